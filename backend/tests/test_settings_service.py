import pytest

from app_settings.models import UpdateSettingsPayload
from app_settings.service import settings_service
from db.config import DEFAULT_IC_EMAIL
from inspections.errors import AuthorizationError


def test_load_falls_back_to_defaults(app_db):
    config = settings_service.load()
    assert config.ic_email == DEFAULT_IC_EMAIL
    assert config.reference_roots == frozenset()


def test_admin_saves_and_roots_are_parsed(app_db, admin):
    payload = UpdateSettingsPayload(
        ic_email="ic@example.com",
        reference_identifiers="12.345.678/0001-99\n98765432000110; 123\n",
    )
    saved = settings_service.save(payload, admin)
    assert saved.reference_roots == frozenset({"12345678", "98765432"})

    reloaded = settings_service.load()
    assert reloaded.ic_email == "ic@example.com"
    assert reloaded.reference_roots == saved.reference_roots


def test_blank_email_keeps_default(app_db, admin):
    saved = settings_service.save(UpdateSettingsPayload(ic_email="  "), admin)
    assert saved.ic_email == DEFAULT_IC_EMAIL


def test_inspector_cannot_change_settings(app_db, inspector):
    with pytest.raises(AuthorizationError):
        settings_service.save(UpdateSettingsPayload(ic_email="x@example.com"), inspector)
    assert settings_service.load().ic_email == DEFAULT_IC_EMAIL
