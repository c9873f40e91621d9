import os
from contextlib import contextmanager

# Keep module-level engines off PostgreSQL during tests
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app_settings import models as settings_models  # noqa: F401
from extraction.models import ExtractedAttributes
from inspections.models import Base
from inspections.service import inspection_service
from review.models import Actor, Role


class FakeOracle:
    """Returns canned attributes, or raises the configured error."""

    def __init__(self, attributes=None, error=None):
        self.attributes = attributes
        self.error = error
        self.calls = []

    async def extract(self, photos):
        self.calls.append(list(photos))
        if self.error is not None:
            raise self.error
        return self.attributes


@pytest.fixture
def app_db(monkeypatch):
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)

    @contextmanager
    def _test_session_scope():
        session = SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    monkeypatch.setattr("inspections.service.engine", engine)
    monkeypatch.setattr("inspections.service.session_scope", _test_session_scope)
    monkeypatch.setattr("review.workflow.session_scope", _test_session_scope)
    monkeypatch.setattr("app_settings.service.session_scope", _test_session_scope)
    monkeypatch.setattr(inspection_service, "_initialized", False)
    return SessionLocal


@pytest.fixture
def admin():
    return Actor(id="admin-1", name="Ana Admin", role=Role.ADMIN)


@pytest.fixture
def inspector():
    return Actor(id="insp-1", name="Igor Campo", role=Role.INSPECTOR)


def make_attributes(tax_id="12.345.678/0001-99", **overrides):
    data = {
        "razaoSocial": "Laticinios Exemplo Ltda",
        "cnpj": [tax_id] if tax_id is not None else [],
        "marca": "Exemplo",
        "fabricanteEmbalagem": "Plasticos Sul",
        "moldagem": "INJETADO",
        "formatoEmbalagem": "REDONDO",
    }
    data.update(overrides)
    return ExtractedAttributes.model_validate(data)
