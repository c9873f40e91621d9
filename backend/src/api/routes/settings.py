"""Global reference configuration API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app_settings.models import UpdateSettingsPayload
from app_settings.service import settings_service
from inspections.errors import PackScanError
from review.models import Actor

from api.utils.actors import get_actor
from api.utils.errors import to_http


router = APIRouter(prefix="/api/settings", tags=["settings"])


def _serialize(config) -> dict:
    payload = config.model_dump(mode="json")
    payload["reference_roots"] = sorted(config.reference_roots)
    return payload


@router.get("")
def get_settings(actor: Actor = Depends(get_actor)):
    return JSONResponse(_serialize(settings_service.load()))


@router.put("")
def update_settings(payload: UpdateSettingsPayload, actor: Actor = Depends(get_actor)):
    """Replace the notification email and reference identifiers (admins only)."""
    try:
        config = settings_service.save(payload, actor)
    except PackScanError as exc:
        raise to_http(exc) from exc
    return JSONResponse(_serialize(config))
