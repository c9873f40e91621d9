"""Product record API routes."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from app_settings.service import settings_service
from inspections.errors import PackScanError
from inspections.models import UpdateRecordPayload
from inspections.service import inspection_service
from review.models import Actor, ReviewStatus

from api.utils.actors import get_actor
from api.utils.errors import to_http


router = APIRouter(prefix="/api/records", tags=["records"])


@router.get("")
def list_records(
    status: Optional[ReviewStatus] = Query(None),
    actor: Actor = Depends(get_actor),
):
    records = inspection_service.list_records(actor, review_status=status)
    return JSONResponse([r.model_dump(mode="json") for r in records])


@router.get("/{record_id}")
def get_record(record_id: str, actor: Actor = Depends(get_actor)):
    try:
        record = inspection_service.get_record(record_id, actor)
    except PackScanError as exc:
        raise to_http(exc) from exc
    return JSONResponse(record.model_dump(mode="json"))


@router.put("/{record_id}")
def update_record(
    record_id: str,
    payload: UpdateRecordPayload,
    actor: Actor = Depends(get_actor),
):
    """Save edited attributes; novelty is re-evaluated against the new identifier."""
    try:
        record = inspection_service.update_record(
            record_id, payload, actor, settings_service.load()
        )
    except PackScanError as exc:
        raise to_http(exc) from exc
    return JSONResponse(record.model_dump(mode="json"))


@router.delete("/{record_id}", status_code=204)
def delete_record(record_id: str, actor: Actor = Depends(get_actor)):
    try:
        inspection_service.delete_record(record_id, actor)
    except PackScanError as exc:
        raise to_http(exc) from exc
    return Response(status_code=204)
