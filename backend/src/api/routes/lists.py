"""Inspection list and record capture API routes."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from app_settings.service import settings_service
from inspections.errors import PackScanError
from inspections.models import CreateListPayload, CreateRecordPayload
from inspections.service import inspection_service
from review.models import Actor

from api.utils.actors import get_actor
from api.utils.errors import to_http


router = APIRouter(prefix="/api/lists", tags=["lists"])


@router.get("")
def list_lists(q: Optional[str] = Query(None), actor: Actor = Depends(get_actor)):
    """Lists visible to the actor, optionally filtered by a search term."""
    lists = inspection_service.list_lists(actor, query=q)
    return JSONResponse([item.model_dump(mode="json") for item in lists])


@router.post("")
def create_list(payload: CreateListPayload, actor: Actor = Depends(get_actor)):
    try:
        created = inspection_service.create_list(payload, actor)
    except PackScanError as exc:
        raise to_http(exc) from exc
    return JSONResponse(created.model_dump(mode="json"), status_code=201)


@router.get("/{list_id}")
def get_list(list_id: str, actor: Actor = Depends(get_actor)):
    try:
        inspection_list = inspection_service.get_list(list_id, actor)
    except PackScanError as exc:
        raise to_http(exc) from exc
    return JSONResponse(inspection_list.model_dump(mode="json"))


@router.post("/{list_id}/submit")
def submit_list(list_id: str, actor: Actor = Depends(get_actor)):
    """Send the list to the intelligence team; returns the notification draft."""
    try:
        draft = inspection_service.submit_for_review(list_id, actor, settings_service.load())
    except PackScanError as exc:
        raise to_http(exc) from exc
    return JSONResponse(draft.model_dump(mode="json"))


@router.delete("/{list_id}", status_code=204)
def delete_list(list_id: str, actor: Actor = Depends(get_actor)):
    try:
        inspection_service.delete_list(list_id, actor)
    except PackScanError as exc:
        raise to_http(exc) from exc
    return Response(status_code=204)


@router.post("/{list_id}/records")
async def create_record(
    list_id: str,
    payload: CreateRecordPayload,
    request: Request,
    actor: Actor = Depends(get_actor),
):
    """Run extraction on the photos and store the resulting record."""
    oracle = getattr(request.app.state, "oracle", None)
    if oracle is None:
        raise HTTPException(status_code=503, detail="Extraction oracle not configured")
    try:
        record = await inspection_service.create_record(
            list_id, payload.photos, actor, oracle, settings_service.load()
        )
    except PackScanError as exc:
        raise to_http(exc) from exc
    return JSONResponse(record.model_dump(mode="json"), status_code=201)
