"""Review workflow API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from inspections.errors import PackScanError
from review.models import Actor, BulkReviewPayload, ReviewPayload
from review.workflow import bulk_transition, record_ids_with_status, transition_review

from api.utils.actors import get_actor
from api.utils.errors import to_http


router = APIRouter(prefix="/api/review", tags=["review"])


@router.post("/records/{record_id}")
def review_record(record_id: str, payload: ReviewPayload, actor: Actor = Depends(get_actor)):
    try:
        transition = transition_review(record_id, payload.status, actor)
    except PackScanError as exc:
        raise to_http(exc) from exc
    return JSONResponse(
        {
            "recordId": transition.record_id,
            "previous": transition.previous.value,
            "status": transition.current.value,
        }
    )


@router.post("/bulk")
def review_bulk(payload: BulkReviewPayload, actor: Actor = Depends(get_actor)):
    """Apply one status to many records, e.g. approve everything still pending."""
    try:
        record_ids = payload.record_ids
        if record_ids is None:
            record_ids = record_ids_with_status(payload.source_status)
        result = bulk_transition(record_ids, payload.status, actor)
    except PackScanError as exc:
        raise to_http(exc) from exc
    return JSONResponse(
        {
            "status": result.target.value,
            "ok": result.ok,
            "succeeded": result.succeeded,
            "failed": result.failed,
        },
        status_code=200 if result.ok else 207,
    )
