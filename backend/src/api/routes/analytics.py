"""BI analytics and master export API routes."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse, Response

from analytics.aggregator import DEFAULT_TOP_N, aggregate
from analytics.export import build_dataframe, export_filename, workbook_bytes
from inspections.service import inspection_service
from review.models import Actor, ReviewStatus

from api.utils.actors import get_actor


router = APIRouter(prefix="/api/analytics", tags=["analytics"])

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("")
def get_report(
    top: int = Query(DEFAULT_TOP_N, ge=1, le=50),
    status: Optional[ReviewStatus] = Query(None),
    actor: Actor = Depends(get_actor),
):
    """Rankings and counts over every list visible to the actor."""
    lists = inspection_service.list_lists(actor)
    report = aggregate(lists, top_n=top, status_filter=status)
    return JSONResponse(report.model_dump(mode="json"))


@router.get("/export")
def export_master(
    fmt: str = Query("xlsx", alias="format"),
    actor: Actor = Depends(get_actor),
):
    df = build_dataframe(inspection_service.list_lists(actor))
    if fmt == "csv":
        content, media_type = df.write_csv().encode("utf-8"), "text/csv"
    elif fmt == "xlsx":
        content, media_type = workbook_bytes(df), _XLSX_MEDIA_TYPE
    else:
        raise HTTPException(status_code=400, detail="format must be 'csv' or 'xlsx'")
    filename = export_filename(fmt)
    return Response(
        content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
