"""Liveness and readiness probes."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from pydantic import BaseModel

from db.session import check_database


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["system"])


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    status: str
    database: str


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return {"status": "healthy"}


@router.get("/ready", response_model=ReadinessResponse)
def readiness_check():
    """Report whether the application database answers queries."""
    try:
        check_database()
    except Exception as exc:
        logger.warning("Readiness probe failed: %s", exc)
        return {"status": "degraded", "database": str(exc)}
    return {"status": "ready", "database": "ok"}
