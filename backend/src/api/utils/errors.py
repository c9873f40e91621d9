"""Translate service exceptions into HTTP errors."""
from __future__ import annotations

from fastapi import HTTPException

from inspections.errors import (
    AuthorizationError,
    ExtractionError,
    IncompleteDeletionError,
    NotFoundError,
    PackScanError,
    ValidationError,
)


_STATUS_CODES: tuple[tuple[type[PackScanError], int], ...] = (
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ValidationError, 400),
    (IncompleteDeletionError, 409),
    (ExtractionError, 502),
)


def to_http(exc: PackScanError) -> HTTPException:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(exc, error_type):
            detail = exc.reason if isinstance(exc, ExtractionError) else str(exc)
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=500, detail=str(exc))
