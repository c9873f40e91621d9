"""Application schema bootstrap."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)


def ensure_application_schema(bind: Optional[Engine] = None) -> None:
    """Create the inspection, record and settings tables when missing.

    Uses the application engine unless ``bind`` is given.
    """
    from inspections.models import Base

    # Registers app_settings with the shared metadata
    import app_settings.models  # noqa: F401

    if bind is None:
        from db.session import engine as bind

    Base.metadata.create_all(bind, checkfirst=True)
    logger.info("Ensured application tables exist (%s)", ", ".join(sorted(Base.metadata.tables)))
