"""Data access for the global settings row."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from .models import SETTINGS_ROW_ID, AppSetting


def get_global_config(db: Session) -> Optional[AppSetting]:
    return db.get(AppSetting, SETTINGS_ROW_ID)


def upsert_global_config(db: Session, *, ic_email: str, reference_identifiers: str) -> AppSetting:
    row = get_global_config(db)
    if row is None:
        row = AppSetting(id=SETTINGS_ROW_ID)
        db.add(row)
    row.ic_email = ic_email
    row.reference_identifiers = reference_identifiers
    db.flush()
    return row
