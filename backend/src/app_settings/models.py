"""Singleton row holding the notification email and reference identifiers."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db.config import DEFAULT_IC_EMAIL
from inspections.identifiers import parse_reference_roots
from inspections.models import Base


SETTINGS_ROW_ID = 1


class AppSetting(Base):
    __tablename__ = "app_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=SETTINGS_ROW_ID)
    ic_email: Mapped[str] = mapped_column(String(320), nullable=False, default=DEFAULT_IC_EMAIL)
    reference_identifiers: Mapped[str] = mapped_column(Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class GlobalReferenceConfig(BaseModel):
    """Value object threaded into the novelty classifier."""

    model_config = ConfigDict(from_attributes=True)

    ic_email: str = DEFAULT_IC_EMAIL
    reference_identifiers: str = ""
    updated_at: Optional[datetime] = None

    @property
    def reference_roots(self) -> frozenset[str]:
        return parse_reference_roots(self.reference_identifiers)


class UpdateSettingsPayload(BaseModel):
    ic_email: str
    reference_identifiers: str = ""
