"""SQLAlchemy models and DTOs for inspection lists and product records."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import JSON, Boolean, DateTime, Enum, ForeignKey, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from extraction.models import ExtractedAttributes
from review.models import ReviewStatus


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class ListStatus(str, enum.Enum):
    EXECUTING = "executing"
    WAITING_IC = "waiting_ic"
    APPROVED = "approved"
    PARTIAL = "partial"
    REJECTED = "rejected"


# =============================================================================
# SQLAlchemy Models
# =============================================================================


class InspectionList(Base):
    """A visit to one point of sale; owns the records captured there."""

    __tablename__ = "inspection_lists"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    establishment: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(200), nullable=False)
    inspector_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    inspector_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    status: Mapped[ListStatus] = mapped_column(
        Enum(ListStatus), default=ListStatus.EXECUTING, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    records: Mapped[list["ProductRecord"]] = relationship(
        "ProductRecord",
        back_populates="inspection_list",
        cascade="all, delete-orphan",
        order_by="ProductRecord.created_at",
    )


class ProductRecord(Base):
    """One product entry: photos plus the attributes extracted from them."""

    __tablename__ = "product_records"
    __table_args__ = (
        Index("ix_product_records_list_created", "list_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    list_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("inspection_lists.id", ondelete="CASCADE"), nullable=False
    )
    photos: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    legal_name: Mapped[str] = mapped_column(Text, nullable=False, default="N/I")
    tax_ids: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    tax_id_root: Mapped[str] = mapped_column(String(8), nullable=False, default="", index=True)
    brand: Mapped[str] = mapped_column(Text, nullable=False, default="N/I")
    product_description: Mapped[str] = mapped_column(Text, nullable=False, default="N/I")
    net_content: Mapped[str] = mapped_column(String(200), nullable=False, default="N/I")
    address: Mapped[str] = mapped_column(Text, nullable=False, default="N/I")
    postal_code: Mapped[str] = mapped_column(String(50), nullable=False, default="N/I")
    phone: Mapped[str] = mapped_column(String(100), nullable=False, default="N/I")
    website: Mapped[str] = mapped_column(String(300), nullable=False, default="N/I")
    packaging_manufacturer: Mapped[str] = mapped_column(Text, nullable=False, default="N/I")
    molding: Mapped[str] = mapped_column(String(20), nullable=False, default="N/I")
    shape: Mapped[str] = mapped_column(String(20), nullable=False, default="N/I")
    package_type: Mapped[str] = mapped_column(String(100), nullable=False, default="N/I")
    package_model: Mapped[str] = mapped_column(String(200), nullable=False, default="N/I")

    is_new_prospect: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    review_status: Mapped[ReviewStatus] = mapped_column(
        Enum(ReviewStatus), default=ReviewStatus.PENDING, nullable=False, index=True
    )
    reviewer_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    inspector_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    inspection_list: Mapped["InspectionList"] = relationship(
        "InspectionList", back_populates="records"
    )


ATTRIBUTE_COLUMNS = tuple(ExtractedAttributes.model_fields)


def attributes_to_columns(attributes: ExtractedAttributes) -> dict:
    """Flatten an attribute bundle into ProductRecord column values."""
    return attributes.model_dump(by_alias=False)


def attributes_from_record(record: ProductRecord) -> ExtractedAttributes:
    return ExtractedAttributes.model_validate(
        {name: getattr(record, name) for name in ATTRIBUTE_COLUMNS}
    )


# =============================================================================
# Pydantic DTOs
# =============================================================================


class RecordDTO(BaseModel):
    id: str
    list_id: str
    photos: list[str] = []
    attributes: ExtractedAttributes
    tax_id_root: str = ""
    is_new_prospect: bool
    review_status: ReviewStatus
    reviewer_comment: Optional[str] = None
    inspector_id: str
    created_at: datetime

    @classmethod
    def from_record(cls, record: ProductRecord) -> "RecordDTO":
        return cls(
            id=record.id,
            list_id=record.list_id,
            photos=list(record.photos or []),
            attributes=attributes_from_record(record),
            tax_id_root=record.tax_id_root or "",
            is_new_prospect=record.is_new_prospect,
            review_status=record.review_status,
            reviewer_comment=record.reviewer_comment,
            inspector_id=record.inspector_id,
            created_at=record.created_at,
        )


class InspectionListDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    establishment: str
    city: str
    inspector_id: str
    inspector_name: str = ""
    status: ListStatus
    created_at: datetime
    records: list[RecordDTO] = []

    @classmethod
    def from_list(cls, inspection_list: InspectionList) -> "InspectionListDTO":
        return cls(
            id=inspection_list.id,
            name=inspection_list.name,
            establishment=inspection_list.establishment,
            city=inspection_list.city,
            inspector_id=inspection_list.inspector_id,
            inspector_name=inspection_list.inspector_name,
            status=inspection_list.status,
            created_at=inspection_list.created_at,
            records=[RecordDTO.from_record(r) for r in inspection_list.records],
        )


class NotificationDraft(BaseModel):
    """Message the operator's mail client sends to the intelligence team."""

    recipient: str
    subject: str
    body: str


# =============================================================================
# Request Payloads
# =============================================================================


class CreateListPayload(BaseModel):
    name: str
    establishment: str
    city: str

    @field_validator("name", "establishment", "city", mode="before")
    @classmethod
    def _normalize(cls, v):
        return (v or "").strip().upper()


class CreateRecordPayload(BaseModel):
    photos: list[str]


class UpdateRecordPayload(BaseModel):
    attributes: ExtractedAttributes
    reviewer_comment: Optional[str] = None
