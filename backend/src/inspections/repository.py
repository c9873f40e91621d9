"""Data access helpers for inspection lists and product records."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload

from review.models import ReviewStatus

from .models import InspectionList, ListStatus, ProductRecord


# =============================================================================
# Inspection Lists
# =============================================================================


def create_list(
    db: Session,
    *,
    name: str,
    establishment: str,
    city: str,
    inspector_id: str,
    inspector_name: str,
) -> InspectionList:
    inspection_list = InspectionList(
        name=name,
        establishment=establishment,
        city=city,
        inspector_id=inspector_id,
        inspector_name=inspector_name,
        status=ListStatus.EXECUTING,
    )
    db.add(inspection_list)
    db.flush()
    return inspection_list


def get_list(db: Session, list_id: str) -> Optional[InspectionList]:
    return db.get(InspectionList, list_id)


def list_lists(db: Session, *, inspector_id: Optional[str] = None) -> list[InspectionList]:
    """Lists with their records, newest first; restricted to one inspector when given."""
    stmt = select(InspectionList).options(selectinload(InspectionList.records))
    if inspector_id is not None:
        stmt = stmt.where(InspectionList.inspector_id == inspector_id)
    stmt = stmt.order_by(InspectionList.created_at.desc())
    return list(db.scalars(stmt))


def set_list_status(db: Session, list_id: str, status: ListStatus) -> Optional[InspectionList]:
    inspection_list = get_list(db, list_id)
    if inspection_list is not None:
        inspection_list.status = status
        db.flush()
    return inspection_list


def delete_list(db: Session, list_id: str) -> bool:
    inspection_list = get_list(db, list_id)
    if inspection_list is None:
        return False
    db.delete(inspection_list)
    db.flush()
    return True


# =============================================================================
# Product Records
# =============================================================================


def insert_record(db: Session, **fields) -> ProductRecord:
    record = ProductRecord(**fields)
    db.add(record)
    db.flush()
    return record


def get_record(db: Session, record_id: str) -> Optional[ProductRecord]:
    return db.get(ProductRecord, record_id)


def list_records(
    db: Session,
    *,
    inspector_id: Optional[str] = None,
    list_id: Optional[str] = None,
    review_status: Optional[ReviewStatus] = None,
) -> list[ProductRecord]:
    stmt = select(ProductRecord)
    if inspector_id is not None:
        stmt = stmt.join(InspectionList).where(InspectionList.inspector_id == inspector_id)
    if list_id is not None:
        stmt = stmt.where(ProductRecord.list_id == list_id)
    if review_status is not None:
        stmt = stmt.where(ProductRecord.review_status == review_status)
    stmt = stmt.order_by(ProductRecord.created_at)
    return list(db.scalars(stmt))


def update_record(db: Session, record_id: str, **fields) -> Optional[ProductRecord]:
    record = get_record(db, record_id)
    if record is not None:
        for key, value in fields.items():
            if hasattr(record, key):
                setattr(record, key, value)
        db.flush()
    return record


def delete_record(db: Session, record_id: str) -> bool:
    record = get_record(db, record_id)
    if record is None:
        return False
    db.delete(record)
    db.flush()
    return True


def delete_records_for_list(db: Session, list_id: str) -> int:
    result = db.execute(delete(ProductRecord).where(ProductRecord.list_id == list_id))
    return result.rowcount or 0


def exists_by_root(db: Session, root: str, exclude_id: Optional[str] = None) -> bool:
    """True when a persisted record other than ``exclude_id`` has this root."""
    if not root:
        return False
    stmt = select(ProductRecord.id).where(ProductRecord.tax_id_root == root)
    if exclude_id is not None:
        stmt = stmt.where(ProductRecord.id != exclude_id)
    return db.scalar(stmt.limit(1)) is not None
