"""High-level inspection service orchestrating extraction, classification and persistence."""

from __future__ import annotations

import logging
from functools import partial
from typing import Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from db.config import get_app_defaults
from db.schema import ensure_application_schema
from db.session import engine, session_scope
from app_settings.models import GlobalReferenceConfig
from extraction.models import ExtractedAttributes
from extraction.oracle import ExtractionOracle
from review.models import Actor, ReviewStatus

from . import repository
from .errors import IncompleteDeletionError, NotFoundError, ValidationError
from .identifiers import identifier_root
from .models import (
    CreateListPayload,
    InspectionList,
    InspectionListDTO,
    ListStatus,
    NotificationDraft,
    ProductRecord,
    RecordDTO,
    UpdateRecordPayload,
    attributes_to_columns,
)
from .novelty import classify_novelty, evaluate_novelty

logger = logging.getLogger(__name__)


def _matches_query(inspection_list: InspectionListDTO, query: str) -> bool:
    if (
        query in inspection_list.name.lower()
        or query in inspection_list.establishment.lower()
        or query in inspection_list.city.lower()
    ):
        return True
    for record in inspection_list.records:
        attributes = record.attributes
        if any(query in tax_id.lower() for tax_id in attributes.tax_ids):
            return True
        if query in attributes.legal_name.lower() or query in attributes.brand.lower():
            return True
    return False


def _can_see(actor: Actor, inspector_id: str) -> bool:
    return actor.is_admin or inspector_id == actor.id


def _visible_list(db: Session, list_id: str, actor: Actor) -> InspectionList:
    """Load a list the actor may act on. Other inspectors' lists look missing."""
    inspection_list = repository.get_list(db, list_id)
    if inspection_list is None or not _can_see(actor, inspection_list.inspector_id):
        raise NotFoundError("List", list_id)
    return inspection_list


def _visible_record(db: Session, record_id: str, actor: Actor) -> ProductRecord:
    record = repository.get_record(db, record_id)
    if record is None or not _can_see(actor, record.inspection_list.inspector_id):
        raise NotFoundError("Record", record_id)
    return record


class InspectionService:
    def __init__(self) -> None:
        self._initialized = False

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        try:
            ensure_application_schema(engine)
        except Exception as exc:  # pragma: no cover
            raise RuntimeError("Failed to initialize inspection tables") from exc
        self._initialized = True

    # =========================================================================
    # Lists
    # =========================================================================

    def create_list(self, payload: CreateListPayload, actor: Actor) -> InspectionListDTO:
        self._ensure_initialized()
        missing = [
            field
            for field in ("name", "establishment", "city")
            if not getattr(payload, field)
        ]
        if missing:
            raise ValidationError(f"Required fields are blank: {', '.join(missing)}")

        with session_scope() as db:
            inspection_list = repository.create_list(
                db,
                name=payload.name,
                establishment=payload.establishment,
                city=payload.city,
                inspector_id=actor.id,
                inspector_name=actor.name.strip().upper(),
            )
            db.refresh(inspection_list)
            dto = InspectionListDTO.from_list(inspection_list)
        logger.info("Inspection list %s created by %s", dto.id, actor.id)
        return dto

    def list_lists(self, actor: Actor, query: Optional[str] = None) -> list[InspectionListDTO]:
        """Lists visible to the actor; admins see every inspector's lists."""
        self._ensure_initialized()
        inspector_id = None if actor.is_admin else actor.id
        with session_scope() as db:
            dtos = [
                InspectionListDTO.from_list(item)
                for item in repository.list_lists(db, inspector_id=inspector_id)
            ]
        needle = (query or "").strip().lower()
        if not needle:
            return dtos
        return [dto for dto in dtos if _matches_query(dto, needle)]

    def get_list(self, list_id: str, actor: Actor) -> InspectionListDTO:
        self._ensure_initialized()
        with session_scope() as db:
            return InspectionListDTO.from_list(_visible_list(db, list_id, actor))

    def submit_for_review(
        self, list_id: str, actor: Actor, config: GlobalReferenceConfig
    ) -> NotificationDraft:
        """Mark a list as waiting for the intelligence team and draft the notice."""
        self._ensure_initialized()
        with session_scope() as db:
            _visible_list(db, list_id, actor)
            inspection_list = repository.set_list_status(db, list_id, ListStatus.WAITING_IC)
            dto = InspectionListDTO.from_list(inspection_list)

        recipient = config.ic_email or get_app_defaults().ic_email
        body = (
            "Olá Inteligência Comercial,\n\n"
            "Uma nova lista de leitura de embalagens foi concluída e está pronta para análise.\n\n"
            "DADOS DA LISTA:\n"
            f"NOME: {dto.name}\n"
            f"ESTABELECIMENTO: {dto.establishment}\n"
            f"CIDADE: {dto.city}\n"
            f"INSPETOR: {dto.inspector_name}\n"
            f"ITENS COLETADOS: {len(dto.records)}\n\n"
            "Atenciosamente,\n"
            "Equipe de Campo - PackScan Pro"
        )
        logger.info("List %s submitted for intelligence review by %s", list_id, actor.id)
        return NotificationDraft(
            recipient=recipient,
            subject=f"NOVA LEITURA PACKSCAN PRO: {dto.name}",
            body=body,
        )

    def delete_list(self, list_id: str, actor: Actor) -> None:
        """Delete a list's records, then the list, in separate commits.

        If the second step fails the records are already gone; the caller
        retries this method, which then only has the list left to remove.
        """
        self._ensure_initialized()
        with session_scope() as db:
            _visible_list(db, list_id, actor)
            removed = repository.delete_records_for_list(db, list_id)
        logger.info("Deleted %d records of list %s", removed, list_id)

        try:
            with session_scope() as db:
                repository.delete_list(db, list_id)
        except Exception as exc:
            logger.error("List %s lost its records but could not be deleted: %s", list_id, exc)
            raise IncompleteDeletionError(list_id, exc) from exc

    # =========================================================================
    # Records
    # =========================================================================

    async def create_record(
        self,
        list_id: str,
        photos: list[str],
        actor: Actor,
        oracle: ExtractionOracle,
        config: GlobalReferenceConfig,
    ) -> RecordDTO:
        """Extract, classify and persist one product record.

        Nothing is written when extraction fails. Database work runs in the
        threadpool so the event loop only waits on the oracle.
        """
        await run_in_threadpool(self._check_list, list_id, actor)
        attributes = await oracle.extract(photos)
        return await run_in_threadpool(
            self._store_record, list_id, photos, actor, attributes, config
        )

    def _check_list(self, list_id: str, actor: Actor) -> None:
        self._ensure_initialized()
        with session_scope() as db:
            _visible_list(db, list_id, actor)

    def _store_record(
        self,
        list_id: str,
        photos: list[str],
        actor: Actor,
        attributes: ExtractedAttributes,
        config: GlobalReferenceConfig,
    ) -> RecordDTO:
        # The history lookup runs before the new row is flushed, so it cannot match itself
        root = identifier_root(attributes.tax_ids)
        with session_scope() as db:
            # The list may have been deleted while the oracle was running
            _visible_list(db, list_id, actor)
            verdict = evaluate_novelty(
                root, config.reference_roots, partial(repository.exists_by_root, db)
            )
            record = repository.insert_record(
                db,
                list_id=list_id,
                inspector_id=actor.id,
                photos=list(photos),
                tax_id_root=root,
                is_new_prospect=verdict.is_new_prospect,
                review_status=ReviewStatus.PENDING,
                **attributes_to_columns(attributes),
            )
            db.refresh(record)
            dto = RecordDTO.from_record(record)
        logger.info(
            "Record %s created in list %s (root=%r, new_prospect=%s)",
            dto.id,
            list_id,
            root,
            dto.is_new_prospect,
        )
        return dto

    def update_record(
        self,
        record_id: str,
        payload: UpdateRecordPayload,
        actor: Actor,
        config: GlobalReferenceConfig,
    ) -> RecordDTO:
        """Replace a record's attributes and re-run the novelty check.

        The identifier may have changed, so the root and the classification are
        recomputed; the record itself is excluded from the history lookup.
        Only admins may write the reviewer comment.
        """
        self._ensure_initialized()
        attributes: ExtractedAttributes = payload.attributes
        root = identifier_root(attributes.tax_ids)

        with session_scope() as db:
            _visible_record(db, record_id, actor)
            is_new_prospect = classify_novelty(
                attributes,
                config,
                partial(repository.exists_by_root, db),
                exclude_id=record_id,
            )
            fields = dict(
                attributes_to_columns(attributes),
                tax_id_root=root,
                is_new_prospect=is_new_prospect,
            )
            if actor.is_admin:
                fields["reviewer_comment"] = payload.reviewer_comment
            record = repository.update_record(db, record_id, **fields)
            dto = RecordDTO.from_record(record)
        logger.info("Record %s updated (root=%r, new_prospect=%s)", record_id, root, dto.is_new_prospect)
        return dto

    def get_record(self, record_id: str, actor: Actor) -> RecordDTO:
        self._ensure_initialized()
        with session_scope() as db:
            return RecordDTO.from_record(_visible_record(db, record_id, actor))

    def list_records(
        self, actor: Actor, review_status: Optional[ReviewStatus] = None
    ) -> list[RecordDTO]:
        self._ensure_initialized()
        inspector_id = None if actor.is_admin else actor.id
        with session_scope() as db:
            records = repository.list_records(
                db, inspector_id=inspector_id, review_status=review_status
            )
            return [RecordDTO.from_record(r) for r in records]

    def delete_record(self, record_id: str, actor: Actor) -> None:
        self._ensure_initialized()
        with session_scope() as db:
            _visible_record(db, record_id, actor)
            repository.delete_record(db, record_id)
        logger.info("Record %s deleted by %s", record_id, actor.id)


inspection_service = InspectionService()
