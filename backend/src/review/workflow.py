"""Review state machine: pending -> approved | rejected.

``pending`` is only the initial value. An admin may move a record to
``approved`` or ``rejected`` and back and forth between them; each transition
overwrites the status and touches nothing else on the record.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

from db.session import session_scope
from inspections import repository
from inspections.errors import InvalidTransitionError, NotFoundError, PackScanError

from .capabilities import ensure_authorized, require_admin
from .models import REVIEW_TARGETS, Actor, BulkReviewResult, ReviewStatus, ReviewTransition

logger = logging.getLogger(__name__)

_BULK_WORKERS = 8


def _check_target(target: ReviewStatus) -> None:
    if target not in REVIEW_TARGETS:
        raise InvalidTransitionError(
            f"Review status {target.value!r} cannot be set explicitly; "
            f"allowed targets are {sorted(t.value for t in REVIEW_TARGETS)}"
        )


def transition_review(record_id: str, target: ReviewStatus, actor: Actor) -> ReviewTransition:
    """Set a record's review status. Authorization is checked before any write."""
    ensure_authorized(require_admin(actor, "approve or reject records for BI"))
    _check_target(target)

    with session_scope() as db:
        record = repository.get_record(db, record_id)
        if record is None:
            raise NotFoundError("Record", record_id)
        previous = record.review_status
        repository.update_record(db, record_id, review_status=target)

    logger.info("Record %s review %s -> %s by %s", record_id, previous.value, target.value, actor.id)
    return ReviewTransition(record_id=record_id, previous=previous, current=target)


def record_ids_with_status(status: ReviewStatus) -> list[str]:
    with session_scope() as db:
        return [record.id for record in repository.list_records(db, review_status=status)]


def bulk_transition(
    record_ids: Iterable[str],
    target: ReviewStatus,
    actor: Actor,
    max_workers: Optional[int] = None,
) -> BulkReviewResult:
    """Apply one target status to many records as independent transitions.

    Transitions run in parallel, each in its own session. A failure on one
    record does not stop the others; the result lists both outcomes.
    """
    ensure_authorized(require_admin(actor, "approve or reject records for BI"))
    _check_target(target)

    ids = list(dict.fromkeys(record_ids))
    result = BulkReviewResult(target=target)
    if not ids:
        return result

    def _apply(record_id: str) -> tuple[str, Optional[str]]:
        try:
            transition_review(record_id, target, actor)
            return record_id, None
        except PackScanError as exc:
            return record_id, str(exc)
        except Exception as exc:
            logger.exception("Review transition failed for record %s", record_id)
            return record_id, f"Unexpected error: {exc}"

    workers = max_workers or min(_BULK_WORKERS, len(ids))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        for record_id, error in executor.map(_apply, ids):
            if error is None:
                result.succeeded.append(record_id)
            else:
                result.failed[record_id] = error

    if result.ok:
        logger.info("Bulk review: %d records set to %s", len(result.succeeded), target.value)
    else:
        logger.warning("Bulk review to %s: %s", target.value, result.summary)
    return result
