"""Two-source novelty check: reference list plus record history.

A company is a *new prospect* when its identifier root matches neither the
administrator-maintained reference set nor any other persisted record.

An empty root (no parseable identifier) matches nothing and is therefore
always classified as new: novelty of something that cannot be matched cannot
be refuted. This is intended.

Classification is an advisory label only. Two inspectors creating records
with the same root at the same time may both see them as new; there is no
locking across concurrent creations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from extraction.models import ExtractedAttributes

from .identifiers import identifier_root

logger = logging.getLogger(__name__)


# (root, exclude_record_id) -> True when another persisted record has that root
ExistsByRoot = Callable[[str, Optional[str]], bool]


@dataclass(frozen=True)
class NoveltyVerdict:
    root: str
    in_reference: bool
    in_history: bool

    @property
    def is_new_prospect(self) -> bool:
        return not self.in_reference and not self.in_history


def matches_reference(root: str, reference_roots: Iterable[str]) -> bool:
    """Containment in either direction, to tolerate truncated OCR reads."""
    if not root:
        return False
    return any(root in ref or ref in root for ref in reference_roots)


def evaluate_novelty(
    root: str,
    reference_roots: Iterable[str],
    exists_by_root: ExistsByRoot,
    exclude_id: Optional[str] = None,
) -> NoveltyVerdict:
    in_reference = matches_reference(root, reference_roots)
    # The history lookup is skipped for empty roots; every unparseable record would match
    in_history = bool(root) and exists_by_root(root, exclude_id)
    verdict = NoveltyVerdict(root=root, in_reference=in_reference, in_history=in_history)
    logger.debug(
        "Novelty for root=%r: reference=%s history=%s new=%s",
        root,
        in_reference,
        in_history,
        verdict.is_new_prospect,
    )
    return verdict


def classify_novelty(
    attributes: ExtractedAttributes,
    reference_config,
    exists_by_root: ExistsByRoot,
    exclude_id: Optional[str] = None,
) -> bool:
    """Return True when the record's company should be flagged as a new prospect.

    ``reference_config`` is a ``GlobalReferenceConfig``. Pass ``exclude_id`` when
    re-classifying an existing record so it does not match itself; initial
    creation has no row to exclude yet.
    """
    root = identifier_root(attributes.tax_ids)
    verdict = evaluate_novelty(root, reference_config.reference_roots, exists_by_root, exclude_id)
    return verdict.is_new_prospect
