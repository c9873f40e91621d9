"""Functions computing BI statistics over the full list/record collection.

Everything here is a pure function of its input and is recomputed on demand.
Rankings are sorted by descending count; ties keep first-encountered order.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence

from pydantic import BaseModel

from extraction.models import NOT_IDENTIFIED
from inspections.models import InspectionListDTO, RecordDTO
from review.models import ReviewStatus


DEFAULT_TOP_N = 5


class RankedEntry(BaseModel):
    key: str
    count: int
    # count / max bucket count of the same ranking, for proportional bars
    share: float = 0.0


class StatusCounts(BaseModel):
    approved: int = 0
    rejected: int = 0
    pending: int = 0


class AnalyticsReport(BaseModel):
    total_records: int = 0
    status_counts: StatusCounts = StatusCounts()
    new_prospects: int = 0
    establishments_count: int = 0
    localities_count: int = 0
    top_establishments: list[RankedEntry] = []
    top_localities: list[RankedEntry] = []
    top_brands: list[RankedEntry] = []
    manufacturer_share: list[RankedEntry] = []
    molding_distribution: list[RankedEntry] = []
    status_filter: Optional[ReviewStatus] = None
    filtered_records: list[RecordDTO] = []


def rank(counts: dict[str, int], top_n: Optional[int] = None) -> list[RankedEntry]:
    """Rank buckets by count, normalizing each against the largest bucket.

    The denominator is never below 1, so an empty ranking is safe.
    """
    ordered = sorted(counts.items(), key=lambda item: -item[1])
    if top_n is not None:
        ordered = ordered[:top_n]
    base = max([1, *counts.values()])
    return [RankedEntry(key=key, count=count, share=count / base) for key, count in ordered]


def count_by(records: Iterable[RecordDTO], key: Callable[[RecordDTO], str]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for record in records:
        bucket = key(record) or NOT_IDENTIFIED
        counts[bucket] = counts.get(bucket, 0) + 1
    return counts


def count_records_per(
    lists: Iterable[InspectionListDTO], key: Callable[[InspectionListDTO], str]
) -> dict[str, int]:
    """Records per list attribute; lists without records still register a bucket."""
    counts: dict[str, int] = {}
    for inspection_list in lists:
        bucket = key(inspection_list)
        counts[bucket] = counts.get(bucket, 0) + len(inspection_list.records)
    return counts


def count_statuses(records: Iterable[RecordDTO]) -> StatusCounts:
    tally = {status: 0 for status in ReviewStatus}
    for record in records:
        tally[record.review_status] += 1
    return StatusCounts(
        approved=tally[ReviewStatus.APPROVED],
        rejected=tally[ReviewStatus.REJECTED],
        pending=tally[ReviewStatus.PENDING],
    )


def filter_by_status(
    records: Iterable[RecordDTO], status: Optional[ReviewStatus]
) -> list[RecordDTO]:
    if status is None:
        return []
    return [record for record in records if record.review_status == status]


def aggregate(
    lists: Sequence[InspectionListDTO],
    *,
    top_n: int = DEFAULT_TOP_N,
    status_filter: Optional[ReviewStatus] = None,
) -> AnalyticsReport:
    """Build the analytics report for a collection of lists and their records."""
    records = [record for inspection_list in lists for record in inspection_list.records]

    establishments = count_records_per(lists, lambda item: item.establishment)
    localities = count_records_per(lists, lambda item: item.city)
    manufacturers = count_by(records, lambda r: r.attributes.packaging_manufacturer)
    molding = count_by(records, lambda r: (r.attributes.molding or NOT_IDENTIFIED).upper())
    brands = count_by(records, lambda r: r.attributes.brand)

    return AnalyticsReport(
        total_records=len(records),
        status_counts=count_statuses(records),
        new_prospects=sum(1 for record in records if record.is_new_prospect),
        establishments_count=len(establishments),
        localities_count=len(localities),
        top_establishments=rank(establishments, top_n),
        top_localities=rank(localities, top_n),
        top_brands=rank(brands, top_n),
        manufacturer_share=rank(manufacturers),
        molding_distribution=rank(molding),
        status_filter=status_filter,
        filtered_records=filter_by_status(records, status_filter),
    )
