from datetime import datetime, timezone

from analytics.aggregator import aggregate, rank
from conftest import make_attributes
from inspections.models import InspectionListDTO, ListStatus, RecordDTO
from review.models import ReviewStatus


NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


def _record(record_id, status=ReviewStatus.PENDING, new=True, **overrides):
    return RecordDTO(
        id=record_id,
        list_id="l",
        attributes=make_attributes(**overrides),
        is_new_prospect=new,
        review_status=status,
        inspector_id="insp-1",
        created_at=NOW,
    )


def _list(list_id, establishment, city, records):
    return InspectionListDTO(
        id=list_id,
        name=f"LISTA {list_id}",
        establishment=establishment,
        city=city,
        inspector_id="insp-1",
        status=ListStatus.EXECUTING,
        created_at=NOW,
        records=records,
    )


def test_empty_input_is_safe():
    report = aggregate([])
    assert report.total_records == 0
    assert report.top_establishments == []
    assert report.manufacturer_share == []
    assert report.status_counts.pending == 0


def test_rank_ties_keep_first_seen_order():
    ranked = rank({"B": 2, "A": 3, "C": 2, "D": 1}, top_n=3)
    assert [entry.key for entry in ranked] == ["A", "B", "C"]
    assert ranked[0].share == 1.0
    assert ranked[1].share == 2 / 3


def test_rank_of_zero_counts_has_zero_share():
    assert rank({"VAZIO": 0})[0].share == 0.0


def test_report_counts():
    lists = [
        _list(
            "1",
            "MERCADO A",
            "CAMPINAS / SP",
            [
                _record("r1", ReviewStatus.APPROVED, fabricanteEmbalagem="Plasticos Sul"),
                _record("r2", ReviewStatus.REJECTED, new=False, moldagem="termoformado"),
            ],
        ),
        _list("2", "MERCADO B", "CAMPINAS / SP", [_record("r3", moldagem=None)]),
        _list("3", "MERCADO A", "SOROCABA / SP", []),
    ]
    report = aggregate(lists, top_n=5, status_filter=ReviewStatus.APPROVED)

    assert report.total_records == 3
    assert report.new_prospects == 2
    assert report.status_counts.approved == 1
    assert report.status_counts.rejected == 1
    assert report.status_counts.pending == 1
    assert report.establishments_count == 2
    assert report.localities_count == 2
    assert [(e.key, e.count) for e in report.top_establishments] == [("MERCADO A", 2), ("MERCADO B", 1)]
    assert [(e.key, e.count) for e in report.top_localities] == [("CAMPINAS / SP", 3), ("SOROCABA / SP", 0)]
    assert {e.key: e.count for e in report.molding_distribution} == {
        "INJETADO": 1,
        "TERMOFORMADO": 1,
        "N/I": 1,
    }
    assert report.manufacturer_share[0].key == "PLASTICOS SUL"
    assert [record.id for record in report.filtered_records] == ["r1"]


def test_no_status_filter_returns_no_records():
    report = aggregate([_list("1", "M", "C", [_record("r1")])])
    assert report.status_filter is None
    assert report.filtered_records == []
