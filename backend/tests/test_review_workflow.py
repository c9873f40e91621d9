import pytest

from inspections import repository
from inspections.errors import AuthorizationError, InvalidTransitionError, NotFoundError
from inspections.models import ProductRecord
from review.capabilities import require_admin
from review.models import Authorized, Denied, ReviewStatus
from review.workflow import bulk_transition, record_ids_with_status, transition_review


@pytest.fixture
def seeded(app_db):
    with app_db() as session:
        inspection_list = repository.create_list(
            session,
            name="LISTA",
            establishment="MERCADO",
            city="CAMPINAS / SP",
            inspector_id="insp-1",
            inspector_name="IGOR CAMPO",
        )
        ids = []
        for index in range(3):
            record = repository.insert_record(
                session,
                list_id=inspection_list.id,
                inspector_id="insp-1",
                tax_id_root=f"1000000{index}",
                review_status=ReviewStatus.PENDING,
            )
            ids.append(record.id)
        session.commit()
    return ids


def _status(app_db, record_id):
    with app_db() as session:
        return session.get(ProductRecord, record_id).review_status


def test_require_admin_returns_capability(admin, inspector):
    assert isinstance(require_admin(admin, "review"), Authorized)
    denied = require_admin(inspector, "review")
    assert isinstance(denied, Denied)
    assert "administrators" in denied.reason


def test_inspector_cannot_review_and_nothing_changes(app_db, seeded, inspector):
    with pytest.raises(AuthorizationError):
        transition_review(seeded[0], ReviewStatus.APPROVED, inspector)
    assert _status(app_db, seeded[0]) == ReviewStatus.PENDING


def test_approve_then_reject_keeps_last_status(app_db, seeded, admin):
    first = transition_review(seeded[0], ReviewStatus.APPROVED, admin)
    assert first.previous == ReviewStatus.PENDING
    second = transition_review(seeded[0], ReviewStatus.REJECTED, admin)
    assert second.previous == ReviewStatus.APPROVED
    assert _status(app_db, seeded[0]) == ReviewStatus.REJECTED


def test_transition_only_touches_status(app_db, seeded, admin):
    with app_db() as session:
        before = session.get(ProductRecord, seeded[1])
        snapshot = (before.tax_id_root, before.is_new_prospect, before.legal_name)
    transition_review(seeded[1], ReviewStatus.APPROVED, admin)
    with app_db() as session:
        after = session.get(ProductRecord, seeded[1])
        assert (after.tax_id_root, after.is_new_prospect, after.legal_name) == snapshot


def test_pending_is_not_a_target(seeded, admin):
    with pytest.raises(InvalidTransitionError):
        transition_review(seeded[0], ReviewStatus.PENDING, admin)


def test_missing_record(app_db, admin):
    with pytest.raises(NotFoundError):
        transition_review("missing", ReviewStatus.APPROVED, admin)


def test_bulk_reports_partial_failure(app_db, seeded, admin):
    result = bulk_transition([*seeded, "missing", seeded[0]], ReviewStatus.APPROVED, admin, max_workers=1)
    assert sorted(result.succeeded) == sorted(seeded)
    assert list(result.failed) == ["missing"]
    assert not result.ok
    assert result.summary == "1 of 4 transitions failed"
    assert record_ids_with_status(ReviewStatus.PENDING) == []


def test_bulk_denied_for_inspector(app_db, seeded, inspector):
    with pytest.raises(AuthorizationError):
        bulk_transition(seeded, ReviewStatus.APPROVED, inspector)
    assert sorted(record_ids_with_status(ReviewStatus.PENDING)) == sorted(seeded)


def test_bulk_with_no_ids_is_a_noop(app_db, admin):
    result = bulk_transition([], ReviewStatus.REJECTED, admin)
    assert result.ok
    assert result.succeeded == []
