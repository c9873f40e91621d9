from app_settings.models import GlobalReferenceConfig
from conftest import make_attributes
from inspections.novelty import classify_novelty, evaluate_novelty, matches_reference


def _history(*roots, owner=None):
    """Fake existence query over (record_id, root) pairs."""
    rows = [(owner or f"rec-{i}", root) for i, root in enumerate(roots)]
    calls = []

    def exists(root, exclude_id=None):
        calls.append((root, exclude_id))
        return any(r == root and rid != exclude_id for rid, r in rows)

    exists.calls = calls
    return exists


def test_reference_match_makes_company_known():
    config = GlobalReferenceConfig(reference_identifiers="12.345.678/0001-99, 99999999")
    attributes = make_attributes("12.345.678/0002-10")
    assert classify_novelty(attributes, config, _history()) is False


def test_unmatched_company_is_new():
    config = GlobalReferenceConfig(reference_identifiers="12.345.678/0001-99, 99999999")
    attributes = make_attributes("00.000.000/0001-00")
    assert classify_novelty(attributes, config, _history()) is True


def test_history_match_makes_company_known():
    config = GlobalReferenceConfig()
    attributes = make_attributes("55.666.777/0001-00")
    assert classify_novelty(attributes, config, _history("55666777")) is False


def test_self_exclusion_on_edit():
    config = GlobalReferenceConfig()
    attributes = make_attributes("55.666.777/0001-00")
    exists = _history("55666777", owner="rec-self")
    assert classify_novelty(attributes, config, exists, exclude_id="rec-self") is True
    assert exists.calls == [("55666777", "rec-self")]


def test_partial_identifier_matches_reference_by_containment():
    assert matches_reference("123456", {"12345678"})
    assert matches_reference("12345678", {"345678"})
    assert not matches_reference("87654321", {"12345678"})


def test_empty_root_is_always_new_and_skips_history():
    config = GlobalReferenceConfig(reference_identifiers="12345678")
    exists = _history("")
    attributes = make_attributes(None)
    assert classify_novelty(attributes, config, exists) is True
    assert exists.calls == []


def test_empty_root_matches_neither_source():
    verdict = evaluate_novelty("", {"12345678"}, _history("12345678"))
    assert verdict.in_reference is False
    assert verdict.in_history is False
    assert verdict.is_new_prospect is True


def test_short_root_matches_reference_by_containment():
    config = GlobalReferenceConfig(reference_identifiers="12.345.678/0001-99")
    attributes = make_attributes("123.456")
    verdict = evaluate_novelty("123456", config.reference_roots, _history())
    assert verdict.in_reference is True
    assert verdict.is_new_prospect is False
    assert classify_novelty(attributes, config, _history()) is False


def test_short_root_matches_history_with_same_root():
    attributes = make_attributes("123.456")
    exists = _history("123456")
    assert classify_novelty(attributes, GlobalReferenceConfig(), exists) is False
    assert exists.calls == [("123456", None)]


def test_short_root_without_matches_is_new():
    attributes = make_attributes("987.654")
    config = GlobalReferenceConfig(reference_identifiers="12345678")
    assert classify_novelty(attributes, config, _history("123456")) is True
