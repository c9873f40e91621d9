from inspections.identifiers import identifier_root, parse_reference_roots


def test_root_strips_punctuation_and_keeps_eight_digits():
    assert identifier_root("12.345.678/0002-10") == "12345678"
    assert identifier_root("12345678000199") == "12345678"


def test_root_uses_first_identifier_of_a_sequence():
    assert identifier_root(["11.222.333/0001-44", "99.999.999/0001-99"]) == "11222333"
    assert identifier_root([]) == ""


def test_root_of_missing_values_is_empty():
    assert identifier_root(None) == ""
    assert identifier_root("") == ""
    assert identifier_root("N/I") == ""
    assert identifier_root(["N/I"]) == ""


def test_short_identifiers_are_returned_truncated_not_rejected():
    assert identifier_root("12.345") == "12345"
    assert identifier_root("CNPJ ILEGIVEL") == ""


def test_root_is_deterministic():
    value = "00.000.000/0001-00"
    assert identifier_root(value) == identifier_root(value) == "00000000"


def test_reference_blob_parsing():
    roots = parse_reference_roots("12.345.678/0001-99, 99999999")
    assert roots == {"12345678", "99999999"}


def test_reference_blob_splits_on_all_delimiters_and_drops_short_tokens():
    blob = "11.111.111/0001-11;22222222\n333\n\n44.444.444/0009-00,"
    assert parse_reference_roots(blob) == {"11111111", "22222222", "44444444"}
    assert parse_reference_roots("") == frozenset()
    assert parse_reference_roots(None) == frozenset()
