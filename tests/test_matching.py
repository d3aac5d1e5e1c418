"""Unit and property tests for the match predicate."""

from __future__ import annotations

from typing import List, Optional

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from kora.matching import SearchableRecord, count_matches, filter_records, matches


def _record(record_id: int, *fields: Optional[str]) -> SearchableRecord:
    return SearchableRecord(
        record_id=record_id, label=str(fields[0] if fields else ""), fields=tuple(fields)
    )


@pytest.fixture
def records() -> List[SearchableRecord]:
    return [
        _record(1, "MEDOVKA", None, "BYLINKY"),
        _record(2, "Žiadosť o dotáciu", "Formulár pre obec", "ÚRAD"),
        _record(3, "Faktúra 2024", None),
        _record(4, "Receipt", "coffee grounds"),
    ]


# Test matches


def test_raw_substring_is_case_insensitive(records):
    assert matches(records[0], "med")
    assert matches(records[0], "MeD")


def test_normalized_substring_ignores_diacritics(records):
    assert matches(records[0], "mëd")
    assert matches(records[1], "ziadost")
    assert matches(records[1], "ŽIADOSŤ")


def test_diacritics_in_record_match_plain_filter(records):
    assert matches(records[2], "faktura")


def test_description_field_matches(records):
    assert matches(records[3], "grounds")
    assert matches(records[1], "formular")


def test_tag_field_matches(records):
    assert matches(records[0], "bylin")
    assert matches(records[1], "urad")


def test_no_field_contains_filter(records):
    assert not matches(records[3], "tea")


def test_absent_fields_never_match():
    record = _record(1, None, None)
    assert not matches(record, "a")
    assert not matches(record, "None")


def test_record_without_fields_never_matches():
    assert not matches(_record(1), "x")


def test_payload_is_not_searched():
    record = SearchableRecord(record_id=1, label="x", fields=("alpha",), payload="beta")
    assert not matches(record, "beta")


# Test filter_records


def test_filter_preserves_input_order(records):
    result = filter_records(records, "a")
    assert [r.record_id for r in result] == [1, 2, 3]


def test_filter_truncates_to_limit(records):
    result = filter_records(records, "a", limit=2)
    assert [r.record_id for r in result] == [1, 2]


def test_empty_filter_is_prefix_without_predicate(records):
    result = filter_records(records, "", limit=3)
    assert result == records[:3]


def test_empty_filter_includes_records_without_fields():
    snapshot = [_record(1), _record(2, None)]
    assert filter_records(snapshot, "") == snapshot


def test_zero_limit_returns_nothing(records):
    assert filter_records(records, "", limit=0) == []


def test_count_matches(records):
    assert count_matches(records, "a") == 3
    assert count_matches(records, "") == 4
    assert count_matches(records, "zzz") == 0


def test_raw_and_normalized_filters_agree_on_membership():
    snapshot = [
        _record(1, "MEDOVKA"),
        _record(2, "Medený drôt"),
        _record(3, "Hrniec"),
    ]
    raw = filter_records(snapshot, "med")
    normalized = filter_records(snapshot, "mëd")
    assert [r.record_id for r in raw] == [r.record_id for r in normalized] == [1, 2]


# Properties

field_text = st.one_of(st.none(), st.text(max_size=12))


@given(st.lists(field_text, max_size=5), st.text(min_size=1, max_size=4))
@settings(max_examples=100)
def test_matching_is_field_disjunctive(fields: List[Optional[str]], filter_text: str):
    record = _record(0, *fields)
    per_field = any(
        matches(_record(0, value), filter_text) for value in fields if value is not None
    )
    assert matches(record, filter_text) == per_field


@given(st.integers(min_value=0, max_value=5), st.text(min_size=1, max_size=4))
def test_all_absent_fields_never_match(count: int, filter_text: str):
    record = _record(0, *([None] * count))
    assert not matches(record, filter_text)


@given(
    st.lists(st.text(max_size=8), max_size=80),
    st.text(max_size=3),
    st.integers(min_value=1, max_value=60),
)
@settings(max_examples=100)
def test_filter_result_is_bounded(names: List[str], filter_text: str, limit: int):
    snapshot = [_record(i, name) for i, name in enumerate(names)]
    result = filter_records(snapshot, filter_text, limit)
    assert len(result) <= limit
    assert len(result) <= count_matches(snapshot, filter_text)
    # Order follows the snapshot
    ids = [r.record_id for r in result]
    assert ids == sorted(ids)
