"""Multi-field substring matching used by filter sessions.

A record matches a filter when any of its present fields contains the
filter either as a plain case-insensitive substring or, after both sides
are reduced to comparison keys, as a diacritic-insensitive substring.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, List, Optional, Sequence, Tuple

from .normalize import comparison_key


@dataclass(frozen=True)
class SearchableRecord:
    """A candidate shown by a filter session.

    Attributes:
        record_id: Opaque identifier of the underlying object
        label: Text displayed for the record
        fields: Ordered searchable fields; ``None`` marks an absent field
        payload: The domain object the record was built from (never matched)
    """

    record_id: Hashable
    label: str
    fields: Tuple[Optional[str], ...]
    payload: Any = field(default=None, compare=False, repr=False)


def _field_matches(value: str, raw_filter: str, filter_key: str) -> bool:
    if raw_filter in value.lower():
        return True
    return filter_key in comparison_key(value)


def _record_matches(record: SearchableRecord, raw_filter: str, filter_key: str) -> bool:
    return any(
        _field_matches(value, raw_filter, filter_key)
        for value in record.fields
        if value is not None
    )


def matches(record: SearchableRecord, filter_text: str) -> bool:
    """Return True if any present field of ``record`` matches ``filter_text``.

    Args:
        record: Candidate to test
        filter_text: Non-empty filter typed by the operator

    Returns:
        True on a raw or normalized substring match in at least one field
    """
    return _record_matches(record, filter_text.lower(), comparison_key(filter_text))


def filter_records(
    records: Iterable[SearchableRecord],
    filter_text: str,
    limit: Optional[int] = None,
) -> List[SearchableRecord]:
    """Select records matching ``filter_text`` in input order.

    An empty filter applies no predicate: the result is just the first
    ``limit`` records.

    Args:
        records: Candidates in display order
        filter_text: Current filter (may be empty)
        limit: Maximum number of records to return (None = unlimited)

    Returns:
        Ordered list of at most ``limit`` records
    """
    out: List[SearchableRecord] = []
    if limit is not None and limit <= 0:
        return out

    raw_filter = filter_text.lower()
    filter_key = comparison_key(filter_text)
    for record in records:
        if filter_text and not _record_matches(record, raw_filter, filter_key):
            continue
        out.append(record)
        if limit is not None and len(out) >= limit:
            break
    return out


def count_matches(records: Sequence[SearchableRecord], filter_text: str) -> int:
    """Number of records matching ``filter_text`` (all records if empty)."""
    if not filter_text:
        return len(records)
    raw_filter = filter_text.lower()
    filter_key = comparison_key(filter_text)
    return sum(1 for r in records if _record_matches(r, raw_filter, filter_key))
