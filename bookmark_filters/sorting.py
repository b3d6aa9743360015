"""Single- and multi-field sorting of bookmark records."""
import functools
import unicodedata
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any, List, Sequence

from bookmark_filters.date_filters import parse_datetime
from bookmark_filters.models import BookmarkRecord, FilterState, SortCriterion


# Editing UIs offer at most this many criteria; the engine accepts any number.
MAX_SORT_CRITERIA = 3


def _fold(text: str) -> str:
    """Strip accents and case so 'Émile' sorts with 'emile'."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _natural_case_key(text: str) -> tuple:
    # Letters compare case-blind first; on a tie lowercase sorts before uppercase.
    return (_fold(text), text.swapcase(), text)


def media_file_name(filepath: str) -> str:
    """Base name of a media path without its extension."""
    return PurePosixPath(filepath.replace("\\", "/")).stem


def field_key(record: BookmarkRecord, field: str) -> Any:
    """Sort key of one record for one field.

    ``createdAt`` is also the fallback for unknown fields. Unparseable
    creation dates sort before every real date.
    """
    if field == "title":
        return _natural_case_key(record.title)
    if field == "timestamp":
        return record.timestamp
    if field == "description":
        return _fold(record.description or "")
    if field == "tags":
        return _fold(", ".join(record.tags))
    if field == "mediaFileName":
        return _fold(media_file_name(record.filepath))
    return parse_datetime(record.created_at) or datetime.min


def _compare(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def compare_field(a: BookmarkRecord, b: BookmarkRecord, field: str, direction: str = "asc") -> int:
    """Compare two records on one field.

    Returns:
        Negative, zero or positive; ``desc`` flips the sign
    """
    result = _compare(field_key(a, field), field_key(b, field))
    return -result if direction == "desc" else result


def _sort_by_criteria(records: Sequence[BookmarkRecord], criteria: Sequence[SortCriterion]) -> List[BookmarkRecord]:
    if not criteria:
        return list(records)

    keys = [tuple(field_key(record, c.field) for c in criteria) for record in records]
    signs = [-1 if c.direction == "desc" else 1 for c in criteria]

    def compare(i: int, j: int) -> int:
        for position, sign in enumerate(signs):
            result = _compare(keys[i][position], keys[j][position])
            if result:
                return sign * result
        return 0

    # list.sort is stable, so full ties keep input order
    order = sorted(range(len(records)), key=functools.cmp_to_key(compare))
    return [records[i] for i in order]


def active_criteria(filter_state: FilterState) -> List[SortCriterion]:
    """Criteria that decide the order for a filter state.

    Multi-sort uses ``sort_criteria`` ordered by priority; otherwise the
    single ``sort_by``/``sort_direction`` pair.
    """
    if filter_state.enable_multi_sort:
        return sorted(filter_state.sort_criteria, key=lambda c: c.priority)
    return [SortCriterion(field=filter_state.sort_by, direction=filter_state.sort_direction, priority=1)]


def sort_bookmarks(records: Sequence[BookmarkRecord], filter_state: FilterState) -> List[BookmarkRecord]:
    """Stable-sort records as described by a filter state.

    Args:
        records: Records to order (not modified)
        filter_state: Supplies single or multi-field sort settings

    Returns:
        New ordered list
    """
    return _sort_by_criteria(records, active_criteria(filter_state))
