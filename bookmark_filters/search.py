"""Filter engine for bookmarks: text/query matching, facets and analytics."""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Union

from bookmark_filters.date_filters import Clock, in_date_range, matches_date, system_clock
from bookmark_filters.models import (
    BookmarkRecord,
    FieldSearches,
    FilterAnalytics,
    FilterResult,
    FilterState,
    ParsedQuery,
)
from bookmark_filters.query_parser import parse_query
from bookmark_filters.sorting import sort_bookmarks


RecordLike = Union[BookmarkRecord, Dict[str, Any]]


class FilterEngine(Protocol):
    """Protocol for filter engines to allow alternative implementations."""

    def apply(
        self,
        bookmarks: Iterable[RecordLike],
        filter_state: FilterState,
        parsed_query: Optional[ParsedQuery] = None,
    ) -> FilterResult:
        """Filter and sort bookmarks.

        Args:
            bookmarks: Full bookmark collection
            filter_state: Active filters and sort settings
            parsed_query: Structured query from the search box, if any

        Returns:
            Ordered matches plus facets and analytics
        """
        ...


# ============================================================================
# Matching helpers
# ============================================================================

def matches_content(bookmark: BookmarkRecord, term: str) -> bool:
    """Case-insensitive substring test against title, description, filepath and tags."""
    needle = term.lower()
    return (
        needle in bookmark.title.lower()
        or needle in (bookmark.description or "").lower()
        or needle in bookmark.filepath.lower()
        or any(needle in tag.lower() for tag in bookmark.tags)
    )


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or "").lower()


def _has_tag_like(bookmark: BookmarkRecord, search_tag: str) -> bool:
    needle = search_tag.lower()
    return any(needle in tag.lower() for tag in bookmark.tags)


def _matches_all_fields(bookmark: BookmarkRecord, fields: FieldSearches) -> bool:
    if fields.title and not _contains(bookmark.title, fields.title):
        return False
    if fields.description and not _contains(bookmark.description, fields.description):
        return False
    if fields.filepath and not _contains(bookmark.filepath, fields.filepath):
        return False
    return all(_has_tag_like(bookmark, tag) for tag in fields.tags)


def _matches_any_field(bookmark: BookmarkRecord, fields: FieldSearches) -> bool:
    return bool(
        (fields.title and _contains(bookmark.title, fields.title))
        or (fields.description and _contains(bookmark.description, fields.description))
        or (fields.filepath and _contains(bookmark.filepath, fields.filepath))
        or any(_has_tag_like(bookmark, tag) for tag in fields.tags)
    )


def matches_query(bookmark: BookmarkRecord, query: ParsedQuery, now: Optional[datetime] = None) -> bool:
    """Check one bookmark against a parsed query.

    Field filters and the ``created:`` filter must all hold, NOT terms and
    negated field filters must not match, every AND term and at least one OR
    term (when there are any) must match, and any leftover free text must
    match too.
    """
    if not _matches_all_fields(bookmark, query.field_searches):
        return False

    created = query.date_filters.created
    if created is not None and not matches_date(bookmark.created_at, created, now=now):
        return False

    if _matches_any_field(bookmark, query.negated_field_searches):
        return False

    if any(matches_content(bookmark, term) for term in query.operators.get("NOT", [])):
        return False

    if not all(matches_content(bookmark, term) for term in query.operators.get("AND", [])):
        return False

    or_terms = query.operators.get("OR", [])
    if or_terms and not any(matches_content(bookmark, term) for term in or_terms):
        return False

    if query.text_search:
        return matches_content(bookmark, query.text_search)

    return True


# ============================================================================
# Pipeline stages
# ============================================================================

def filter_bookmarks(
    bookmarks: Iterable[RecordLike],
    filter_state: FilterState,
    parsed_query: Optional[ParsedQuery] = None,
    now: Optional[datetime] = None,
) -> List[BookmarkRecord]:
    """Remove bookmarks that fail the active filters, keeping input order.

    Stages run in order: query or basic search, file filter, tag filter
    (all required tags present), created-date range.

    Args:
        bookmarks: Records or their dict form
        filter_state: Active filter description
        parsed_query: Advanced query; when absent ``search_term`` is used
        now: Evaluation instant for relative date filters

    Returns:
        Matching records
    """
    result = [BookmarkRecord.coerce(b) for b in bookmarks]

    if parsed_query is not None:
        result = [b for b in result if matches_query(b, parsed_query, now=now)]
    elif filter_state.search_term:
        result = [b for b in result if matches_content(b, filter_state.search_term)]

    if filter_state.file_filter:
        result = [b for b in result if b.filepath == filter_state.file_filter]

    if filter_state.tags:
        required = set(filter_state.tags)
        result = [b for b in result if required.issubset(b.tags)]

    date_range = filter_state.date_range
    if date_range.is_set():
        result = [
            b for b in result
            if in_date_range(b.created_at, date_range.start, date_range.end)
        ]

    return result


def available_files(bookmarks: Iterable[RecordLike]) -> List[str]:
    """Sorted distinct filepaths across the whole collection."""
    return sorted({BookmarkRecord.coerce(b).filepath for b in bookmarks})


def available_tags(bookmarks: Iterable[RecordLike]) -> List[str]:
    """Sorted distinct tags across the whole collection."""
    return sorted({tag for b in bookmarks for tag in BookmarkRecord.coerce(b).tags})


def compute_analytics(total: int, filtered: int) -> FilterAnalytics:
    """Summarize how much the filters narrowed the collection."""
    reduction = round((total - filtered) / total * 100, 1) if total > 0 else 0
    return FilterAnalytics(
        total_bookmarks=total,
        filtered_count=filtered,
        reduction_percentage=reduction,
        has_active_filters=filtered != total,
    )


# ============================================================================
# Engine
# ============================================================================

class BookmarkFilterEngine:
    """Filter, sort and summarize a bookmark collection.

    The collection is passed on every call and never cached. ``clock``
    supplies "now" for relative date filters.
    """

    def __init__(self, clock: Clock = system_clock):
        self._clock = clock

    def apply(
        self,
        bookmarks: Iterable[RecordLike],
        filter_state: FilterState,
        parsed_query: Optional[ParsedQuery] = None,
    ) -> FilterResult:
        """Filter and sort bookmarks, computing facets over the full input.

        Args:
            bookmarks: Full bookmark collection
            filter_state: Active filters and sort settings
            parsed_query: Structured query from the search box, if any

        Returns:
            FilterResult with ordered bookmarks, facets and analytics
        """
        records: Sequence[BookmarkRecord] = [BookmarkRecord.coerce(b) for b in bookmarks]

        filtered = filter_bookmarks(records, filter_state, parsed_query, now=self._clock())
        ordered = sort_bookmarks(filtered, filter_state)

        return FilterResult(
            bookmarks=ordered,
            available_files=available_files(records),
            available_tags=available_tags(records),
            analytics=compute_analytics(len(records), len(ordered)),
        )

    def search(
        self,
        query: str,
        bookmarks: Iterable[RecordLike],
        filter_state: Optional[FilterState] = None,
    ) -> FilterResult:
        """Parse a raw search string and apply it with a filter state.

        An empty or whitespace-only query applies the filter state alone.
        """
        filter_state = filter_state or FilterState()
        parsed = parse_query(query) if query and query.strip() else None
        return self.apply(bookmarks, filter_state, parsed)
