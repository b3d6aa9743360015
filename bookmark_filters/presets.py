"""Built-in quick filters and helpers for applying and matching presets."""
from datetime import date, timedelta
from typing import List, Optional

from bookmark_filters.date_filters import system_clock
from bookmark_filters.models import (
    DEFAULT_SORT_BY,
    DEFAULT_SORT_DIRECTION,
    FilterPreset,
    FilterState,
)


def default_presets(today: Optional[date] = None) -> List[FilterPreset]:
    """Quick filters offered next to the user's own presets.

    Date-based presets are anchored to ``today`` (local date by default).
    """
    if today is None:
        today = system_clock().date()

    newest_first = {"sortBy": "createdAt", "sortDirection": "desc"}

    return [
        FilterPreset(
            id="recent",
            name="Recent",
            description="Bookmarks created today",
            filters={"dateRange": {"start": today.isoformat(), "end": ""}, **newest_first},
        ),
        FilterPreset(
            id="this-week",
            name="This Week",
            description="Bookmarks from the past 7 days",
            filters={"dateRange": {"start": (today - timedelta(days=7)).isoformat(), "end": ""}, **newest_first},
        ),
        FilterPreset(
            id="favorites",
            name="Favorites",
            description="Bookmarks with favorite tag",
            filters={"tags": ["favorite"], **newest_first},
        ),
    ]


def apply_preset(state: FilterState, preset: FilterPreset) -> FilterState:
    """Overlay a preset's filters on the current state."""
    return state.merged(preset.filters)


def is_active_preset(preset: FilterPreset, state: FilterState) -> bool:
    """True if every setting the preset carries equals the current state."""
    current = state.to_dict()

    for key in ("searchTerm", "sortBy", "sortDirection", "fileFilter", "enableMultiSort"):
        if key in preset.filters and preset.filters[key] != current[key]:
            return False

    if "tags" in preset.filters and set(preset.filters["tags"] or []) != set(state.tags):
        return False

    if "dateRange" in preset.filters:
        date_range = preset.filters["dateRange"] or {}
        if (date_range.get("start", ""), date_range.get("end", "")) != (state.date_range.start, state.date_range.end):
            return False

    return True


def has_active_filters(state: FilterState) -> bool:
    """True if the state differs from the default in any filter or sort setting."""
    return (
        state.search_term != ""
        or state.date_range.is_set()
        or len(state.tags) > 0
        or state.file_filter != ""
        or state.sort_by != DEFAULT_SORT_BY
        or state.sort_direction != DEFAULT_SORT_DIRECTION
        or state.enable_multi_sort
    )
