"""Data model for bookmark records, queries, filter state and history.

Every model converts to and from the camelCase JSON shape used by persisted
blobs (``to_dict`` / ``from_dict``). ``from_dict`` is lenient: missing keys
take defaults and unknown keys are ignored, so stale or partial blobs still
load.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


SORT_FIELDS = ("title", "timestamp", "createdAt", "description", "tags", "mediaFileName")
SORT_DIRECTIONS = ("asc", "desc")
DATE_SHORTCUTS = ("today", "yesterday", "this-week", "this-month")
DATE_COMPARISONS = (">", "<", "=")
BOOLEAN_OPERATORS = ("AND", "OR", "NOT")

DEFAULT_SORT_BY = "createdAt"
DEFAULT_SORT_DIRECTION = "desc"

# FilterState keys a preset may carry
PRESET_FILTER_KEYS = (
    "searchTerm", "dateRange", "tags", "sortBy", "sortDirection", "fileFilter",
    "sortCriteria", "enableMultiSort",
)


def _str_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _str_list(value: Any) -> List[str]:
    """A bare string is one item; anything other than a list or tuple is empty."""
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return []


@dataclass(frozen=True)
class BookmarkRecord:
    """A bookmark as seen by the engine. Never mutated."""
    id: str
    title: str
    timestamp: float
    filepath: str
    created_at: str
    description: Optional[str] = None
    tags: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BookmarkRecord":
        """Build a record from its JSON shape.

        Args:
            data: Dict with id, title, timestamp, filepath, createdAt and
                optional description/tags

        Returns:
            BookmarkRecord with absent fields defaulted
        """
        try:
            timestamp = float(data.get("timestamp") or 0)
        except (TypeError, ValueError):
            timestamp = 0.0

        description = data.get("description")

        return cls(
            id=str(data.get("id", "")),
            title=_str_or_empty(data.get("title")),
            timestamp=timestamp,
            filepath=_str_or_empty(data.get("filepath")),
            created_at=_str_or_empty(data.get("createdAt")),
            description=description if isinstance(description, str) else None,
            tags=tuple(_str_list(data.get("tags"))),
        )

    @classmethod
    def coerce(cls, record: Union["BookmarkRecord", Dict[str, Any]]) -> "BookmarkRecord":
        """Accept either a record or its dict form."""
        if isinstance(record, cls):
            return record
        return cls.from_dict(record)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "timestamp": self.timestamp,
            "filepath": self.filepath,
            "createdAt": self.created_at,
            "tags": list(self.tags),
        }
        if self.description is not None:
            result["description"] = self.description
        return result


# ============================================================================
# Parsed query
# ============================================================================

@dataclass
class DateFilter:
    """A ``created:`` condition: a shortcut or a comparison with a value."""
    operator: str
    value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"operator": self.operator}
        if self.value is not None:
            result["value"] = self.value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DateFilter":
        value = data.get("value")
        return cls(
            operator=_str_or_empty(data.get("operator")),
            value=value if isinstance(value, str) else None,
        )


@dataclass
class FieldSearches:
    title: Optional[str] = None
    description: Optional[str] = None
    filepath: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.title or self.description or self.filepath or self.tags)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for name in ("title", "description", "filepath"):
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.tags:
            result["tags"] = list(self.tags)
        return result

    @classmethod
    def from_dict(cls, data: Any) -> "FieldSearches":
        if not isinstance(data, dict):
            return cls()
        return cls(
            title=data.get("title"),
            description=data.get("description"),
            filepath=data.get("filepath"),
            tags=_str_list(data.get("tags")),
        )


@dataclass
class DateFilters:
    created: Optional[DateFilter] = None


def _empty_operators() -> Dict[str, List[str]]:
    return {op: [] for op in BOOLEAN_OPERATORS}


@dataclass
class ParsedQuery:
    """Structured form of a search-box query. Empty matches everything.

    ``negated_field_searches`` holds field filters written as ``NOT field:value``;
    a record matching any of them is rejected.
    """
    text_search: str = ""
    field_searches: FieldSearches = field(default_factory=FieldSearches)
    operators: Dict[str, List[str]] = field(default_factory=_empty_operators)
    date_filters: DateFilters = field(default_factory=DateFilters)
    negated_field_searches: FieldSearches = field(default_factory=FieldSearches)

    def is_empty(self) -> bool:
        return (
            not self.text_search
            and self.field_searches.is_empty()
            and self.negated_field_searches.is_empty()
            and not any(self.operators.get(op) for op in BOOLEAN_OPERATORS)
            and self.date_filters.created is None
        )

    def to_dict(self) -> Dict[str, Any]:
        date_filters: Dict[str, Any] = {}
        if self.date_filters.created is not None:
            date_filters["created"] = self.date_filters.created.to_dict()

        return {
            "textSearch": self.text_search,
            "fieldSearches": self.field_searches.to_dict(),
            "negatedFieldSearches": self.negated_field_searches.to_dict(),
            "operators": {op: list(self.operators.get(op, [])) for op in BOOLEAN_OPERATORS},
            "dateFilters": date_filters,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParsedQuery":
        operators = data.get("operators") or {}
        created = (data.get("dateFilters") or {}).get("created")
        return cls(
            text_search=_str_or_empty(data.get("textSearch")),
            field_searches=FieldSearches.from_dict(data.get("fieldSearches")),
            operators={op: list(operators.get(op) or []) for op in BOOLEAN_OPERATORS},
            date_filters=DateFilters(
                created=DateFilter.from_dict(created) if isinstance(created, dict) else None,
            ),
            negated_field_searches=FieldSearches.from_dict(data.get("negatedFieldSearches")),
        )


# ============================================================================
# Filter state
# ============================================================================

@dataclass
class DateRange:
    start: str = ""
    end: str = ""

    def is_set(self) -> bool:
        return bool(self.start or self.end)


@dataclass
class SortCriterion:
    """One entry of a multi-field sort. Lower priority applies first."""
    field: str
    direction: str = "asc"
    priority: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "direction": self.direction, "priority": self.priority}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["SortCriterion"]:
        """Build a criterion, or None when its field is not sortable."""
        sort_field = data.get("field")
        if sort_field not in SORT_FIELDS:
            return None
        direction = data.get("direction")
        try:
            priority = int(data.get("priority", 1))
        except (OverflowError, TypeError, ValueError):
            priority = 1
        return cls(
            field=sort_field,
            direction=direction if direction in SORT_DIRECTIONS else "asc",
            priority=priority,
        )


@dataclass
class FilterState:
    """Declarative filter description for one view."""
    search_term: str = ""
    date_range: DateRange = field(default_factory=DateRange)
    tags: List[str] = field(default_factory=list)
    sort_by: str = DEFAULT_SORT_BY
    sort_direction: str = DEFAULT_SORT_DIRECTION
    file_filter: str = ""
    sort_criteria: List[SortCriterion] = field(default_factory=list)
    enable_multi_sort: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "searchTerm": self.search_term,
            "dateRange": {"start": self.date_range.start, "end": self.date_range.end},
            "tags": list(self.tags),
            "sortBy": self.sort_by,
            "sortDirection": self.sort_direction,
            "fileFilter": self.file_filter,
            "sortCriteria": [criterion.to_dict() for criterion in self.sort_criteria],
            "enableMultiSort": self.enable_multi_sort,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterState":
        """Build a state from its JSON shape.

        Out-of-range ``sortBy``/``sortDirection`` values fall back to the
        defaults and unsortable criteria are dropped, so the comparator only
        ever sees known fields.
        """
        date_range = data.get("dateRange")
        if not isinstance(date_range, dict):
            date_range = {}
        sort_by = data.get("sortBy")
        sort_direction = data.get("sortDirection")

        raw_criteria = data.get("sortCriteria")
        if not isinstance(raw_criteria, list):
            raw_criteria = []
        enable_multi_sort = data.get("enableMultiSort")

        criteria = []
        for raw in raw_criteria:
            if isinstance(raw, dict):
                criterion = SortCriterion.from_dict(raw)
                if criterion is not None:
                    criteria.append(criterion)

        return cls(
            search_term=_str_or_empty(data.get("searchTerm")),
            date_range=DateRange(
                start=_str_or_empty(date_range.get("start")),
                end=_str_or_empty(date_range.get("end")),
            ),
            tags=_str_list(data.get("tags")),
            sort_by=sort_by if sort_by in SORT_FIELDS else DEFAULT_SORT_BY,
            sort_direction=sort_direction if sort_direction in SORT_DIRECTIONS else DEFAULT_SORT_DIRECTION,
            file_filter=_str_or_empty(data.get("fileFilter")),
            sort_criteria=criteria,
            enable_multi_sort=enable_multi_sort if isinstance(enable_multi_sort, bool) else False,
        )

    def merged(self, partial: Dict[str, Any]) -> "FilterState":
        """Return a new state with a partial (camelCase) dict applied on top."""
        data = self.to_dict()
        data.update(partial)
        return FilterState.from_dict(data)


# ============================================================================
# History and presets
# ============================================================================

@dataclass
class FilterPreset:
    id: str
    name: str
    description: str = ""
    filters: Dict[str, Any] = field(default_factory=dict)
    created_at: str = ""
    usage_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "filters": dict(self.filters),
            "createdAt": self.created_at,
            "usageCount": self.usage_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterPreset":
        try:
            usage_count = max(0, int(data.get("usageCount", 0)))
        except (TypeError, ValueError):
            usage_count = 0
        filters = data.get("filters")
        return cls(
            id=str(data.get("id", "")),
            name=_str_or_empty(data.get("name")),
            description=_str_or_empty(data.get("description")),
            filters=dict(filters) if isinstance(filters, dict) else {},
            created_at=_str_or_empty(data.get("createdAt")),
            usage_count=usage_count,
        )


@dataclass
class FilterHistoryData:
    recent_searches: List[str] = field(default_factory=list)
    custom_presets: List[FilterPreset] = field(default_factory=list)
    filter_usage_stats: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recentSearches": list(self.recent_searches),
            "customPresets": [preset.to_dict() for preset in self.custom_presets],
            "filterUsageStats": dict(self.filter_usage_stats),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterHistoryData":
        stats = data.get("filterUsageStats")
        return cls(
            recent_searches=[s for s in data.get("recentSearches") or [] if isinstance(s, str)],
            custom_presets=[
                FilterPreset.from_dict(p) for p in data.get("customPresets") or [] if isinstance(p, dict)
            ],
            filter_usage_stats=dict(stats) if isinstance(stats, dict) else {},
        )


# ============================================================================
# Engine output
# ============================================================================

@dataclass
class FilterAnalytics:
    total_bookmarks: int
    filtered_count: int
    reduction_percentage: float
    has_active_filters: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalBookmarks": self.total_bookmarks,
            "filteredCount": self.filtered_count,
            "reductionPercentage": self.reduction_percentage,
            "hasActiveFilters": self.has_active_filters,
        }


@dataclass
class FilterResult:
    bookmarks: List[BookmarkRecord]
    available_files: List[str]
    available_tags: List[str]
    analytics: FilterAnalytics

    @property
    def results_count(self) -> int:
        return len(self.bookmarks)
