"""Date parsing and ``created:`` filter evaluation.

All comparisons happen in naive local time. Timezone-aware inputs are
converted to local time first, date-only strings mean local midnight.
"""
import re
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, Optional, Union

from bookmark_filters.models import DateFilter


Clock = Callable[[], datetime]

DateLike = Union[datetime, date, str, int, float, None]

_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def system_clock() -> datetime:
    """Current local time."""
    return datetime.now()


def _to_local_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def parse_datetime(value: DateLike) -> Optional[datetime]:
    """Parse an ISO-8601 string, epoch seconds, date or datetime.

    Args:
        value: Value to interpret as an instant

    Returns:
        Naive local datetime, or None if the value cannot be interpreted
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        try:
            return _to_local_naive(value)
        except (OverflowError, ValueError):
            return None

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    # fromisoformat only learned the "Z" suffix in 3.11
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"

    try:
        return _to_local_naive(datetime.fromisoformat(text))
    except (OverflowError, ValueError):
        return None


def is_date_only(value: str) -> bool:
    """True for a bare ``YYYY-MM-DD`` string."""
    return bool(_DATE_ONLY_RE.match(value.strip()))


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def matches_date(
    record_date: DateLike,
    date_filter: Union[DateFilter, Dict[str, Any], None],
    now: Optional[datetime] = None,
) -> bool:
    """Check a record date against a ``created:`` filter.

    Shortcuts are evaluated against ``now`` so they describe a rolling
    window: ``today`` and ``this-month`` start at calendar boundaries,
    ``this-week`` is the last 7 days.

    Args:
        record_date: The record's creation instant
        date_filter: Shortcut or comparison condition
        now: Evaluation instant. Defaults to the system clock.

    Returns:
        True if the date satisfies the filter. Unknown operators, missing or
        unparseable comparison values impose no constraint. A record date
        that cannot be parsed never satisfies an active constraint.
    """
    if date_filter is None:
        return True
    if isinstance(date_filter, dict):
        date_filter = DateFilter.from_dict(date_filter)

    now = _to_local_naive(now) if now is not None else system_clock()
    today = start_of_day(now)
    operator = date_filter.operator

    lower: Optional[datetime] = None  # inclusive
    upper: Optional[datetime] = None  # exclusive

    if operator == "today":
        lower = today
    elif operator == "yesterday":
        lower, upper = today - timedelta(days=1), today
    elif operator == "this-week":
        lower = now - timedelta(days=7)
    elif operator == "this-month":
        lower = today.replace(day=1)
    elif operator in (">", "<", "="):
        compare = parse_datetime(date_filter.value)
        if compare is None:
            return True
        record = parse_datetime(record_date)
        if record is None:
            return False
        if operator == ">":
            return record > compare
        if operator == "<":
            return record < compare
        return start_of_day(record) == start_of_day(compare)
    else:
        return True

    record = parse_datetime(record_date)
    if record is None:
        return False
    if lower is not None and record < lower:
        return False
    if upper is not None and record >= upper:
        return False
    return True


def in_date_range(record_date: DateLike, start: str, end: str) -> bool:
    """Check a record date against a closed ``[start, end]`` range.

    An empty bound is open. A date-only ``end`` includes that whole day.
    Unparseable bounds are ignored.
    """
    start_dt = parse_datetime(start) if start else None
    end_dt = parse_datetime(end) if end else None
    if start_dt is None and end_dt is None:
        return True

    record = parse_datetime(record_date)
    if record is None:
        return False

    if start_dt is not None and record < start_dt:
        return False
    if end_dt is not None:
        if is_date_only(end):
            return start_of_day(record) <= start_of_day(end_dt)
        return record <= end_dt
    return True
