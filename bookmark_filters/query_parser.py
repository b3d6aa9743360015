"""Parser for the bookmark search mini-language.

Supported syntax::

    meeting notes                  free text (substring match anywhere)
    title:meeting                  field filter (title, description, filepath)
    title:"team meeting"           quoted field value
    tag:work tag:urgent            tag filters, all must match
    created:today                  today, yesterday, this-week, this-month
    created:>2024-01-01            also < and = (same calendar day)
    AND term / OR term / NOT term  boolean terms matched against any field
    NOT tag:done                   negated field filter

Parsing never fails: fragments that cannot be interpreted are dropped.
"""
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from bookmark_filters.models import (
    DATE_COMPARISONS,
    DATE_SHORTCUTS,
    DateFilter,
    ParsedQuery,
)


FIELD_OPERATORS = ("title:", "description:", "tag:", "filepath:", "created:")
SEARCH_OPERATORS = ("AND", "OR", "NOT")

MAX_SUGGESTIONS = 8
MAX_TAG_SUGGESTIONS = 5
MAX_RECENT_SUGGESTIONS = 3

_WHITESPACE_RE = re.compile(r"\s+")

# An optional operator directly in front of a field filter binds to it
_FIELD_RE = re.compile(
    r'(?:\b(AND|OR|NOT)\s+)?\b(title|description|tag|filepath|created):(?:"([^"]+)"|(\S+))'
)

_OPERATOR_RE = re.compile(r"\b(AND|OR|NOT)\s+(\S+)")


def _normalize(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _parse_created(value: str, warnings: List[str]) -> Optional[DateFilter]:
    if value in DATE_SHORTCUTS:
        return DateFilter(operator=value)

    if value[:1] in DATE_COMPARISONS:
        if len(value) == 1:
            warnings.append(f"Ignored created:{value} (missing date)")
            return None
        return DateFilter(operator=value[0], value=value[1:])

    warnings.append(f"Ignored created:{value} (unrecognized date filter)")
    return None


def parse_query_with_warnings(query: Optional[str]) -> Tuple[ParsedQuery, List[str]]:
    """Parse a search string and report fragments that were dropped.

    Args:
        query: Raw search-box text

    Returns:
        Tuple of (parsed query, list of human-readable warnings)
    """
    result = ParsedQuery()
    warnings: List[str] = []

    normalized = _normalize(query or "")
    if not normalized:
        return result, warnings

    fields = result.field_searches
    negated = result.negated_field_searches

    def take_field(match: "re.Match[str]") -> str:
        operator, name, quoted, unquoted = match.groups()
        value = quoted if quoted is not None else unquoted
        target = negated if operator == "NOT" else fields

        if operator == "OR":
            warnings.append(f"OR before {name}:{value} has no effect; field filters always combine with AND")

        if name == "tag":
            target.tags.append(value)
        elif name == "created":
            if operator == "NOT":
                warnings.append(f"Ignored NOT created:{value} (date filters cannot be negated)")
            else:
                created = _parse_created(value, warnings)
                if created is not None:
                    result.date_filters.created = created
        else:
            setattr(target, name, value)

        return " "

    remaining = _normalize(_FIELD_RE.sub(take_field, normalized))

    def take_operator(match: "re.Match[str]") -> str:
        operator, term = match.groups()
        result.operators[operator].append(term)
        return " "

    remaining = _normalize(_OPERATOR_RE.sub(take_operator, remaining))

    result.text_search = remaining
    return result, warnings


def parse_query(query: Optional[str]) -> ParsedQuery:
    """Parse a search string into a ParsedQuery. Never raises."""
    parsed, _ = parse_query_with_warnings(query)
    return parsed


# ============================================================================
# Suggestions
# ============================================================================

@dataclass
class Suggestion:
    """Completion offered for the word under the caret."""
    type: str  # 'field' | 'operator' | 'value' | 'preset'
    label: str
    value: str
    description: str = ""


def generate_suggestions(
    query: str,
    caret: Optional[int] = None,
    available_tags: Iterable[str] = (),
    recent_searches: Iterable[str] = (),
) -> List[Suggestion]:
    """Suggest completions for the word before the caret.

    Args:
        query: Current search-box text
        caret: Caret position. Defaults to the end of the text.
        available_tags: Tags to offer after ``tag:``
        recent_searches: Recent searches to offer on an empty word

    Returns:
        At most 8 suggestions
    """
    if caret is None:
        caret = len(query)
    before = query[:caret]
    last_word = _WHITESPACE_RE.split(before)[-1]

    suggestions: List[Suggestion] = []

    for name in FIELD_OPERATORS:
        if name.startswith(last_word):
            suggestions.append(Suggestion(
                type="field",
                label=name,
                value=name,
                description=f"Search in {name[:-1]} field",
            ))

    upper_word = last_word.upper()
    for op in SEARCH_OPERATORS:
        if op.startswith(upper_word):
            suggestions.append(Suggestion(
                type="operator",
                label=op,
                value=op + " ",
                description=f"{op} operator for combining terms",
            ))

    if "tag:" in before and " " not in before[before.rfind("tag:"):]:
        prefix = last_word.replace("tag:", "").lower()
        matching = [tag for tag in available_tags if prefix in tag.lower()]
        for tag in matching[:MAX_TAG_SUGGESTIONS]:
            suggestions.append(Suggestion(
                type="value",
                label=tag,
                value=tag,
                description=f"Filter by tag: {tag}",
            ))

    if "created:" in before and " " not in before[before.rfind("created:"):]:
        prefix = last_word.replace("created:", "")
        for shortcut in DATE_SHORTCUTS:
            if prefix in shortcut:
                suggestions.append(Suggestion(
                    type="value",
                    label=shortcut,
                    value=shortcut,
                    description=f"Filter by {shortcut}",
                ))

    if not last_word:
        for search in list(recent_searches)[:MAX_RECENT_SUGGESTIONS]:
            suggestions.append(Suggestion(
                type="preset",
                label=search,
                value=search,
                description="Recent search",
            ))

    return suggestions[:MAX_SUGGESTIONS]
