"""PostgREST filter builders.

Filters are plain ``(column, "op.value")`` query-parameter pairs so they can
be passed straight to ``httpx`` as params. OR groups are rendered as
``or=(cond1,cond2,...)`` where each condition is ``column.op.value``.
"""

from __future__ import annotations

from typing import Iterable

Filter = tuple[str, str]

# Characters with meaning inside a PostgREST logic tree value; any whitespace
# also forces quoting
_RESERVED_CHARS = set(',.:()"\\')


def escape_like(term: str) -> str:
    """Escape LIKE metacharacters so ``term`` matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(term: str) -> str:
    """Build a substring ILIKE pattern using PostgREST's ``*`` wildcard."""
    return f"*{escape_like(term)}*"


def _quote_if_reserved(value: str) -> str:
    if any(ch in _RESERVED_CHARS or ch.isspace() for ch in value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


def eq(column: str, value: object) -> Filter:
    return column, f"eq.{value}"


def gte(column: str, value: object) -> Filter:
    return column, f"gte.{value}"


def lte(column: str, value: object) -> Filter:
    return column, f"lte.{value}"


def ilike(column: str, term: str) -> Filter:
    """Case-insensitive substring filter on a single column."""
    return column, f"ilike.{contains_pattern(term)}"


def ilike_condition(column: str, term: str) -> str:
    """Case-insensitive substring condition for use inside an OR group."""
    return f"{column}.ilike.{_quote_if_reserved(contains_pattern(term))}"


def or_group(conditions: Iterable[str]) -> str:
    """Render conditions as the value of an ``or`` query parameter.

    Raises:
        ValueError: If no conditions are given.
    """
    items = list(conditions)
    if not items:
        raise ValueError("or_group requires at least one condition")
    return f"({','.join(items)})"
