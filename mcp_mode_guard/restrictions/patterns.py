"""Wildcard name matching for server/tool restriction rules.

Two wildcards are recognised:

* ``*`` matches any sequence of characters, including none.
* ``?`` matches exactly one character.

Every other character is literal, so ``get.tool`` only matches the text
``get.tool`` and ``[a]`` only matches ``[a]``.  Patterns are anchored at
both ends and matching is case-sensitive.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Mapping, Optional, Sequence, TypeVar

from mcp_mode_guard.constants import WILDCARD_ANY, WILDCARD_ONE

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _translate(pattern: str) -> str:
    """Translate a wildcard *pattern* into an unanchored regex body."""
    parts: List[str] = []
    for ch in pattern:
        if ch == WILDCARD_ANY:
            # ``**`` behaves like ``*``
            if not parts or parts[-1] != ".*":
                parts.append(".*")
        elif ch == WILDCARD_ONE:
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return "".join(parts)


def matches_pattern(text: str, pattern: str) -> bool:
    """Return ``True`` if *text* is fully matched by the wildcard *pattern*.

    Falls back to plain equality if the pattern cannot be compiled.
    """
    if not isinstance(text, str):
        return False
    try:
        regex = re.compile(_translate(pattern), re.DOTALL)
    except (re.error, TypeError) as exc:
        logger.debug("Pattern %r not compilable (%s); using exact match.", pattern, exc)
        return text == pattern
    return regex.fullmatch(text) is not None


def matches_any(text: str, patterns: Optional[Iterable[str]]) -> bool:
    """Return ``True`` if *text* matches at least one of *patterns*."""
    if not patterns:
        return False
    return any(matches_pattern(text, pat) for pat in patterns)


def matches_pattern_or_contains(text: str, term: str) -> bool:
    """Search helper: wildcard match, or case-insensitive substring.

    Meant for interactive filtering only.  Access decisions must use
    :func:`matches_pattern`, otherwise a rule for ``help`` would also
    catch ``helper``.
    """
    if matches_pattern(text, term):
        return True
    if not term or not isinstance(text, str) or not isinstance(term, str):
        return False
    return term.casefold() in text.casefold()


def _field_value(item: Any, field: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(field)
    return getattr(item, field, None)


def filter_by_pattern(items: Sequence[T], term: str, fields: Sequence[str]) -> List[T]:
    """Return *items* whose named *fields* match *term* (see
    :func:`matches_pattern_or_contains`).

    Items may be mappings or plain objects.  An empty *term* keeps
    everything.  Input order is preserved.
    """
    if not term:
        return list(items)
    return [
        item
        for item in items
        if any(
            isinstance(value, str) and matches_pattern_or_contains(value, term)
            for value in (_field_value(item, f) for f in fields)
        )
    ]
