"""Regex helpers for pulling sections out of irregular portal HTML.

Missing sections are expected, so every helper returns an empty result
rather than raising, including when handed an invalid pattern.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Optional, Pattern, Union

LOGGER = logging.getLogger(__name__)

DEFAULT_FLAGS = re.IGNORECASE | re.DOTALL

PatternLike = Union[str, Pattern[str]]


def compile_pattern(pattern: PatternLike, flags: int = DEFAULT_FLAGS) -> Optional[Pattern[str]]:
    if isinstance(pattern, re.Pattern):
        return pattern
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        LOGGER.debug("Ignoring invalid pattern %r: %s", pattern, exc)
        return None


def _capture(match: "re.Match[str]") -> Optional[str]:
    if match.re.groups:
        return match.group(1)
    return match.group(0)


def find_first(text: Optional[str], pattern: PatternLike, flags: int = DEFAULT_FLAGS) -> Optional[str]:
    """First capture group of the first match (whole match for group-less patterns)."""

    compiled = compile_pattern(pattern, flags)
    if compiled is None or not text:
        return None
    for match in compiled.finditer(text):
        value = _capture(match)
        if value is not None:
            return value
    return None


def find_all(text: Optional[str], pattern: PatternLike, flags: int = DEFAULT_FLAGS) -> Iterator[str]:
    """Yield capture-group matches in document order; single pass."""

    compiled = compile_pattern(pattern, flags)
    if compiled is None or not text:
        return
    for match in compiled.finditer(text):
        value = _capture(match)
        if value is not None:
            yield value


def window_after(text: Optional[str], anchor: str, max_chars: int) -> Optional[str]:
    """Slice of ``text`` starting at the first case-insensitive ``anchor``, at most ``max_chars`` long."""

    if not text or not anchor:
        return None
    match = re.search(re.escape(anchor), text, flags=re.IGNORECASE)
    if not match:
        return None
    start = match.start()
    return text[start : start + max(max_chars, 0)]
