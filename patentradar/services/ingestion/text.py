"""Markup stripping and paragraph merging shared by every portal adapter."""

from __future__ import annotations

import re
from typing import Optional

TAG_RE = re.compile(r"<[^>]+>")
WHITESPACE_RE = re.compile(r"\s+")

# Literal backslash-n sequences leak into search API descriptions.
ESCAPED_NEWLINE = "\\n"

# No &lt;/&gt;: decoded angle brackets would be stripped as tags on the next pass.
ENTITIES = {
    "&nbsp;": " ",
    "&quot;": '"',
    "&#039;": "'",
    "&#39;": "'",
    "&rsquo;": "'",
    "&lsquo;": "'",
    "&ldquo;": '"',
    "&rdquo;": '"',
    "&amp;": "&",
}

DUPLICATE_PREFIX_CHARS = 50


def _normalize_once(text: str) -> str:
    text = TAG_RE.sub("", text)
    text = text.replace(ESCAPED_NEWLINE, " ")
    for entity, replacement in ENTITIES.items():
        text = text.replace(entity, replacement)
    return WHITESPACE_RE.sub(" ", text).strip()


def normalize(raw: Optional[str]) -> str:
    """Return ``raw`` without markup or entities, whitespace collapsed and trimmed.

    A pass never lengthens the string, so repeating it until nothing
    changes terminates and makes the function idempotent even for
    double-escaped input such as ``&amp;quot;``. Escaped angle brackets are
    left as ``&lt;``/``&gt;`` so comparisons like ``&lt;100 K`` survive.
    """

    if not raw:
        return ""
    text = str(raw)
    while True:
        cleaned = _normalize_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def merge_description(abstract: Optional[str], technical: Optional[str]) -> str:
    """Join an abstract and a technical description, dropping prefix duplicates.

    The portal frequently repeats the abstract as the opening of the technical
    description; in that case the longer text wins instead of both being shown.
    """

    abstract = (abstract or "").strip()
    technical = (technical or "").strip()
    if not technical:
        return abstract
    if not abstract:
        return technical
    if technical.startswith(abstract):
        return technical
    if abstract.startswith(technical[:DUPLICATE_PREFIX_CHARS]):
        return abstract
    return f"{abstract}\n\n{technical}"
