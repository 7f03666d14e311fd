"""Adapter for the portal's positional-array search API.

``GET /api/api/patent/{query}?page=N`` answers with
``{"results": [[...], ...], "count": .., "total": .., "perpage": .., "page": ..}``
where every inner array is an unlabeled record. Raw arrays never leave this
module: they are wrapped into :class:`Patent` right here.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel, ValidationError

from patentradar.core.errors import MalformedUpstreamResponse
from patentradar.schemas import DEFAULT_CATEGORY, PLACEHOLDER_TITLE, PORTAL_ORIGIN, Patent
from patentradar.services.ingestion.text import normalize

LOGGER = logging.getLogger(__name__)


MIN_RECORD_SLOTS = 10

# Fixed by upstream convention; slot 4 repeats the case number, 6-8 are unused.
ID_SLOT = 0
CASE_NUMBER_SLOT = 1
TITLE_SLOT = 2
DESCRIPTION_SLOT = 3
CATEGORY_SLOT = 5
CENTER_SLOT = 9
IMAGE_SLOT = 10


@dataclass(frozen=True)
class JSONScalar:
    """One decoded slot of a positional record.

    ``kind`` is one of ``string``, ``int``, ``float``, ``bool`` or ``null``.
    """

    kind: str
    value: Any = None

    @classmethod
    def decode(cls, raw: Any) -> "JSONScalar":
        if isinstance(raw, str):
            return cls("string", raw)
        # bool is an int subclass in Python; JSON true/false must not become 1/0.
        if isinstance(raw, int) and not isinstance(raw, bool):
            return cls("int", raw)
        if isinstance(raw, float):
            return cls("float", raw)
        if isinstance(raw, bool):
            return cls("bool", raw)
        return cls("null")

    def display(self) -> Optional[str]:
        """Project to display text; empty strings and nulls are missing."""

        if self.kind == "string":
            return self.value or None
        if self.kind in ("int", "float"):
            return str(self.value)
        if self.kind == "bool":
            return "true" if self.value else "false"
        return None


def scalar_text(raw: Any) -> Optional[str]:
    return JSONScalar.decode(raw).display()


class SearchEnvelope(BaseModel):
    results: List[Any]
    count: Optional[int] = None
    total: Optional[int] = None
    perpage: Optional[int] = None
    page: Optional[int] = None


def parse_search_envelope(payload: Any) -> SearchEnvelope:
    """Validate the outer envelope, raising ``MalformedUpstreamResponse`` on mismatch."""

    if isinstance(payload, SearchEnvelope):
        return payload
    if not isinstance(payload, dict):
        raise MalformedUpstreamResponse(
            f"Search response must be a JSON object, got {type(payload).__name__}"
        )
    try:
        return SearchEnvelope.model_validate(payload)
    except ValidationError as exc:
        raise MalformedUpstreamResponse(f"Unexpected search response shape: {exc}") from exc


def absolute_url(value: Optional[str], origin: str = PORTAL_ORIGIN) -> Optional[str]:
    """Prefix portal-relative paths with ``origin``; absolute URLs pass through."""

    if not value:
        return None
    value = value.strip()
    if not value:
        return None
    if value.startswith(("http://", "https://")):
        return value
    if value.startswith("//"):
        return f"https:{value}"
    return f"{origin.rstrip('/')}/{value.lstrip('/')}"


def record_to_patent(record: Sequence[Any], origin: str = PORTAL_ORIGIN) -> Optional[Patent]:
    """Map one positional record; ``None`` when it is too short to trust."""

    if len(record) < MIN_RECORD_SLOTS:
        return None

    slots = [scalar_text(value) for value in record]
    identifier = (slots[ID_SLOT] or "").strip() or str(uuid.uuid4())
    title = normalize(slots[TITLE_SLOT]) or PLACEHOLDER_TITLE
    category = (slots[CATEGORY_SLOT] or "").strip() or DEFAULT_CATEGORY
    image = slots[IMAGE_SLOT] if len(slots) > IMAGE_SLOT else None

    return Patent(
        id=identifier,
        title=title,
        description=normalize(slots[DESCRIPTION_SLOT]),
        category=category,
        case_number=(slots[CASE_NUMBER_SLOT] or "").strip(),
        patent_number=None,
        image_url=absolute_url(image, origin),
        center=slots[CENTER_SLOT],
        trl=None,
    )


def to_patents(payload: Any, origin: str = PORTAL_ORIGIN) -> List[Patent]:
    envelope = parse_search_envelope(payload)
    patents: List[Patent] = []
    skipped = 0
    for record in envelope.results:
        patent = record_to_patent(record, origin) if isinstance(record, list) else None
        if patent is None:
            skipped += 1
            continue
        patents.append(patent)
    if skipped:
        LOGGER.debug("Skipped %s short or malformed search records", skipped)
    return patents
