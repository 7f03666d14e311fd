"""Adapter for the Elasticsearch-shaped category (browse) API."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence

from patentradar.core.errors import MalformedUpstreamResponse
from patentradar.schemas import DEFAULT_CATEGORY, PORTAL_ORIGIN, Patent
from patentradar.services.ingestion.search import absolute_url, scalar_text
from patentradar.services.ingestion.text import merge_description, normalize

LOGGER = logging.getLogger(__name__)


def hit_to_patent(hit: Dict[str, Any], origin: str = PORTAL_ORIGIN) -> Optional[Patent]:
    """Map one ``{_id, _source}`` hit; ``None`` when it has no usable title."""

    source = hit.get("_source")
    if not isinstance(source, dict):
        return None

    title = normalize(scalar_text(source.get("title")))
    if not title:
        return None

    identifier = (scalar_text(hit.get("_id")) or "").strip() or str(uuid.uuid4())
    case_number = (scalar_text(source.get("client_record_id")) or "").strip() or identifier
    description = merge_description(
        normalize(scalar_text(source.get("abstract"))),
        normalize(scalar_text(source.get("tech_desc"))),
    )
    patent_number = (scalar_text(source.get("patent_number")) or "").strip() or None

    return Patent(
        id=identifier,
        title=title,
        description=description,
        category=normalize(scalar_text(source.get("category"))) or DEFAULT_CATEGORY,
        case_number=case_number,
        patent_number=patent_number,
        image_url=absolute_url(scalar_text(source.get("img1")), origin),
        center=normalize(scalar_text(source.get("center"))) or None,
        trl=normalize(scalar_text(source.get("trl"))) or None,
    )


def to_patents(payload: Any, origin: str = PORTAL_ORIGIN) -> List[Patent]:
    if not isinstance(payload, list):
        raise MalformedUpstreamResponse(
            f"Category response must be a JSON array, got {type(payload).__name__}"
        )
    patents: List[Patent] = []
    for hit in payload:
        if not isinstance(hit, dict):
            continue
        patent = hit_to_patent(hit, origin)
        if patent is not None:
            patents.append(patent)
    return patents


def merge_by_id(batches: Iterable[Sequence[Patent]]) -> List[Patent]:
    """Fold batches into one list keyed by id (first seen wins), sorted by title.

    ``sorted`` is stable, so equal titles keep their first-seen order.
    """

    merged: Dict[str, Patent] = {}
    for batch in batches:
        for patent in batch:
            if patent.id in merged:
                continue
            merged[patent.id] = patent
    return sorted(merged.values(), key=lambda patent: patent.title)
