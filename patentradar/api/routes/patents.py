"""Patent browse, search and detail endpoints backed by the portal client."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Response, status

from patentradar import schemas
from patentradar.api.dependencies import PortalClient
from patentradar.core.errors import (
    Cancelled,
    EmptyQuery,
    InvalidURL,
    MalformedUpstreamResponse,
    NetworkError,
    PortalError,
    UpstreamHTTPError,
)

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/patents", tags=["patents"])

CLIENT_CLOSED_REQUEST = 499

ERROR_STATUS = {
    EmptyQuery: status.HTTP_400_BAD_REQUEST,
    InvalidURL: status.HTTP_400_BAD_REQUEST,
    UpstreamHTTPError: status.HTTP_502_BAD_GATEWAY,
    MalformedUpstreamResponse: status.HTTP_502_BAD_GATEWAY,
    NetworkError: status.HTTP_504_GATEWAY_TIMEOUT,
    Cancelled: CLIENT_CLOSED_REQUEST,
}


def to_http_exception(exc: PortalError) -> HTTPException:
    """Translate a portal failure into the HTTP status callers should see."""

    code = ERROR_STATUS.get(type(exc), status.HTTP_502_BAD_GATEWAY)
    if code >= 500:
        LOGGER.warning("Portal request failed: %s", exc)
    return HTTPException(status_code=code, detail=str(exc))


@router.get("/categories", response_model=List[schemas.CategoryRead])
def list_categories() -> List[schemas.CategoryRead]:
    """Return the category catalogue with display names and API slugs."""

    return [schemas.CategoryRead.from_category(category) for category in schemas.PatentCategory]


@router.get("/browse", response_model=List[schemas.Patent])
async def browse_patents(
    portal: PortalClient,
    category: str = Query("all", description="Category label, slug, or 'all'."),
) -> List[schemas.Patent]:
    """List a category, or every category merged and sorted by title."""

    try:
        return await portal.browse_by_category(category)
    except PortalError as exc:
        raise to_http_exception(exc) from exc


@router.get("/search", response_model=List[schemas.Patent])
async def search_patents(
    portal: PortalClient,
    q: str = Query("", description="Free-text search query."),
    page: int = Query(1, ge=1, description="1-based result page."),
) -> List[schemas.Patent]:
    """Run a portal search; blank queries are rejected with 400."""

    try:
        return await portal.search(q, page)
    except PortalError as exc:
        raise to_http_exception(exc) from exc


@router.get("/featured", response_model=List[schemas.Patent])
async def featured_patents(portal: PortalClient) -> List[schemas.Patent]:
    try:
        return await portal.featured_patents()
    except PortalError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache(
    portal: PortalClient,
    scope: schemas.CacheScope = Query(schemas.CacheScope.ALL, description="Which cache to drop."),
) -> Response:
    await portal.clear_cache(scope)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{case_number}", response_model=schemas.Patent)
async def get_patent(case_number: str, portal: PortalClient) -> schemas.Patent:
    """Look up a single summary record by id or case number."""

    try:
        patent: Optional[schemas.Patent] = await portal.find_patent(case_number)
    except PortalError as exc:
        raise to_http_exception(exc) from exc
    if patent is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patent not found")
    return patent


@router.get("/{case_number}/detail", response_model=schemas.PatentDetail)
async def get_patent_detail(case_number: str, portal: PortalClient) -> schemas.PatentDetail:
    """Scrape the listing's detail page (benefits, applications, media, related)."""

    try:
        return await portal.get_detail(case_number)
    except PortalError as exc:
        raise to_http_exception(exc) from exc
