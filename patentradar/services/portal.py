"""Async façade over the NASA Technology Transfer portal.

``PatentPortalClient`` is constructed once at startup and handed to whoever
needs it. It owns the per-kind caches, routes raw upstream payloads to the
adapters in :mod:`patentradar.services.ingestion`, and translates transport
failures into :mod:`patentradar.core.errors`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union
from urllib.parse import quote, unquote

import httpx

from patentradar.core.cancellation import CancellationToken, check_cancelled
from patentradar.core.config import Settings, get_settings
from patentradar.core.errors import (
    Cancelled,
    EmptyQuery,
    InvalidURL,
    MalformedUpstreamResponse,
    NetworkError,
    PortalError,
    UpstreamHTTPError,
)
from patentradar.schemas import ALL_CATEGORY_SLUGS, CacheScope, Patent, PatentCategory, PatentDetail
from patentradar.services.cache import Clock, TTLCache
from patentradar.services.ingestion import category as category_adapter
from patentradar.services.ingestion import search as search_adapter
from patentradar.services.ingestion.detail import parse_detail

LOGGER = logging.getLogger(__name__)

ALL_CATEGORIES_KEY = "all"
DEFAULT_FEATURED_QUERIES = ("aeronautics", "robotics", "sensors", "materials", "propulsion")

CategoryArg = Union[PatentCategory, str, None]


class PatentPortalClient:
    """Browse, search and scrape the portal with TTL caching and cancellation."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.settings = settings or get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            headers={"User-Agent": self.settings.user_agent},
            follow_redirects=True,
        )
        self._category_cache: TTLCache[Tuple[Patent, ...]] = TTLCache(
            "category", self.settings.category_ttl_seconds, clock
        )
        self._search_cache: TTLCache[Tuple[Patent, ...]] = TTLCache(
            "search", self.settings.search_ttl_seconds, clock
        )
        self._detail_cache: TTLCache[PatentDetail] = TTLCache(
            "detail", self.settings.detail_ttl_seconds, clock
        )

    async def __aenter__(self) -> "PatentPortalClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def base_url(self) -> str:
        return self.settings.portal_base_url.rstrip("/")

    # ------------------------------------------------------------------
    # URL construction
    # ------------------------------------------------------------------

    def _build_url(self, raw: str) -> httpx.URL:
        try:
            url = httpx.URL(raw)
        except (httpx.InvalidURL, TypeError, ValueError) as exc:
            raise InvalidURL(f"Could not build request URL {raw!r}: {exc}") from exc
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidURL(f"Portal base URL must be absolute http(s): {raw!r}")
        return url

    def search_url(self, query: str, page: int = 1) -> httpx.URL:
        if page < 1:
            raise InvalidURL(f"Search page must be >= 1, got {page}")
        return self._build_url(f"{self.base_url}/api/api/patent/{quote(query, safe='')}?page={page}")

    def category_url(self, slug: str) -> httpx.URL:
        # Accept slugs that arrive already percent-encoded.
        encoded = quote(unquote(slug), safe="")
        return self._build_url(f"{self.base_url}/searchosapicat/multi/aw/patent/{encoded}/1/200/")

    def detail_url(self, case_number: str) -> httpx.URL:
        return self._build_url(f"{self.base_url}/patent/{quote(case_number, safe='')}")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _get(self, url: httpx.URL, cancel_token: Optional[CancellationToken]) -> httpx.Response:
        check_cancelled(cancel_token)
        LOGGER.debug("GET %s", url)
        try:
            response = await self._client.get(url)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise InvalidURL(str(exc)) from exc
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Timed out fetching {url}") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Failed to fetch {url}: {exc}") from exc
        if response.status_code != 200:
            raise UpstreamHTTPError(response.status_code, str(url))
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedUpstreamResponse(f"Response from {response.url} was not valid JSON") from exc

    async def _store(
        self,
        cache: TTLCache[Any],
        key: str,
        value: Any,
        cancel_token: Optional[CancellationToken],
    ) -> None:
        async with cache.lock:
            check_cancelled(cancel_token)
            cache.set(key, value)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        page: int = 1,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Patent]:
        """Search the portal; a blank query fails with ``EmptyQuery`` before any I/O."""

        trimmed = (query or "").strip()
        if not trimmed:
            raise EmptyQuery("Search query must not be blank")
        check_cancelled(cancel_token)

        key = f"{trimmed.lower()}|{page}"
        cached = self._search_cache.get(key)
        if cached is not None:
            check_cancelled(cancel_token)
            return list(cached)

        response = await self._get(self.search_url(trimmed, page), cancel_token)
        patents = search_adapter.to_patents(self._json(response), origin=self.base_url)
        LOGGER.info("Search %r page %s returned %s patents", trimmed, page, len(patents))
        await self._store(self._search_cache, key, tuple(patents), cancel_token)
        return patents

    async def browse_by_category(
        self,
        category: CategoryArg = PatentCategory.ALL,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Patent]:
        """List one category, or every category merged when ``category`` is ``ALL``."""

        check_cancelled(cancel_token)
        slug = resolve_category_slug(category)
        key = slug or ALL_CATEGORIES_KEY

        cached = self._category_cache.get(key)
        if cached is not None:
            check_cancelled(cancel_token)
            return list(cached)

        if slug is None:
            patents = await self.fetch_all_categories(ALL_CATEGORY_SLUGS, cancel_token=cancel_token)
        else:
            patents = await self._fetch_category(slug, cancel_token)
        LOGGER.info("Category %s returned %s patents", key, len(patents))
        await self._store(self._category_cache, key, tuple(patents), cancel_token)
        return patents

    async def _fetch_category(self, slug: str, cancel_token: Optional[CancellationToken]) -> List[Patent]:
        response = await self._get(self.category_url(slug), cancel_token)
        return category_adapter.to_patents(self._json(response), origin=self.base_url)

    async def fetch_all_categories(
        self,
        slugs: Iterable[str],
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Patent]:
        """Fetch several categories in waves and merge them by id, sorted by title.

        At most ``category_batch_size`` requests are in flight per wave. A slug
        whose request fails contributes nothing; the others still count. Slugs
        are processed in sorted order and folded in that order, so on an id
        collision the record from the alphabetically first slug wins. If every
        slug fails the first failure is raised instead of an empty list.
        """

        ordered = sorted(dict.fromkeys(slugs))
        batch_size = max(1, self.settings.category_batch_size)
        batches: List[List[Patent]] = []
        failures: List[PortalError] = []

        for start in range(0, len(ordered), batch_size):
            check_cancelled(cancel_token)
            wave = ordered[start : start + batch_size]
            results = await asyncio.gather(
                *(self._fetch_category(slug, cancel_token) for slug in wave),
                return_exceptions=True,
            )
            for slug, result in zip(wave, results):
                if isinstance(result, Cancelled):
                    raise result
                if isinstance(result, PortalError):
                    LOGGER.warning("Category %s failed during fan-out: %s", slug, result)
                    failures.append(result)
                    continue
                if isinstance(result, BaseException):
                    raise result
                batches.append(result)

        check_cancelled(cancel_token)
        if ordered and not batches and failures:
            raise failures[0]
        return category_adapter.merge_by_id(batches)

    async def get_detail(
        self,
        case_number: str,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PatentDetail:
        key = (case_number or "").strip()
        if not key:
            raise InvalidURL("Case number must not be blank")
        check_cancelled(cancel_token)

        cached = self._detail_cache.get(key)
        if cached is not None:
            check_cancelled(cancel_token)
            return cached

        response = await self._get(self.detail_url(key), cancel_token)
        detail = parse_detail(
            response.text,
            key,
            window_chars=self.settings.detail_window_chars,
            include_direct_video_files=self.settings.include_direct_video_files,
            origin=self.base_url,
        )
        await self._store(self._detail_cache, key, detail, cancel_token)
        return detail

    async def clear_cache(self, scope: Union[CacheScope, str] = CacheScope.ALL) -> None:
        scope = CacheScope(scope)
        caches = {
            CacheScope.CATEGORY: (self._category_cache,),
            CacheScope.SEARCH: (self._search_cache,),
            CacheScope.DETAIL: (self._detail_cache,),
            CacheScope.ALL: (self._category_cache, self._search_cache, self._detail_cache),
        }[scope]
        for cache in caches:
            async with cache.lock:
                cache.clear()
        LOGGER.info("Cleared %s cache", scope.value)

    async def featured_patents(
        self,
        queries: Sequence[str] = DEFAULT_FEATURED_QUERIES,
        per_query: int = 3,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[Patent]:
        """A mixed sample: the first few hits of several popular searches."""

        picked: Dict[str, Patent] = {}
        for query in queries:
            try:
                patents = await self.search(query, cancel_token=cancel_token)
            except Cancelled:
                raise
            except PortalError as exc:
                LOGGER.warning("Featured query %r failed: %s", query, exc)
                continue
            for patent in patents[:per_query]:
                picked.setdefault(patent.id, patent)
        return sorted(picked.values(), key=lambda patent: patent.title)

    async def find_patent(
        self,
        identifier: str,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[Patent]:
        """Look a listing up by id or case number via search (there is no id endpoint)."""

        patents = await self.search(identifier, cancel_token=cancel_token)
        wanted = identifier.strip()
        return next(
            (patent for patent in patents if patent.id == wanted or patent.case_number == wanted),
            None,
        )


def resolve_category_slug(category: CategoryArg) -> Optional[str]:
    """Map a category enum, label or raw slug to its API slug; ``None`` means all."""

    if category is None:
        return None
    if isinstance(category, PatentCategory):
        return category.api_slug
    label = category.strip()
    if not label or label.lower() in (ALL_CATEGORIES_KEY, "all categories"):
        return None
    matched = PatentCategory.from_label(unquote(label))
    if matched is not None:
        return matched.api_slug
    return label
