"""Best-effort scraper for a listing's HTML detail page (``/patent/{case}``).

The portal's markup is not a contract and has drifted between releases, so
the page is read as text with a series of independent extraction steps.
Each step has an empty default; a section that is missing or unreadable
leaves its field empty without affecting the others.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, TypeVar
from urllib.parse import urlsplit

from patentradar.schemas import PORTAL_ORIGIN, PatentDetail
from patentradar.services.ingestion.patterns import find_all, find_first, window_after
from patentradar.services.ingestion.search import absolute_url
from patentradar.services.ingestion.text import merge_description, normalize

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Markup patterns
# ---------------------------------------------------------------------------


TITLE_PATTERN = r"<h1[^>]*>(.*?)</h1>"

ABSTRACT_PATTERNS = (
    r"<(div|p|section)[^>]*class=[\"'][^\"']*\babstract\b[^\"']*[\"'][^>]*>(?P<body>.*?)</\1>",
    r"<(div|p|section)[^>]*id=[\"']abstract[\"'][^>]*>(?P<body>.*?)</\1>",
)
TECH_DESC_PATTERNS = (
    r"<(div|section)[^>]*class=[\"'][^\"']*\btech(?:nology)?[-_]?desc(?:ription)?\b[^\"']*[\"'][^>]*>(?P<body>.*?)</\1>",
    r"<(div|section)[^>]*id=[\"']tech(?:nology)?[-_]?desc(?:ription)?[\"'][^>]*>(?P<body>.*?)</\1>",
)
META_DESCRIPTION_PATTERN = r"<meta[^>]*name=[\"']description[\"'][^>]*content=[\"']([^\"']*)[\"']"

SECTION_NAMES = ("benefits", "applications")

# A list block opened by a class/id or by a heading; {stop} keeps the capture
# from running into a sibling section.
SECTION_LIST_TEMPLATES = (
    r"(?:id|class)=[\"'][^\"']*\b{name}\b[^\"']*[\"'][^>]*>((?:(?!{stop}).)*?)</(?:ul|ol)>",
    r"<h[1-6][^>]*>\s*(?:<[^>]+>\s*)*{name}\s*(?:<[^>]+>\s*)*</h[1-6]>((?:(?!{stop}|<h[1-6][\s>]).)*?)</(?:ul|ol)>",
)
SECTION_END = r"</section>"
SECTION_MARKER_TEMPLATE = (
    r"(?:id|class)=[\"'][^\"']*\b(?:{names})\b|<h[1-6][^>]*>\s*(?:<[^>]+>\s*)*(?:{names})\b"
)
LIST_BLOCK_PATTERN = r"<(?:ul|ol)[^>]*>(.*?)</(?:ul|ol)>"
LIST_ITEM_PATTERN = r"<li[^>]*>(.*?)</li>"

URL_CANDIDATE_PATTERN = r"((?:https?:)?//[^\s\"'<>()]+|/(?:t2media|t2_images|uploads)/[^\s\"'<>()]+)"
MEDIA_PATH_MARKERS = ("/t2media/", "/t2_images/")
# Uploads only count when they live on the portal itself.
PORTAL_UPLOAD_MARKER = "/uploads/"
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
VIDEO_FILE_EXTENSIONS = (".mp4", ".mov", ".m4v", ".webm")

YOUTUBE_PATTERN = (
    r"(?:https?:)?//(?:www\.|m\.)?"
    r"(?:youtube(?:-nocookie)?\.com/(?:watch\?(?:[^\"'\s<>]*?&(?:amp;)?)?v=|embed/|shorts/|v/)|youtu\.be/)"
    r"([A-Za-z0-9_-]{11})"
)
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

PATENT_ANCHOR_PATTERN = re.compile(
    r"patent\s*(?:numbers?|nos?\.?|#)|patent[-_]number|patents\.google\.com/patent/US",
    re.IGNORECASE,
)
PATENT_NUMBER_PATTERN = r"(?<![\d,])(\d{1,3}(?:,\d{3})+|\d{6,10})(?![\d,])"
PATENT_ANCHOR_WINDOW = 200
PATENT_NUMBER_LENGTHS = range(6, 11)

RELATED_ANCHORS = ("Related Technolog", "Similar Technolog", "Similar Results", "related-", "related")
RELATED_LINK_PATTERN = r"href=[\"'](?:https?://[^/\"']+)?/patent/([A-Za-z0-9][A-Za-z0-9_.-]*)"
RELATED_WINDOW = 8000
MAX_RELATED = 10

DEFAULT_WINDOW_CHARS = 4000


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def unique(values: Iterable[str]) -> List[str]:
    """De-duplicate while keeping first-seen order."""

    return list(dict.fromkeys(values))


def _first_block(html: str, patterns: Sequence[str]) -> str:
    for pattern in patterns:
        match = re.search(pattern, html, flags=re.IGNORECASE | re.DOTALL)
        if match:
            return normalize(match.group("body"))
    return ""


def _list_items(block: Optional[str]) -> List[str]:
    items = (normalize(item) for item in find_all(block, LIST_ITEM_PATTERN))
    return [item for item in items if item]


def _url_candidates(html: str, origin: str) -> List[str]:
    urls = []
    for raw in find_all(html, URL_CANDIDATE_PATTERN):
        url = absolute_url(raw.replace("&amp;", "&"), origin)
        if url:
            urls.append(url)
    return urls


def _path_endswith(url: str, extensions: Tuple[str, ...]) -> bool:
    return urlsplit(url).path.lower().endswith(extensions)


def _is_portal_media(url: str, origin: str) -> bool:
    parts = urlsplit(url)
    if any(marker in parts.path for marker in MEDIA_PATH_MARKERS):
        return True
    return PORTAL_UPLOAD_MARKER in parts.path and parts.netloc.lower() == urlsplit(origin).netloc.lower()


def _other_sections_pattern(name: str) -> Optional[str]:
    others = [re.escape(other) for other in SECTION_NAMES if other != name.lower()]
    if not others:
        return None
    return SECTION_MARKER_TEMPLATE.format(names="|".join(others))


def _run_step(name: str, case_number: str, step: Callable[[], T], default: T) -> T:
    try:
        return step()
    except Exception as exc:
        LOGGER.warning("Detail step %s failed for %s: %s", name, case_number, exc)
        return default


# ---------------------------------------------------------------------------
# Extraction steps
# ---------------------------------------------------------------------------


def extract_title(html: str, case_number: str) -> str:
    return normalize(find_first(html, TITLE_PATTERN)) or case_number


def extract_description(html: str) -> str:
    abstract = _first_block(html, ABSTRACT_PATTERNS)
    technical = _first_block(html, TECH_DESC_PATTERNS)
    description = merge_description(abstract, technical)
    if description:
        return description
    return normalize(find_first(html, META_DESCRIPTION_PATTERN))


def extract_section_items(html: str, name: str, window_chars: int = DEFAULT_WINDOW_CHARS) -> List[str]:
    """List items of the section called ``name`` (e.g. ``benefits``).

    Falls back to the first list within ``window_chars`` of the heading text
    when no block is marked up with a matching class, id or heading. Neither
    path reads past the start of another known section.
    """

    others = _other_sections_pattern(name)
    stop = SECTION_END if others is None else f"{SECTION_END}|{others}"
    for template in SECTION_LIST_TEMPLATES:
        block = find_first(html, template.format(name=re.escape(name), stop=stop))
        if block is not None:
            return unique(_list_items(block))

    window = window_after(html, name, window_chars)
    if window is None:
        return []
    if others is not None:
        boundary = re.search(others, window, flags=re.IGNORECASE | re.DOTALL)
        if boundary:
            window = window[: boundary.start()]
    block = find_first(window, LIST_BLOCK_PATTERN) or window
    return unique(_list_items(block))


def extract_images(html: str, origin: str = PORTAL_ORIGIN) -> List[str]:
    images = [
        url
        for url in _url_candidates(html, origin)
        if _is_portal_media(url, origin) and _path_endswith(url, IMAGE_EXTENSIONS)
    ]
    return unique(images)


def extract_videos(html: str, origin: str = PORTAL_ORIGIN, include_direct_files: bool = False) -> List[str]:
    """Canonical YouTube watch URLs, one per video id, in document order.

    ``include_direct_files`` additionally keeps direct ``.mp4``-style links.
    """

    videos = [YOUTUBE_WATCH_URL.format(video_id=video_id) for video_id in find_all(html, YOUTUBE_PATTERN)]
    if include_direct_files:
        videos.extend(
            url for url in _url_candidates(html, origin) if _path_endswith(url, VIDEO_FILE_EXTENSIONS)
        )
    return unique(videos)


def extract_patent_numbers(html: str) -> List[str]:
    numbers: List[str] = []
    for anchor in PATENT_ANCHOR_PATTERN.finditer(html):
        segment = normalize(html[anchor.end() : anchor.end() + PATENT_ANCHOR_WINDOW])
        for raw in find_all(segment, PATENT_NUMBER_PATTERN):
            digits = raw.replace(",", "")
            if len(digits) in PATENT_NUMBER_LENGTHS:
                numbers.append(digits)
    return unique(numbers)


def extract_related(html: str, case_number: str) -> List[str]:
    for anchor in RELATED_ANCHORS:
        window = window_after(html, anchor, RELATED_WINDOW)
        if window is None:
            continue
        related = [
            identifier
            for identifier in unique(find_all(window, RELATED_LINK_PATTERN))
            if identifier.lower() != case_number.lower()
        ]
        if related:
            return related[:MAX_RELATED]
    return []


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_detail(
    html: Optional[str],
    case_number: str,
    *,
    window_chars: int = DEFAULT_WINDOW_CHARS,
    include_direct_video_files: bool = False,
    origin: str = PORTAL_ORIGIN,
) -> PatentDetail:
    """Scrape ``html`` into a :class:`PatentDetail`; never raises."""

    html = html or ""

    title = _run_step("title", case_number, lambda: extract_title(html, case_number), case_number)
    description = _run_step("description", case_number, lambda: extract_description(html), "")
    benefits = _run_step(
        "benefits", case_number, lambda: extract_section_items(html, "benefits", window_chars), []
    )
    applications = _run_step(
        "applications", case_number, lambda: extract_section_items(html, "applications", window_chars), []
    )
    images = _run_step("images", case_number, lambda: extract_images(html, origin), [])
    videos = _run_step(
        "videos",
        case_number,
        lambda: extract_videos(html, origin, include_direct_files=include_direct_video_files),
        [],
    )
    patent_numbers = _run_step("patent_numbers", case_number, lambda: extract_patent_numbers(html), [])
    related = _run_step("related", case_number, lambda: extract_related(html, case_number), [])

    LOGGER.debug(
        "Parsed detail %s: %s benefits, %s applications, %s images, %s videos",
        case_number,
        len(benefits),
        len(applications),
        len(images),
        len(videos),
    )

    return PatentDetail(
        id=case_number,
        case_number=case_number,
        title=title,
        full_description=description,
        benefits=tuple(benefits),
        applications=tuple(applications),
        images=tuple(images),
        videos=tuple(videos),
        patent_numbers=tuple(patent_numbers),
        related_technologies=tuple(related),
    )
