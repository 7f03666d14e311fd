"""Adapters that turn raw portal payloads into normalised records."""

from .category import merge_by_id  # noqa: F401
from .category import to_patents as category_to_patents  # noqa: F401
from .detail import parse_detail  # noqa: F401
from .patterns import find_all, find_first, window_after  # noqa: F401
from .search import JSONScalar, parse_search_envelope  # noqa: F401
from .search import to_patents as search_to_patents  # noqa: F401
from .text import merge_description, normalize  # noqa: F401
