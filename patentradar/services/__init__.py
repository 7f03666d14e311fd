"""Service exports."""

from patentradar.services.cache import CacheEntry, TTLCache
from patentradar.services.portal import PatentPortalClient, resolve_category_slug

__all__ = [
	"CacheEntry",
	"TTLCache",
	"PatentPortalClient",
	"resolve_category_slug",
]
