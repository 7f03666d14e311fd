"""Schema exports."""

from patentradar.schemas.patent import (
	ALL_CATEGORY_SLUGS,
	DEFAULT_CATEGORY,
	PLACEHOLDER_TITLE,
	PORTAL_ORIGIN,
	CacheScope,
	CategoryRead,
	Patent,
	PatentCategory,
	PatentDetail,
)

__all__ = [
	"ALL_CATEGORY_SLUGS",
	"DEFAULT_CATEGORY",
	"PLACEHOLDER_TITLE",
	"PORTAL_ORIGIN",
	"CacheScope",
	"CategoryRead",
	"Patent",
	"PatentCategory",
	"PatentDetail",
]
