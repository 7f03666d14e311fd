"""Pydantic schemas for normalised portal records."""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


PORTAL_ORIGIN = "https://technology.nasa.gov"
PLACEHOLDER_TITLE = "Untitled"
DEFAULT_CATEGORY = "General"
# Shorter fragments ("a", "and") are too ambiguous to resolve to a category.
MIN_PARTIAL_LABEL = 4


class Patent(BaseModel):
    """Summary record shared by the search and category APIs."""

    id: str = Field(..., min_length=1, description="Listing identifier as assigned upstream.")
    title: str = Field(..., min_length=1)
    description: str = ""
    category: str = Field(DEFAULT_CATEGORY, description="Free-text category label reported upstream.")
    case_number: str = Field("", description="NASA internal case identifier (e.g. ARC-12345).")
    patent_number: Optional[str] = Field(None, description="Issued US patent number, if known.")
    image_url: Optional[str] = None
    center: Optional[str] = Field(None, description="Originating NASA field center.")
    trl: Optional[str] = Field(None, description="Technology Readiness Level (1-9) as free text.")

    model_config = ConfigDict(frozen=True)

    @property
    def patent_office_url(self) -> Optional[str]:
        if not self.patent_number:
            return None
        return f"https://patents.google.com/patent/US{self.patent_number}"

    @property
    def portal_url(self) -> str:
        return f"{PORTAL_ORIGIN}/patent/{self.id}"


class PatentDetail(BaseModel):
    """Rich record scraped from a single listing's HTML page."""

    id: str
    case_number: str
    title: str
    full_description: str = ""
    benefits: Tuple[str, ...] = ()
    applications: Tuple[str, ...] = ()
    images: Tuple[str, ...] = ()
    videos: Tuple[str, ...] = ()
    patent_numbers: Tuple[str, ...] = ()
    related_technologies: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def has_rich_content(self) -> bool:
        return bool(self.benefits or self.applications or self.patent_numbers) or len(self.images) > 1

    @property
    def has_media(self) -> bool:
        return bool(self.images or self.videos)


class CacheScope(str, Enum):
    """Which cache map ``clear_cache`` should drop."""

    CATEGORY = "category"
    SEARCH = "search"
    DETAIL = "detail"
    ALL = "all"


class PatentCategory(str, Enum):
    """Top-level categories offered by the portal."""

    ALL = "All"
    AERONAUTICS = "Aeronautics"
    COMMUNICATIONS = "Communications"
    ELECTRONICS = "Electronics"
    ENVIRONMENT = "Environment"
    HEALTH = "Health Medicine and Biotechnology"
    INFORMATION = "Information Technology and Software"
    INSTRUMENTATION = "Instrumentation"
    MANUFACTURING = "Manufacturing"
    MATERIALS = "Materials and Coatings"
    MECHANICAL = "Mechanical and Fluid Systems"
    OPTICS = "Optics"
    POWER = "Power Generation and Storage"
    PROPULSION = "Propulsion"
    ROBOTICS = "Robotics Automation and Control"
    SENSORS = "Sensors"

    @property
    def api_slug(self) -> Optional[str]:
        """Slug used by the category API; ``None`` means every category."""

        return _API_SLUGS.get(self)

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES.get(self, self.value)

    @property
    def short_name(self) -> str:
        return _SHORT_NAMES.get(self, self.value)

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["PatentCategory"]:
        """Best-effort match of a free-text label, slug or display name."""

        needle = (label or "").strip().lower()
        if not needle:
            return None
        for category in cls:
            names = {
                category.value.lower(),
                category.name.lower(),
                category.display_name.lower(),
                category.short_name.lower(),
                (category.api_slug or "").lower(),
            }
            if needle in names:
                return category
        if len(needle) < MIN_PARTIAL_LABEL:
            return None
        for category in cls:
            if category is cls.ALL:
                continue
            value = category.value.lower()
            if _contains_words(value, needle) or _contains_words(needle, value):
                return category
        return None


def _contains_words(text: str, words: str) -> bool:
    return re.search(rf"\b{re.escape(words)}\b", text) is not None


_API_SLUGS = {
    PatentCategory.AERONAUTICS: "aerospace",
    PatentCategory.COMMUNICATIONS: "communications",
    PatentCategory.ELECTRONICS: "electrical and electronics",
    PatentCategory.ENVIRONMENT: "environment",
    PatentCategory.HEALTH: "health medicine and biotechnology",
    PatentCategory.INFORMATION: "information technology and software",
    PatentCategory.INSTRUMENTATION: "instrumentation",
    PatentCategory.MANUFACTURING: "manufacturing",
    PatentCategory.MATERIALS: "materials and coatings",
    PatentCategory.MECHANICAL: "mechanical and fluid systems",
    PatentCategory.OPTICS: "optics",
    PatentCategory.POWER: "power generation and storage",
    PatentCategory.PROPULSION: "propulsion",
    PatentCategory.ROBOTICS: "robotics automation and control",
    PatentCategory.SENSORS: "sensors",
}

_DISPLAY_NAMES = {
    PatentCategory.ALL: "All Categories",
    PatentCategory.HEALTH: "Health & Biotech",
    PatentCategory.INFORMATION: "Software & IT",
    PatentCategory.MATERIALS: "Materials",
    PatentCategory.MECHANICAL: "Mechanical",
    PatentCategory.ROBOTICS: "Robotics",
}

_SHORT_NAMES = {
    PatentCategory.AERONAUTICS: "Aero",
    PatentCategory.COMMUNICATIONS: "Comms",
    PatentCategory.ENVIRONMENT: "Enviro",
    PatentCategory.HEALTH: "Health",
    PatentCategory.INFORMATION: "Software",
    PatentCategory.INSTRUMENTATION: "Instrum",
    PatentCategory.MANUFACTURING: "Mfg",
    PatentCategory.MATERIALS: "Materials",
    PatentCategory.MECHANICAL: "Mech",
    PatentCategory.ROBOTICS: "Robotics",
}

ALL_CATEGORY_SLUGS: Tuple[str, ...] = tuple(_API_SLUGS.values())


class CategoryRead(BaseModel):
    """Category catalogue entry returned by the HTTP API."""

    name: str
    label: str
    display_name: str
    short_name: str
    slug: Optional[str]

    @classmethod
    def from_category(cls, category: PatentCategory) -> "CategoryRead":
        return cls(
            name=category.name.lower(),
            label=category.value,
            display_name=category.display_name,
            short_name=category.short_name,
            slug=category.api_slug,
        )
