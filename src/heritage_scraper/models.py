# ABOUTME: Pydantic models for scraped site records, raw page fields and run reporting
# ABOUTME: Defines the CSV layout of the output store and the page selectors used for extraction

import math
from pathlib import Path
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

CSV_HEADER = ["Title", "Aura", "Category", "Description", "Latitude", "Longitude", "Price", "Images", "Link"]
RESUME_KEY_COLUMN = "Link"

AURA_SCORE = 400
CATEGORY = "historic"
PRICE_PLACEHOLDER = "N/A"


class Coordinates(NamedTuple):
    """Signed decimal degrees; NaN on either axis means the source text was unparsable."""

    latitude: float
    longitude: float

    @property
    def is_known(self) -> bool:
        return not (math.isnan(self.latitude) or math.isnan(self.longitude))


class PageSelectors(BaseModel):
    """CSS selectors describing where each field lives on the index and detail pages.

    Candidate lists are ordered: the first selector with non-empty text wins.
    """

    model_config = ConfigDict(frozen=True)

    site_links: str = ".list_site a"
    title_candidates: tuple[str, ...] = ("h1.title", "#content h1")
    description_candidates: tuple[str, ...] = (
        "div#contentdes_en div.rich-text p",
        "div#contentdes_en div.rich-text",
        "div.tab-content div.rich-text p",
    )
    coordinates: str = "div.mt-3.small.text-muted div"
    hero_image: str = "img.w-100.border"
    gallery_images: str = ".gallery img"


class RawSiteFields(BaseModel):
    """Fields as read from a detail page, before normalization."""

    title: str = ""
    description: str = ""
    coordinates_text: str = ""
    images: list[str] = Field(default_factory=list)

    @field_validator("title", "description", "coordinates_text", mode="before")
    @classmethod
    def _strip(cls, value: str | None) -> str:
        return (value or "").strip()

    @property
    def missing_fields(self) -> list[str]:
        return [name for name in ("title", "description") if not getattr(self, name)]


class EntityRecord(BaseModel):
    """One persisted site. Written once, never mutated."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    aura_score: int = AURA_SCORE
    category: str = CATEGORY
    description: str
    latitude: float = math.nan
    longitude: float = math.nan
    price: str = PRICE_PLACEHOLDER
    images: tuple[str, ...] = ()
    source_link: str = Field(min_length=1)

    def to_row(self) -> list[str]:
        """Render the record in ``CSV_HEADER`` order; the resume key is always last."""
        return [
            self.title,
            str(self.aura_score),
            self.category,
            self.description,
            _format_degrees(self.latitude),
            _format_degrees(self.longitude),
            self.price,
            ",".join(self.images),
            self.source_link,
        ]


def _format_degrees(value: float) -> str:
    return "NaN" if math.isnan(value) else repr(value)


class RunSummary(BaseModel):
    """Counts reported at the end of a scrape run."""

    discovered: int = 0
    skipped: int = 0
    saved: int = 0
    failed: int = 0
    output_path: Path | None = None

    @property
    def pending(self) -> int:
        return self.discovered - self.skipped
