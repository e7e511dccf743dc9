from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from .urls import resolve_redirect_link


CATEGORIES: Tuple[str, ...] = (
    "Charts / Awards",
    "Classical",
    "Country",
    "Digital Life and Gaming",
    "Jazz",
    "Latin",
    "Metal / Hard Rock",
    "Movies and TV",
    "Music Industry",
    "Oldies",
    "Pop / Rock",
    "Reviews",
    "RnB",
    "Rock",
    "Soundtracks",
    "Tour Dates",
)
DEFAULT_CATEGORY = "Pop / Rock"

_LEADING_HEADING = re.compile(r"^\s*<h[1-6]\b", re.IGNORECASE)


@dataclass(frozen=True)
class FeedEntry:
    """
    One normalized entry of the topic feed.

    ``link`` always points at the original article: a redirector link is
    resolved on construction.
    """
    title: str
    link: str
    published_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "link", resolve_redirect_link(self.link))

    @property
    def timestamp(self) -> float:
        """Recency key; entries without a date count as epoch 0."""
        if self.published_at is None:
            return 0.0
        return self.published_at.timestamp()


@dataclass(frozen=True)
class ImageResult:
    url: str
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def has_dimensions(self) -> bool:
        return bool(self.width) and bool(self.height)

    def width_within(self, min_width: int, max_width: int) -> bool:
        return self.width is not None and min_width <= self.width <= max_width


@dataclass(frozen=True)
class ExtractionResult:
    """Best-effort article text. ``status`` is "ok", "empty" or "unavailable"."""
    text: str
    status: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass(frozen=True)
class GeneratedArticle:
    headline: str
    body_html: str
    structured: bool = True


@dataclass(frozen=True)
class SynthesizedItem:
    """
    A finished output item. Only built once every required stage succeeded.

    WARNING: Do not change fields lightly. The emitter serializes exactly these.
    """
    headline: str
    body_markup: str
    category: str
    source_url: str
    image_url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category!r}")
        if _LEADING_HEADING.match(self.body_markup):
            raise ValueError("body_markup must not begin with a heading")

    @property
    def guid(self) -> str:
        return hashlib.sha1(f"{self.headline}|{self.source_url}".encode("utf-8")).hexdigest()
