from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from .models import CATEGORIES, DEFAULT_CATEGORY


HOROSCOPE_KEYWORDS: Tuple[str, ...] = ("horoscope", "zodiac", "astrology", "astrological")


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    t = text.lower()
    return any(k.lower() in t for k in keywords)


def is_excluded(title: str, keywords: Iterable[str] = HOROSCOPE_KEYWORDS) -> bool:
    """True when the title mentions any excluded keyword (case-insensitive substring)."""
    return _contains_any(title, keywords)


@dataclass(frozen=True)
class CategoryRule:
    """
    Maps to ``category`` when ``title_pattern`` matches the lowercased title or
    ``body_pattern`` matches the lowercased article text.
    """
    category: str
    title_pattern: Optional[str] = None
    body_pattern: Optional[str] = None

    def matches(self, title: str, body: str) -> bool:
        if self.title_pattern and re.search(self.title_pattern, title):
            return True
        if self.body_pattern and re.search(self.body_pattern, body):
            return True
        return False


# Evaluated in order; the first matching rule wins.
DEFAULT_CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule("Tour Dates", r"tour", r"tour dates"),
    CategoryRule("Soundtracks", r"soundtrack", r"soundtrack"),
    CategoryRule("Charts / Awards", r"\boscars?\b|\bgrammys?\b|\bbillboard\b|\bchart\b|\bawards?\b"),
    CategoryRule("Movies and TV", r"\b(?:movie|film|tv\b|series|show|netflix|hulu|disney)"),
    CategoryRule("Digital Life and Gaming",
                 r"\b(?:gaming|video game|playstation|xbox|nintendo|pc game)", r"gaming"),
    CategoryRule("Classical", r"\b(?:classical|symphony|philharmonic|orchestra|concerto)"),
    CategoryRule("Jazz", r"\bjazz\b"),
    CategoryRule("Latin", r"\blatin\b"),
    CategoryRule("Country", r"\bcountry\b"),
    CategoryRule("Metal / Hard Rock", r"\b(?:metal|hard rock|heavy metal)"),
    CategoryRule("RnB", r"\b(?:rnb|r&b)"),
    CategoryRule("Rock", r"\brock\b"),
    CategoryRule("Pop / Rock", r"\bpop\b"),
    CategoryRule("Reviews", r"\breviews?\b"),
    CategoryRule("Oldies", r"\b(?:oldies|classic hits)\b"),
    CategoryRule("Music Industry",
                 r"\b(?:industry|label|streaming|royalties|catalog)", r"music industry"),
    # General news still has to land inside the fixed set.
    CategoryRule("Digital Life and Gaming",
                 r"\b(?:ai|artificial intelligence|tech|software|app|platform)"),
    CategoryRule("Movies and TV", r"\b(?:series|season|episode|box office)"),
)


class CategoryClassifier:
    """Keyword classifier over title + article text; always returns a member of CATEGORIES."""

    def __init__(self, rules: Sequence[CategoryRule] = DEFAULT_CATEGORY_RULES,
                 default: str = DEFAULT_CATEGORY) -> None:
        unknown = [r.category for r in rules if r.category not in CATEGORIES]
        if unknown or default not in CATEGORIES:
            raise ValueError(f"Rules reference unknown categories: {unknown or [default]}")
        self.rules = tuple(rules)
        self.default = default

    def __call__(self, title: str, text: str) -> str:
        lc_title = title.lower()
        lc_body = text.lower()
        for rule in self.rules:
            if rule.matches(lc_title, lc_body):
                return rule.category
        return self.default


classify_category = CategoryClassifier()
