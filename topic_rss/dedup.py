from __future__ import annotations

from typing import Iterable, List, Sequence

from .classifier import HOROSCOPE_KEYWORDS, is_excluded
from .models import FeedEntry
from .similarity import DEFAULT_RULES, SimilarityRules, is_duplicate


def deduplicate(items: Iterable[FeedEntry], rules: SimilarityRules = DEFAULT_RULES) -> List[FeedEntry]:
    """
    Remove near-duplicate titles.
    Keeps the first occurrence and preserves original order; each entry is
    compared against the entries already kept.
    """
    out: List[FeedEntry] = []
    for it in items:
        if any(is_duplicate(it.title, kept.title, rules) for kept in out):
            continue
        out.append(it)
    return out


def rank(items: Iterable[FeedEntry]) -> List[FeedEntry]:
    """Newest first; entries without a date sort last."""
    return sorted(items, key=lambda x: x.timestamp, reverse=True)


def select_candidates(
    entries: Iterable[FeedEntry],
    *,
    similarity: SimilarityRules = DEFAULT_RULES,
    exclude_keywords: Sequence[str] = HOROSCOPE_KEYWORDS,
) -> List[FeedEntry]:
    """
    Pipeline: exclude (horoscopes etc.) -> deduplicate -> sort (newest first).
    The result is a fixed point: selecting it again returns it unchanged.
    """
    kept = [e for e in entries if not is_excluded(e.title, exclude_keywords)]
    return rank(deduplicate(kept, similarity))
