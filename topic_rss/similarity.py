"""
Title similarity used to drop near-duplicate stories.

Two titles are duplicates when their token sets overlap strongly, or when they
share a capitalized entity and overlap moderately. Token overlap alone misses
the same subject phrased differently; a shared name alone merges unrelated
stories. Both thresholds are tunable through SimilarityRules.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import FrozenSet, Set

DEFAULT_STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "and", "or", "but", "if", "on", "in", "at", "to", "of",
    "for", "by", "with", "from", "as", "is", "are", "was", "were", "be", "been",
    "being", "that", "this", "it", "its", "into", "over", "about", "after",
    "before", "under", "above", "across", "new", "latest", "breaking", "update",
    "updates", "news",
})

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_ENTITY = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+){0,4})\b")


@dataclass(frozen=True)
class SimilarityRules:
    stop_words: FrozenSet[str] = DEFAULT_STOP_WORDS
    min_token_length: int = 3
    min_entity_length: int = 3
    duplicate_threshold: float = 0.70
    entity_threshold: float = 0.40


DEFAULT_RULES = SimilarityRules()


def normalize_tokens(text: str, rules: SimilarityRules = DEFAULT_RULES) -> Set[str]:
    lc = _NON_ALNUM.sub(" ", text.lower())
    lc = _WHITESPACE.sub(" ", lc)
    return {
        t for t in lc.split(" ")
        if t and t not in rules.stop_words and len(t) >= rules.min_token_length
    }


def jaccard(a: Set[str], b: Set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def extract_entities(title: str, rules: SimilarityRules = DEFAULT_RULES) -> Set[str]:
    """Runs of one to five Capitalized words taken from the raw title."""
    return {
        m.strip() for m in _ENTITY.findall(title)
        if len(m.strip()) >= rules.min_entity_length
    }


def similarity(title_a: str, title_b: str, rules: SimilarityRules = DEFAULT_RULES) -> float:
    return jaccard(normalize_tokens(title_a, rules), normalize_tokens(title_b, rules))


def is_duplicate(title_a: str, title_b: str, rules: SimilarityRules = DEFAULT_RULES) -> bool:
    score = similarity(title_a, title_b, rules)
    if score >= rules.duplicate_threshold:
        return True
    if score < rules.entity_threshold:
        return False
    return bool(extract_entities(title_a, rules) & extract_entities(title_b, rules))
