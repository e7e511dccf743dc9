from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from .exceptions import ParseError
from .models import FeedEntry
from .parser import parse_entry

logger = logging.getLogger(__name__)


def to_feed_entry(entry: Dict[str, Any]) -> FeedEntry:
    """
    Convert a parsed entry dict into a FeedEntry.
    Requires:
    - title (non-empty)
    - link (non-empty; redirector links are resolved by FeedEntry)
    Optional:
    - published_at
    """
    title = entry.get("title") or ""
    link = entry.get("link") or ""
    if not title or not link:
        raise ParseError("Entry lacks required fields for FeedEntry: title/link")
    return FeedEntry(title=title, link=link, published_at=entry.get("published_at"))


def normalize(raw_items: Iterable[Dict[str, Any]]) -> List[FeedEntry]:
    """Parse raw feed entries into FeedEntry records, dropping incomplete ones."""
    items: List[FeedEntry] = []
    for raw in raw_items:
        try:
            items.append(to_feed_entry(parse_entry(raw)))
        except ParseError:
            # Skip malformed rows
            logger.debug("Dropping feed entry without title/link: %r", raw.get("title"))
            continue
    return items
