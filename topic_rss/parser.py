from __future__ import annotations

import calendar
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from feedparser.datetimes import _parse_date


def _to_datetime(entry: Dict[str, Any]) -> Optional[datetime]:
    """
    Convert feed entry date fields to timezone-aware UTC datetime.
    Priority: published_parsed -> updated_parsed -> created_parsed -> raw strings -> None.
    """
    for key in ("published_parsed", "updated_parsed", "created_parsed"):
        val = entry.get(key)
        if isinstance(val, time.struct_time):
            try:
                return datetime.fromtimestamp(calendar.timegm(val), tz=timezone.utc)
            except (OverflowError, ValueError, OSError):
                continue
    # feedparser normally fills *_parsed; retry its date parser on the raw strings.
    for key in ("published", "updated", "created", "pubDate"):
        s = entry.get(key)
        if isinstance(s, str) and s:
            try:
                parsed = _parse_date(s)
            except Exception:
                continue
            if isinstance(parsed, time.struct_time):
                try:
                    return datetime.fromtimestamp(calendar.timegm(parsed), tz=timezone.utc)
                except (OverflowError, ValueError, OSError):
                    continue
    return None


def parse_entry(entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map a raw feed entry (from feedparser) to a dict with the fields the
    pipeline uses: title, link, published_at (datetime|None).
    """
    title = entry.get("title") or ""
    link = entry.get("link") or ""
    return {
        "title": title.strip() if isinstance(title, str) else "",
        "link": link.strip() if isinstance(link, str) else "",
        "published_at": _to_datetime(entry),
    }
