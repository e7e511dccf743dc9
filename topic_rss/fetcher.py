from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import feedparser
import requests

from .exceptions import RSSFetchError

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
}


def http_get(url: str, *, params: Optional[Dict[str, str]] = None,
             headers: Optional[Dict[str, str]] = None, timeout: float = 20.0,
             session: Optional[requests.Session] = None) -> requests.Response:
    """GET with the browser-like default headers; raises on HTTP >= 400."""
    merged = dict(DEFAULT_HEADERS)
    if headers:
        merged.update(headers)
    client = session or requests
    resp = client.get(url, params=params, headers=merged, timeout=timeout, allow_redirects=True)
    resp.raise_for_status()
    return resp


def fetch_feed_entries(url: str, *, referer: Optional[str] = None, timeout: float = 20.0,
                       session: Optional[requests.Session] = None) -> List[Dict[str, Any]]:
    """
    Fetch a single feed URL and return its raw feedparser entries.

    Raises RSSFetchError on network issues or when the body is not a usable feed.
    """
    headers = {"Referer": referer} if referer else None
    try:
        resp = http_get(url, headers=headers, timeout=timeout, session=session)
    except requests.RequestException as e:
        raise RSSFetchError(f"Failed to fetch feed: {url} ({e})") from e

    feed = feedparser.parse(resp.content)
    entries = getattr(feed, "entries", None)

    if getattr(feed, "bozo", 0) and not entries:
        exc = getattr(feed, "bozo_exception", None)
        msg = f"Invalid RSS feed: {url}"
        if exc:
            msg += f" ({exc})"
        raise RSSFetchError(msg)

    if not isinstance(entries, list):
        raise RSSFetchError(f"Feed has no entries: {url}")
    logger.info("Fetched %d entries from %s", len(entries), url)
    return entries
