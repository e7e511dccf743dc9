from __future__ import annotations

from urllib.parse import parse_qs, urlparse

GOOGLE_NEWS_HOST = "news.google.com"


def topic_url_to_rss(topic_url: str) -> str:
    """
    Convert a Google News topic page URL into its RSS feed URL.

    https://news.google.com/topics/XYZ?hl=en-US -> https://news.google.com/rss/topics/XYZ?hl=en-US
    """
    parts = urlparse(topic_url)
    if not (parts.scheme and parts.netloc and parts.path):
        raise ValueError(f"Invalid topic URL: {topic_url!r}")
    path = parts.path.replace("/topics/", "/rss/topics/")
    rss_url = f"{parts.scheme}://{parts.netloc}{path}"
    if parts.query:
        rss_url += f"?{parts.query}"
    return rss_url


def resolve_redirect_link(link: str) -> str:
    """
    Undo the Google News redirector: links on the feed host that carry a
    ``url`` query parameter resolve to that parameter's value.
    Any other link is returned unchanged.
    """
    parts = urlparse(link)
    if not parts.netloc or GOOGLE_NEWS_HOST not in parts.netloc.lower():
        return link
    if not parts.query:
        return link
    target = parse_qs(parts.query).get("url")
    if target and target[0]:
        return target[0]
    return link
