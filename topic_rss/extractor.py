"""Best-effort article text extraction.

Never raises: network or parse failures come back as an ExtractionResult with
status "unavailable" and empty text.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from .fetcher import http_get
from .models import ExtractionResult

logger = logging.getLogger(__name__)

MIN_ARTICLE_CHARS = 400

_CONTAINER_SELECTORS = (
    "[role=main]",
    "main",
    "#content",
    "#main",
    ".article",
    ".content",
)


def _aggregate_paragraphs(node: Tag, *, min_len: int = 40, limit: int = 30) -> str:
    paras: List[str] = []
    for p in node.find_all("p"):
        t = p.get_text().strip()
        if t and len(t) >= min_len:
            paras.append(t)
    return "\n\n".join(paras[:limit]).strip()


def extract_text_from_html(html: str) -> str:
    """
    Pull readable article text out of an HTML page.
    Order: <article> -> main-content containers -> every long <p>.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()

    article = soup.find("article")
    if article is not None:
        text = _aggregate_paragraphs(article)
        if len(text) > MIN_ARTICLE_CHARS:
            return text

    for selector in _CONTAINER_SELECTORS:
        nodes = soup.select(selector)
        if not nodes:
            continue
        text = "\n".join(_aggregate_paragraphs(n) for n in nodes).strip()
        if len(text) > MIN_ARTICLE_CHARS:
            return text

    out = [t for t in (p.get_text().strip() for p in soup.find_all("p")) if len(t) >= 60]
    return "\n\n".join(out[:20]).strip()


def extract_article_text(url: str, *, timeout: float = 20.0,
                         session: Optional[requests.Session] = None) -> ExtractionResult:
    try:
        resp = http_get(url, timeout=timeout, session=session)
    except requests.RequestException as e:
        logger.warning("Source fetch failed for %s: %s", url, e)
        return ExtractionResult(text="", status="unavailable", error=str(e))

    try:
        text = extract_text_from_html(resp.text)
    except Exception as e:  # pragma: no cover - parser hiccups on hostile markup
        logger.warning("Source parse failed for %s: %s", url, e)
        return ExtractionResult(text="", status="unavailable", error=str(e))

    if not text:
        return ExtractionResult(text="", status="empty")
    return ExtractionResult(text=text, status="ok")
