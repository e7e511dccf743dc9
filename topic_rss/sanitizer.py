from __future__ import annotations

import re
from typing import Tuple

ALLOWED_TAGS: Tuple[str, ...] = ("p", "h3", "i")

_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG = re.compile(r"<(/?)([a-zA-Z][a-zA-Z0-9]*)\b[^>]*>")
_LEADING_HEADING = re.compile(r"^\s*<h([1-6])\b[^>]*>.*?</h\1\s*>\s*", re.IGNORECASE | re.DOTALL)
_UNCLOSED_HEADING = re.compile(r"^\s*<h[1-6]\b[^>]*>\s*", re.IGNORECASE)


def _keep_allowed(match: "re.Match[str]") -> str:
    closing, name = match.group(1), match.group(2).lower()
    if name not in ALLOWED_TAGS:
        return ""
    # attributes are dropped on the tags we keep
    return f"<{closing}{name}>"


def sanitize_markup(html: str) -> str:
    """
    Restrict generated markup to <p>, <h3> and <i>, and make sure the body
    opens with text rather than a heading.
    """
    body = html or ""
    # dropping a tag can splice its neighbours into a new one; filter until stable
    while True:
        filtered = _TAG.sub(_keep_allowed, _COMMENT.sub("", body))
        if filtered == body:
            break
        body = filtered
    while True:
        stripped = _LEADING_HEADING.sub("", body, count=1)
        if stripped == body:
            stripped = _UNCLOSED_HEADING.sub("", body, count=1)
        if stripped == body:
            break
        body = stripped
    return body.strip()
