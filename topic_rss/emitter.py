"""
Streaming RSS writer.

Each part of the document is written and flushed as soon as it is produced so
a reader sees every <item> the moment it is finished. Used as a context
manager the emitter always closes the document, even on the error path.
"""
from __future__ import annotations

import logging
import re
from types import TracebackType
from typing import Optional, TextIO, Type
from xml.sax.saxutils import escape, quoteattr

from .models import SynthesizedItem

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
MEDIA_NS = "http://search.yahoo.com/mrss/"


_INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def xml_text(text: str) -> str:
    return escape(_INVALID_XML_CHARS.sub("", text))


def cdata(text: str) -> str:
    text = _INVALID_XML_CHARS.sub("", text)
    # "]]>" cannot appear inside a CDATA section; split it across two sections.
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


def render_item(item: SynthesizedItem) -> str:
    lines = [
        "<item>",
        f'<guid isPermaLink="false">{item.guid}</guid>',
        f"<title>{xml_text(item.headline)}</title>",
        f"<link>{xml_text(item.source_url)}</link>",
        f"<category>{xml_text(item.category)}</category>",
    ]
    if item.image_url:
        lines.append(f'<media:content url={quoteattr(item.image_url)} medium="image" />')
    lines.append(f"<description>{cdata(item.body_markup)}</description>")
    lines.append("</item>")
    return "\n".join(lines) + "\n"


def error_document(message: str) -> str:
    return (
        f'{XML_DECLARATION}<rss version="2.0"><channel><title>Error</title>'
        f"<description>{xml_text(message)}</description></channel></rss>"
    )


def emit_error(stream: TextIO, message: str) -> None:
    stream.write(error_document(message))
    stream.flush()


class RSSEmitter:
    def __init__(self, stream: TextIO, *, title: str, link: str, description: str) -> None:
        self.stream = stream
        self.title = title
        self.link = link
        self.description = description
        self.header_written = False
        self.footer_written = False
        self.items_written = 0

    def _write(self, text: str) -> None:
        self.stream.write(text)
        self.stream.flush()

    def emit_header(self) -> None:
        if self.header_written:
            return
        self._write(
            f"{XML_DECLARATION}\n"
            f'<rss version="2.0" xmlns:media="{MEDIA_NS}">\n'
            "<channel>\n"
            f"<title>{xml_text(self.title)}</title>\n"
            f"<link>{xml_text(self.link)}</link>\n"
            f"<description>{xml_text(self.description)}</description>\n"
        )
        self.header_written = True

    def emit_item(self, item: SynthesizedItem) -> None:
        if not self.header_written or self.footer_written:
            raise RuntimeError("emit_item must be called between emit_header and emit_footer")
        self._write(render_item(item))
        self.items_written += 1

    def emit_footer(self) -> None:
        if self.footer_written:
            return
        if not self.header_written:
            self.emit_header()
        self._write("</channel></rss>\n")
        self.footer_written = True

    def __enter__(self) -> "RSSEmitter":
        self.emit_header()
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if exc is not None:
            logger.error("Feed aborted after %d item(s): %s", self.items_written, exc)
        self.emit_footer()
