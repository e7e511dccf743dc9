from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, TextIO

from .classifier import classify_category
from .config import Settings
from .dedup import select_candidates
from .emitter import RSSEmitter, emit_error
from .exceptions import RSSFetchError
from .extractor import extract_article_text
from .fetcher import fetch_feed_entries
from .generators import ArticleGenerator, GenerateOptions, build_generator
from .images import MAX_IMAGE_WIDTH, MIN_IMAGE_WIDTH, build_image_resolver
from .models import FeedEntry
from .normalizer import normalize
from .orchestrator import Classifier, Extractor, ImageLookup, Synthesizer
from .urls import topic_url_to_rss

logger = logging.getLogger(__name__)

FEED_TITLE = "AI-Synthesized Topic Feed"


@dataclass
class FeedOptions:
    max_items: int = 5
    overflow: Optional[int] = None  # extra candidates kept for failed generations; None -> max_items
    min_image_width: int = MIN_IMAGE_WIDTH
    max_image_width: int = MAX_IMAGE_WIDTH
    timeout_sec: float = 20.0
    max_workers: int = 1

    @property
    def candidate_limit(self) -> int:
        overflow = self.max_items if self.overflow is None else max(0, self.overflow)
        return self.max_items + overflow


class TopicFeedBuilder:
    """
    High-level API: Google News topic URL in, streamed RSS document out.

    Pipeline: fetch → normalize → exclude/deduplicate → sort (newest first) →
    synthesize each candidate → emit, stopping at max_items.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        options: Optional[FeedOptions] = None,
        generator: Optional[ArticleGenerator] = None,
        images: Optional[ImageLookup] = None,
        extractor: Optional[Extractor] = None,
        classifier: Optional[Classifier] = None,
    ) -> None:
        self.settings = settings or Settings()
        self.options = options or FeedOptions(max_items=self.settings.max_items)
        if generator is None:
            generator = build_generator(
                GenerateOptions(provider=self.settings.provider, model=self.settings.generator_model),
                api_key=self.settings.require_generator_key(),
            )
        if images is None:
            images = build_image_resolver(
                serpapi_key=self.settings.serpapi_api_key,
                timeout=self.options.timeout_sec,
                min_width=self.options.min_image_width,
                max_width=self.options.max_image_width,
            )
        self.synthesizer = Synthesizer(
            generator,
            images=images,
            extractor=extractor or extract_article_text,
            classifier=classifier or classify_category,
        )

    def fetch_candidates(self, topic_url: str) -> List[FeedEntry]:
        """Fetch, normalize and select the topic's entries. Raises RSSFetchError."""
        try:
            rss_url = topic_url_to_rss(topic_url)
        except ValueError as e:
            raise RSSFetchError(str(e)) from e
        raw = fetch_feed_entries(rss_url, referer=topic_url, timeout=self.options.timeout_sec)
        candidates = select_candidates(normalize(raw))
        logger.info("%d candidate(s) after filtering", len(candidates))
        return candidates[: self.options.candidate_limit]

    def build(self, topic_url: str, stream: TextIO) -> int:
        """Write the whole document to ``stream``; returns the number of items emitted."""
        try:
            candidates = self.fetch_candidates(topic_url)
        except RSSFetchError as e:
            logger.error("Failed to fetch topic: %s", e)
            emit_error(stream, str(e))
            return 0

        emitter = RSSEmitter(
            stream,
            title=FEED_TITLE,
            link=topic_url,
            description=f"Top {self.options.max_items} synthesized articles from Google News topic",
        )
        with emitter:
            emitted = self.synthesizer.run(
                candidates, emitter,
                target=self.options.max_items,
                max_workers=self.options.max_workers,
            )
        logger.info("Emitted %d item(s)", emitted)
        return emitted
