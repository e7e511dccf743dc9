from __future__ import annotations

import concurrent.futures as _fut
import logging
from collections import deque
from typing import Callable, Deque, Iterable, Optional, Protocol

from .classifier import classify_category
from .emitter import RSSEmitter
from .extractor import extract_article_text
from .generators import ArticleGenerator
from .models import CATEGORIES, DEFAULT_CATEGORY, ExtractionResult, FeedEntry, ImageResult, SynthesizedItem
from .sanitizer import sanitize_markup

logger = logging.getLogger(__name__)

Extractor = Callable[[str], ExtractionResult]
Classifier = Callable[[str, str], str]


class ImageLookup(Protocol):
    def resolve(self, query: str) -> Optional[ImageResult]:  # pragma: no cover - interface
        ...


class Synthesizer:
    """
    Turns one candidate into a SynthesizedItem.

    Stages: extract source text -> classify -> generate -> sanitize -> find image.
    Extraction, classification and image lookup degrade on failure; a failed
    generation call drops the candidate.
    """

    def __init__(
        self,
        generator: ArticleGenerator,
        *,
        images: Optional[ImageLookup] = None,
        extractor: Extractor = extract_article_text,
        classifier: Classifier = classify_category,
    ) -> None:
        self.generator = generator
        self.images = images
        self.extractor = extractor
        self.classifier = classifier

    def _source_text(self, entry: FeedEntry) -> str:
        try:
            result = self.extractor(entry.link)
        except Exception as e:
            logger.warning("Extraction failed for %s: %s", entry.link, e)
            return ""
        return result.text if result.ok else ""

    def _category(self, entry: FeedEntry, text: str) -> str:
        try:
            category = self.classifier(entry.title, text)
        except Exception as e:
            logger.warning("Classification failed for %r: %s", entry.title, e)
            return DEFAULT_CATEGORY
        if category not in CATEGORIES:
            logger.warning("Classifier returned unknown category %r; using %s", category, DEFAULT_CATEGORY)
            return DEFAULT_CATEGORY
        return category

    def _image_url(self, headline: str) -> Optional[str]:
        if self.images is None:
            return None
        try:
            img = self.images.resolve(headline)
        except Exception as e:
            logger.warning("Image lookup failed for %r: %s", headline, e)
            return None
        return img.url if img is not None else None

    def synthesize(self, entry: FeedEntry) -> Optional[SynthesizedItem]:
        text = self._source_text(entry)
        category = self._category(entry, text)

        try:
            article = self.generator.generate(
                title=entry.title, source_url=entry.link, source_text=text, category=category,
            )
        except Exception as e:
            logger.error("Generation failed for: %s - %s", entry.title, e)
            return None

        try:
            body = sanitize_markup(article.body_html)
            headline = article.headline.strip() or entry.title
            if not body:
                logger.error("Generation failed for: %s - empty body", entry.title)
                return None
            item = SynthesizedItem(
                headline=headline,
                body_markup=body,
                category=category,
                source_url=entry.link,
                image_url=self._image_url(headline),
            )
        except Exception as e:
            logger.error("Generation failed for: %s - malformed article: %s", entry.title, e)
            return None
        logger.info("Synthesized %r (%s)", item.headline, item.category)
        return item

    def run(self, candidates: Iterable[FeedEntry], emitter: RSSEmitter, *,
            target: int, max_workers: int = 1) -> int:
        """
        Emit up to ``target`` items in candidate order. Returns how many were emitted.
        Running out of candidates first is not an error.
        """
        if target <= 0:
            return 0
        max_workers = max(1, int(max_workers or 1))
        if max_workers == 1:
            emitted = 0
            for entry in candidates:
                item = self.synthesize(entry)
                if item is None:
                    continue
                emitter.emit_item(item)
                emitted += 1
                if emitted >= target:
                    break
            return emitted
        return self._run_windowed(candidates, emitter, target=target, max_workers=max_workers)

    def _run_windowed(self, candidates: Iterable[FeedEntry], emitter: RSSEmitter, *,
                      target: int, max_workers: int) -> int:
        # At most max_workers candidates in flight; results are consumed in
        # submission order so emission order equals candidate order.
        emitted = 0
        pending: Deque["_fut.Future[Optional[SynthesizedItem]]"] = deque()
        it = iter(candidates)
        ex = _fut.ThreadPoolExecutor(max_workers=max_workers)
        try:
            while emitted < target:
                while len(pending) < max_workers:
                    entry = next(it, None)
                    if entry is None:
                        break
                    pending.append(ex.submit(self.synthesize, entry))
                if not pending:
                    break
                item = pending.popleft().result()
                if item is not None:
                    emitter.emit_item(item)
                    emitted += 1
        finally:
            # Calls already running cannot be interrupted; they finish in the
            # background and their results are dropped.
            if pending:
                logger.debug("Discarding %d in-flight candidate(s)", len(pending))
            ex.shutdown(wait=False, cancel_futures=True)
        return emitted
