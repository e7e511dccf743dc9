"""
topic_rss

Turns a Google News topic into a streamed RSS feed of original, AI-written articles.

Core ideas:
- Input: Google News topic URL
- Process: fetch → normalize → exclude/deduplicate → sort (newest first)
  → per candidate: extract text → classify → generate → sanitize → find image
- Output: RSS 2.0 written to a stream, each <item> flushed as soon as it is ready

Example
-------
import sys
from topic_rss import Settings, TopicFeedBuilder

builder = TopicFeedBuilder(Settings.from_env())
builder.build(
    "https://news.google.com/topics/CAAqJggKIiBDQkFTRWdvSUwyMHZNREpxYW5RU0FtVnVHZ0pWVXlnQVAB?hl=en-US&gl=US&ceid=US%3Aen",
    sys.stdout,
)
"""
from .config import Settings
from .core import FeedOptions, TopicFeedBuilder
from .dedup import select_candidates
from .emitter import RSSEmitter
from .generators import GenerateOptions
from .images import ImageResolver
from .models import CATEGORIES, FeedEntry, ImageResult, SynthesizedItem
from .normalizer import normalize
from .orchestrator import Synthesizer
from .similarity import is_duplicate

__all__ = [
    "CATEGORIES",
    "FeedEntry",
    "FeedOptions",
    "GenerateOptions",
    "ImageResolver",
    "ImageResult",
    "RSSEmitter",
    "Settings",
    "SynthesizedItem",
    "Synthesizer",
    "TopicFeedBuilder",
    "is_duplicate",
    "normalize",
    "select_candidates",
]
