from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .config import Settings
from .core import FeedOptions, TopicFeedBuilder
from .exceptions import ConfigurationError


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="topic-rss",
        description="Stream an RSS feed of AI-written articles for a Google News topic.",
    )
    parser.add_argument("topic_url", nargs="?", help="Google News topic URL (default: TOPIC_RSS_TOPIC_URL or built-in topic)")
    parser.add_argument("--max-items", type=int, default=None, help="number of items to emit (default 5)")
    parser.add_argument("--provider", choices=["openai", "gemini"], default=None, help="text generation provider")
    parser.add_argument("--workers", type=int, default=1, help="candidates synthesized concurrently")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = Settings.from_env()
        if args.provider:
            settings.provider = args.provider
        if args.max_items is not None:
            settings.max_items = args.max_items
        options = FeedOptions(max_items=settings.max_items, max_workers=args.workers)
        builder = TopicFeedBuilder(settings, options=options)
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    builder.build(args.topic_url or settings.topic_url, sys.stdout)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
