import time
import unittest
from datetime import datetime, timezone

from topic_rss.models import FeedEntry
from topic_rss.normalizer import normalize
from topic_rss.parser import parse_entry
from topic_rss.urls import resolve_redirect_link, topic_url_to_rss


class TestUrls(unittest.TestCase):
    def test_topic_url_to_rss(self):
        self.assertEqual(
            topic_url_to_rss("https://news.google.com/topics/ABC123?hl=en-US&gl=US&ceid=US%3Aen"),
            "https://news.google.com/rss/topics/ABC123?hl=en-US&gl=US&ceid=US%3Aen",
        )

    def test_topic_url_without_query(self):
        self.assertEqual(
            topic_url_to_rss("https://news.google.com/topics/ABC123"),
            "https://news.google.com/rss/topics/ABC123",
        )

    def test_invalid_topic_url(self):
        with self.assertRaises(ValueError):
            topic_url_to_rss("not a url")

    def test_redirector_resolved(self):
        link = "https://news.google.com/articles/xyz?url=https%3A%2F%2Fexample.com%2Fstory%3Fid%3D1&hl=en"
        self.assertEqual(resolve_redirect_link(link), "https://example.com/story?id=1")

    def test_other_hosts_untouched(self):
        link = "https://example.com/out?url=https://elsewhere.com/"
        self.assertEqual(resolve_redirect_link(link), link)

    def test_feed_host_without_url_param_untouched(self):
        link = "https://news.google.com/rss/articles/CBMiabc?oc=5"
        self.assertEqual(resolve_redirect_link(link), link)

    def test_feed_entry_resolves_on_construction(self):
        entry = FeedEntry("Title here", "https://news.google.com/articles/x?url=https://example.com/a")
        self.assertEqual(entry.link, "https://example.com/a")


class TestNormalize(unittest.TestCase):
    def test_parsed_timestamp(self):
        raw = {
            "title": "  Orchestra opens season  ",
            "link": "https://example.com/a",
            "published_parsed": time.strptime("2024-01-01 10:00:00", "%Y-%m-%d %H:%M:%S"),
        }
        entry = parse_entry(raw)
        self.assertEqual(entry["title"], "Orchestra opens season")
        self.assertEqual(entry["published_at"], datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc))

    def test_raw_date_string(self):
        raw = {"title": "T", "link": "https://example.com/a", "published": "Mon, 01 Jan 2024 10:00:00 GMT"}
        self.assertEqual(parse_entry(raw)["published_at"], datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc))

    def test_bad_date_keeps_entry(self):
        items = normalize([{"title": "T", "link": "https://example.com/a", "published": "not a date"}])
        self.assertEqual(len(items), 1)
        self.assertIsNone(items[0].published_at)

    def test_drops_incomplete_entries(self):
        items = normalize([
            {"title": "", "link": "https://example.com/a"},
            {"title": "No link"},
            {"title": "Kept", "link": "https://news.google.com/a?url=https://example.com/kept"},
        ])
        self.assertEqual(items, [FeedEntry("Kept", "https://example.com/kept")])


if __name__ == "__main__":
    unittest.main()
