import unittest
from datetime import datetime, timezone

from topic_rss.dedup import deduplicate, rank, select_candidates
from topic_rss.models import FeedEntry
from topic_rss.similarity import is_duplicate


def _at(day):
    return datetime(2024, 5, day, 12, 0, tzinfo=timezone.utc)


ENTRIES = [
    FeedEntry("Senate Passes Climate Bill", "https://example.com/1", _at(2)),
    FeedEntry("Your Weekly Horoscope for Leo", "https://example.com/2", _at(9)),
    FeedEntry("Senate Passes Climate Bill Today", "https://example.com/3", _at(8)),
    FeedEntry("Lakers Win NBA Championship", "https://example.com/4", None),
    FeedEntry("Taylor Swift announces stadium tour dates", "https://example.com/5", _at(5)),
    FeedEntry("Taylor Swift reveals stadium tour", "https://example.com/6", _at(7)),
    FeedEntry("ZODIAC signs and your love life", "https://example.com/7", _at(6)),
    FeedEntry("Orchestra opens season with Mahler", "https://example.com/8", _at(3)),
]


class TestSelectCandidates(unittest.TestCase):
    def setUp(self):
        self.selected = select_candidates(ENTRIES)

    def test_expected_candidates(self):
        self.assertEqual(
            [e.link for e in self.selected],
            [
                "https://example.com/5",
                "https://example.com/8",
                "https://example.com/1",
                "https://example.com/4",
            ],
        )

    def test_first_seen_wins(self):
        links = {e.link for e in self.selected}
        self.assertIn("https://example.com/1", links)
        self.assertNotIn("https://example.com/3", links)

    def test_horoscopes_excluded(self):
        for e in self.selected:
            self.assertNotIn("horoscope", e.title.lower())
            self.assertNotIn("zodiac", e.title.lower())

    def test_no_duplicates_survive(self):
        for i, a in enumerate(self.selected):
            for b in self.selected[i + 1:]:
                self.assertFalse(is_duplicate(a.title, b.title))

    def test_ranking_is_monotonic(self):
        stamps = [e.timestamp for e in self.selected]
        self.assertEqual(stamps, sorted(stamps, reverse=True))
        self.assertIsNone(self.selected[-1].published_at)

    def test_idempotent(self):
        self.assertEqual(select_candidates(self.selected), self.selected)

    def test_empty_input(self):
        self.assertEqual(select_candidates([]), [])


class TestHelpers(unittest.TestCase):
    def test_deduplicate_preserves_order(self):
        out = deduplicate([ENTRIES[2], ENTRIES[0], ENTRIES[3]])
        self.assertEqual([e.link for e in out], ["https://example.com/3", "https://example.com/4"])

    def test_rank_missing_dates_last(self):
        out = rank([ENTRIES[3], ENTRIES[0], ENTRIES[2]])
        self.assertEqual([e.link for e in out], [
            "https://example.com/3",
            "https://example.com/1",
            "https://example.com/4",
        ])


if __name__ == "__main__":
    unittest.main()
