import unittest

from topic_rss.similarity import (
    SimilarityRules,
    extract_entities,
    is_duplicate,
    jaccard,
    normalize_tokens,
    similarity,
)


TITLES = [
    "Senate Passes New Climate Bill",
    "Senate Approves Climate Legislation",
    "Lakers Win NBA Championship",
    "Taylor Swift announces stadium tour dates",
    "Taylor Swift reveals stadium tour",
    "taylor swift reveals stadium tour",
    "",
]


class TestNormalizeTokens(unittest.TestCase):
    def test_drops_stop_words_short_tokens_and_punctuation(self):
        self.assertEqual(normalize_tokens("The NEW iPhone 15 is here!"), {"iphone", "here"})

    def test_returns_a_set(self):
        self.assertEqual(normalize_tokens("Rock rock ROCK concert"), {"rock", "concert"})


class TestJaccard(unittest.TestCase):
    def test_empty_sets(self):
        self.assertEqual(jaccard(set(), set()), 0.0)

    def test_overlap(self):
        self.assertAlmostEqual(jaccard({"a1", "b1"}, {"b1", "c1"}), 1 / 3)

    def test_reworded_senate_story_overlap(self):
        score = similarity("Senate Passes New Climate Bill", "Senate Approves Climate Legislation")
        self.assertAlmostEqual(score, 2 / 6)


class TestEntities(unittest.TestCase):
    def test_capitalized_runs(self):
        self.assertEqual(
            extract_entities("Lakers Win NBA Championship"),
            {"Lakers Win", "Championship"},
        )

    def test_run_is_maximal(self):
        self.assertEqual(
            extract_entities("Senate Passes New Climate Bill"),
            {"Senate Passes New Climate Bill"},
        )

    def test_short_matches_dropped(self):
        self.assertEqual(extract_entities("Al and Bo went home"), set())


class TestIsDuplicate(unittest.TestCase):
    def test_high_token_overlap(self):
        self.assertTrue(is_duplicate("Senate Passes Climate Bill", "Senate Passes Climate Bill Today"))

    def test_unrelated_titles(self):
        self.assertFalse(is_duplicate("Senate Passes New Climate Bill", "Lakers Win NBA Championship"))

    def test_shared_entity_with_moderate_overlap(self):
        self.assertTrue(is_duplicate(
            "Taylor Swift announces stadium tour dates",
            "Taylor Swift reveals stadium tour",
        ))

    def test_moderate_overlap_without_entity(self):
        self.assertFalse(is_duplicate(
            "taylor swift announces stadium tour dates",
            "taylor swift reveals stadium tour",
        ))

    def test_symmetric(self):
        for a in TITLES:
            for b in TITLES:
                self.assertEqual(is_duplicate(a, b), is_duplicate(b, a), (a, b))

    def test_custom_rules(self):
        strict = SimilarityRules(duplicate_threshold=0.9, entity_threshold=0.9)
        self.assertFalse(is_duplicate(
            "Taylor Swift announces stadium tour dates",
            "Taylor Swift reveals stadium tour",
            strict,
        ))


if __name__ == "__main__":
    unittest.main()
