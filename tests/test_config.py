import io
import os
import unittest
from unittest import mock

from topic_rss import cli
from topic_rss.config import DEFAULT_TOPIC_URL, Settings
from topic_rss.exceptions import ConfigurationError


class TestSettings(unittest.TestCase):
    def test_from_env(self):
        env = {
            "OPENAI_API_KEY": "sk-test",
            "SERPAPI_API_KEY": "serp",
            "TOPIC_RSS_MAX_ITEMS": "3",
            "TOPIC_RSS_PROVIDER": "Gemini",
            "GEMINI_API_KEY": "g-key",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = Settings.from_env(dotenv=False)
        self.assertEqual(settings.topic_url, DEFAULT_TOPIC_URL)
        self.assertEqual(settings.provider, "gemini")
        self.assertEqual(settings.max_items, 3)
        self.assertEqual(settings.serpapi_api_key, "serp")
        self.assertEqual(settings.require_generator_key(), "g-key")
        self.assertEqual(settings.generator_model, "gemini-1.5-flash")

    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_env(dotenv=False)
        self.assertEqual(settings.provider, "openai")
        self.assertEqual(settings.max_items, 5)
        self.assertIsNone(settings.serpapi_api_key)
        with self.assertRaises(ConfigurationError):
            settings.require_generator_key()

    def test_bad_integer(self):
        with mock.patch.dict(os.environ, {"TOPIC_RSS_MAX_ITEMS": "five"}, clear=True):
            with self.assertRaises(ConfigurationError):
                Settings.from_env(dotenv=False)


class TestCli(unittest.TestCase):
    def test_missing_key_exits_with_error(self):
        stdout, stderr = io.StringIO(), io.StringIO()
        with mock.patch.object(cli.Settings, "from_env", return_value=Settings()), \
                mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", stderr):
            code = cli.main([])
        self.assertEqual(code, 1)
        self.assertEqual(stdout.getvalue(), "")
        self.assertIn("OPENAI_API_KEY", stderr.getvalue())

    def test_bad_environment_exits_with_error(self):
        stdout, stderr = io.StringIO(), io.StringIO()
        with mock.patch.dict(os.environ, {"TOPIC_RSS_MAX_ITEMS": "five"}, clear=True), \
                mock.patch("topic_rss.config.load_dotenv"), \
                mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", stderr):
            code = cli.main([])
        self.assertEqual(code, 1)
        self.assertEqual(stdout.getvalue(), "")
        self.assertIn("ERROR: TOPIC_RSS_MAX_ITEMS", stderr.getvalue())

    def test_streams_to_stdout(self):
        stdout = io.StringIO()
        builder = mock.Mock()
        with mock.patch.object(cli.Settings, "from_env", return_value=Settings(openai_api_key="sk")), \
                mock.patch.object(cli, "TopicFeedBuilder", return_value=builder) as builder_cls, \
                mock.patch("sys.stdout", stdout):
            code = cli.main(["https://news.google.com/topics/XYZ", "--max-items", "2", "--workers", "2"])
        self.assertEqual(code, 0)
        options = builder_cls.call_args.kwargs["options"]
        self.assertEqual((options.max_items, options.max_workers), (2, 2))
        builder.build.assert_called_once_with("https://news.google.com/topics/XYZ", stdout)


if __name__ == "__main__":
    unittest.main()
