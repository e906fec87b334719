"""
Unit tests for environment-driven settings.
"""
import unittest
from unittest.mock import patch

from quizapp.config import Settings, _parse_seed
from quizapp.core.models import LeaderboardEntry


class TestSettings(unittest.TestCase):

    @patch("quizapp.config.load_dotenv")
    def test_defaults(self, _load_dotenv):
        with patch.dict("os.environ", {}, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.question_count, 5)
        self.assertEqual(settings.visual_image_count, 2)
        self.assertEqual(settings.leaderboard_size, 5)
        self.assertEqual(settings.session_ttl_seconds, 0)
        self.assertEqual(settings.leaderboard_seed, ())
        self.assertEqual(settings.cors_origins, ["*"])

    @patch("quizapp.config.load_dotenv")
    def test_overrides(self, _load_dotenv):
        env = {
            "QUIZ_LEADERBOARD_SIZE": "3",
            "QUIZ_SESSION_TTL_SECONDS": "900",
            "QUIZ_LOG_LEVEL": "debug",
            "QUIZ_CORS_ORIGINS": "http://a.test, http://b.test",
            "QUIZ_LEADERBOARD_SEED": "Alice:4,Bob:3",
        }
        with patch.dict("os.environ", env, clear=True):
            settings = Settings.from_env()
        self.assertEqual(settings.leaderboard_size, 3)
        self.assertEqual(settings.session_ttl_seconds, 900)
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertEqual(settings.cors_origins, ["http://a.test", "http://b.test"])
        self.assertEqual(settings.leaderboard_seed, (LeaderboardEntry("Alice", 4), LeaderboardEntry("Bob", 3)))

    @patch("quizapp.config.load_dotenv")
    def test_bad_integer(self, _load_dotenv):
        with patch.dict("os.environ", {"QUIZ_QUESTION_COUNT": "five"}, clear=True):
            with self.assertRaises(ValueError):
                Settings.from_env()

    def test_invalid_visual_split(self):
        with self.assertRaises(ValueError):
            Settings(question_count=3, visual_image_count=4)

    def test_bad_seed(self):
        with self.assertRaises(ValueError):
            _parse_seed("Alice")


if __name__ == "__main__":
    unittest.main()
