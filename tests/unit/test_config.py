import logging
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT))

from mp4_ascii.config import PlayerConfig
from mp4_ascii.logging_setup import LOGGER_NAME, configure_logging


class PlayerConfigTests(unittest.TestCase):
    def test_defaults_are_valid(self):
        config = PlayerConfig().validate()
        self.assertEqual((config.width, config.height), (64, 48))
        self.assertEqual(config.pacing, "deadline")
        self.assertFalse(config.skip_corrupt)

    def test_invalid_values(self):
        for kwargs in ({"width": -1}, {"max_fps": 0}, {"max_frames": -5},
                       {"mapping": "log"}, {"pacing": "vsync"}):
            with self.assertRaises(ValueError):
                PlayerConfig(**kwargs).validate()


class LoggingSetupTests(unittest.TestCase):
    def test_configure_is_idempotent(self):
        logger = configure_logging(logging.DEBUG)
        count = len(logger.handlers)
        again = configure_logging(logging.INFO)
        self.assertIs(logger, again)
        self.assertEqual(len(again.handlers), count)
        self.assertEqual(again.level, logging.INFO)
        self.assertEqual(logger.name, LOGGER_NAME)


if __name__ == "__main__":
    unittest.main()
