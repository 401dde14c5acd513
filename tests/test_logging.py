import logging
import unittest

from tonal_tuner.logger import get_logger
from tonal_tuner.logging_config import setup_logging


class TestGetLogger(unittest.TestCase):
    def test_package_module_keeps_its_name(self):
        logger = get_logger("tonal_tuner.detection.pitch_estimator")
        self.assertEqual(logger.name, "tonal_tuner.detection.pitch_estimator")
        self.assertIs(logger, get_logger("tonal_tuner.detection.pitch_estimator"))

    def test_package_logger_is_not_nested(self):
        self.assertEqual(get_logger("tonal_tuner").name, "tonal_tuner")

    def test_script_logger_is_nested_under_package(self):
        logger = get_logger("__main__")
        self.assertEqual(logger.name, "tonal_tuner.__main__")
        self.assertIs(logger.parent, logging.getLogger("tonal_tuner"))

    def test_similar_prefix_is_nested(self):
        self.assertEqual(get_logger("tonal_tuners").name, "tonal_tuner.tonal_tuners")

    def test_script_logger_uses_package_level(self):
        setup_logging("DEBUG")
        try:
            self.assertTrue(get_logger("__main__").isEnabledFor(logging.DEBUG))
        finally:
            setup_logging()


if __name__ == "__main__":
    unittest.main()
