from __future__ import annotations

import logging
import os
import unittest
from unittest.mock import patch

from prediction_core import settings as prediction_settings


class TestLoadSettings(unittest.TestCase):
    def setUp(self) -> None:
        patcher = patch.object(prediction_settings, "load_env_files")
        self.load_env_files = patcher.start()
        self.addCleanup(patcher.stop)

    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            loaded = prediction_settings.load_settings()

        self.assertEqual(loaded, prediction_settings.Settings())
        self.load_env_files.assert_called_once()

    def test_environment_overrides(self) -> None:
        env = {
            "PREDICTION_LOG_LEVEL": "debug",
            "PREDICTION_TIMEZONE": "Europe/Berlin",
            "PREDICTION_SCAN_NARRATIVES": "off",
        }
        with patch.dict(os.environ, env, clear=True):
            loaded = prediction_settings.load_settings()

        self.assertEqual(loaded.log_level, "DEBUG")
        self.assertEqual(loaded.timezone, "Europe/Berlin")
        self.assertFalse(loaded.scan_narratives)

    def test_invalid_values_fall_back_with_warning(self) -> None:
        env = {"PREDICTION_LOG_LEVEL": "chatty", "PREDICTION_TIMEZONE": "Mars/Olympus"}
        with patch.dict(os.environ, env, clear=True):
            with self.assertLogs("prediction_settings", level="WARNING") as captured:
                loaded = prediction_settings.load_settings()

        self.assertEqual(loaded.log_level, "INFO")
        self.assertEqual(loaded.timezone, "Asia/Kolkata")
        self.assertEqual(len(captured.records), 2)

    def test_settings_are_frozen(self) -> None:
        with self.assertRaises(AttributeError):
            prediction_settings.Settings().log_level = "DEBUG"


class TestConfigureLogging(unittest.TestCase):
    def test_basic_config_uses_resolved_level(self) -> None:
        with patch("prediction_core.settings.logging.basicConfig") as basic_config:
            resolved = prediction_settings.configure_logging(prediction_settings.Settings(log_level="WARNING"))

        self.assertEqual(resolved.log_level, "WARNING")
        basic_config.assert_called_once_with(level=logging.WARNING, format=prediction_settings.LOG_FORMAT)


if __name__ == "__main__":
    unittest.main()
