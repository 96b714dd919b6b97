"""
Unit tests for ConfigManager class.
"""
import json
import logging
import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from encard.config_manager import ConfigManager


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager functionality."""

    def setUp(self):
        """Set up test fixtures before each test method."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_manager = ConfigManager(self.temp_dir)

        # Suppress logging during tests
        logging.disable(logging.CRITICAL)

    def tearDown(self):
        """Clean up after each test method."""
        logging.disable(logging.NOTSET)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, data):
        path = Path(self.temp_dir) / "config.json"
        with open(path, 'w', encoding='utf-8') as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)
        return path

    def test_initialization_with_defaults(self):
        """Test that ConfigManager initializes with correct default values."""
        self.assertEqual(self.config_manager.get_data_directory(), Path(self.temp_dir))
        self.assertEqual(self.config_manager.get_questions_path(), Path(self.temp_dir) / "questions.json")
        self.assertEqual(self.config_manager.get_log_level(), "INFO")
        self.assertEqual(self.config_manager.get_log_directory(), Path(self.temp_dir) / "logs")
        self.assertEqual(self.config_manager.get_welcome_text(), "Welcome to Encard")
        self.assertEqual(self.config_manager.get_tick_interval(), 1.0)

    def test_default_data_directory_is_in_home(self):
        """Test that the default data directory is ~/.encard."""
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("ENCARD_HOME", None)
            config_manager = ConfigManager()

        self.assertEqual(config_manager.get_data_directory(), Path.home() / ".encard")

    def test_environment_variable_overrides_default(self):
        """Test that ENCARD_HOME selects the data directory."""
        with patch.dict(os.environ, {"ENCARD_HOME": self.temp_dir}):
            config_manager = ConfigManager()

        self.assertEqual(config_manager.get_data_directory(), Path(self.temp_dir))

    def test_explicit_directory_overrides_environment(self):
        """Test that an explicit directory wins over ENCARD_HOME."""
        explicit = os.path.join(self.temp_dir, "explicit")
        with patch.dict(os.environ, {"ENCARD_HOME": "/somewhere/else"}):
            config_manager = ConfigManager(explicit)

        self.assertEqual(config_manager.get_data_directory(), Path(explicit))

    def test_set_log_level_valid_values(self):
        """Test setting valid log levels."""
        for level in ("debug", "INFO", " Warning ", "ERROR"):
            result = self.config_manager.set_log_level(level)
            self.assertTrue(result['success'])
        self.assertEqual(self.config_manager.get_log_level(), "ERROR")

    def test_set_log_level_invalid_values(self):
        """Test setting invalid log levels."""
        for level in ("LOUD", "", 10, None):
            result = self.config_manager.set_log_level(level)
            self.assertFalse(result['success'])
            self.assertIn('user_message', result)
        self.assertEqual(self.config_manager.get_log_level(), "INFO")

    def test_set_questions_file(self):
        """Test setting the questions file name."""
        result = self.config_manager.set_questions_file("capitals.json")

        self.assertTrue(result['success'])
        self.assertEqual(self.config_manager.get_questions_path(), Path(self.temp_dir) / "capitals.json")

    def test_set_questions_file_rejects_paths(self):
        """Test that the questions file must be a bare name."""
        for value in ("", "  ", "sub/questions.json", 5):
            result = self.config_manager.set_questions_file(value)
            self.assertFalse(result['success'])
        self.assertEqual(self.config_manager.get_questions_file(), "questions.json")

    def test_set_welcome_text(self):
        """Test welcome text validation."""
        self.assertTrue(self.config_manager.set_welcome_text("Hi there")['success'])
        self.assertEqual(self.config_manager.get_welcome_text(), "Hi there")

        self.assertFalse(self.config_manager.set_welcome_text("")['success'])
        self.assertFalse(self.config_manager.set_welcome_text("x" * 201)['success'])
        self.assertEqual(self.config_manager.get_welcome_text(), "Hi there")

    def test_set_tick_interval(self):
        """Test tick interval validation."""
        self.assertTrue(self.config_manager.set_tick_interval(2)['success'])
        self.assertEqual(self.config_manager.get_tick_interval(), 2.0)

        for value in (0, 0.05, 61, "1", True):
            self.assertFalse(self.config_manager.set_tick_interval(value)['success'])
        self.assertEqual(self.config_manager.get_tick_interval(), 2.0)

    def test_set_log_directory(self):
        """Test setting a custom log directory."""
        result = self.config_manager.set_log_directory("~/encard-logs")

        self.assertTrue(result['success'])
        self.assertEqual(self.config_manager.get_log_directory(), Path.home() / "encard-logs")
        self.assertFalse(self.config_manager.set_log_directory("")['success'])

    def test_load_missing_config_file_keeps_defaults(self):
        """Test that no config.json means defaults."""
        self.assertEqual(self.config_manager.load_config_file(), {})
        self.assertEqual(self.config_manager.load_errors, [])
        self.assertEqual(self.config_manager.get_log_level(), "INFO")

    def test_load_config_file_applies_settings(self):
        """Test that config.json values are applied."""
        self._write_config({
            "quiz": {"welcome_text": "Quiz time", "questions_file": "deck.json"},
            "logging": {"level": "debug", "log_directory": self.temp_dir}
        })

        self.config_manager.load_config_file()

        self.assertEqual(self.config_manager.get_welcome_text(), "Quiz time")
        self.assertEqual(self.config_manager.get_questions_file(), "deck.json")
        self.assertEqual(self.config_manager.get_log_level(), "DEBUG")
        self.assertEqual(self.config_manager.get_log_directory(), Path(self.temp_dir))
        self.assertEqual(self.config_manager.load_errors, [])

    def test_load_config_file_invalid_json(self):
        """Test that invalid JSON is reported and defaults are kept."""
        self._write_config("{ not json")

        self.assertEqual(self.config_manager.load_config_file(), {})
        self.assertEqual(len(self.config_manager.load_errors), 1)
        self.assertEqual(self.config_manager.get_welcome_text(), "Welcome to Encard")

    def test_load_config_file_invalid_values(self):
        """Test that invalid values are recorded and skipped."""
        self._write_config({"logging": {"level": "LOUD"}, "quiz": {"welcome_text": "Ok"}})

        self.config_manager.load_config_file()

        self.assertEqual(self.config_manager.get_log_level(), "INFO")
        self.assertEqual(self.config_manager.get_welcome_text(), "Ok")
        self.assertEqual(len(self.config_manager.load_errors), 1)

    def test_load_config_file_non_object(self):
        """Test that a non-object config is rejected."""
        self._write_config([1, 2, 3])

        self.assertEqual(self.config_manager.load_config_file(), {})
        self.assertEqual(len(self.config_manager.load_errors), 1)

    def test_load_config_file_non_object_sections(self):
        """Test that sections that are not objects are reported and skipped."""
        for quiz_section in (5, "welcome_text", [1]):
            with self.subTest(quiz=quiz_section):
                self._write_config({"quiz": quiz_section, "logging": {"level": "DEBUG"}})

                self.config_manager.load_config_file()

                self.assertEqual(len(self.config_manager.load_errors), 1)
                self.assertIn("'quiz'", self.config_manager.load_errors[0])
                self.assertEqual(self.config_manager.get_welcome_text(), "Welcome to Encard")
                self.assertEqual(self.config_manager.get_log_level(), "DEBUG")

    def test_load_config_file_undecodable_bytes(self):
        """Test that a config file that is not UTF-8 is reported and defaults are kept."""
        with open(Path(self.temp_dir) / "config.json", 'wb') as f:
            f.write(b'\xff{}')

        self.assertEqual(self.config_manager.load_config_file(), {})
        self.assertEqual(len(self.config_manager.load_errors), 1)
        self.assertEqual(self.config_manager.get_questions_file(), "questions.json")

    def test_validate_settings(self):
        """Test validation of current settings."""
        validation = self.config_manager.validate_settings()

        self.assertTrue(validation['valid'])
        self.assertEqual(validation['issues'], [])

    def test_settings_summary(self):
        """Test the human-readable summary."""
        summary = self.config_manager.get_settings_summary()

        self.assertIn("questions.json", summary)
        self.assertIn("INFO", summary)


if __name__ == '__main__':
    unittest.main()
