"""
Configuration manager for Encard settings and storage locations.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import DEFAULT_WELCOME_TEXT


class ConfigManager:
    """Manages application configuration: storage, logging and display settings."""

    # Default configuration values
    DEFAULT_DATA_DIRECTORY = "~/.encard"
    DEFAULT_QUESTIONS_FILE = "questions.json"
    DEFAULT_LOG_LEVEL = "INFO"
    DEFAULT_TICK_INTERVAL = 1.0
    CONFIG_FILE_NAME = "config.json"
    DATA_DIRECTORY_ENV = "ENCARD_HOME"

    VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

    # Validation limits
    MIN_TICK_INTERVAL = 0.1
    MAX_TICK_INTERVAL = 60.0
    MAX_WELCOME_LENGTH = 200

    def __init__(self, data_directory: Optional[str] = None):
        """
        Initialize ConfigManager with default settings.

        Args:
            data_directory: Explicit data directory; falls back to the
                ENCARD_HOME environment variable, then ~/.encard
        """
        self.logger = logging.getLogger(__name__)
        self._data_directory = self._resolve_directory(
            data_directory or os.getenv(self.DATA_DIRECTORY_ENV) or self.DEFAULT_DATA_DIRECTORY
        )
        self._questions_file = self.DEFAULT_QUESTIONS_FILE
        self._log_level = self.DEFAULT_LOG_LEVEL
        self._log_directory: Optional[Path] = None
        self._welcome_text = DEFAULT_WELCOME_TEXT
        self._tick_interval = self.DEFAULT_TICK_INTERVAL
        self.load_errors: List[str] = []

    @staticmethod
    def _resolve_directory(directory: str) -> Path:
        return Path(directory).expanduser()

    def get_data_directory(self) -> Path:
        return self._data_directory

    def get_questions_path(self) -> Path:
        return self._data_directory / self._questions_file

    def get_questions_file(self) -> str:
        return self._questions_file

    def get_log_level(self) -> str:
        return self._log_level

    def get_log_directory(self) -> Path:
        """
        Get the directory log files are written to.

        Returns:
            Configured log directory, or <data_directory>/logs by default
        """
        if self._log_directory is not None:
            return self._log_directory
        return self._data_directory / "logs"

    def get_welcome_text(self) -> str:
        return self._welcome_text

    def get_tick_interval(self) -> float:
        return self._tick_interval

    def set_questions_file(self, file_name: str) -> Dict[str, Any]:
        """
        Set the questions file name inside the data directory.

        Args:
            file_name: Bare file name, e.g. "questions.json"

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(file_name, str):
            error_msg = f"Questions file must be a string, got {type(file_name).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Invalid input: Expected a file name, got {type(file_name).__name__}"
            }

        if not file_name.strip():
            error_msg = "Questions file name cannot be empty"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "Questions file name cannot be empty"
            }

        if Path(file_name).name != file_name:
            error_msg = f"Questions file must be a bare file name, got {file_name}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Questions file must not contain a directory: {file_name}"
            }

        self._questions_file = file_name
        self.logger.info(f"Questions file set to {file_name}")
        return {
            'success': True,
            'message': f"Questions file set to {file_name}",
            'user_message': f"Questions file set to {file_name}"
        }

    def set_log_level(self, level: str) -> Dict[str, Any]:
        """
        Set the logging level by name.

        Args:
            level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL (case-insensitive)

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(level, str):
            error_msg = f"Log level must be a string, got {type(level).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Invalid input: Expected a level name, got {type(level).__name__}"
            }

        normalized = level.strip().upper()
        if normalized not in self.VALID_LOG_LEVELS:
            error_msg = f"Unknown log level: {level}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Unknown log level {level!r}. Use one of: {', '.join(self.VALID_LOG_LEVELS)}"
            }

        self._log_level = normalized
        return {
            'success': True,
            'message': f"Log level set to {normalized}",
            'user_message': f"Log level set to {normalized}"
        }

    def set_log_directory(self, directory: str) -> Dict[str, Any]:
        """
        Set the directory log files are written to.

        Args:
            directory: Path to the log directory; "~" is expanded

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(directory, str) or not directory.strip():
            error_msg = "Log directory must be a non-empty string"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "Log directory path cannot be empty"
            }

        self._log_directory = self._resolve_directory(directory)
        return {
            'success': True,
            'message': f"Log directory set to {self._log_directory}",
            'user_message': f"Log directory set to {self._log_directory}"
        }

    def set_welcome_text(self, text: str) -> Dict[str, Any]:
        """
        Set the prompt shown on the menu screen.

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if not isinstance(text, str) or not text.strip():
            error_msg = "Welcome text must be a non-empty string"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': "Welcome text cannot be empty"
            }

        if len(text) > self.MAX_WELCOME_LENGTH:
            error_msg = f"Welcome text cannot exceed {self.MAX_WELCOME_LENGTH} characters"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Welcome text too long: Maximum is {self.MAX_WELCOME_LENGTH} characters"
            }

        self._welcome_text = text
        return {
            'success': True,
            'message': "Welcome text updated",
            'user_message': "Welcome text updated"
        }

    def set_tick_interval(self, seconds: float) -> Dict[str, Any]:
        """
        Set how often the elapsed-time counter advances.

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            error_msg = f"Tick interval must be a number, got {type(seconds).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"Invalid input: Expected a number, got {type(seconds).__name__}"
            }

        if not self.MIN_TICK_INTERVAL <= seconds <= self.MAX_TICK_INTERVAL:
            error_msg = (f"Tick interval must be between {self.MIN_TICK_INTERVAL} "
                         f"and {self.MAX_TICK_INTERVAL} seconds")
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': error_msg
            }

        self._tick_interval = float(seconds)
        return {
            'success': True,
            'message': f"Tick interval set to {seconds} seconds",
            'user_message': f"Tick interval set to {seconds} seconds"
        }

    def load_config_file(self, config_path: Optional[Path] = None) -> Dict[str, Any]:
        """
        Apply settings from an optional JSON configuration file.

        Expected structure (every key optional):
        {
            "quiz": {"welcome_text": str, "questions_file": str, "tick_interval": float},
            "logging": {"level": str, "log_directory": str}
        }

        A missing file leaves the defaults in place. Invalid JSON or invalid
        values are recorded in load_errors and skipped.

        Args:
            config_path: File to read, defaults to <data_directory>/config.json

        Returns:
            The decoded configuration, or an empty dict
        """
        self.load_errors.clear()
        config_path = Path(config_path) if config_path else self._data_directory / self.CONFIG_FILE_NAME

        if not config_path.exists():
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self.load_errors.append(f"Invalid JSON in {config_path}: {e}")
            self.logger.error(self.load_errors[-1])
            return {}
        except OSError as e:
            self.load_errors.append(f"Failed to read {config_path}: {e}")
            self.logger.error(self.load_errors[-1])
            return {}

        if not isinstance(config, dict):
            self.load_errors.append(f"{config_path} must contain a JSON object")
            return {}

        quiz_config = self._config_section(config, 'quiz', config_path)
        log_config = self._config_section(config, 'logging', config_path)

        results = []
        if 'welcome_text' in quiz_config:
            results.append(self.set_welcome_text(quiz_config['welcome_text']))
        if 'questions_file' in quiz_config:
            results.append(self.set_questions_file(quiz_config['questions_file']))
        if 'tick_interval' in quiz_config:
            results.append(self.set_tick_interval(quiz_config['tick_interval']))
        if 'level' in log_config:
            results.append(self.set_log_level(log_config['level']))
        if 'log_directory' in log_config:
            results.append(self.set_log_directory(log_config['log_directory']))

        for result in results:
            if not result['success']:
                self.load_errors.append(result['error'])

        self.logger.info(f"Loaded configuration from {config_path}")
        return config

    def _config_section(self, config: Dict[str, Any], name: str, config_path: Path) -> Dict[str, Any]:
        """Return a config section, recording an error when it is not an object."""
        section = config.get(name)
        if section is None:
            return {}
        if not isinstance(section, dict):
            self.load_errors.append(f"Section '{name}' in {config_path} must be a JSON object")
            self.logger.error(self.load_errors[-1])
            return {}
        return section

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }

        if self._log_level not in self.VALID_LOG_LEVELS:
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid log level: {self._log_level}")

        if not self._questions_file or Path(self._questions_file).name != self._questions_file:
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid questions file: {self._questions_file}")

        if not self.MIN_TICK_INTERVAL <= self._tick_interval <= self.MAX_TICK_INTERVAL:
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid tick interval: {self._tick_interval}")

        if not self._welcome_text.strip():
            validation_result["valid"] = False
            validation_result["issues"].append("Welcome text is empty")

        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        return (
            f"Encard Settings:\n"
            f"• Data Directory: {self._data_directory}\n"
            f"• Questions File: {self.get_questions_path()}\n"
            f"• Log Level: {self._log_level}\n"
            f"• Log Directory: {self.get_log_directory()}\n"
            f"• Tick Interval: {self._tick_interval} seconds"
        )
