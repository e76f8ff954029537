"""
Unit tests for qdrant_vectorstore.core.logging_config module

Tests logging configuration setup with different debug settings
and JSON formatter functionality.
"""

import logging
import sys
from unittest.mock import MagicMock, patch

from qdrant_vectorstore.core.config import build_pure_defaults_with_overrides
from qdrant_vectorstore.core.logging_config import JsonFormatter, setup_logging


class TestJsonFormatter:
    """Test JsonFormatter functionality"""

    def setup_method(self, method):
        """Setup test environment"""
        self.formatter = JsonFormatter()

    def test_add_fields_with_timestamp(self):
        """Test JsonFormatter adds timestamp if not present"""
        log_record = {}
        record = MagicMock()
        record.created = 1640995200.0  # 2022-01-01 00:00:00 UTC
        record.levelname = "INFO"
        message_dict = {}

        self.formatter.add_fields(log_record, record, message_dict)

        assert log_record["timestamp"] == 1640995200.0
        assert log_record["level"] == "INFO"

    def test_add_fields_with_existing_timestamp(self):
        """Test JsonFormatter doesn't override existing timestamp"""
        log_record = {"timestamp": 1234567890.0}
        record = MagicMock()
        record.created = 1640995200.0
        record.levelname = "DEBUG"

        self.formatter.add_fields(log_record, record, {})

        assert log_record["timestamp"] == 1234567890.0
        assert log_record["level"] == "DEBUG"

    def test_add_fields_with_existing_level(self):
        """Test JsonFormatter uppercases an existing level"""
        log_record = {"level": "warning"}
        record = MagicMock()
        record.created = 1640995200.0
        record.levelname = "DEBUG"

        self.formatter.add_fields(log_record, record, {})

        assert log_record["level"] == "WARNING"


class TestSetupLogging:
    """Test setup_logging function"""

    @patch("qdrant_vectorstore.core.logging_config.dictConfig")
    @patch("qdrant_vectorstore.core.logging_config.get_settings")
    def test_setup_logging_debug_mode(self, mock_get_settings, mock_dict_config):
        """Test setup_logging with debug=True sets DEBUG level"""
        mock_get_settings.return_value = build_pure_defaults_with_overrides(debug=True)

        setup_logging()

        mock_dict_config.assert_called_once()
        config = mock_dict_config.call_args[0][0]
        assert config["loggers"]["qdrant_vectorstore"]["level"] == "DEBUG"
        assert config["root"]["level"] == "DEBUG"

    @patch("qdrant_vectorstore.core.logging_config.dictConfig")
    @patch("qdrant_vectorstore.core.logging_config.get_settings")
    def test_setup_logging_production_mode(self, mock_get_settings, mock_dict_config):
        """Test setup_logging with debug=False sets INFO level"""
        mock_get_settings.return_value = build_pure_defaults_with_overrides(debug=False)

        setup_logging()

        config = mock_dict_config.call_args[0][0]
        assert config["loggers"]["qdrant_vectorstore"]["level"] == "INFO"
        assert config["loggers"]["qdrant_client"]["level"] == "WARNING"
        assert config["root"]["level"] == "INFO"

    @patch("qdrant_vectorstore.core.logging_config.dictConfig")
    @patch("qdrant_vectorstore.core.logging_config.get_settings")
    def test_console_only_by_default(self, mock_get_settings, mock_dict_config):
        """Test no file handler is configured unless enabled"""
        mock_get_settings.return_value = build_pure_defaults_with_overrides()

        setup_logging()

        config = mock_dict_config.call_args[0][0]
        assert "file" not in config["handlers"]
        assert config["handlers"]["console"]["class"] == "logging.StreamHandler"
        assert config["handlers"]["console"]["stream"] == sys.stdout
        assert config["root"]["handlers"] == ["console"]

    @patch("qdrant_vectorstore.core.logging_config.dictConfig")
    @patch("qdrant_vectorstore.core.logging_config.get_settings")
    def test_file_handler_config(self, mock_get_settings, mock_dict_config, tmp_path):
        """Test file handler configuration when file logging is enabled"""
        mock_get_settings.return_value = build_pure_defaults_with_overrides(
            log_file_enabled=True, log_dir=str(tmp_path / "logs")
        )

        setup_logging()

        config = mock_dict_config.call_args[0][0]
        file_handler = config["handlers"]["file"]

        assert config["formatters"]["json"]["()"] == JsonFormatter
        assert file_handler["class"] == "logging.handlers.TimedRotatingFileHandler"
        assert file_handler["formatter"] == "json"
        assert file_handler["filename"] == str(
            tmp_path / "logs" / "qdrant_vectorstore.log"
        )
        assert file_handler["when"] == "midnight"
        assert file_handler["backupCount"] == 30
        assert "file" in config["loggers"]["qdrant_vectorstore"]["handlers"]
        assert (tmp_path / "logs").is_dir()

    @patch("qdrant_vectorstore.core.logging_config.dictConfig")
    @patch("qdrant_vectorstore.core.logging_config.get_settings")
    def test_falls_back_to_console_when_file_handler_fails(
        self, mock_get_settings, mock_dict_config, tmp_path
    ):
        """Test a failing file handler degrades to console-only logging"""
        mock_get_settings.return_value = build_pure_defaults_with_overrides(
            log_file_enabled=True, log_dir=str(tmp_path)
        )
        mock_dict_config.side_effect = [PermissionError("denied"), None]

        setup_logging()

        assert mock_dict_config.call_count == 2
        retry_config = mock_dict_config.call_args[0][0]
        assert "file" not in retry_config["handlers"]
        assert retry_config["root"]["handlers"] == ["console"]
        for logger_config in retry_config["loggers"].values():
            assert "file" not in logger_config["handlers"]

    def test_json_formatter_integration(self):
        """Test JsonFormatter integration in actual logging"""
        formatter = JsonFormatter()

        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname="test.py",
            lineno=42,
            msg="Test message",
            args=(),
            exc_info=None,
        )

        formatted = formatter.format(record)

        assert "INFO" in formatted
        assert "Test message" in formatted
