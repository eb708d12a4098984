"""Tests for common utilities."""

import io
import json
import logging

from url_store.common.validators import is_valid_url, is_valid_alias
from url_store.common.logging_config import setup_logging
from url_store.database.models import URLRecord


class TestValidators:
    """Test validation utilities."""

    def test_valid_urls(self):
        """Test valid URL validation."""
        valid, _ = is_valid_url("https://example.com")
        assert valid

        valid, _ = is_valid_url("http://example.com/path")
        assert valid

        valid, _ = is_valid_url("https://sub.example.com:8080/path?query=value")
        assert valid

    def test_invalid_urls(self):
        """Test invalid URL validation."""
        valid, error = is_valid_url("")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_url("not-a-url")
        assert not valid

        valid, error = is_valid_url("ftp://example.com")
        assert not valid
        assert "http" in error.lower()

        valid, error = is_valid_url("https://")
        assert not valid
        assert "domain" in error.lower()

    def test_url_too_long(self):
        valid, error = is_valid_url("https://example.com/" + "a" * 2048)
        assert not valid
        assert "too long" in error.lower()

    def test_valid_aliases(self):
        """Test valid alias validation."""
        for alias in ("ex1", "a", "test-code", "test_code", "A" * 64):
            valid, _ = is_valid_alias(alias)
            assert valid, alias

    def test_invalid_aliases(self):
        """Test invalid alias validation."""
        valid, error = is_valid_alias("")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_alias("a" * 65)
        assert not valid
        assert "at most" in error.lower()

        valid, error = is_valid_alias("abc@123")
        assert not valid

        valid, error = is_valid_alias("with space")
        assert not valid


class TestLogging:
    """Test logging setup."""

    def test_setup_logging_sets_level(self):
        logger = setup_logging(level="WARNING")
        assert logger.name == "url_store"
        assert logger.level == logging.WARNING

    def test_setup_logging_does_not_stack_handlers(self):
        setup_logging(level="INFO")
        logger = setup_logging(level="INFO")
        assert len(logger.handlers) == 1

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "store.log"
        logger = setup_logging(level="INFO", log_file=str(log_file), json_format=True)
        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        entry = json.loads(log_file.read_text().splitlines()[0])
        assert entry["message"] == "hello"

        setup_logging(level="INFO")

    def test_unknown_level_falls_back_to_info(self):
        logger = setup_logging(level="chatty")
        assert logger.level == logging.INFO

    def test_console_defaults_to_stderr(self, capsys):
        logger = setup_logging(level="INFO")
        logger.info("to stderr")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "to stderr" in captured.err

    def test_custom_stream(self):
        stream = io.StringIO()
        logger = setup_logging(level="INFO", stream=stream)
        logger.info("into buffer")
        assert "[INFO] url_store - into buffer" in stream.getvalue()

    def test_json_lines_escape_message(self):
        stream = io.StringIO()
        logger = setup_logging(level="INFO", json_format=True, stream=stream)
        logger.info('saved "ex1" -> https://example.com/?q="a b"\nsecond line')

        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["level"] == "INFO"
        assert entry["logger"] == "url_store"
        assert entry["message"] == 'saved "ex1" -> https://example.com/?q="a b"\nsecond line'


class TestModels:
    """Test data models."""

    def test_record_to_dict(self):
        record = URLRecord(id=7, alias="ex1", url="https://example.com")
        assert record.to_dict() == {"id": 7, "alias": "ex1", "url": "https://example.com"}
