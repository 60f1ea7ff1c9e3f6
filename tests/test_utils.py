"""Tests for logging, helpers and the exception hierarchy."""

import logging
import logging.handlers

import pytest

from config import load_config
from expense_extraction.utils import (
    confidence_icon,
    ensure_directory,
    generate_timestamp,
    get_file_extension,
    get_logger,
    setup_logger,
    setup_logger_from_config,
)
from expense_extraction.utils.exceptions import (
    EmptyInputError,
    ExpenseExtractionError,
    GroundTruthError,
    InputError,
    ReportExportError,
    UnsupportedFileTypeError,
)
from expense_extraction.utils.logger import ColoredFormatter


class TestLogger:

    def test_get_logger_namespace(self):
        assert get_logger("main").name == "expense_extraction.main"
        assert get_logger("expense_extraction.parser").name == "expense_extraction.parser"

    def test_setup_is_idempotent(self):
        setup_logger(level="WARNING")
        logger = setup_logger(level="DEBUG")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "extraction.log"
        logger = setup_logger(level="INFO", log_file=str(log_file), colorize=False)

        get_logger("tests").info("Processed receipt_01.txt")
        for handler in logger.handlers:
            handler.flush()

        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)
        assert "Processed receipt_01.txt" in log_file.read_text(encoding="utf-8")

    def test_colored_formatter(self):
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "boom", None, None)
        formatted = ColoredFormatter("%(message)s").format(record)

        assert formatted.startswith(ColoredFormatter.COLORS[logging.ERROR])
        assert formatted.endswith(ColoredFormatter.RESET)
        assert "boom" in formatted

    def test_from_config_with_override(self):
        logger = setup_logger_from_config(level_override="ERROR")
        assert logger.level == logging.ERROR

    def test_from_config_file_logging(self, tmp_path):
        config_path = tmp_path / "settings.yaml"
        config_path.write_text(
            f"paths:\n  log_dir: {tmp_path / 'logs'}\n"
            "logging:\n  level: DEBUG\n  file:\n    enabled: true\n    filename: run.log\n",
            encoding="utf-8",
        )
        load_config(str(config_path))

        logger = setup_logger_from_config()

        assert logger.level == logging.DEBUG
        assert (tmp_path / "logs" / "run.log").exists()


class TestHelpers:

    def test_ensure_directory(self, tmp_path):
        path = ensure_directory(tmp_path / "a" / "b")
        assert path.is_dir()

    def test_get_file_extension(self):
        assert get_file_extension("scan_01.TXT") == ".txt"
        assert get_file_extension("noext") == ""

    def test_generate_timestamp(self):
        assert len(generate_timestamp()) == len("20240101_120000")

    @pytest.mark.parametrize("confidence, icon", [
        (0.95, "🟢"),
        (0.9, "🟢"),
        (0.75, "🟡"),
        (0.5, "🟠"),
        (0.2, "🔴"),
        (0.0, "⚫"),
    ])
    def test_confidence_icon(self, confidence, icon):
        assert confidence_icon(confidence) == icon


class TestExceptions:

    def test_hierarchy(self):
        assert issubclass(UnsupportedFileTypeError, InputError)
        assert issubclass(InputError, ExpenseExtractionError)
        assert issubclass(ReportExportError, ExpenseExtractionError)
        assert issubclass(GroundTruthError, ExpenseExtractionError)

    def test_message_and_details(self):
        error = EmptyInputError("ocr/a.txt", "File is empty")

        assert error.message == "No OCR text to process: ocr/a.txt"
        assert error.details == {"filepath": "ocr/a.txt", "reason": "File is empty"}
        assert "Details:" in str(error)

    def test_without_details(self):
        assert str(ExpenseExtractionError("plain")) == "plain"
