"""
Logging Configuration Module.

Centralized logging for the expense extraction engine and its batch
tooling. The extraction core only emits DEBUG/WARNING records through
module loggers; handlers are attached once by the application entry
point (CLI or host service).

Usage:
    from expense_extraction.utils.logger import setup_logger, get_logger

    # Initialize logging (call once at startup)
    setup_logger()

    # Get logger in any module
    logger = get_logger(__name__)
    logger.debug("Total matched by pattern %s", name)
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import colorama
from colorama import Fore, Style

colorama.init()

# Root namespace for every logger in the package
LOGGER_NAMESPACE = "expense_extraction"


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors console records by level.

    Colors:
        - DEBUG: Cyan
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Red (bold)
    """

    COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }
    RESET = Style.RESET_ALL

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, '')
        message = super().format(record)
        return f"{color}{message}{self.RESET}"


def setup_logger(
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,  # 10 MB
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    Configure the package logger.

    Safe to call more than once: existing handlers are replaced, so the
    CLI can re-initialize logging after parsing --debug / --quiet.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Custom log format string.
        date_format: Custom date format string.
        log_file: Path to a rotating log file. None disables file logging.
        max_bytes: Maximum log file size before rotation.
        backup_count: Number of rotated files to keep.
        colorize: Whether to color console output.

    Returns:
        The configured ``expense_extraction`` logger.

    Example:
        >>> setup_logger(level="DEBUG", log_file="logs/extraction.log")
    """
    if log_format is None:
        log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    if date_format is None:
        date_format = "%Y-%m-%d %H:%M:%S"

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    if colorize:
        console_handler.setFormatter(ColoredFormatter(log_format, datefmt=date_format))
    else:
        console_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
    package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        package_logger.addHandler(file_handler)

    package_logger.propagate = False

    package_logger.debug("Logging initialized at level %s", level.upper())
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module, nested under the package namespace.

    Args:
        name: Logger name, typically ``__name__``.

    Returns:
        Logger instance.
    """
    if name.startswith(LOGGER_NAMESPACE):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def setup_logger_from_config(level_override: Optional[str] = None) -> logging.Logger:
    """
    Initialize logging from the ``logging`` section of settings.yaml.

    Args:
        level_override: Level that wins over the configured one
            (used by the CLI's --debug / --quiet flags).

    Returns:
        Configured package logger.
    """
    from config import get_config

    level = level_override or get_config("logging.level", "INFO")

    log_file = None
    if get_config("logging.file.enabled", False):
        log_dir = Path(get_config("paths.log_dir", "logs"))
        log_file = str(log_dir / get_config("logging.file.filename", "expense_extraction.log"))

    return setup_logger(
        level=level,
        log_format=get_config("logging.format"),
        date_format=get_config("logging.date_format"),
        log_file=log_file,
        max_bytes=get_config("logging.file.max_bytes", 10485760),
        backup_count=get_config("logging.file.backup_count", 5),
        colorize=get_config("logging.console.colorize", True)
    )
