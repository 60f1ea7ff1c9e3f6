"""
Utility Module for the Expense Extraction Engine.

Common utilities used across the other modules:
    - Logging configuration
    - Exception hierarchy for the batch tooling
    - File and formatting helpers
"""

from .logger import setup_logger, get_logger, setup_logger_from_config
from .helpers import (
    ensure_directory,
    get_file_extension,
    generate_timestamp,
    confidence_icon,
)

__all__ = [
    'setup_logger',
    'get_logger',
    'setup_logger_from_config',
    'ensure_directory',
    'get_file_extension',
    'generate_timestamp',
    'confidence_icon',
]
