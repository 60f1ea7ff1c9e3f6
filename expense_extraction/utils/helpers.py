"""
Helper Utilities Module.

Small filesystem and formatting helpers shared by the batch tooling.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Lowercased file extension
    - generate_timestamp: Formatted timestamps for report names
    - confidence_icon: Traffic-light marker for a confidence score
"""

from datetime import datetime
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it and its parents if necessary.

    Args:
        path: Directory path.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs/reports")
        PosixPath('outputs/reports')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the lowercase extension (with dot) from a filepath.

    Example:
        >>> get_file_extension("scan_01.TXT")
        ".txt"
    """
    return Path(filepath).suffix.lower()


def generate_timestamp(format_str: str = "%Y%m%d_%H%M%S") -> str:
    """
    Generate a formatted timestamp string.

    Example:
        >>> generate_timestamp("%Y-%m-%d")
        "2026-01-21"
    """
    return datetime.now().strftime(format_str)


def confidence_icon(confidence: float) -> str:
    """
    Map a confidence score to the marker used in console summaries.

    Args:
        confidence: Score in [0, 1].

    Returns:
        Green for >= 0.9, yellow for >= 0.7, orange for >= 0.5,
        red for anything above zero, black for zero.
    """
    if confidence >= 0.9:
        return "🟢"
    if confidence >= 0.7:
        return "🟡"
    if confidence >= 0.5:
        return "🟠"
    if confidence > 0:
        return "🔴"
    return "⚫"
