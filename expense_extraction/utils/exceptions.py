"""
Custom Exceptions Module.

Exceptions raised by the batch tooling around the extraction core
(input loading, configuration, report export, evaluation). The core
``parse`` operation never raises for any text input; a missing field
is its only failure signal.

Exception Hierarchy:
    ExpenseExtractionError (base)
    ├── InputError
    │   ├── UnsupportedFileTypeError
    │   ├── InputFileNotFoundError
    │   └── EmptyInputError
    ├── ConfigurationError
    ├── OutputError
    │   └── ReportExportError
    └── EvaluationError
        └── GroundTruthError
"""

from typing import Any, Dict, List, Optional


class ExpenseExtractionError(Exception):
    """
    Base exception for all expense extraction errors.

    Attributes:
        message: Human-readable error message.
        details: Additional error context.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(ExpenseExtractionError):
    """Base exception for input handling errors."""
    pass


class UnsupportedFileTypeError(InputError):
    """
    Raised when a file with an unsupported extension is provided.

    Example:
        >>> raise UnsupportedFileTypeError(".pdf", [".txt"])
    """

    def __init__(self, file_type: str, supported_types: List[str]):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


class InputFileNotFoundError(InputError):
    """Raised when an input file or directory cannot be found."""

    def __init__(self, filepath: str):
        message = f"File not found: {filepath}"
        details = {"filepath": filepath}
        super().__init__(message, details)


class EmptyInputError(InputError):
    """Raised when an input file or directory holds nothing to process."""

    def __init__(self, filepath: str, reason: Optional[str] = None):
        message = f"No OCR text to process: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(ExpenseExtractionError):
    """Raised when configuration or a referenced resource is invalid."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(ExpenseExtractionError):
    """Base exception for output handling errors."""
    pass


class ReportExportError(OutputError):
    """Raised when a JSON or Excel report cannot be written."""

    def __init__(self, filepath: str, reason: Optional[str] = None):
        message = f"Failed to export report: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


# =============================================================================
# EVALUATION ERRORS
# =============================================================================

class EvaluationError(ExpenseExtractionError):
    """Base exception for evaluation errors."""
    pass


class GroundTruthError(EvaluationError):
    """Raised when a ground truth file is missing or malformed."""

    def __init__(self, filepath: str, reason: Optional[str] = None):
        message = f"Invalid ground truth file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'ExpenseExtractionError',
    'InputError',
    'UnsupportedFileTypeError',
    'InputFileNotFoundError',
    'EmptyInputError',
    'ConfigurationError',
    'OutputError',
    'ReportExportError',
    'EvaluationError',
    'GroundTruthError',
]
