"""
Input Handler Module for the Expense Extraction Engine.

This module provides functionality for:
    - Loading OCR text dumps from files and directories
    - Validating extension, existence and content
    - Decoding with the configured encoding
"""

from .handler import OcrDocument, OcrTextLoader

__all__ = [
    'OcrDocument',
    'OcrTextLoader',
]
