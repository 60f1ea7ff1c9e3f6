"""
Normalization Module for the Expense Extraction Engine.

This module provides:
    - OCR text canonicalization (TextNormalizer)
    - Invariant monetary parsing (AmountNormalizer)

Author: ML Engineering Team
"""

from .normalizers import TextNormalizer, AmountNormalizer, normalize_text, parse_amount

__all__ = [
    'TextNormalizer',
    'AmountNormalizer',
    'normalize_text',
    'parse_amount',
]
