"""
Validation Module for the Expense Extraction Engine.

This module provides:
    - Israeli business ID normalization and checksum
    - Invoice date range checks
    - Monetary amount range checks

Author: ML Engineering Team
"""

from .validators import BusinessIdValidator, DateValidator, AmountValidator

__all__ = [
    'BusinessIdValidator',
    'DateValidator',
    'AmountValidator',
]
