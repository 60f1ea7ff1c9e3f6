"""
Invoice Parser Module.

This module provides:
    - InvoiceParser: normalizes OCR text once and runs every extractor
    - ParsedInvoiceData: the merged, immutable result
    - parse_invoice: convenience function over a shared parser

Author: ML Engineering Team
"""

from .parsed_invoice import ParsedInvoiceData
from .invoice_parser import InvoiceParser, parse_invoice

__all__ = [
    'ParsedInvoiceData',
    'InvoiceParser',
    'parse_invoice',
]
