"""
Expense Extraction Engine.

Rule-based extraction of financial fields from OCR text of Hebrew/English
invoices and receipts. Each field comes with a calibrated confidence.

Modules:
    - normalization: OCR text canonicalization and amount parsing
    - validation: Business ID checksum, date and amount plausibility
    - extractors: Per-field pattern cascades and the confidence model
    - parser: Orchestration into ParsedInvoiceData
    - input_handler: Loading OCR text dumps for batch runs
    - output_handler: JSON and Excel reports
    - evaluation: Accuracy against ground truth

Architecture:
    OCR text → Normalizer → Field Extractors → ParsedInvoiceData
                                                    ↓
                                       Reports / Evaluation (batch)
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

from .parser import InvoiceParser, ParsedInvoiceData, parse_invoice
from .extractors import DocumentType, ReferenceType

__all__ = [
    'InvoiceParser',
    'ParsedInvoiceData',
    'parse_invoice',
    'DocumentType',
    'ReferenceType',
]
