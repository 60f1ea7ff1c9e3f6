"""
Field Extractors for the Expense Extraction Engine.

Each extractor owns an ordered cascade of candidate patterns and returns
an ExtractionResult carrying the value, a calibrated confidence and the
name of the rule that matched. Extractors are stateless and independent;
only the amount extractor sequences its own sub-stages.

Author: ML Engineering Team
"""

from .extraction_result import ExtractionResult, ConfidenceFactors
from .base import BaseFieldExtractor, CandidatePattern, PositionZone
from .document_type import DocumentType, DocumentTypeExtractor
from .invoice_number import InvoiceNumberExtractor
from .date import DateExtractor
from .business_name import BusinessNameExtractor
from .business_id import BusinessIdExtractor
from .reference_number import ReferenceNumber, ReferenceType, ReferenceNumberExtractor
from .amounts import AmountExtractor, MonetaryAmounts, VAT_RATE

__all__ = [
    'ExtractionResult',
    'ConfidenceFactors',
    'BaseFieldExtractor',
    'CandidatePattern',
    'PositionZone',
    'DocumentType',
    'DocumentTypeExtractor',
    'InvoiceNumberExtractor',
    'DateExtractor',
    'BusinessNameExtractor',
    'BusinessIdExtractor',
    'ReferenceNumber',
    'ReferenceType',
    'ReferenceNumberExtractor',
    'AmountExtractor',
    'MonetaryAmounts',
    'VAT_RATE',
]
