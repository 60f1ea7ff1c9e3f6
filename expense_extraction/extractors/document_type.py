"""
Document Type Extractor.

Classifies a document as a tax invoice, invoice or receipt from the first
Hebrew/English document keyword it contains.

Author: ML Engineering Team
"""

import re
from enum import Enum
from typing import Optional, Tuple

from .base import BaseFieldExtractor, CandidatePattern, PositionZone


class DocumentType(str, Enum):
    """Kind of fiscal document."""
    UNKNOWN = "Unknown"
    TAX_INVOICE = "TaxInvoice"
    INVOICE = "Invoice"
    RECEIPT = "Receipt"


DOCUMENT_TYPE_PATTERNS: Tuple[CandidatePattern, ...] = (
    CandidatePattern(
        name="document_type_keyword",
        regex=re.compile(
            r"(?:חשבונית\s*מס|חשבונית|קבלה|חש'?\s*מס|tax\s*invoice|invoice|receipt)",
            re.IGNORECASE,
        ),
        priority=1.0,
        group=0,
    ),
)


class DocumentTypeExtractor(BaseFieldExtractor[DocumentType]):
    """
    Detects the document type.

    When fragments co-occur in the matched keyword the more specific type
    wins: Tax-Invoice > Invoice > Receipt. Expected in the top 30% of the
    document.

    Example:
        >>> DocumentTypeExtractor().extract("חשבונית מס 1234").value
        <DocumentType.TAX_INVOICE: 'TaxInvoice'>
    """

    field_name = "document_type"
    PATTERNS = DOCUMENT_TYPE_PATTERNS
    POSITION_ZONE = PositionZone(threshold=0.3, inside=1.0, outside=0.85)

    def _accept(self, match, candidate, text) -> Optional[Tuple[DocumentType, float]]:
        document_type = self.classify(match.group(candidate.group))
        if document_type is DocumentType.UNKNOWN:
            return None
        return document_type, candidate.priority

    @staticmethod
    def classify(keyword: str) -> DocumentType:
        """Map a matched keyword to a DocumentType."""
        keyword = keyword.casefold()

        if ("חש" in keyword and "מס" in keyword) or ("tax" in keyword and "invoice" in keyword):
            return DocumentType.TAX_INVOICE
        if "חשבונית" in keyword or "invoice" in keyword:
            return DocumentType.INVOICE
        if "קבלה" in keyword or "receipt" in keyword:
            return DocumentType.RECEIPT
        return DocumentType.UNKNOWN
