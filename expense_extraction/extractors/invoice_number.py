"""
Invoice / Receipt Number Extractor.

Seven-rule cascade from explicitly labelled numbers down to bare numbers
found near a document keyword. Numeric and alphanumeric candidates are
validated differently:

    - numeric: 4-12 digits; 8-digit values that read as DDMMYYYY are
      dates, 9-digit values are business IDs unless an invoice/receipt
      keyword is within 30 characters
    - alphanumeric: 5-20 characters, no order/booking/check/date keyword
      within 50 characters

Author: ML Engineering Team
"""

import re
from typing import Optional, Tuple

from .base import BaseFieldExtractor, CandidatePattern, PositionZone

NUMERIC = "numeric"
ALPHANUMERIC = "alphanumeric"

# Document keywords
INVOICE_KEYWORDS = r"(?:חשבונית|invoice)"
RECEIPT_KEYWORDS = r"(?:קבלה|receipt)"
DOCUMENT_KEYWORDS = r"(?:חשבונית|invoice|קבלה|receipt)"

# "No." / "Number" / "מס'" style labels
NUMBER_LABEL = r"(?:מספר|מס'?|#|number|num|no\.?)"

INVOICE_NUMBER_PATTERNS: Tuple[CandidatePattern, ...] = (
    CandidatePattern(
        name="explicit_invoice",
        regex=re.compile(
            INVOICE_KEYWORDS + r"\s*" + NUMBER_LABEL + r"?\s*[:\-]?\s*(\d{4,12})(?!\w)",
            re.IGNORECASE,
        ),
        priority=1.0,
        kind=NUMERIC,
    ),
    CandidatePattern(
        name="explicit_receipt",
        regex=re.compile(
            RECEIPT_KEYWORDS + r"\s*" + NUMBER_LABEL + r"?\s*[:\-]?\s*(\d{4,12})(?!\w)",
            re.IGNORECASE,
        ),
        priority=1.0,
        kind=NUMERIC,
    ),
    CandidatePattern(
        name="alphanumeric_explicit",
        regex=re.compile(
            DOCUMENT_KEYWORDS + r"\s*" + NUMBER_LABEL + r"\s*[:\-]?\s*([A-Za-z0-9]+-[A-Za-z0-9]+)",
            re.IGNORECASE,
        ),
        priority=0.98,
        kind=ALPHANUMERIC,
    ),
    CandidatePattern(
        name="alphanumeric_near_keyword",
        regex=re.compile(
            DOCUMENT_KEYWORDS + r".{0,20}?([A-Z]{2,}[A-Z0-9]*-[0-9]+)",
            re.IGNORECASE,
        ),
        priority=0.92,
        kind=ALPHANUMERIC,
    ),
    CandidatePattern(
        name="generic_number_label",
        regex=re.compile(r"(?:מספר|מס'|#|\bno\.?)\s*[:\-]?\s*(\d{4,12})(?!\w)", re.IGNORECASE),
        priority=0.85,
        kind=NUMERIC,
    ),
    CandidatePattern(
        name="alphanumeric_standalone",
        regex=re.compile(r"\b([A-Z]{2,}[A-Z0-9]*-[A-Z0-9]{2,})\b", re.IGNORECASE),
        priority=0.75,
        kind=ALPHANUMERIC,
    ),
    CandidatePattern(
        name="numeric_near_keyword",
        regex=re.compile(DOCUMENT_KEYWORDS + r".{0,50}?(?<!\d)(\d{8,12})(?!\d)", re.IGNORECASE),
        priority=0.7,
        kind=NUMERIC,
    ),
)

# Terms that mark a number as something other than an invoice number
EXCLUDE_KEYWORDS = ("הזמנה", "booking", "order", "המחאה", "check", "תאריך", "date")

# Keywords that make a 9-digit value an invoice number rather than a business ID
NINE_DIGIT_KEYWORDS = ("חשבונית", "invoice", "קבלה", "receipt", "מס", "no", "number")


class InvoiceNumberExtractor(BaseFieldExtractor[str]):
    """
    Extracts the invoice or receipt number.

    Cascade (priority):
        explicit_invoice (1.0), explicit_receipt (1.0),
        alphanumeric_explicit (0.98), alphanumeric_near_keyword (0.92),
        generic_number_label (0.85), alphanumeric_standalone (0.75),
        numeric_near_keyword (0.7)

    Example:
        >>> InvoiceNumberExtractor().extract("Invoice No: JZMYWEKA-0003").value
        'JZMYWEKA-0003'
    """

    field_name = "invoice_number"
    PATTERNS = INVOICE_NUMBER_PATTERNS
    POSITION_ZONE = PositionZone(threshold=0.4, inside=1.0, outside=0.8)

    def _accept(self, match, candidate, text) -> Optional[Tuple[str, float]]:
        value = match.group(candidate.group)

        if candidate.kind == ALPHANUMERIC:
            valid = self._is_valid_alphanumeric(value, match.start(), text)
        else:
            valid = self._is_valid_numeric(value, match.start(), text)
            if valid and candidate.name == "generic_number_label":
                valid = not self._label_is_excluded(match.start(), text)

        if not valid:
            return None
        return value, candidate.priority

    def _is_valid_alphanumeric(self, value: str, position: int, text: str) -> bool:
        if not 5 <= len(value) <= 20:
            return False
        return not self.is_near_keyword(text, position, EXCLUDE_KEYWORDS, 50)

    def _is_valid_numeric(self, value: str, position: int, text: str) -> bool:
        if not 4 <= len(value) <= 12:
            return False

        if len(value) == 8 and self.looks_like_date(value):
            return False

        if len(value) == 9 and not self.is_near_keyword(text, position, NINE_DIGIT_KEYWORDS, 30):
            return False

        return True

    @staticmethod
    def _label_is_excluded(position: int, text: str) -> bool:
        # "Order No: 1234" - the generic label belongs to another number
        line_start = text.rfind('\n', 0, position) + 1
        preceding = text[line_start:position].casefold()[-20:]
        return any(keyword in preceding for keyword in EXCLUDE_KEYWORDS)

    @staticmethod
    def looks_like_date(value: str) -> bool:
        """True for an 8-digit string that reads as a DDMMYYYY date."""
        if len(value) != 8 or not value.isdigit():
            return False

        day, month, year = int(value[:2]), int(value[2:4]), int(value[4:])
        return 1 <= day <= 31 and 1 <= month <= 12 and 2000 <= year <= 2100
