"""
Reference Number Extractor.

Free-form reference numbers that are not the invoice number: order IDs,
booking/confirmation numbers, references (אסמכתא) and transaction IDs.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .base import BaseFieldExtractor, CandidatePattern, PositionZone


class ReferenceType(str, Enum):
    """Kind of reference number."""
    UNKNOWN = "Unknown"
    ORDER_ID = "OrderId"
    BOOKING_ID = "BookingId"
    CONFIRMATION_NUMBER = "ConfirmationNumber"
    TRANSACTION_ID = "TransactionId"


@dataclass(frozen=True)
class ReferenceNumber:
    value: str
    reference_type: ReferenceType = ReferenceType.UNKNOWN


REFERENCE_VALUE = r"\s*[:\-#]?\s*([A-Z0-9\-]{4,20})(?![A-Z0-9\-])"

REFERENCE_NUMBER_PATTERNS: Tuple[CandidatePattern, ...] = (
    CandidatePattern(
        name="order_id",
        regex=re.compile(
            r"(?:\bOrder\s*(?:ID|Number|No\.?)|הזמנה\s*(?:מספר|מס'?))" + REFERENCE_VALUE,
            re.IGNORECASE,
        ),
        priority=0.95,
        kind=ReferenceType.ORDER_ID,
    ),
    CandidatePattern(
        name="booking_id",
        regex=re.compile(
            r"(?:\bBooking\s*(?:ID|Number|No\.?)|\bConfirmation(?:\s*(?:Number|No\.?|Code))?"
            r"|אישור\s*(?:מספר|מס'?))" + REFERENCE_VALUE,
            re.IGNORECASE,
        ),
        priority=0.95,
        kind=ReferenceType.BOOKING_ID,
    ),
    CandidatePattern(
        name="reference",
        regex=re.compile(
            r"(?:\bReference(?:\s*(?:Number|No\.?|ID))?|\bRef\b\.?(?:\s*(?:Number|No\.?))?|אסמכתא)"
            + REFERENCE_VALUE,
            re.IGNORECASE,
        ),
        priority=0.9,
        kind=ReferenceType.CONFIRMATION_NUMBER,
    ),
    CandidatePattern(
        name="transaction_id",
        regex=re.compile(
            r"(?:\bTransaction\s*(?:ID|Number|No\.?)|עסקה\s*(?:מספר|מס'?))" + REFERENCE_VALUE,
            re.IGNORECASE,
        ),
        priority=0.9,
        kind=ReferenceType.TRANSACTION_ID,
    ),
)

HAS_DIGIT = re.compile(r"\d")


class ReferenceNumberExtractor(BaseFieldExtractor[ReferenceNumber]):
    """
    Extracts a labelled reference number and its type.

    The first labelled pattern that matches a 4-20 character value
    containing at least one digit wins.

    Example:
        >>> ref = ReferenceNumberExtractor().extract("Order ID: A1B2C3").value
        >>> ref.value, ref.reference_type.value
        ('A1B2C3', 'OrderId')
    """

    field_name = "reference_number"
    PATTERNS = REFERENCE_NUMBER_PATTERNS
    POSITION_ZONE = PositionZone(threshold=0.5, inside=1.0, outside=0.9)

    def _accept(self, match, candidate, text) -> Optional[Tuple[ReferenceNumber, float]]:
        value = match.group(candidate.group).strip()

        if not 4 <= len(value) <= 20 or not HAS_DIGIT.search(value):
            return None

        return ReferenceNumber(value=value, reference_type=candidate.kind), candidate.priority
