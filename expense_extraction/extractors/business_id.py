"""
Business ID Extractor.

Israeli business identifiers: company number (ח.פ.), licensed dealer
(ע.מ. / עוסק מורשה), exempt dealer (ע.פ. / עוסק פטור), VAT number,
generic company/tax ID, and finally a bare 9-digit token.

Author: ML Engineering Team
"""

import re
from typing import Optional, Tuple

from expense_extraction.validation.validators import BusinessIdValidator
from .base import BaseFieldExtractor, CandidatePattern, PositionZone

BUSINESS_ID_PATTERNS: Tuple[CandidatePattern, ...] = (
    CandidatePattern(
        name="company_number",
        regex=re.compile(r'(?:ח\.\s*פ\.?|ח"פ|חפ)\s*[:\-]?\s*([\d\-]{8,10})', re.IGNORECASE),
        priority=1.0,
    ),
    CandidatePattern(
        name="licensed_dealer",
        regex=re.compile(r'(?:ע\.\s*מ\.?|עוסק\s*מורשה|(?<!ב)ע"מ)\s*[:\-]?\s*([\d\-]{8,10})', re.IGNORECASE),
        priority=1.0,
    ),
    CandidatePattern(
        name="exempt_dealer",
        regex=re.compile(r'(?:ע\.\s*פ\.?|עוסק\s*פטור)\s*[:\-]?\s*([\d\-]{8,10})', re.IGNORECASE),
        priority=1.0,
    ),
    CandidatePattern(
        name="vat_number",
        regex=re.compile(
            r'(?:VAT\s*(?:No|Number|ID)|מע["\']מ\s*(?:מספר|מס))\.?\s*[:\-]?\s*([\d\-]{8,12})',
            re.IGNORECASE,
        ),
        priority=0.95,
    ),
    CandidatePattern(
        name="generic_company_id",
        regex=re.compile(
            r'(?:Company\s*ID|Tax\s*ID|Business\s*ID|Company\s*No)\.?\s*[:\-]?\s*([\d\-]{8,12})',
            re.IGNORECASE,
        ),
        priority=0.9,
    ),
    CandidatePattern(
        name="standalone_nine_digits",
        regex=re.compile(r'\b(\d{9})\b'),
        priority=0.6,
    ),
)

# Confidence multiplier for 8/9 digit IDs whose check digit fails
CHECKSUM_FAILURE_MULTIPLIER = 0.7


class BusinessIdExtractor(BaseFieldExtractor[str]):
    """
    Extracts the issuer's business ID as a digit string.

    Accepted IDs have 8-12 digits after normalization. 8 and 9 digit IDs
    are checksum-validated; a failing checksum lowers the priority by
    ``CHECKSUM_FAILURE_MULTIPLIER`` instead of rejecting the candidate.

    The cascade stops at the first candidate scoring at least 0.6. A
    candidate scoring lower is remembered and the cascade keeps going, so
    a later lower-priority match can replace it.

    Example:
        >>> BusinessIdExtractor().extract('ח.פ. 515512345').value
        '515512345'
    """

    field_name = "business_id"
    PATTERNS = BUSINESS_ID_PATTERNS
    POSITION_ZONE = PositionZone(threshold=0.4, inside=1.0, outside=0.85)
    ACCEPT_THRESHOLD = 0.6

    def _accept(self, match, candidate, text) -> Optional[Tuple[str, float]]:
        business_id = BusinessIdValidator.normalize_id(match.group(candidate.group))

        if not 8 <= len(business_id) <= 12:
            return None

        priority = candidate.priority
        if len(business_id) in (8, 9) and not BusinessIdValidator.validate_israeli_id(business_id):
            priority *= CHECKSUM_FAILURE_MULTIPLIER

        return business_id, priority
