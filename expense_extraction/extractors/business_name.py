"""
Business Name Extractor.

Four-stage cascade:
    1. explicit label ("שם העסק", "Business Name", "Company Name")
    2. English line ending in a legal suffix (Ltd, Inc, LLC, PBC, L.L.C.)
    3. inline legal suffix, Hebrew בע"מ included
    4. heuristic scan of the first 20 non-empty lines

Author: ML Engineering Team
"""

import re
from typing import Optional, Tuple

from .base import BaseFieldExtractor, CandidatePattern, PositionZone
from .extraction_result import ConfidenceFactors, ExtractionResult

LEGAL_SUFFIX = r'(?:בע"מ|Ltd\.?|Inc\.?|LLC|PBC|L\.L\.C\.)(?!\w)'

BUSINESS_NAME_PATTERNS: Tuple[CandidatePattern, ...] = (
    CandidatePattern(
        name="explicit_label",
        regex=re.compile(
            r"(?:שם\s*העסק|business\s*name|company\s*name)[ \t]*[:\-]?[ \t]*\n?[ \t]*([^\n]{3,80})",
            re.IGNORECASE,
        ),
        priority=1.0,
    ),
    CandidatePattern(
        name="legal_suffix_line",
        regex=re.compile(
            r"^([A-Za-z][A-Za-z \t&,.\-]+(?:Ltd\.?|Inc\.?|LLC|PBC|L\.L\.C\.))[ \t]*$",
            re.IGNORECASE | re.MULTILINE,
        ),
        priority=0.96,
    ),
    CandidatePattern(
        name="legal_suffix_inline",
        regex=re.compile(r"[א-ת \t\w&,.]+" + LEGAL_SUFFIX, re.IGNORECASE),
        priority=0.95,
        group=0,
    ),
)

# Lines containing these are headers, totals or contact details
EXCLUDE_KEYWORDS = (
    "חשבונית", "invoice", "receipt", "קבלה", "total", 'סה"כ',
    "vat", 'מע"מ', "date", "תאריך", "amount", "סכום",
    "http://", "https://", "@", "payment", "subtotal", "description",
    "quantity", "price", "item", "service",
)

NUMERIC_OR_DATE_LINE = re.compile(r"^\d+[\d/.\-\s]*$")
DIGITS_ONLY = re.compile(r"^\d+$")

HEURISTIC_LINE_LIMIT = 20
HEURISTIC_PRIORITY = 0.7
# Lines after this 1-based index are penalized
TOP_LINES = 5
LOWER_LINE_MULTIPLIER = 0.85


class BusinessNameExtractor(BaseFieldExtractor[str]):
    """
    Extracts the issuing business name.

    Names are 3-80 characters, not mostly digits, and not a URL or email.
    Expected in the top 20% of the document.

    Example:
        >>> BusinessNameExtractor().extract("Acme Widgets Ltd\\nInvoice 1234").value
        'Acme Widgets Ltd'
    """

    field_name = "business_name"
    PATTERNS = BUSINESS_NAME_PATTERNS
    POSITION_ZONE = PositionZone(threshold=0.2, inside=1.0, outside=0.7)

    def extract(self, normalized_text: str) -> ExtractionResult[str]:
        result = super().extract(normalized_text)
        if result.value is not None or not normalized_text:
            return result
        return self._extract_from_leading_lines(normalized_text)

    def _accept(self, match, candidate, text) -> Optional[Tuple[str, float]]:
        name = match.group(candidate.group).strip()
        if not self.is_valid_business_name(name):
            return None
        return name, candidate.priority

    def _extract_from_leading_lines(self, text: str) -> ExtractionResult[str]:
        lines = [line for line in text.split('\n') if line.strip()]

        for line_index, line in enumerate(lines[:HEURISTIC_LINE_LIMIT], start=1):
            candidate = line.strip()

            if len(candidate) < 5:
                continue
            if self._contains_excluded_keyword(candidate):
                continue
            if NUMERIC_OR_DATE_LINE.match(candidate):
                continue
            if "http" in candidate or "www." in candidate or "@" in candidate:
                continue
            if not self.is_valid_business_name(candidate):
                continue

            multiplier = 1.0 if line_index <= TOP_LINES else LOWER_LINE_MULTIPLIER
            factors = ConfidenceFactors(
                pattern_priority=HEURISTIC_PRIORITY * multiplier,
                position_score=multiplier,
            )
            return ExtractionResult.from_factors(candidate, "leading_line_heuristic", factors)

        return ExtractionResult.empty()

    @staticmethod
    def _contains_excluded_keyword(line: str) -> bool:
        folded = line.casefold()
        return any(keyword in folded for keyword in EXCLUDE_KEYWORDS)

    @staticmethod
    def is_valid_business_name(name: str) -> bool:
        """Length 3-80, not mostly digits, not a URL or email."""
        if not name or not name.strip():
            return False

        if not 3 <= len(name) <= 80:
            return False

        if DIGITS_ONLY.match(name):
            return False

        digit_count = sum(1 for char in name if char.isdigit())
        if digit_count > len(name) * 0.5:
            return False

        if any(marker in name for marker in ("http://", "https://", "www.", "@")):
            return False

        return True
