"""
Transaction Date Extractor.

Six-rule cascade over numeric and month-name date forms. Numeric dates
are ambiguous between DD/MM and MM/DD; a part greater than 12 must be the
day, otherwise the Israeli day-first convention applies.

Author: ML Engineering Team
"""

import re
from datetime import date
from typing import Dict, Optional, Tuple

from expense_extraction.validation.validators import DateValidator
from .base import BaseFieldExtractor, CandidatePattern, PositionZone

# Value families, used to pick the parser for a match
LABELLED = "labelled"
MONTH_FIRST = "month_first"
DAY_FIRST_MONTH_NAME = "day_month_name"
DAY_FIRST = "day_first"
ISO = "iso"
COMPACT = "compact"

MONTH_NAMES = (
    r"(January|February|March|April|May|June|July|August|September|October|November|December"
    r"|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sept|Sep|Oct|Nov|Dec)"
)

ORDINAL_SUFFIX = r"(?:st|nd|rd|th)?"

MONTHS: Dict[str, int] = {
    'january': 1, 'jan': 1,
    'february': 2, 'feb': 2,
    'march': 3, 'mar': 3,
    'april': 4, 'apr': 4,
    'may': 5,
    'june': 6, 'jun': 6,
    'july': 7, 'jul': 7,
    'august': 8, 'aug': 8,
    'september': 9, 'sep': 9, 'sept': 9,
    'october': 10, 'oct': 10,
    'november': 11, 'nov': 11,
    'december': 12, 'dec': 12,
}

DATE_PATTERNS: Tuple[CandidatePattern, ...] = (
    CandidatePattern(
        name="explicit_label",
        regex=re.compile(
            r"(?:תאריך|date)\s*[:\-]?\s*(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{2,4})(?!\d)",
            re.IGNORECASE,
        ),
        priority=1.0,
        kind=LABELLED,
    ),
    CandidatePattern(
        name="month_name_first",
        regex=re.compile(
            r"\b" + MONTH_NAMES + r"\.?\s+(\d{1,2})" + ORDINAL_SUFFIX + r"\s*,?\s*(\d{4})\b",
            re.IGNORECASE,
        ),
        priority=0.98,
        kind=MONTH_FIRST,
    ),
    CandidatePattern(
        name="day_month_name",
        regex=re.compile(
            r"\b(\d{1,2})" + ORDINAL_SUFFIX + r"\s+" + MONTH_NAMES + r"\.?,?\s+(\d{4})\b",
            re.IGNORECASE,
        ),
        priority=0.98,
        kind=DAY_FIRST_MONTH_NAME,
    ),
    CandidatePattern(
        name="israeli_format",
        regex=re.compile(r"\b(\d{1,2})[/.](\d{1,2})[/.](\d{4})\b"),
        priority=0.9,
        kind=DAY_FIRST,
    ),
    CandidatePattern(
        name="iso_format",
        regex=re.compile(r"\b(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})\b"),
        priority=1.0,
        kind=ISO,
    ),
    CandidatePattern(
        name="compact_format",
        regex=re.compile(r"\b(\d{2})(\d{2})(\d{4})\b"),
        priority=0.8,
        kind=COMPACT,
    ),
)


class DateExtractor(BaseFieldExtractor[date]):
    """
    Extracts the transaction date.

    Cascade (priority):
        explicit_label (1.0), month_name_first (0.98), day_month_name (0.98),
        israeli_format (0.9), iso_format (1.0), compact_format (0.8)

    Dates outside [2000-01-01, today + 1 year] are rejected and the cascade
    moves on to the next rule.

    Example:
        >>> DateExtractor().extract("תאריך: 01/06/2024").value
        datetime.date(2024, 6, 1)
    """

    field_name = "transaction_date"
    PATTERNS = DATE_PATTERNS
    POSITION_ZONE = PositionZone(threshold=0.4, inside=1.0, outside=0.85)

    def __init__(self, today: Optional[date] = None) -> None:
        """
        Args:
            today: Reference date for the plausibility window; defaults to
                the current date at extraction time.
        """
        self.date_validator = DateValidator(today=today)

    def _accept(self, match, candidate, text) -> Optional[Tuple[date, float]]:
        if candidate.kind == MONTH_FIRST:
            parsed = self.build_date(match.group(3), MONTHS.get(match.group(1).casefold()), match.group(2))
        elif candidate.kind == DAY_FIRST_MONTH_NAME:
            parsed = self.build_date(match.group(3), MONTHS.get(match.group(2).casefold()), match.group(1))
        elif candidate.kind == ISO:
            parsed = self.build_date(match.group(1), match.group(2), match.group(3))
        else:
            parsed = self.parse_numeric(match.group(1), match.group(2), match.group(3))

        if parsed is None or not self.date_validator.is_plausible_invoice_date(parsed):
            return None
        return parsed, candidate.priority

    @classmethod
    def parse_numeric(cls, first: str, second: str, year: str) -> Optional[date]:
        """
        Resolve a day/month/year triple written day-first or month-first.

        Args:
            first: First numeric part.
            second: Second numeric part.
            year: Year, two or four digits.

        Returns:
            The date, or None if the parts do not form a calendar date.

        Example:
            >>> DateExtractor.parse_numeric("03", "15", "2024")
            datetime.date(2024, 3, 15)
        """
        first_value, second_value = int(first), int(second)

        if first_value > 12 >= second_value:
            day, month = first_value, second_value
        elif second_value > 12 >= first_value:
            day, month = second_value, first_value
        else:
            day, month = first_value, second_value

        return cls.build_date(year, month, day)

    @staticmethod
    def build_date(year, month, day) -> Optional[date]:
        """Build a date from string or int parts; two-digit years are 20xx."""
        if month is None:
            return None

        year_value = int(year)
        if year_value < 100:
            year_value += 2000

        try:
            return date(year_value, int(month), int(day))
        except ValueError:
            return None
