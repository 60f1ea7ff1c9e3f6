"""
Field Validators Module.

This module provides stateless validation for:
    - Israeli business identifiers (ח.פ. / ע.מ. / ע.פ.) with checksum
    - Invoice dates (plausible range)
    - Monetary amounts (plausible range)

Author: ML Engineering Team
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

NON_DIGITS = re.compile(r'\D')


class BusinessIdValidator:
    """
    Normalization and checksum validation for Israeli business IDs.

    Israeli company and dealer numbers are 9 digits (older ones 8) and carry
    a check digit computed with a Luhn-like weighted sum: digit *i*
    (0-indexed) is multiplied by ``(i % 2) + 1``, products above 9 have 9
    subtracted, and the total must be divisible by 10.

    Example:
        >>> BusinessIdValidator.normalize_id("51-551234-5")
        '515512345'
        >>> BusinessIdValidator.validate_israeli_id("000000018")
        True
    """

    ID_LENGTH = 9
    LEGACY_ID_LENGTH = 8

    @staticmethod
    def normalize_id(value: Optional[str]) -> str:
        """Strip every non-digit character. Blank input gives ''."""
        if value is None or not value.strip():
            return ""
        return NON_DIGITS.sub('', value)

    @classmethod
    def validate_israeli_id(cls, value: Optional[str]) -> bool:
        """
        Validate an Israeli business ID checksum.

        Args:
            value: Raw or normalized identifier.

        Returns:
            True only for 8 or 9 digit identifiers with a valid check digit.
        """
        digits = cls.normalize_id(value)

        if len(digits) not in (cls.ID_LENGTH, cls.LEGACY_ID_LENGTH):
            return False

        digits = digits.zfill(cls.ID_LENGTH)

        total = 0
        for index, char in enumerate(digits):
            product = int(char) * ((index % 2) + 1)
            total += product - 9 if product > 9 else product

        return total % 10 == 0


class DateValidator:
    """
    Validates extracted invoice dates.

    A transaction date is plausible when it lies between 2000-01-01 and one
    year from today (invoices may be post-dated).

    Example:
        >>> DateValidator().is_plausible_invoice_date(date(2024, 6, 1))
        True
        >>> DateValidator().validate(date(1999, 12, 31))
        (False, 'Date 1999-12-31 is before 2000-01-01')
    """

    MIN_DATE = date(2000, 1, 1)
    MAX_FUTURE = relativedelta(years=1)

    def __init__(self, today: Optional[date] = None) -> None:
        """
        Args:
            today: Reference date for the upper bound. Defaults to the
                current date at validation time.
        """
        self._today = today

    @property
    def max_date(self) -> date:
        today = self._today or date.today()
        return today + self.MAX_FUTURE

    def validate(self, value: Union[date, datetime]) -> Tuple[bool, str]:
        """
        Validate a date with detailed feedback.

        Returns:
            Tuple of (is_valid, message).
        """
        if isinstance(value, datetime):
            value = value.date()

        if value < self.MIN_DATE:
            return False, f"Date {value.isoformat()} is before {self.MIN_DATE.isoformat()}"

        max_date = self.max_date
        if value > max_date:
            return False, f"Date {value.isoformat()} is after {max_date.isoformat()}"

        return True, "Valid date"

    def is_plausible_invoice_date(self, value: Union[date, datetime]) -> bool:
        valid, _ = self.validate(value)
        return valid


class AmountValidator:
    """
    Validates monetary amounts.

    Amounts must be strictly positive and below one million; anything else
    is treated as an OCR artifact (phone numbers, IDs glued to a label).
    """

    MIN_EXCLUSIVE = Decimal('0')
    MAX_EXCLUSIVE = Decimal('1000000')

    def validate(self, amount: Optional[Decimal]) -> Tuple[bool, str]:
        if amount is None:
            return False, "Amount is empty"
        if amount <= self.MIN_EXCLUSIVE:
            return False, f"Amount {amount} is not positive"
        if amount >= self.MAX_EXCLUSIVE:
            return False, f"Amount {amount} exceeds {self.MAX_EXCLUSIVE}"
        return True, "Valid amount"

    def is_plausible(self, amount: Optional[Decimal]) -> bool:
        valid, _ = self.validate(amount)
        return valid
