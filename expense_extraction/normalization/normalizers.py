"""
Text and Amount Normalizers Module.

This module provides normalization for:
    - Raw OCR text (Unicode, punctuation, whitespace, known OCR spacing defects)
    - Monetary amount strings (thousands separators, currency markers)

OCR output from Hebrew/English invoices is noisy: smart quotes appear in
place of gershayim, bidi control marks leak into the text and letters of
short acronyms get split apart. Every extractor runs on the output of
``TextNormalizer.normalize`` so the patterns only have to cover the
canonical forms.

Author: ML Engineering Team
"""

import re
import unicodedata
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from expense_extraction.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


# =============================================================================
# CHARACTER TABLES
# =============================================================================

# Quote variants mapped to ASCII
QUOTE_TRANSLATION = str.maketrans({
    '“': '"',   # left double quotation mark
    '”': '"',   # right double quotation mark
    '‘': "'",   # left single quotation mark
    '’': "'",   # right single quotation mark
    '״': '"',   # Hebrew gershayim
    '׳': "'",   # Hebrew geresh
})

# Maqaf becomes a hyphen, bidi marks are dropped
PUNCTUATION_TRANSLATION = str.maketrans({
    '\u05be': '-',   # Hebrew maqaf
    '\u200e': None,  # left-to-right mark
    '\u200f': None,  # right-to-left mark
})

MULTIPLE_SPACES = re.compile(r'[ \t]+')
MULTIPLE_NEWLINES = re.compile(r'\n{3,}')

# Scattered letters of fixed Hebrew compounds
HEBREW_OCR_FIXES: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r'\bמ\s*ע\s*מ\b'), 'מע"מ'),
    (re.compile(r'\bח\s*פ\b'), 'ח.פ.'),
    (re.compile(r'\bע\s*מ\b'), 'ע.מ.'),
    (re.compile(r'\bבע\s*מ\b'), 'בע"מ'),
    (re.compile(r'סה\s*"\s*כ'), 'סה"כ'),
)

# Split English acronyms
ENGLISH_OCR_FIXES: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r'\bV\s*A\s*T\b', re.IGNORECASE), 'VAT'),
    (re.compile(r'\bG\s*S\s*T\b', re.IGNORECASE), 'GST'),
)

# A single pass can expose new NFC compositions once bidi marks are
# removed, so the pass is repeated until the text stops changing.
MAX_NORMALIZATION_PASSES = 5


class TextNormalizer:
    """
    Canonicalizes raw OCR text before field extraction.

    Steps, in fixed order:
        1. Unicode canonical composition (NFC)
        2. Curly and Hebrew quotes to ASCII ``"`` / ``'``
        3. Maqaf to hyphen, LRM/RLM removed
        4. Space/tab runs collapsed, 3+ newlines collapsed to two
        5. OCR spacing repairs (מע"מ, ח.פ., ע.מ., בע"מ, סה"כ, VAT, GST)
        6. Trim

    The normalizer holds no state; ``normalize`` is idempotent.

    Example:
        >>> TextNormalizer().normalize("סה ״ כ:  100")
        'סה"כ: 100'
    """

    def normalize(self, raw_text: Optional[str]) -> str:
        """
        Normalize raw OCR text.

        Args:
            raw_text: OCR output, possibly None or blank.

        Returns:
            Normalized text, or an empty string for blank input.
        """
        if raw_text is None or not raw_text.strip():
            return ""

        text = raw_text
        for _ in range(MAX_NORMALIZATION_PASSES):
            normalized = self._single_pass(text)
            if normalized == text:
                break
            text = normalized

        return text

    def _single_pass(self, text: str) -> str:
        text = unicodedata.normalize('NFC', text)
        text = text.translate(QUOTE_TRANSLATION)
        text = text.translate(PUNCTUATION_TRANSLATION)

        text = MULTIPLE_SPACES.sub(' ', text)
        text = MULTIPLE_NEWLINES.sub('\n\n', text)

        text = self._fix_hebrew_ocr_errors(text)
        text = self._fix_english_ocr_errors(text)

        return text.strip()

    @staticmethod
    def _fix_hebrew_ocr_errors(text: str) -> str:
        for pattern, replacement in HEBREW_OCR_FIXES:
            text = pattern.sub(replacement, text)
        return text

    @staticmethod
    def _fix_english_ocr_errors(text: str) -> str:
        # O->0 and l->I are context dependent and left to the extractors
        for pattern, replacement in ENGLISH_OCR_FIXES:
            text = pattern.sub(replacement, text)
        return text


class AmountNormalizer:
    """
    Parses monetary strings into ``Decimal`` values.

    Thousands separators (commas) and currency markers are stripped and the
    remainder is parsed with invariant (dot-decimal) rules. Malformed input
    yields None instead of raising, so a caller can move on to its next
    candidate.

    Example:
        >>> AmountNormalizer().parse("₪1,170.00")
        Decimal('1170.00')
        >>> AmountNormalizer().parse("12.3.4") is None
        True
    """

    CURRENCY_MARKERS: List[str] = ['₪', '$', '€', 'NIS', 'ILS', 'USD', 'EUR']

    def parse(self, amount_str: Optional[str]) -> Optional[Decimal]:
        """
        Parse an amount string.

        Args:
            amount_str: Raw amount text (e.g. "1,170.00" or "$ 99.90").

        Returns:
            Parsed Decimal or None when the text is not a number.
        """
        if amount_str is None or not amount_str.strip():
            return None

        cleaned = amount_str.replace(',', '')
        for marker in self.CURRENCY_MARKERS:
            cleaned = cleaned.replace(marker, '')
        cleaned = cleaned.strip()

        if not cleaned:
            return None

        try:
            value = Decimal(cleaned)
        except InvalidOperation:
            logger.debug(f"Could not parse amount: {amount_str!r}")
            return None

        if not value.is_finite():
            return None
        return value


# Module-level instances; both classes are stateless
_text_normalizer = TextNormalizer()
_amount_normalizer = AmountNormalizer()


def normalize_text(raw_text: Optional[str]) -> str:
    """Convenience wrapper around ``TextNormalizer.normalize``."""
    return _text_normalizer.normalize(raw_text)


def parse_amount(amount_str: Optional[str]) -> Optional[Decimal]:
    """Convenience wrapper around ``AmountNormalizer.parse``."""
    return _amount_normalizer.parse(amount_str)
