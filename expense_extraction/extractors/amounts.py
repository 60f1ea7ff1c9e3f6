"""
Monetary Amount Extractor.

Extracts three interdependent amounts:
    - Total (after VAT)
    - VAT
    - Amount before VAT

Each has its own pattern cascade. The total is extracted first and is
used to sanity-check the VAT candidate against the Israeli rate. Missing
amounts are then derived from the ones found (fallback), and finally the
three are cross-checked: ``total == before_vat + vat`` within 1%.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from expense_extraction.normalization.normalizers import parse_amount
from expense_extraction.utils.logger import get_logger
from expense_extraction.validation.validators import AmountValidator
from .base import BaseFieldExtractor, CandidatePattern, PositionZone
from .extraction_result import ConfidenceFactors, ExtractionResult

# Initialize module logger
logger = get_logger(__name__)

# Israeli statutory VAT rate
VAT_RATE = Decimal('0.17')
CENTS = Decimal('0.01')

# VAT further than this from the rate-implied VAT is suspicious
VAT_DEVIATION_TOLERANCE = Decimal('0.05')
VAT_DEVIATION_MULTIPLIER = 0.8

# total vs before_vat + vat
CROSS_FIELD_TOLERANCE = Decimal('0.01')
CROSS_FIELD_PENALTY = 0.8

# Confidence multipliers for derived amounts
DERIVED_BEFORE_VAT_MULTIPLIER = 0.95
DERIVED_FROM_RATE_MULTIPLIER = 0.7

# =============================================================================
# PATTERN BUILDING BLOCKS
# =============================================================================

CURRENCY = r"(?:₪|NIS|\$|USD|ILS|EUR|€)?"
SEPARATOR = r"\s*[:\-]?\s*"
AMOUNT = r"([\d,]+\.?\d{0,2})"
# A VAT amount is never followed by a percent sign
VAT_AMOUNT = AMOUNT + r"(?![\d%])"
PERCENTAGE = r"\(?(\d+(?:\.\d+)?)\s*%\)?"
VAT_HEBREW = r'מע["\']מ'


def _labelled(label: str, amount: str = AMOUNT) -> str:
    return label + SEPARATOR + CURRENCY + r"\s*" + amount


TOTAL_PATTERNS: Tuple[CandidatePattern, ...] = (
    CandidatePattern(
        name="total_explicit_due",
        regex=re.compile(
            _labelled(r"(?:Total\s*Due|Total\s*Amount|Grand\s*Total|Amount\s*Due)"),
            re.IGNORECASE,
        ),
        priority=1.0,
    ),
    CandidatePattern(
        name="total_hebrew",
        regex=re.compile(_labelled(r'(?:סה["\']כ\s*לתשלום|סה["\']כ|סכום\s*כולל)'), re.IGNORECASE),
        priority=1.0,
    ),
    CandidatePattern(
        name="total_including_vat",
        regex=re.compile(
            _labelled(r"(?:Total\s*(?:including|incl\.?)\s*VAT|כולל\s*" + VAT_HEBREW + r")"),
            re.IGNORECASE,
        ),
        priority=1.0,
    ),
    CandidatePattern(
        name="total_final_price",
        regex=re.compile(_labelled(r"(?:Final\s*Price|Total\s*Price|Price)"), re.IGNORECASE),
        priority=0.95,
    ),
    CandidatePattern(
        name="total_generic_currency",
        regex=re.compile(r"[$₪€]\s*([\d,]+\.\d{2})", re.IGNORECASE),
        priority=0.7,
    ),
)

VAT_PATTERNS: Tuple[CandidatePattern, ...] = (
    CandidatePattern(
        name="vat_with_percentage",
        regex=re.compile(_labelled(r"\bVAT\s*" + PERCENTAGE, VAT_AMOUNT), re.IGNORECASE),
        priority=1.0,
        group=2,
    ),
    CandidatePattern(
        name="vat_hebrew",
        regex=re.compile(
            _labelled(r"(?<!כולל\s)(?<!לפני\s)" + VAT_HEBREW + r"\s*(?:" + PERCENTAGE + r")?", VAT_AMOUNT),
            re.IGNORECASE,
        ),
        priority=1.0,
        group=2,
    ),
    CandidatePattern(
        name="vat_generic_tax",
        regex=re.compile(
            _labelled(
                r"(?<!before\s)(?<!excl\s)(?<!excl\.\s)(?<!excluding\s)"
                r"(?<!incl\s)(?<!incl\.\s)(?<!including\s)"
                r"\b(?:VAT|Sales\s*Tax|Tax|GST)",
                VAT_AMOUNT,
            ),
            re.IGNORECASE,
        ),
        priority=0.95,
    ),
    CandidatePattern(
        name="vat_hebrew_reversed",
        regex=re.compile(r"(?<![\w.,])" + AMOUNT + r"[ \t]*" + CURRENCY + r"[ \t]*" + VAT_HEBREW, re.IGNORECASE),
        priority=0.9,
    ),
    CandidatePattern(
        name="vat_english_reversed",
        regex=re.compile(r"(?<![\w.,])" + AMOUNT + r"[ \t]*" + CURRENCY + r"[ \t]*VAT\b", re.IGNORECASE),
        priority=0.9,
    ),
)

BEFORE_VAT_PATTERNS: Tuple[CandidatePattern, ...] = (
    CandidatePattern(
        name="before_vat_explicit",
        regex=re.compile(_labelled(r"(?:Amount\s*)?(?:Before|excl\.?|excluding)\s*VAT"), re.IGNORECASE),
        priority=1.0,
    ),
    CandidatePattern(
        name="before_vat_hebrew",
        regex=re.compile(_labelled(r"(?:סכום\s*)?לפני\s*" + VAT_HEBREW), re.IGNORECASE),
        priority=1.0,
    ),
    CandidatePattern(
        name="before_vat_subtotal",
        regex=re.compile(_labelled(r"(?:Sub\s*-?\s*Total|סכום\s*ביניים)"), re.IGNORECASE),
        priority=0.9,
    ),
    CandidatePattern(
        name="before_vat_net",
        regex=re.compile(_labelled(r"(?:\bNet\s*Amount|\bNet\b|נטו)"), re.IGNORECASE),
        priority=0.9,
    ),
)


class _AmountCascade(BaseFieldExtractor[Decimal]):
    """Shared validation for the three amount cascades."""

    amount_validator = AmountValidator()

    def _accept(self, match, candidate, text) -> Optional[Tuple[Decimal, float]]:
        amount = parse_amount(match.group(candidate.group))
        if not self.amount_validator.is_plausible(amount):
            return None
        return amount, candidate.priority


class TotalAmountExtractor(_AmountCascade):
    """Total after VAT; rewards matches in the bottom 30% of the document."""

    field_name = "amount_after_vat"
    PATTERNS = TOTAL_PATTERNS
    POSITION_ZONE = PositionZone(threshold=0.7, inside=1.0, outside=0.8, prefer_top=False)


class VatAmountExtractor(_AmountCascade):
    """
    VAT amount.

    When the total is known, a VAT deviating more than 5% from
    ``total * 0.17 / 1.17`` has its priority multiplied by 0.8.
    """

    field_name = "vat_amount"
    PATTERNS = VAT_PATTERNS

    def extract(self, normalized_text: str, total: Optional[Decimal] = None) -> ExtractionResult[Decimal]:
        result = super().extract(normalized_text)

        if result.value is None or total is None or total <= 0:
            return result

        expected = vat_from_total(total, quantize=False)
        deviation = abs(result.value - expected) / expected
        if deviation <= VAT_DEVIATION_TOLERANCE:
            return result

        logger.debug(
            f"VAT {result.value} deviates {deviation:.1%} from expected {expected:.2f}"
        )
        factors = replace(
            result.factors,
            pattern_priority=result.factors.pattern_priority * VAT_DEVIATION_MULTIPLIER,
        )
        return result.with_factors(factors)


class BeforeVatAmountExtractor(_AmountCascade):
    """Amount before VAT (subtotal / net)."""

    field_name = "amount_before_vat"
    PATTERNS = BEFORE_VAT_PATTERNS


def vat_from_total(total: Decimal, quantize: bool = True) -> Decimal:
    """VAT contained in a VAT-inclusive total at the Israeli rate."""
    vat = total * VAT_RATE / (1 + VAT_RATE)
    if quantize:
        return vat.quantize(CENTS, rounding=ROUND_HALF_UP)
    return vat


@dataclass(frozen=True)
class MonetaryAmounts:
    """Total, VAT and before-VAT results of one document."""
    total: ExtractionResult[Decimal] = field(default_factory=ExtractionResult.empty)
    vat: ExtractionResult[Decimal] = field(default_factory=ExtractionResult.empty)
    before_vat: ExtractionResult[Decimal] = field(default_factory=ExtractionResult.empty)


class AmountExtractor:
    """
    Extracts and reconciles the document's monetary amounts.

    Stages:
        1. total, VAT (checked against the total) and before-VAT cascades
        2. fallback derivation of missing amounts
        3. cross-field consistency check

    Example:
        >>> amounts = AmountExtractor().extract("Total Due: 117.00")
        >>> amounts.total.value, amounts.vat.value, amounts.before_vat.value
        (Decimal('117.00'), Decimal('17.00'), Decimal('100.00'))
    """

    field_name = "amounts"

    def __init__(self) -> None:
        self.total_extractor = TotalAmountExtractor()
        self.vat_extractor = VatAmountExtractor()
        self.before_vat_extractor = BeforeVatAmountExtractor()
        self.amount_validator = AmountValidator()

    def extract(self, normalized_text: str) -> MonetaryAmounts:
        """
        Extract total, VAT and before-VAT amounts.

        Args:
            normalized_text: Output of ``TextNormalizer.normalize``.

        Returns:
            MonetaryAmounts; amounts that could not be found or derived
            are empty results.
        """
        if not normalized_text or not normalized_text.strip():
            return MonetaryAmounts()

        total = self.total_extractor.extract(normalized_text)
        vat = self.vat_extractor.extract(normalized_text, total=total.value)
        before_vat = self.before_vat_extractor.extract(normalized_text)

        amounts = MonetaryAmounts(total=total, vat=vat, before_vat=before_vat)
        amounts = self._apply_fallback(amounts)
        return self._cross_validate(amounts)

    def _apply_fallback(self, amounts: MonetaryAmounts) -> MonetaryAmounts:
        total, vat, before_vat = amounts.total, amounts.vat, amounts.before_vat

        if total.is_success and vat.is_success and not before_vat.is_success:
            derived = (total.value - vat.value).quantize(CENTS, rounding=ROUND_HALF_UP)
            if self.amount_validator.is_plausible(derived):
                confidence = min(total.confidence, vat.confidence) * DERIVED_BEFORE_VAT_MULTIPLIER
                before_vat = self._derived(derived, "derived_total_minus_vat", confidence)
                logger.debug(f"Before-VAT derived from total - VAT: {derived}")

        if total.is_success and not vat.is_success:
            derived_vat = vat_from_total(total.value)
            confidence = total.confidence * DERIVED_FROM_RATE_MULTIPLIER
            vat = self._derived(derived_vat, "derived_vat_rate", confidence)
            before_vat = self._derived(total.value - derived_vat, "derived_total_minus_vat", confidence)
            logger.debug(f"VAT derived from total at {VAT_RATE:.0%}: {derived_vat}")

        return MonetaryAmounts(total=total, vat=vat, before_vat=before_vat)

    def _cross_validate(self, amounts: MonetaryAmounts) -> MonetaryAmounts:
        total, vat, before_vat = amounts.total, amounts.vat, amounts.before_vat

        if not (total.is_success and vat.is_success and before_vat.is_success):
            return amounts

        calculated = before_vat.value + vat.value
        deviation = abs(total.value - calculated) / total.value
        if deviation <= CROSS_FIELD_TOLERANCE:
            return amounts

        logger.debug(
            f"Amounts inconsistent: total {total.value} vs "
            f"{before_vat.value} + {vat.value} ({deviation:.1%})"
        )
        return MonetaryAmounts(
            total=self._penalize(total),
            vat=self._penalize(vat),
            before_vat=self._penalize(before_vat),
        )

    @staticmethod
    def _penalize(result: ExtractionResult[Decimal]) -> ExtractionResult[Decimal]:
        return result.with_factors(result.factors.with_cross_field(CROSS_FIELD_PENALTY))

    @staticmethod
    def _derived(value: Decimal, pattern_used: str, confidence: float) -> ExtractionResult[Decimal]:
        # Uniform factors keep confidence == factors.overall()
        return ExtractionResult.from_factors(value, pattern_used, ConfidenceFactors.uniform(confidence))
