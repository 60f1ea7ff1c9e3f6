"""
Extraction Result Data Classes.

This module defines the envelope every field extractor returns: the
extracted value, its calibrated confidence, the rule that produced it and
the factors the confidence was computed from.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar('T')

# Confidence below this is treated as "not extracted"
SUCCESS_THRESHOLD = 0.4


@dataclass(frozen=True)
class ConfidenceFactors:
    """
    Inputs to the confidence formula, each in [0, 1].

    Attributes:
        pattern_priority: Intrinsic reliability of the rule that matched
        context_validation: Reserved, left at 1.0 by most extractors
        position_score: Plausibility of the match's location in the document
        cross_field_validation: Agreement with other fields (amounts only)
    """
    pattern_priority: float = 1.0
    context_validation: float = 1.0
    position_score: float = 1.0
    cross_field_validation: float = 1.0

    # Fixed weights of the overall confidence
    PRIORITY_WEIGHT = 0.4
    CONTEXT_WEIGHT = 0.3
    POSITION_WEIGHT = 0.2
    CROSS_FIELD_WEIGHT = 0.1

    def overall(self) -> float:
        """
        Weighted confidence, clamped to [0, 1].

        Returns:
            ``0.4*priority + 0.3*context + 0.2*position + 0.1*cross_field``
        """
        score = (
            self.pattern_priority * self.PRIORITY_WEIGHT +
            self.context_validation * self.CONTEXT_WEIGHT +
            self.position_score * self.POSITION_WEIGHT +
            self.cross_field_validation * self.CROSS_FIELD_WEIGHT
        )
        return min(1.0, max(0.0, score))

    def with_cross_field(self, value: float) -> 'ConfidenceFactors':
        return replace(self, cross_field_validation=value)

    @classmethod
    def uniform(cls, value: float) -> 'ConfidenceFactors':
        """Factors whose overall confidence equals ``value`` exactly."""
        return cls(
            pattern_priority=value,
            context_validation=value,
            position_score=value,
            cross_field_validation=value,
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            'pattern_priority': self.pattern_priority,
            'context_validation': self.context_validation,
            'position_score': self.position_score,
            'cross_field_validation': self.cross_field_validation,
        }


@dataclass(frozen=True)
class ExtractionResult(Generic[T]):
    """
    Outcome of one field extraction attempt.

    A result is immutable; stages that adjust confidence after the fact
    (amount cross-validation) build a new result.

    Attributes:
        value: Extracted value, None on failure
        confidence: Overall confidence in [0, 1]
        pattern_used: Name of the rule that matched, for diagnostics
        factors: Inputs the confidence was computed from

    Example:
        >>> factors = ConfidenceFactors(pattern_priority=1.0, position_score=0.8)
        >>> result = ExtractionResult.from_factors("123456", "explicit_invoice", factors)
        >>> result.confidence
        0.96
        >>> result.is_success
        True
    """
    value: Optional[T] = None
    confidence: float = 0.0
    pattern_used: str = ""
    factors: ConfidenceFactors = field(default_factory=ConfidenceFactors)

    @property
    def is_success(self) -> bool:
        return self.confidence >= SUCCESS_THRESHOLD and self.value is not None

    @classmethod
    def empty(cls) -> 'ExtractionResult[Any]':
        """Zero-confidence result with no value."""
        return cls()

    @classmethod
    def from_factors(
        cls,
        value: T,
        pattern_used: str,
        factors: ConfidenceFactors
    ) -> 'ExtractionResult[T]':
        """Build a result whose confidence is computed from its factors."""
        return cls(
            value=value,
            confidence=round(factors.overall(), 6),
            pattern_used=pattern_used,
            factors=factors,
        )

    def with_factors(self, factors: ConfidenceFactors) -> 'ExtractionResult[T]':
        """Copy of this result with new factors and a recomputed confidence."""
        return ExtractionResult.from_factors(self.value, self.pattern_used, factors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'confidence': self.confidence,
            'pattern_used': self.pattern_used,
            'factors': self.factors.to_dict(),
            'is_success': self.is_success,
        }

    def __repr__(self) -> str:
        return (
            f"ExtractionResult(value={self.value!r}, "
            f"confidence={self.confidence:.2f}, "
            f"pattern={self.pattern_used or '-'})"
        )
