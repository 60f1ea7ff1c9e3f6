"""
Base Field Extractor.

Every field extractor is an ordered table of candidate patterns
interpreted by the loop in ``BaseFieldExtractor.extract``. Patterns are
tried highest priority first; the first one that matches and passes the
extractor's field-specific validation (``_accept``) wins. Priorities are
data in the tables, so adding a locale or a rule never touches the loop.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from typing import Any, Generic, Iterable, Optional, Tuple, TypeVar

from expense_extraction.utils.logger import get_logger
from .extraction_result import ConfidenceFactors, ExtractionResult

# Initialize module logger
logger = get_logger(__name__)

T = TypeVar('T')

# Position score used when an extractor has no preferred zone
NEUTRAL_POSITION_SCORE = 0.9


@dataclass(frozen=True)
class CandidatePattern:
    """
    One row of an extractor's cascade.

    Attributes:
        name: Rule identifier reported as ``pattern_used``
        regex: Compiled matcher
        priority: Base ``pattern_priority`` in [0, 1]
        group: Capture group holding the value
        kind: Extractor-specific tag (value family, reference type, ...)
    """
    name: str
    regex: re.Pattern
    priority: float
    group: int = 1
    kind: Any = None


@dataclass(frozen=True)
class PositionZone:
    """
    Preferred location of a field within the document.

    ``position`` is the match offset divided by the text length. With
    ``prefer_top`` the zone is ``position < threshold``, otherwise
    ``position > threshold``.
    """
    threshold: float
    inside: float
    outside: float
    prefer_top: bool = True

    def score(self, position: float) -> float:
        if self.prefer_top:
            in_zone = position < self.threshold
        else:
            in_zone = position > self.threshold
        return self.inside if in_zone else self.outside


class BaseFieldExtractor(Generic[T]):
    """
    Interpreter for a cascade of candidate patterns.

    Subclasses declare:
        field_name: Identifier used in diagnostics
        PATTERNS: Ordered tuple of CandidatePattern
        POSITION_ZONE: Preferred zone, or None for a neutral 0.9
        ACCEPT_THRESHOLD: Minimum confidence that stops the cascade

    and implement ``_accept`` to turn a match into ``(value, priority)``.
    Extractors hold no mutable state and may be shared between threads.
    """

    field_name: str = ""
    PATTERNS: Tuple[CandidatePattern, ...] = ()
    POSITION_ZONE: Optional[PositionZone] = None
    ACCEPT_THRESHOLD: float = 0.0

    def extract(self, normalized_text: str) -> ExtractionResult[T]:
        """
        Run the cascade over normalized text.

        Args:
            normalized_text: Output of ``TextNormalizer.normalize``.

        Returns:
            The first candidate whose confidence reaches ACCEPT_THRESHOLD.
            When none does, the last validated candidate; when nothing
            validates, an empty zero-confidence result.
        """
        if not normalized_text or not normalized_text.strip():
            return ExtractionResult.empty()

        fallback: Optional[ExtractionResult[T]] = None

        for candidate in self.PATTERNS:
            match = candidate.regex.search(normalized_text)
            if match is None:
                continue

            accepted = self._accept(match, candidate, normalized_text)
            if accepted is None:
                continue

            value, priority = accepted
            factors = ConfidenceFactors(
                pattern_priority=priority,
                position_score=self.position_confidence(match.start(), normalized_text),
            )
            result = ExtractionResult.from_factors(value, candidate.name, factors)

            if result.confidence >= self.ACCEPT_THRESHOLD:
                logger.debug(
                    f"{self.field_name}: {candidate.name} -> {value!r} "
                    f"({result.confidence:.2f})"
                )
                return result
            fallback = result

        if fallback is not None:
            return fallback
        return ExtractionResult.empty()

    def _accept(
        self,
        match: re.Match,
        candidate: CandidatePattern,
        text: str
    ) -> Optional[Tuple[T, float]]:
        """
        Validate a match.

        Returns:
            ``(value, pattern_priority)`` or None to try the next pattern.
        """
        raise NotImplementedError

    # =========================================================================
    # SHARED HELPERS
    # =========================================================================

    def position_confidence(self, offset: int, text: str) -> float:
        """Score a character offset against this field's preferred zone."""
        if not text or self.POSITION_ZONE is None:
            return NEUTRAL_POSITION_SCORE
        return self.POSITION_ZONE.score(offset / len(text))

    @staticmethod
    def is_near_keyword(
        text: str,
        position: int,
        keywords: Iterable[str],
        max_distance: int = 100
    ) -> bool:
        """
        Check whether any keyword occurs within ``max_distance`` characters
        of ``position`` (case-insensitive).
        """
        start = max(0, position - max_distance)
        end = min(len(text), position + max_distance)
        if end <= start:
            return False

        window = text[start:end].casefold()
        return any(keyword.casefold() in window for keyword in keywords)

    @staticmethod
    def get_context_lines(
        text: str,
        position: int,
        lines_before: int = 2,
        lines_after: int = 2
    ) -> str:
        """
        Return the line containing ``position`` plus its neighbours.

        Example:
            >>> BaseFieldExtractor.get_context_lines("a\\nb\\nc\\nd", 4, 1, 0)
            'b\\nc'
        """
        lines = text.split('\n')
        current = text.count('\n', 0, max(0, min(position, len(text))))

        first = max(0, current - lines_before)
        last = min(len(lines) - 1, current + lines_after)
        return '\n'.join(lines[first:last + 1])
