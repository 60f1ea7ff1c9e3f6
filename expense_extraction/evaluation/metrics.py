"""
Metrics Calculator Module.

This module provides metrics calculation for evaluating expense
extraction accuracy against ground truth.

Metrics Include:
    - Field-level accuracy (exact match)
    - Partial match scores (Levenshtein ratio on text fields)
    - Missing field rates
    - Overall extraction rate
    - Confidence analysis

Comparison rules:
    - Amounts match when they differ by at most ``amount_tolerance``
    - Dates are parsed with dateutil (day-first) and compared as dates
    - Business IDs compare digits only
    - Text fields compare case-folded with collapsed whitespace

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from dateutil import parser as date_parser

from expense_extraction.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class FieldMetrics:
    """
    Metrics for a single field across all samples.

    Attributes:
        field_name: Name of the field
        total_samples: Samples whose ground truth has this field
        extracted_count: Samples where the field was extracted
        correct_count: Number of exact matches
        partial_match_count: Exact plus partial matches
        missing_count: Samples where the field was not extracted
        accuracy: correct_count / total_samples
        extraction_rate: extracted_count / total_samples
        partial_accuracy: partial_match_count / total_samples
        avg_confidence: Mean confidence of the extracted values
    """
    field_name: str
    total_samples: int = 0
    extracted_count: int = 0
    correct_count: int = 0
    partial_match_count: int = 0
    missing_count: int = 0
    accuracy: float = 0.0
    extraction_rate: float = 0.0
    partial_accuracy: float = 0.0
    avg_confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'accuracy': self.accuracy,
            'extraction_rate': self.extraction_rate,
            'partial_accuracy': self.partial_accuracy,
            'total_samples': self.total_samples,
            'extracted_count': self.extracted_count,
            'correct_count': self.correct_count,
            'missing_count': self.missing_count,
            'avg_confidence': self.avg_confidence,
        }


@dataclass
class EvaluationResult:
    """
    Complete evaluation results.

    Attributes:
        field_metrics: Dictionary of field name to FieldMetrics
        overall_accuracy: Mean accuracy over evaluated fields
        overall_extraction_rate: Mean extraction rate over evaluated fields
        avg_confidence: Mean confidence over evaluated fields
        total_samples: Number of documents evaluated
        unmatched_files: Files that had no ground truth record
        timestamp: Evaluation timestamp
    """
    field_metrics: Dict[str, FieldMetrics] = field(default_factory=dict)
    overall_accuracy: float = 0.0
    overall_extraction_rate: float = 0.0
    avg_confidence: float = 0.0
    total_samples: int = 0
    unmatched_files: List[str] = field(default_factory=list)
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overall_accuracy': self.overall_accuracy,
            'overall_extraction_rate': self.overall_extraction_rate,
            'avg_confidence': self.avg_confidence,
            'total_samples': self.total_samples,
            'unmatched_files': list(self.unmatched_files),
            'timestamp': self.timestamp,
            'field_metrics': {name: m.to_dict() for name, m in self.field_metrics.items()},
        }

    def print_report(self) -> str:
        """Generate a formatted report string."""
        lines = [
            "=" * 60,
            "EXTRACTION EVALUATION REPORT",
            "=" * 60,
            f"Timestamp: {self.timestamp}",
            f"Total Samples: {self.total_samples}",
        ]

        if self.unmatched_files:
            lines.append(f"Without Ground Truth: {len(self.unmatched_files)}")

        lines.extend([
            "-" * 60,
            "",
            "OVERALL METRICS:",
            f"  Accuracy:        {self.overall_accuracy * 100:.1f}%",
            f"  Extraction Rate: {self.overall_extraction_rate * 100:.1f}%",
            f"  Avg Confidence:  {self.avg_confidence:.2f}",
            "",
            "-" * 60,
            "FIELD-LEVEL METRICS:",
            "",
        ])

        for name, m in self.field_metrics.items():
            lines.extend([
                f"  {name}:",
                f"    Accuracy:        {m.accuracy * 100:.1f}%",
                f"    Extraction Rate: {m.extraction_rate * 100:.1f}%",
                f"    Partial Match:   {m.partial_accuracy * 100:.1f}%",
                f"    Extracted/Total: {m.extracted_count}/{m.total_samples}",
                f"    Avg Confidence:  {m.avg_confidence:.2f}",
                ""
            ])

        lines.append("=" * 60)
        return "\n".join(lines)


# =============================================================================
# STRING SIMILARITY
# =============================================================================

def levenshtein_distance(s1: str, s2: str) -> int:
    """Edit distance with unit costs, two-row dynamic programming."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1, 1):
        current = [i]
        for j, c2 in enumerate(s2, 1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (c1 != c2)
            ))
        previous = current

    return previous[-1]


def levenshtein_ratio(s1: str, s2: str) -> float:
    """
    Similarity between two strings in [0, 1].

    Example:
        >>> levenshtein_ratio("Acme Ltd", "Acme Ltd.")
        0.8888888888888888
    """
    if not s1 or not s2:
        return 0.0
    if s1 == s2:
        return 1.0
    return 1.0 - levenshtein_distance(s1, s2) / max(len(s1), len(s2))


# =============================================================================
# METRICS CALCULATOR
# =============================================================================

class MetricsCalculator:
    """
    Compares predictions against ground truth field by field.

    Predictions and ground truth are plain dictionaries keyed by field
    name; values may be strings, numbers, Decimals or dates.

    Attributes:
        fields: Fields to evaluate
        partial_match_threshold: Levenshtein ratio counted as partial match
        amount_tolerance: Allowed absolute difference between amounts

    Example:
        >>> calculator = MetricsCalculator(fields=['amount_after_vat'])
        >>> calculator.compare_values("1,170.00", "1170", "amount_after_vat")
        (True, True)
    """

    DEFAULT_FIELDS = [
        'document_type',
        'business_name',
        'business_id',
        'invoice_number',
        'transaction_date',
        'amount_before_vat',
        'vat_amount',
        'amount_after_vat',
        'reference_number',
    ]

    AMOUNT_FIELDS = {'amount_before_vat', 'vat_amount', 'amount_after_vat'}
    DATE_FIELDS = {'transaction_date'}
    DIGIT_FIELDS = {'business_id'}

    def __init__(
        self,
        fields: Optional[List[str]] = None,
        partial_match_threshold: float = 0.8,
        amount_tolerance: float = 0.01
    ) -> None:
        self.fields = list(fields or self.DEFAULT_FIELDS)
        self.partial_match_threshold = partial_match_threshold
        self.amount_tolerance = Decimal(str(amount_tolerance))

        logger.debug(f"MetricsCalculator initialized (fields: {len(self.fields)})")

    def evaluate(
        self,
        predictions: List[Dict[str, Any]],
        ground_truth: List[Dict[str, Any]],
        confidence_scores: Optional[List[Dict[str, float]]] = None
    ) -> EvaluationResult:
        """
        Evaluate predictions against ground truth.

        A field only counts for a sample when the ground truth has a
        value for it.

        Args:
            predictions: List of prediction dictionaries.
            ground_truth: List of ground truth dictionaries, same order.
            confidence_scores: Optional per-sample confidence dictionaries.

        Returns:
            EvaluationResult with computed metrics.

        Raises:
            ValueError: If predictions and ground truth lengths don't match.
        """
        if len(predictions) != len(ground_truth):
            raise ValueError(
                f"Predictions ({len(predictions)}) and ground truth "
                f"({len(ground_truth)}) must have same length"
            )

        if not predictions:
            return EvaluationResult()

        field_metrics = {name: FieldMetrics(field_name=name) for name in self.fields}
        confidences: Dict[str, List[float]] = {name: [] for name in self.fields}

        for idx, (pred, gt) in enumerate(zip(predictions, ground_truth)):
            conf = confidence_scores[idx] if confidence_scores else {}

            for field_name in self.fields:
                gt_value = gt.get(field_name)
                if _is_empty(gt_value):
                    continue

                metrics = field_metrics[field_name]
                metrics.total_samples += 1

                pred_value = pred.get(field_name)
                if _is_empty(pred_value):
                    metrics.missing_count += 1
                    continue

                metrics.extracted_count += 1
                if conf.get(field_name, 0.0) > 0:
                    confidences[field_name].append(conf[field_name])

                is_exact, is_partial = self.compare_values(pred_value, gt_value, field_name)
                if is_exact:
                    metrics.correct_count += 1
                if is_partial:
                    metrics.partial_match_count += 1

        for name, metrics in field_metrics.items():
            if metrics.total_samples > 0:
                metrics.extraction_rate = metrics.extracted_count / metrics.total_samples
                metrics.accuracy = metrics.correct_count / metrics.total_samples
                metrics.partial_accuracy = metrics.partial_match_count / metrics.total_samples
            if confidences[name]:
                metrics.avg_confidence = sum(confidences[name]) / len(confidences[name])

        # Fields absent from every ground truth record do not dilute the averages
        evaluated = [m for m in field_metrics.values() if m.total_samples > 0]
        count = len(evaluated)

        return EvaluationResult(
            field_metrics=field_metrics,
            overall_accuracy=sum(m.accuracy for m in evaluated) / count if count else 0.0,
            overall_extraction_rate=sum(m.extraction_rate for m in evaluated) / count if count else 0.0,
            avg_confidence=sum(m.avg_confidence for m in evaluated) / count if count else 0.0,
            total_samples=len(predictions)
        )

    def evaluate_single(
        self,
        prediction: Dict[str, Any],
        ground_truth: Dict[str, Any],
        confidence_scores: Optional[Dict[str, float]] = None
    ) -> Dict[str, Any]:
        """
        Per-field comparison for one document.

        Returns:
            {field: {predicted, ground_truth, exact_match, partial_match,
            confidence, extracted}}
        """
        results = {}

        for field_name in self.fields:
            pred_value = prediction.get(field_name)
            gt_value = ground_truth.get(field_name)
            is_exact, is_partial = self.compare_values(pred_value, gt_value, field_name)

            results[field_name] = {
                'predicted': pred_value,
                'ground_truth': gt_value,
                'exact_match': is_exact,
                'partial_match': is_partial,
                'confidence': (confidence_scores or {}).get(field_name, 0.0),
                'extracted': not _is_empty(pred_value),
            }

        return results

    def compare_values(self, predicted: Any, ground_truth: Any, field_name: str) -> Tuple[bool, bool]:
        """
        Compare one predicted value with its ground truth.

        Returns:
            Tuple of (is_exact_match, is_partial_match). An exact match is
            also a partial match. Amounts and dates have no partial match.
        """
        if _is_empty(predicted) or _is_empty(ground_truth):
            return (False, False)

        if field_name in self.AMOUNT_FIELDS:
            pred_amount = _to_decimal(predicted)
            gt_amount = _to_decimal(ground_truth)
            if pred_amount is None or gt_amount is None:
                return (False, False)
            is_exact = abs(pred_amount - gt_amount) <= self.amount_tolerance
            return (is_exact, is_exact)

        if field_name in self.DATE_FIELDS:
            pred_date = _to_date(predicted)
            is_exact = pred_date is not None and pred_date == _to_date(ground_truth)
            return (is_exact, is_exact)

        pred_norm = self._normalize_text(predicted, field_name)
        gt_norm = self._normalize_text(ground_truth, field_name)

        if pred_norm == gt_norm:
            return (True, True)

        return (False, levenshtein_ratio(pred_norm, gt_norm) >= self.partial_match_threshold)

    def _normalize_text(self, value: Any, field_name: str) -> str:
        value = str(value)
        if field_name in self.DIGIT_FIELDS:
            return re.sub(r'\D', '', value)
        return ' '.join(value.casefold().split())


YEAR_FIRST = re.compile(r'\d{4}[-/.]')


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, Decimal):
        return value
    cleaned = re.sub(r'[^\d.\-]', '', str(value))
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def _to_date(value: Any):
    if hasattr(value, 'year') and hasattr(value, 'month'):
        return value.date() if isinstance(value, datetime) else value
    text = str(value).strip()
    try:
        # Year-first strings (ISO) must not be read day-first
        return date_parser.parse(text, dayfirst=not YEAR_FIRST.match(text)).date()
    except (ValueError, OverflowError):
        return None
