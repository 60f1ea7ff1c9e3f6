"""
Main Evaluator Module.

This module provides the unified Evaluator class that matches extraction
records to ground truth by file name, computes metrics and writes
reports.

Author: ML Engineering Team
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config import get_config
from expense_extraction.extractors.document_type import DocumentType
from expense_extraction.output_handler.extraction_record import ExtractionRecord
from expense_extraction.utils.exceptions import EvaluationError, ReportExportError
from expense_extraction.utils.helpers import ensure_directory
from expense_extraction.utils.logger import get_logger
from .ground_truth import GroundTruthLoader
from .metrics import EvaluationResult, MetricsCalculator

# Initialize module logger
logger = get_logger(__name__)


class Evaluator:
    """
    Main evaluator for the expense extraction engine.

    Attributes:
        metrics_calculator: MetricsCalculator instance
        ground_truth: GroundTruthLoader instance, None until loaded

    Example:
        >>> evaluator = Evaluator("ground_truth.json")
        >>> result = evaluator.evaluate(records)
        >>> print(result.print_report())
    """

    def __init__(
        self,
        ground_truth_path: Optional[Union[str, Path]] = None,
        fields: Optional[List[str]] = None,
        partial_match_threshold: Optional[float] = None,
        amount_tolerance: Optional[float] = None
    ) -> None:
        """
        Initialize the evaluator.

        Arguments left as None fall back to the ``evaluation`` config section.

        Args:
            ground_truth_path: Path to ground truth file.
            fields: Fields to evaluate.
            partial_match_threshold: Threshold for partial match scoring.
            amount_tolerance: Allowed absolute difference between amounts.
        """
        if partial_match_threshold is None:
            partial_match_threshold = get_config("evaluation.partial_match_threshold", 0.8)
        if amount_tolerance is None:
            amount_tolerance = get_config("evaluation.amount_tolerance", 0.01)

        self.metrics_calculator = MetricsCalculator(
            fields=fields or get_config("evaluation.fields"),
            partial_match_threshold=partial_match_threshold,
            amount_tolerance=amount_tolerance
        )

        self.ground_truth: Optional[GroundTruthLoader] = None
        if ground_truth_path:
            self.load_ground_truth(ground_truth_path)

        logger.debug("Evaluator initialized")

    def load_ground_truth(self, path: Union[str, Path]) -> None:
        """
        Load ground truth data from file.

        Raises:
            GroundTruthError: If the file cannot be loaded.
        """
        self.ground_truth = GroundTruthLoader(path)
        validation = self.ground_truth.validate(self.metrics_calculator.fields)

        if validation['invalid_records'] > 0:
            logger.warning(
                f"Ground truth has {validation['invalid_records']} records without a file name"
            )

    def evaluate(self, records: List[ExtractionRecord]) -> EvaluationResult:
        """
        Evaluate extraction records against the loaded ground truth.

        Records without a ground truth entry are skipped and listed in
        ``unmatched_files``. Records that failed to load count as having
        extracted nothing.

        Raises:
            EvaluationError: If no ground truth has been loaded.
        """
        ground_truth = self._require_ground_truth()

        predictions = []
        confidence_scores = []
        gt_data = []
        unmatched = []

        for record in records:
            gt_record = ground_truth.get_by_filename(record.file_name)
            if gt_record is None:
                logger.warning(f"No ground truth for: {record.file_name}")
                unmatched.append(record.file_name)
                continue

            predictions.append(prediction_from_record(record))
            confidence_scores.append(record.data.confidence_scores if record.data else {})
            gt_data.append(gt_record)

        result = self.metrics_calculator.evaluate(
            predictions=predictions,
            ground_truth=gt_data,
            confidence_scores=confidence_scores
        )
        result.unmatched_files = unmatched

        logger.info(
            f"Evaluation complete: {result.overall_accuracy * 100:.1f}% accuracy "
            f"on {result.total_samples} samples"
        )
        return result

    def evaluate_single(
        self,
        record: ExtractionRecord,
        ground_truth: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Per-field comparison for one record.

        Args:
            record: Extraction record.
            ground_truth: Ground truth for this record. If None, it is
                looked up in the loaded ground truth by file name.
        """
        if ground_truth is None:
            ground_truth = self._require_ground_truth().get_by_filename(record.file_name) or {}

        return self.metrics_calculator.evaluate_single(
            prediction=prediction_from_record(record),
            ground_truth=ground_truth,
            confidence_scores=record.data.confidence_scores if record.data else {}
        )

    def generate_report(
        self,
        evaluation_result: EvaluationResult,
        output_path: Optional[Union[str, Path]] = None,
        format: str = 'txt'
    ) -> str:
        """
        Generate an evaluation report.

        Args:
            evaluation_result: Evaluation result to report.
            output_path: Path for report file. If None, returns string.
            format: Report format ('txt' or 'json').

        Returns:
            Report string or path to saved file.

        Raises:
            ValueError: If the format is not supported.
            ReportExportError: If the report file cannot be written.
        """
        if format == 'txt':
            report = evaluation_result.print_report()
        elif format == 'json':
            report = json.dumps(evaluation_result.to_dict(), indent=2, ensure_ascii=False)
        else:
            raise ValueError(f"Unsupported format: {format}")

        if output_path is None:
            return report

        try:
            ensure_directory(Path(output_path).parent)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(report)
        except OSError as e:
            raise ReportExportError(str(output_path), str(e))

        logger.info(f"Report saved to: {output_path}")
        return str(output_path)

    def save_detailed_results(
        self,
        records: List[ExtractionRecord],
        output_path: Union[str, Path]
    ) -> str:
        """
        Save per-document comparisons as JSON.

        Raises:
            EvaluationError: If no ground truth has been loaded.
            ReportExportError: If the file cannot be written.
        """
        ground_truth = self._require_ground_truth()

        detailed = []
        for record in records:
            gt = ground_truth.get_by_filename(record.file_name) or {}
            detailed.append({
                'file_name': record.file_name,
                'extraction': record.data.to_dict() if record.data else None,
                'ground_truth': gt,
                'comparison': self.evaluate_single(record, gt),
            })

        try:
            ensure_directory(Path(output_path).parent)
            with open(output_path, 'w', encoding='utf-8') as f:
                json.dump(detailed, f, indent=2, ensure_ascii=False, default=str)
        except OSError as e:
            raise ReportExportError(str(output_path), str(e))

        logger.info(f"Detailed results saved to: {output_path}")
        return str(output_path)

    def _require_ground_truth(self) -> GroundTruthLoader:
        if self.ground_truth is None:
            raise EvaluationError(
                "No ground truth available. Load ground truth before evaluating."
            )
        return self.ground_truth


def prediction_from_record(record: ExtractionRecord) -> Dict[str, Any]:
    """
    Field values of a record for comparison; empty for failed records.
    """
    if record.data is None:
        return {}

    prediction = dict(record.data.fields)
    document_type = prediction.get('document_type')
    if isinstance(document_type, DocumentType):
        prediction['document_type'] = document_type.value
    return prediction
