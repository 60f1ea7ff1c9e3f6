"""Tests for ground truth loading, metrics and the evaluator."""

import json
from datetime import date
from decimal import Decimal

import openpyxl
import pytest

from expense_extraction.evaluation import (
    Evaluator,
    GroundTruthLoader,
    MetricsCalculator,
    levenshtein_ratio,
)
from expense_extraction.evaluation.metrics import levenshtein_distance
from expense_extraction.output_handler import ExtractionRecord
from expense_extraction.utils.exceptions import EvaluationError, GroundTruthError

EVALUATED_FIELDS = [
    'document_type',
    'business_name',
    'business_id',
    'invoice_number',
    'transaction_date',
    'amount_after_vat',
]

GROUND_TRUTH = [
    {
        'file_name': 'invoice_01.txt',
        'document_type': 'TaxInvoice',
        'business_name': 'חברת בדיקה בע"מ',
        'business_id': '51-551234-1',
        'invoice_number': '123456789',
        'transaction_date': '01/06/2024',
        'amount_after_vat': '1,170.00',
    },
    {
        'file_name': 'broken.txt',
        'amount_after_vat': '50.00',
    },
]


@pytest.fixture
def ground_truth_file(tmp_path):
    path = tmp_path / "ground_truth.json"
    path.write_text(json.dumps(GROUND_TRUTH, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def evaluator(ground_truth_file):
    return Evaluator(ground_truth_file, fields=EVALUATED_FIELDS)


class TestLevenshtein:

    def test_distance(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "abc") == 0

    def test_ratio(self):
        assert levenshtein_ratio("Acme Ltd", "Acme Ltd") == 1.0
        assert levenshtein_ratio("Acme Ltd", "Acme Ltd.") == pytest.approx(8 / 9)
        assert levenshtein_ratio("", "Acme") == 0.0


class TestCompareValues:

    @pytest.fixture
    def calculator(self):
        return MetricsCalculator()

    def test_amounts_within_tolerance(self, calculator):
        assert calculator.compare_values(Decimal("1170.00"), "1,170.00", "amount_after_vat") == (True, True)
        assert calculator.compare_values(Decimal("117.00"), 117.01, "amount_after_vat") == (True, True)
        assert calculator.compare_values(Decimal("117.00"), "117.50", "amount_after_vat") == (False, False)

    def test_unparseable_amount(self, calculator):
        assert calculator.compare_values(Decimal("117.00"), "n/a", "vat_amount") == (False, False)

    def test_dates(self, calculator):
        assert calculator.compare_values(date(2024, 6, 1), "01/06/2024", "transaction_date") == (True, True)
        assert calculator.compare_values(date(2024, 6, 1), "2024-06-01", "transaction_date") == (True, True)
        assert calculator.compare_values(date(2024, 6, 1), "2024-01-06", "transaction_date") == (False, False)
        assert calculator.compare_values(date(2024, 6, 1), "someday", "transaction_date") == (False, False)

    def test_business_id_digits_only(self, calculator):
        assert calculator.compare_values("515512341", "51-551234-1", "business_id") == (True, True)

    def test_text_normalized(self, calculator):
        assert calculator.compare_values("ACME  Cloud", "acme cloud", "business_name") == (True, True)

    def test_text_partial_match(self, calculator):
        assert calculator.compare_values("Acme Cloud Ltd", "Acme Cloud Ltd.", "business_name") == (False, True)
        assert calculator.compare_values("Acme", "Globex", "business_name") == (False, False)

    def test_empty_values(self, calculator):
        assert calculator.compare_values(None, "x", "business_name") == (False, False)
        assert calculator.compare_values("x", "  ", "business_name") == (False, False)


class TestMetricsCalculator:

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            MetricsCalculator().evaluate([{}], [])

    def test_no_samples(self):
        result = MetricsCalculator().evaluate([], [])
        assert result.total_samples == 0
        assert result.overall_accuracy == 0.0

    def test_field_metrics(self):
        calculator = MetricsCalculator(fields=['invoice_number', 'business_name'])
        predictions = [
            {'invoice_number': '4521', 'business_name': 'Cafe Greg'},
            {'invoice_number': None, 'business_name': 'Acme'},
        ]
        ground_truth = [
            {'invoice_number': '4521', 'business_name': 'Cafe Greg'},
            {'invoice_number': '9999'},
        ]
        confidences = [
            {'invoice_number': 1.0, 'business_name': 0.9},
            {'business_name': 0.5},
        ]

        result = calculator.evaluate(predictions, ground_truth, confidences)
        invoice = result.field_metrics['invoice_number']
        name = result.field_metrics['business_name']

        assert invoice.total_samples == 2
        assert invoice.missing_count == 1
        assert invoice.accuracy == 0.5
        assert invoice.avg_confidence == 1.0
        # No ground truth name for the second sample
        assert name.total_samples == 1
        assert name.accuracy == 1.0
        assert result.overall_accuracy == pytest.approx(0.75)
        assert result.total_samples == 2

    def test_evaluate_single(self):
        calculator = MetricsCalculator(fields=['invoice_number'])
        result = calculator.evaluate_single({'invoice_number': '4521'}, {'invoice_number': '4522'})

        assert result['invoice_number']['exact_match'] is False
        assert result['invoice_number']['partial_match'] is False
        assert result['invoice_number']['extracted'] is True


class TestGroundTruthLoader:

    def test_json_list(self, ground_truth_file):
        loader = GroundTruthLoader(ground_truth_file)

        assert len(loader) == 2
        assert loader.get_by_filename("invoice_01.txt")['invoice_number'] == "123456789"
        assert loader.get_by_filename("/data/ocr/broken.txt")['amount_after_vat'] == "50.00"
        assert loader.get_by_filename("other.txt") is None

    def test_json_records_key(self, tmp_path):
        path = tmp_path / "gt.json"
        path.write_text(json.dumps({'records': [{'source_file': 'a.txt', 'invoice_number': '1'}]}))

        assert GroundTruthLoader(path).get_by_filename("a.txt")['invoice_number'] == "1"

    def test_json_keyed_by_file_name(self, tmp_path):
        path = tmp_path / "gt.json"
        path.write_text(json.dumps({'a.txt': {'invoice_number': '1'}}))

        record = GroundTruthLoader(path).get_by_filename("a.txt")
        assert record == {'invoice_number': '1', 'file_name': 'a.txt'}

    def test_csv(self, tmp_path):
        path = tmp_path / "gt.csv"
        path.write_text("filename,invoice_number\nreceipt_01.txt,4521\n", encoding="utf-8")

        assert GroundTruthLoader(path).get_by_filename("receipt_01.txt")['invoice_number'] == "4521"

    def test_excel(self, tmp_path):
        path = tmp_path / "gt.xlsx"
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        sheet.append(["file_name", "amount_after_vat"])
        sheet.append(["receipt_01.txt", 234.0])
        workbook.save(path)

        assert GroundTruthLoader(path).get_by_filename("receipt_01.txt")['amount_after_vat'] == 234.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(GroundTruthError, match="File not found"):
            GroundTruthLoader(tmp_path / "nope.json")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "gt.yaml"
        path.write_text("a: 1")
        with pytest.raises(GroundTruthError, match="Unsupported format"):
            GroundTruthLoader(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "gt.json"
        path.write_text("{not json")
        with pytest.raises(GroundTruthError):
            GroundTruthLoader(path)

    def test_validate(self, tmp_path):
        path = tmp_path / "gt.json"
        path.write_text(json.dumps([{'file_name': 'a.txt'}, {'invoice_number': '1'}]))

        result = GroundTruthLoader(path).validate(['invoice_number'])
        assert result['valid_records'] == 1
        assert result['invalid_records'] == 1
        assert result['missing_fields'] == {'invoice_number': 1}


class TestEvaluator:

    def test_evaluate(self, evaluator, extraction_records):
        records = extraction_records + [ExtractionRecord(file_name="unknown.txt", error="x")]
        result = evaluator.evaluate(records)

        assert result.total_samples == 2
        assert result.unmatched_files == ["unknown.txt"]

        total = result.field_metrics['amount_after_vat']
        assert total.total_samples == 2
        assert total.correct_count == 1
        assert total.missing_count == 1
        assert total.avg_confidence == 1.0

        assert result.field_metrics['business_id'].accuracy == 1.0
        assert result.field_metrics['transaction_date'].accuracy == 1.0
        assert result.overall_accuracy == pytest.approx(5.5 / 6)

    def test_requires_ground_truth(self, extraction_records):
        with pytest.raises(EvaluationError):
            Evaluator(fields=EVALUATED_FIELDS).evaluate(extraction_records)

    def test_evaluate_single(self, evaluator, extraction_records):
        comparison = evaluator.evaluate_single(extraction_records[0])

        assert comparison['document_type']['exact_match'] is True
        assert comparison['business_name']['confidence'] == 0.92

    def test_text_report(self, evaluator, extraction_records):
        report = evaluator.generate_report(evaluator.evaluate(extraction_records))

        assert "EXTRACTION EVALUATION REPORT" in report
        assert "amount_after_vat:" in report

    def test_json_report_file(self, evaluator, extraction_records, tmp_path):
        path = evaluator.generate_report(
            evaluator.evaluate(extraction_records),
            output_path=tmp_path / "reports" / "eval.json",
            format='json',
        )

        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        assert data['total_samples'] == 2
        assert 'amount_after_vat' in data['field_metrics']

    def test_unsupported_report_format(self, evaluator, extraction_records):
        with pytest.raises(ValueError):
            evaluator.generate_report(evaluator.evaluate(extraction_records), format='html')

    def test_detailed_results(self, evaluator, extraction_records, tmp_path):
        path = evaluator.save_detailed_results(extraction_records, tmp_path / "detailed.json")

        with open(path, encoding="utf-8") as f:
            detailed = json.load(f)

        assert [d['file_name'] for d in detailed] == ["invoice_01.txt", "broken.txt"]
        assert detailed[0]['comparison']['invoice_number']['exact_match'] is True
        assert detailed[1]['extraction'] is None
