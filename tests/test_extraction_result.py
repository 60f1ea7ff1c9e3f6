"""Tests for the extraction result envelope and the confidence model."""

import pytest

from expense_extraction.extractors import ConfidenceFactors, ExtractionResult


class TestConfidenceFactors:
    """Tests for the weighted confidence formula."""

    def test_default_factors_give_full_confidence(self):
        assert ConfidenceFactors().overall() == pytest.approx(1.0)

    def test_weights(self):
        """0.4 priority + 0.3 context + 0.2 position + 0.1 cross-field."""
        factors = ConfidenceFactors(
            pattern_priority=0.5,
            context_validation=1.0,
            position_score=0.8,
            cross_field_validation=0.8,
        )
        assert factors.overall() == pytest.approx(0.2 + 0.3 + 0.16 + 0.08)

    def test_clamped_to_unit_interval(self):
        assert ConfidenceFactors(pattern_priority=2.0).overall() == 1.0
        assert ConfidenceFactors(
            pattern_priority=-1.0,
            context_validation=-1.0,
            position_score=-1.0,
            cross_field_validation=-1.0,
        ).overall() == 0.0

    def test_uniform_reproduces_value(self):
        assert ConfidenceFactors.uniform(0.7).overall() == pytest.approx(0.7)

    def test_with_cross_field_returns_copy(self):
        factors = ConfidenceFactors(pattern_priority=0.9)
        penalized = factors.with_cross_field(0.8)

        assert penalized.cross_field_validation == 0.8
        assert penalized.pattern_priority == 0.9
        assert factors.cross_field_validation == 1.0


class TestExtractionResult:
    """Tests for ExtractionResult."""

    def test_empty(self):
        result = ExtractionResult.empty()
        assert result.value is None
        assert result.confidence == 0.0
        assert not result.is_success

    def test_from_factors_computes_confidence(self):
        factors = ConfidenceFactors(pattern_priority=1.0, position_score=0.8)
        result = ExtractionResult.from_factors("123456", "explicit_invoice", factors)

        assert result.value == "123456"
        assert result.pattern_used == "explicit_invoice"
        assert result.confidence == pytest.approx(0.96)
        assert result.factors is factors

    def test_success_threshold(self):
        """Success needs a value and confidence of at least 0.4."""
        assert ExtractionResult.from_factors("x", "p", ConfidenceFactors.uniform(0.4)).is_success
        assert not ExtractionResult.from_factors("x", "p", ConfidenceFactors.uniform(0.39)).is_success
        assert not ExtractionResult(value=None, confidence=1.0).is_success

    def test_with_factors_recomputes_confidence(self):
        result = ExtractionResult.from_factors("x", "p", ConfidenceFactors())
        penalized = result.with_factors(result.factors.with_cross_field(0.8))

        assert penalized.confidence == pytest.approx(0.98)
        assert penalized.value == "x"
        assert penalized.pattern_used == "p"
        assert result.confidence == pytest.approx(1.0)

    def test_immutable(self):
        result = ExtractionResult.empty()
        with pytest.raises(AttributeError):
            result.confidence = 1.0

    def test_to_dict(self):
        result = ExtractionResult.from_factors("4521", "explicit_receipt", ConfidenceFactors())
        data = result.to_dict()

        assert data['value'] == "4521"
        assert data['pattern_used'] == "explicit_receipt"
        assert data['is_success'] is True
        assert data['factors']['pattern_priority'] == 1.0
