"""Tests for monetary amount extraction, derivation and cross-validation."""

from decimal import Decimal

import pytest

from expense_extraction.extractors import AmountExtractor, VAT_RATE
from expense_extraction.extractors.amounts import (
    BeforeVatAmountExtractor,
    TotalAmountExtractor,
    VatAmountExtractor,
    vat_from_total,
)


@pytest.fixture
def extractor():
    return AmountExtractor()


class TestTotalAmount:
    """Tests for the total (after VAT) cascade."""

    @pytest.fixture
    def total_extractor(self):
        return TotalAmountExtractor()

    @pytest.mark.parametrize("text, pattern", [
        ("Total Due: 117.00", "total_explicit_due"),
        ("Amount Due: $117.00", "total_explicit_due"),
        ('סה"כ לתשלום: ₪117.00', "total_hebrew"),
        ("סכום כולל 117.00", "total_hebrew"),
        ("Total incl. VAT: 117.00", "total_including_vat"),
        ("Final Price: 117.00", "total_final_price"),
    ])
    def test_labels(self, total_extractor, text, pattern):
        result = total_extractor.extract(text)
        assert result.value == Decimal("117.00")
        assert result.pattern_used == pattern

    def test_thousands_separator(self, total_extractor):
        assert total_extractor.extract("Grand Total: 1,170.00").value == Decimal("1170.00")

    def test_bottom_of_document_scores_higher(self, total_extractor):
        top = total_extractor.extract("Total Due: 117.00")
        bottom = total_extractor.extract(
            "Thank you for your business, see you again soon!\nTotal Due: 117.00"
        )

        assert top.confidence == pytest.approx(0.96)
        assert bottom.confidence == pytest.approx(1.0)

    def test_implausible_amount_rejected(self, total_extractor):
        assert total_extractor.extract("Grand Total: 2000000.00").value is None

    def test_malformed_amount_rejected(self, total_extractor):
        assert total_extractor.extract("Grand Total: ,,,").value is None

    def test_label_without_amount(self, total_extractor):
        assert total_extractor.extract("Total: X").value is None


class TestVatAmount:

    @pytest.fixture
    def vat_extractor(self):
        return VatAmountExtractor()

    def test_with_percentage(self, vat_extractor):
        result = vat_extractor.extract("VAT (17%): 17.00")
        assert result.value == Decimal("17.00")
        assert result.pattern_used == "vat_with_percentage"

    def test_hebrew(self, vat_extractor):
        result = vat_extractor.extract('מע"מ 17%: 34.00')
        assert result.value == Decimal("34.00")
        assert result.pattern_used == "vat_hebrew"

    def test_hebrew_before_vat_label_is_not_vat(self, vat_extractor):
        assert vat_extractor.extract('לפני מע"מ: 100.00').value is None

    def test_reversed(self, vat_extractor):
        result = vat_extractor.extract("17.00 VAT")
        assert result.value == Decimal("17.00")
        assert result.pattern_used == "vat_english_reversed"

    def test_consistent_with_total(self, vat_extractor):
        result = vat_extractor.extract("VAT: 17.00", total=Decimal("117.00"))
        assert result.confidence == pytest.approx(0.96)

    def test_deviation_from_rate_penalized(self, vat_extractor):
        result = vat_extractor.extract("VAT: 30.00", total=Decimal("117.00"))

        assert result.value == Decimal("30.00")
        assert result.factors.pattern_priority == pytest.approx(0.76)
        assert result.confidence == pytest.approx(0.884)


class TestBeforeVatAmount:

    @pytest.fixture
    def before_vat_extractor(self):
        return BeforeVatAmountExtractor()

    @pytest.mark.parametrize("text, pattern", [
        ("Amount before VAT: 100.00", "before_vat_explicit"),
        ('לפני מע"מ: 100.00', "before_vat_hebrew"),
        ("Subtotal: 100.00", "before_vat_subtotal"),
        ("Net Amount: 100.00", "before_vat_net"),
    ])
    def test_labels(self, before_vat_extractor, text, pattern):
        result = before_vat_extractor.extract(text)
        assert result.value == Decimal("100.00")
        assert result.pattern_used == pattern


class TestFallbackDerivation:
    """Missing amounts are derived from the ones found."""

    def test_vat_and_before_vat_from_total(self, extractor):
        amounts = extractor.extract("Total Due: 117.00")

        assert amounts.total.value == Decimal("117.00")
        assert amounts.vat.value == Decimal("17.00")
        assert amounts.before_vat.value == Decimal("100.00")
        assert amounts.vat.pattern_used == "derived_vat_rate"
        assert amounts.vat.confidence == pytest.approx(0.672)
        assert amounts.before_vat.confidence == pytest.approx(0.672)

    def test_before_vat_from_total_and_vat(self, extractor):
        amounts = extractor.extract("Grand Total: 117.00\nVAT: 30.00")

        assert amounts.before_vat.value == Decimal("87.00")
        assert amounts.before_vat.pattern_used == "derived_total_minus_vat"
        assert amounts.before_vat.confidence == pytest.approx(min(0.96, 0.884) * 0.95)

    def test_generic_currency_total(self, extractor):
        amounts = extractor.extract("Paid ₪45.90 by card")

        assert amounts.total.value == Decimal("45.90")
        assert amounts.total.confidence == pytest.approx(0.84)
        assert amounts.vat.value == Decimal("6.67")
        assert amounts.before_vat.value == Decimal("39.23")
        assert amounts.vat.confidence == pytest.approx(0.588)

    def test_derived_confidence_matches_factors(self, extractor):
        amounts = extractor.extract("Total Due: 117.00")
        assert amounts.vat.factors.overall() == pytest.approx(amounts.vat.confidence)

    def test_no_total_no_derivation(self, extractor):
        amounts = extractor.extract('לפני מע"מ: 100.00')

        assert amounts.before_vat.value == Decimal("100.00")
        assert amounts.total.value is None
        assert amounts.vat.value is None

    def test_vat_from_total(self):
        assert vat_from_total(Decimal("1170.00")) == Decimal("170.00")
        assert VAT_RATE == Decimal("0.17")


class TestCrossValidation:

    def test_consistent_amounts_not_penalized(self, extractor):
        amounts = extractor.extract("Subtotal: 100.00\nVAT: 17.00\nTotal Due: 117.00")

        assert amounts.total.confidence == pytest.approx(0.96)
        assert amounts.vat.confidence == pytest.approx(0.96)
        assert amounts.before_vat.confidence == pytest.approx(0.94)
        assert amounts.total.factors.cross_field_validation == 1.0

    def test_inconsistent_amounts_penalized(self, extractor):
        amounts = extractor.extract("Subtotal: 50.00\nVAT: 30.00\nTotal Due: 100.00")

        assert amounts.total.confidence == pytest.approx(0.94)
        assert amounts.vat.confidence == pytest.approx(0.864)
        assert amounts.before_vat.confidence == pytest.approx(0.92)
        for result in (amounts.total, amounts.vat, amounts.before_vat):
            assert result.factors.cross_field_validation == 0.8


class TestFullDocuments:

    def test_hebrew_receipt(self, extractor, hebrew_receipt):
        amounts = extractor.extract(hebrew_receipt)

        assert amounts.total.value == Decimal("234.00")
        assert amounts.vat.value == Decimal("34.00")
        assert amounts.before_vat.value == Decimal("200.00")
        assert amounts.before_vat.pattern_used == "before_vat_hebrew"

    def test_english_invoice(self, extractor, english_invoice):
        amounts = extractor.extract(english_invoice)

        assert amounts.total.value == Decimal("117.00")
        assert amounts.vat.value == Decimal("17.00")
        assert amounts.before_vat.value == Decimal("100.00")
        assert amounts.total.confidence == pytest.approx(1.0)

    @pytest.mark.parametrize("text", ["", "   ", "Thank you!"])
    def test_nothing_found(self, extractor, text):
        amounts = extractor.extract(text)
        assert amounts.total.value is None
        assert amounts.vat.value is None
        assert amounts.before_vat.value is None
