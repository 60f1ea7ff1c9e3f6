"""Tests for reference number extraction."""

import pytest

from expense_extraction.extractors import ReferenceNumberExtractor, ReferenceType


@pytest.fixture
def extractor():
    return ReferenceNumberExtractor()


class TestReferenceNumberExtractor:

    @pytest.mark.parametrize("text, value, reference_type", [
        ("Order ID: ORD-77812", "ORD-77812", ReferenceType.ORDER_ID),
        ("הזמנה מספר 55123", "55123", ReferenceType.ORDER_ID),
        ("Booking Number: HX99812", "HX99812", ReferenceType.BOOKING_ID),
        ("Confirmation Code: 8K2M9Q", "8K2M9Q", ReferenceType.BOOKING_ID),
        ("אסמכתא: 88812345", "88812345", ReferenceType.CONFIRMATION_NUMBER),
        ("Ref. No: 7781-22", "7781-22", ReferenceType.CONFIRMATION_NUMBER),
        ("Transaction ID: TXN-5521", "TXN-5521", ReferenceType.TRANSACTION_ID),
    ])
    def test_labelled_references(self, extractor, text, value, reference_type):
        result = extractor.extract(text)

        assert result.value.value == value
        assert result.value.reference_type is reference_type

    def test_confidence(self, extractor):
        assert extractor.extract("Order ID: A1B2C3").confidence == pytest.approx(0.98)

    def test_english_invoice(self, extractor, english_invoice):
        result = extractor.extract(english_invoice)
        assert result.value.value == "ORD-77812"
        assert result.pattern_used == "order_id"

    def test_value_needs_a_digit(self, extractor):
        assert extractor.extract("Reference: ABCDEF").value is None

    def test_value_too_short(self, extractor):
        assert extractor.extract("Order ID: A12").value is None

    def test_unlabelled_number_ignored(self, extractor, hebrew_tax_invoice):
        assert extractor.extract(hebrew_tax_invoice).value is None
