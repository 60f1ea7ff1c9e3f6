"""Tests for Israeli business ID extraction."""

import pytest

from expense_extraction.extractors import BusinessIdExtractor


@pytest.fixture
def extractor():
    return BusinessIdExtractor()


class TestLabelledIds:

    @pytest.mark.parametrize("text, pattern", [
        ("ח.פ. 515512341", "company_number"),
        ('ח"פ: 515512341', "company_number"),
        ("ע.מ. 515512341", "licensed_dealer"),
        ("עוסק מורשה: 515512341", "licensed_dealer"),
        ("ע.פ. 515512341", "exempt_dealer"),
        ("עוסק פטור 515512341", "exempt_dealer"),
    ])
    def test_hebrew_labels(self, extractor, text, pattern):
        result = extractor.extract(text)

        assert result.value == "515512341"
        assert result.pattern_used == pattern
        assert result.confidence == pytest.approx(1.0)

    def test_vat_number(self, extractor):
        result = extractor.extract("VAT No: 515512341")
        assert result.value == "515512341"
        assert result.pattern_used == "vat_number"
        assert result.confidence == pytest.approx(0.98)

    def test_tax_id(self, extractor):
        result = extractor.extract("Tax ID: 515512341")
        assert result.pattern_used == "generic_company_id"
        assert result.confidence == pytest.approx(0.96)

    def test_long_foreign_id_skips_checksum(self, extractor):
        result = extractor.extract("Company ID: 12345678901")
        assert result.value == "12345678901"
        assert result.confidence == pytest.approx(0.96)

    def test_dashes_removed(self, extractor):
        assert extractor.extract("ח.פ. 51-5512341").value == "515512341"


class TestChecksum:

    def test_failed_checksum_lowers_confidence(self, extractor):
        result = extractor.extract("ח.פ. 515512342")

        assert result.value == "515512342"
        assert result.confidence == pytest.approx(0.88)
        assert result.is_success

    def test_standalone_nine_digits(self, extractor, hebrew_tax_invoice):
        result = extractor.extract(hebrew_tax_invoice)

        assert result.value == "123456789"
        assert result.pattern_used == "standalone_nine_digits"
        assert result.confidence == pytest.approx(0.768)


class TestRejection:

    def test_too_short(self, extractor):
        assert extractor.extract("ח.פ. 1234567").value is None

    def test_hebrew_legal_suffix_is_not_a_dealer_label(self, extractor):
        """בע"מ followed by a number must not read as ע"מ."""
        result = extractor.extract('קפה גרג בע"מ 515512341')

        assert result.value == "515512341"
        assert result.pattern_used == "standalone_nine_digits"

    def test_no_id(self, extractor, english_invoice):
        assert extractor.extract(english_invoice).value is None


class TestCascadeOrder:

    def test_labelled_id_beats_earlier_bare_number(self, extractor):
        result = extractor.extract("Receipt 987654321\nח.פ. 515512341")

        assert result.value == "515512341"
        assert result.pattern_used == "company_number"
        assert result.confidence == pytest.approx(0.97)

    def test_sub_threshold_match_is_replaced_by_later_pattern(self):
        """A labelled match below the accept threshold does not stop the cascade."""

        class StrictExtractor(BusinessIdExtractor):
            ACCEPT_THRESHOLD = 0.99

        result = StrictExtractor().extract("ח.פ. 515512342")

        # Nothing reaches 0.99; the last validated candidate is returned
        assert result.value == "515512342"
        assert result.pattern_used == "standalone_nine_digits"
        assert result.confidence == pytest.approx(0.768)
