"""
Invoice Parser Module.

Orchestrates the extraction pipeline for one OCR text:

    raw text -> TextNormalizer -> field extractors -> ParsedInvoiceData

The parser is a pure function of its input: it holds only stateless
extractors and compiled pattern tables, performs no I/O and reads no
configuration. It never raises for any text input; a field that cannot
be extracted is simply left empty with zero confidence.

Author: ML Engineering Team
"""

import re
from typing import Any, Callable, Dict, Optional

from expense_extraction.extractors.amounts import AmountExtractor, MonetaryAmounts
from expense_extraction.extractors.business_id import BusinessIdExtractor
from expense_extraction.extractors.business_name import BusinessNameExtractor
from expense_extraction.extractors.date import DateExtractor
from expense_extraction.extractors.document_type import DocumentTypeExtractor
from expense_extraction.extractors.extraction_result import ExtractionResult
from expense_extraction.extractors.invoice_number import InvoiceNumberExtractor
from expense_extraction.extractors.reference_number import ReferenceNumberExtractor
from expense_extraction.normalization.normalizers import TextNormalizer
from expense_extraction.utils.logger import get_logger
from .parsed_invoice import ParsedInvoiceData

# Initialize module logger
logger = get_logger(__name__)


# =============================================================================
# SERVICE DESCRIPTION HEURISTIC
# =============================================================================

DESCRIPTION_LABEL_PATTERNS = (
    re.compile(r"(?:Description|תיאור)[ \t]*[:\-]?[ \t]*\n?[ \t]*(.+)", re.IGNORECASE),
    re.compile(r"(?:Service|שירות)[ \t]*[:\-]?[ \t]*(.+)", re.IGNORECASE),
)

DESCRIPTION_KEYWORDS = ("שירות", "service", "מוצר", "product", "development")


class InvoiceParser:
    """
    Parses OCR text of an invoice or receipt into ParsedInvoiceData.

    Attributes:
        normalizer: Text normalizer applied once per document
        document_type_extractor, invoice_number_extractor, date_extractor,
        business_name_extractor, business_id_extractor,
        reference_number_extractor, amount_extractor: Field extractors

    Example:
        >>> parser = InvoiceParser()
        >>> data = parser.parse("חשבונית מס 123456789\\nסה\\"כ: ₪1170.00")
        >>> data.document_type.value, data.amount_after_vat
        ('TaxInvoice', Decimal('1170.00'))
    """

    def __init__(self) -> None:
        self.normalizer = TextNormalizer()
        self.document_type_extractor = DocumentTypeExtractor()
        self.invoice_number_extractor = InvoiceNumberExtractor()
        self.date_extractor = DateExtractor()
        self.business_name_extractor = BusinessNameExtractor()
        self.business_id_extractor = BusinessIdExtractor()
        self.reference_number_extractor = ReferenceNumberExtractor()
        self.amount_extractor = AmountExtractor()

    def parse(self, raw_ocr_text: Optional[str]) -> ParsedInvoiceData:
        """
        Extract every field from raw OCR text.

        Args:
            raw_ocr_text: OCR output; None and blank text are accepted.

        Returns:
            ParsedInvoiceData. Only results that pass the success
            threshold are copied; everything else stays empty.
        """
        if raw_ocr_text is None or not raw_ocr_text.strip():
            return ParsedInvoiceData()

        text = self.normalizer.normalize(raw_ocr_text)
        fields: Dict[str, Any] = {}

        document_type = self._run("document_type", self.document_type_extractor.extract, text)
        if document_type.is_success:
            fields['document_type'] = document_type.value
            fields['document_type_confidence'] = document_type.confidence

        for field_name, extractor in (
            ('invoice_number', self.invoice_number_extractor),
            ('transaction_date', self.date_extractor),
            ('business_name', self.business_name_extractor),
            ('business_id', self.business_id_extractor),
        ):
            result = self._run(field_name, extractor.extract, text)
            self._copy(fields, field_name, result)

        reference = self._run("reference_number", self.reference_number_extractor.extract, text)
        if reference.is_success:
            fields['reference_number'] = reference.value.value
            fields['reference_type'] = reference.value.reference_type
            fields['reference_number_confidence'] = reference.confidence

        amounts = self._extract_amounts(text)
        self._copy(fields, 'amount_after_vat', amounts.total)
        self._copy(fields, 'vat_amount', amounts.vat)
        self._copy(fields, 'amount_before_vat', amounts.before_vat)

        fields['service_description'] = self._extract_service_description(text)

        parsed = ParsedInvoiceData(**fields)
        logger.debug(
            f"Parsed invoice: {len(parsed.extracted_fields)} fields, "
            f"overall confidence {parsed.overall_confidence:.2f}"
        )
        return parsed

    @staticmethod
    def _copy(fields: Dict[str, Any], field_name: str, result: ExtractionResult) -> None:
        if result.is_success:
            fields[field_name] = result.value
            fields[f'{field_name}_confidence'] = result.confidence

    @staticmethod
    def _run(field_name: str, extract: Callable[[str], ExtractionResult], text: str) -> ExtractionResult:
        # A failing rule must not cost the other fields
        try:
            return extract(text)
        except Exception as e:
            logger.warning(f"Error extracting {field_name}: {e}")
            return ExtractionResult.empty()

    def _extract_amounts(self, text: str) -> MonetaryAmounts:
        try:
            return self.amount_extractor.extract(text)
        except Exception as e:
            logger.warning(f"Error extracting amounts: {e}")
            return MonetaryAmounts()

    @staticmethod
    def _extract_service_description(text: str) -> Optional[str]:
        """
        Best-effort service description: an explicitly labelled value,
        else the first line of 10-200 characters mentioning a service or
        product. Carries no confidence score.
        """
        for pattern in DESCRIPTION_LABEL_PATTERNS:
            match = pattern.search(text)
            if match:
                description = match.group(1).strip()
                if 3 < len(description) < 200:
                    return description

        for line in text.split('\n'):
            candidate = line.strip()
            if not 10 < len(candidate) < 200:
                continue
            folded = candidate.casefold()
            if any(keyword in folded for keyword in DESCRIPTION_KEYWORDS):
                return candidate

        return None


# Shared parser; InvoiceParser holds no per-call state
_default_parser: Optional[InvoiceParser] = None


def parse_invoice(raw_ocr_text: Optional[str]) -> ParsedInvoiceData:
    """
    Parse OCR text with a shared InvoiceParser.

    Example:
        >>> parse_invoice("Total Due: 117.00").vat_amount
        Decimal('17.00')
    """
    global _default_parser
    if _default_parser is None:
        _default_parser = InvoiceParser()
    return _default_parser.parse(raw_ocr_text)


__all__ = ['InvoiceParser', 'parse_invoice']
