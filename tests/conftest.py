"""Test fixtures and utilities."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from config import ConfigurationManager
from expense_extraction.extractors.document_type import DocumentType
from expense_extraction.output_handler import ExtractionRecord
from expense_extraction.parser import ParsedInvoiceData

# Minimal Hebrew tax invoice
SAMPLE_HEBREW_TAX_INVOICE = (
    "חשבונית מס 123456789\n"
    "חברת בדיקה בע\"מ\n"
    "תאריך: 01/06/2024\n"
    "סה\"כ: ₪1170.00"
)

# Hebrew receipt with explicit VAT breakdown
SAMPLE_HEBREW_RECEIPT = """קפה גרג בע"מ
ח.פ. 515512341
קבלה מספר 4521
תאריך: 15/03/2024

קפה הפוך                  18.00
מאפה                      24.00

לפני מע"מ: 200.00
מע"מ 17%: 34.00
סה"כ לתשלום: 234.00
"""

# English SaaS invoice
SAMPLE_ENGLISH_INVOICE = """Acme Cloud Services Ltd
Invoice No: JZMYWEKA-0003

Bill to: Example Corp
Tel Aviv, Israel

Issued: March 15th, 2024
Order ID: ORD-77812

Description: Web development services

Subtotal: 100.00
VAT (17%): 17.00
Total Due: 117.00
"""


@pytest.fixture(autouse=True)
def reset_configuration():
    """Every test starts from config/settings.yaml."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers attached by setup_logger so they never outlive a test."""
    yield
    package_logger = logging.getLogger("expense_extraction")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture
def hebrew_tax_invoice() -> str:
    return SAMPLE_HEBREW_TAX_INVOICE


@pytest.fixture
def hebrew_receipt() -> str:
    return SAMPLE_HEBREW_RECEIPT


@pytest.fixture
def english_invoice() -> str:
    return SAMPLE_ENGLISH_INVOICE


@pytest.fixture
def parsed_invoice() -> ParsedInvoiceData:
    """Hand-built parse result with a typical mix of fields."""
    return ParsedInvoiceData(
        business_name='חברת בדיקה בע"מ',
        transaction_date=date(2024, 6, 1),
        amount_before_vat=Decimal("1000.00"),
        amount_after_vat=Decimal("1170.00"),
        vat_amount=Decimal("170.00"),
        business_id="515512341",
        invoice_number="123456789",
        document_type=DocumentType.TAX_INVOICE,
        business_name_confidence=0.92,
        transaction_date_confidence=0.97,
        amount_before_vat_confidence=0.7,
        amount_after_vat_confidence=1.0,
        vat_amount_confidence=0.7,
        business_id_confidence=1.0,
        invoice_number_confidence=1.0,
        document_type_confidence=1.0,
    )


@pytest.fixture
def extraction_records(parsed_invoice):
    """One parsed record and one that failed to load."""
    return [
        ExtractionRecord(file_name="invoice_01.txt", ocr_text_length=69, data=parsed_invoice),
        ExtractionRecord(file_name="broken.txt", error="File is empty"),
    ]
