"""
Parsed Invoice Data Class.

The merged, immutable output of one ``InvoiceParser.parse`` call: every
extracted field with its confidence, plus serialization helpers for the
JSON and Excel reports.

Author: ML Engineering Team
"""

import json
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from expense_extraction.extractors.document_type import DocumentType
from expense_extraction.extractors.reference_number import ReferenceType

# Fields averaged into overall_confidence
OVERALL_CONFIDENCE_FIELDS = (
    'business_name',
    'transaction_date',
    'amount_after_vat',
    'invoice_number',
)

# Fields that carry a confidence score
SCORED_FIELDS = (
    'business_name',
    'transaction_date',
    'amount_before_vat',
    'amount_after_vat',
    'vat_amount',
    'business_id',
    'invoice_number',
    'document_type',
    'reference_number',
)


@dataclass(frozen=True)
class ParsedInvoiceData:
    """
    Structured fields extracted from one OCR text.

    Attributes:
        business_name: Issuing business
        transaction_date: Date of the transaction
        amount_before_vat: Net amount
        amount_after_vat: Gross total
        vat_amount: VAT amount
        business_id: Israeli business ID (digits only)
        invoice_number: Invoice or receipt number
        service_description: Best-effort description, no confidence
        document_type: Tax invoice / invoice / receipt
        reference_number: Order, booking, reference or transaction number
        reference_type: Kind of reference_number
        *_confidence: Confidence of the matching field, 0.0 when absent

    Example:
        >>> data = ParsedInvoiceData(invoice_number="1234", invoice_number_confidence=0.96)
        >>> data.overall_confidence
        0.96
    """
    # Core fields
    business_name: Optional[str] = None
    transaction_date: Optional[date] = None
    amount_before_vat: Optional[Decimal] = None
    amount_after_vat: Optional[Decimal] = None
    vat_amount: Optional[Decimal] = None
    business_id: Optional[str] = None
    invoice_number: Optional[str] = None
    service_description: Optional[str] = None

    # Classification
    document_type: DocumentType = DocumentType.UNKNOWN
    reference_number: Optional[str] = None
    reference_type: ReferenceType = ReferenceType.UNKNOWN

    # Per-field confidence (0.0 to 1.0)
    business_name_confidence: float = 0.0
    transaction_date_confidence: float = 0.0
    amount_before_vat_confidence: float = 0.0
    amount_after_vat_confidence: float = 0.0
    vat_amount_confidence: float = 0.0
    business_id_confidence: float = 0.0
    invoice_number_confidence: float = 0.0
    document_type_confidence: float = 0.0
    reference_number_confidence: float = 0.0

    @property
    def overall_confidence(self) -> float:
        """
        Mean of the non-zero confidences of business name, transaction
        date, total and invoice number. Other fields do not contribute.
        """
        scores = [
            self.get_confidence(name)
            for name in OVERALL_CONFIDENCE_FIELDS
            if self.get_confidence(name) > 0
        ]
        if not scores:
            return 0.0
        return sum(scores) / len(scores)

    @property
    def fields(self) -> Dict[str, Any]:
        return {
            'business_name': self.business_name,
            'transaction_date': self.transaction_date,
            'amount_before_vat': self.amount_before_vat,
            'amount_after_vat': self.amount_after_vat,
            'vat_amount': self.vat_amount,
            'business_id': self.business_id,
            'invoice_number': self.invoice_number,
            'service_description': self.service_description,
            'document_type': None if self.document_type is DocumentType.UNKNOWN else self.document_type,
            'reference_number': self.reference_number,
        }

    @property
    def extracted_fields(self) -> Dict[str, Any]:
        """Fields that have a value."""
        return {k: v for k, v in self.fields.items() if v is not None and v != ""}

    @property
    def missing_fields(self) -> List[str]:
        """Names of fields without a value."""
        return [k for k, v in self.fields.items() if v is None or v == ""]

    @property
    def confidence_scores(self) -> Dict[str, float]:
        return {name: self.get_confidence(name) for name in SCORED_FIELDS}

    def get_confidence(self, field_name: str) -> float:
        """Confidence of a field, 0.0 for unknown or unscored fields."""
        return getattr(self, f"{field_name}_confidence", 0.0)

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-friendly dictionary: ISO dates, amounts as strings, enum values.
        """
        return {
            'document_type': self.document_type.value,
            'business_name': self.business_name,
            'business_id': self.business_id,
            'invoice_number': self.invoice_number,
            'transaction_date': self.transaction_date.isoformat() if self.transaction_date else None,
            'amount_before_vat': _decimal_to_str(self.amount_before_vat),
            'vat_amount': _decimal_to_str(self.vat_amount),
            'amount_after_vat': _decimal_to_str(self.amount_after_vat),
            'reference_number': self.reference_number,
            'reference_type': self.reference_type.value,
            'service_description': self.service_description,
            'confidence_scores': self.confidence_scores,
            'overall_confidence': round(self.overall_confidence, 4),
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def to_flat_dict(self) -> Dict[str, Any]:
        """
        Flat dictionary for spreadsheet rows; amounts as floats and no
        nested structures.
        """
        result = {
            'document_type': self.document_type.value,
            'business_name': self.business_name or '',
            'business_id': self.business_id or '',
            'invoice_number': self.invoice_number or '',
            'transaction_date': self.transaction_date.isoformat() if self.transaction_date else '',
            'amount_before_vat': _decimal_to_float(self.amount_before_vat),
            'vat_amount': _decimal_to_float(self.vat_amount),
            'amount_after_vat': _decimal_to_float(self.amount_after_vat),
            'reference_number': self.reference_number or '',
            'reference_type': self.reference_type.value,
            'service_description': self.service_description or '',
            'overall_confidence': round(self.overall_confidence, 4),
        }

        for name in SCORED_FIELDS:
            result[f'{name}_confidence'] = self.get_confidence(name)

        return result

    def __repr__(self) -> str:
        return (
            f"ParsedInvoiceData("
            f"type={self.document_type.value}, "
            f"business={self.business_name}, "
            f"invoice={self.invoice_number}, "
            f"total={self.amount_after_vat}, "
            f"confidence={self.overall_confidence:.2f})"
        )


def _decimal_to_str(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


def _decimal_to_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None
