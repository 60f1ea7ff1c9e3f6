"""
Extraction Record Data Class.

Pairs one input document with its parse outcome. This is the unit the
JSON and Excel reports and the evaluator work on.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from expense_extraction.parser.parsed_invoice import ParsedInvoiceData


@dataclass(frozen=True)
class ExtractionRecord:
    """
    Outcome of processing one OCR text file.

    Attributes:
        file_name: Source file name
        ocr_text_length: Number of characters in the OCR text
        data: Parsed fields, None when the file could not be processed
        error: Error message when the file could not be processed
    """
    file_name: str
    ocr_text_length: int = 0
    data: Optional[ParsedInvoiceData] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.data is not None and self.error is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'file_name': self.file_name,
            'ocr_text_length': self.ocr_text_length,
            'extraction': self.data.to_dict() if self.data is not None else None,
            'error': self.error,
        }
