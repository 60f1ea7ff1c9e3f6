"""
Output Handler Module for the Expense Extraction Engine.

This module provides functionality for:
    - JSON reports (one record per input file)
    - Excel workbooks with extracted data and confidence scores
    - A unified handler coordinating both
"""

from .extraction_record import ExtractionRecord
from .json_exporter import JsonExporter
from .excel_exporter import ExcelExporter
from .handler import OutputHandler

__all__ = [
    'ExtractionRecord',
    'JsonExporter',
    'ExcelExporter',
    'OutputHandler',
]
