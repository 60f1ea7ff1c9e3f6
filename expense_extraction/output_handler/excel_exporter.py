"""
Excel Exporter Module.

This module provides Excel file generation for expense extraction
results. Uses openpyxl for modern Excel format support.

Features:
    - Formatted headers
    - Auto-column width
    - Confidence scores sheet
    - Failed files listed with their error

Author: ML Engineering Team
"""

from pathlib import Path
from typing import List, Optional, Union

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config import get_config
from expense_extraction.parser.parsed_invoice import SCORED_FIELDS
from expense_extraction.utils.exceptions import ReportExportError
from expense_extraction.utils.helpers import ensure_directory, generate_timestamp
from expense_extraction.utils.logger import get_logger
from .extraction_record import ExtractionRecord

# Initialize module logger
logger = get_logger(__name__)


class ExcelExporter:
    """
    Exports extraction records to Excel format.

    Attributes:
        output_dir: Directory for output files
        include_confidence: Whether to add the confidence scores sheet
        sheet_name: Title of the main data sheet

    Example:
        >>> exporter = ExcelExporter()
        >>> filepath = exporter.export(records, "outputs/expenses.xlsx")
        >>> print(f"Saved to: {filepath}")
    """

    # (header, key in ParsedInvoiceData.to_flat_dict())
    COLUMNS = [
        ('Document Type', 'document_type'),
        ('Business Name', 'business_name'),
        ('Business ID', 'business_id'),
        ('Invoice Number', 'invoice_number'),
        ('Transaction Date', 'transaction_date'),
        ('Amount Before VAT', 'amount_before_vat'),
        ('VAT Amount', 'vat_amount'),
        ('Amount After VAT', 'amount_after_vat'),
        ('Reference Number', 'reference_number'),
        ('Reference Type', 'reference_type'),
        ('Service Description', 'service_description'),
        ('Overall Confidence', 'overall_confidence'),
    ]

    AMOUNT_FORMAT = '#,##0.00'

    def __init__(self) -> None:
        """Initialize the Excel exporter with configuration."""
        self.output_dir = Path(get_config("paths.output_dir", "outputs"))
        self.include_confidence = get_config("output.excel.include_confidence", True)
        self.sheet_name = get_config("output.excel.sheet_name", "Extracted Data")

        logger.debug(f"ExcelExporter initialized (output_dir: {self.output_dir})")

    def export(
        self,
        records: Union[ExtractionRecord, List[ExtractionRecord]],
        filepath: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Export extraction records to an Excel file.

        Args:
            records: Single record or list of records to export.
            filepath: Output file. If None, a timestamped file in
                output_dir is used.

        Returns:
            Path to the created Excel file.

        Raises:
            ReportExportError: If there is nothing to export or the
                workbook cannot be saved.
        """
        if isinstance(records, ExtractionRecord):
            records = [records]

        path = Path(filepath) if filepath else self.output_dir / self.get_default_filename()

        if not records:
            raise ReportExportError(str(path), "No records to export")

        try:
            ensure_directory(path.parent)

            workbook = openpyxl.Workbook()
            self._create_data_sheet(workbook, records)

            if self.include_confidence:
                self._create_confidence_sheet(workbook, records)

            workbook.save(path)

        except OSError as e:
            logger.error(f"Excel export failed: {e}")
            raise ReportExportError(str(path), str(e))

        logger.info(f"Excel file saved: {path} ({len(records)} records)")
        return str(path)

    # =========================================================================
    # SHEETS
    # =========================================================================

    def _create_data_sheet(self, workbook, records: List[ExtractionRecord]) -> None:
        """
        Main sheet: one row per file, failed files carry only their error.
        """
        sheet = workbook.active
        sheet.title = self.sheet_name

        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        headers = ['File Name'] + [header for header, _ in self.COLUMNS] + ['Error']
        self._write_header(sheet, headers, "4472C4", thin_border)

        for row_num, record in enumerate(records, 2):
            flat = record.data.to_flat_dict() if record.data is not None else {}

            sheet.cell(row=row_num, column=1, value=record.file_name).border = thin_border

            for col, (_, key) in enumerate(self.COLUMNS, 2):
                value = flat.get(key)
                cell = sheet.cell(row=row_num, column=col, value=value if value != '' else None)
                cell.border = thin_border
                if key.startswith('amount') or key == 'vat_amount':
                    cell.number_format = self.AMOUNT_FORMAT

            error_cell = sheet.cell(row=row_num, column=len(headers), value=record.error)
            error_cell.border = thin_border

        self._fit_columns(sheet, len(headers))
        sheet.freeze_panes = 'A2'

    def _create_confidence_sheet(self, workbook, records: List[ExtractionRecord]) -> None:
        """Confidence score of every scored field, per file."""
        sheet = workbook.create_sheet(title="Confidence Scores")

        headers = ['File Name'] + [f"{name} Conf." for name in SCORED_FIELDS] + ['Overall']
        self._write_header(sheet, headers, "C65911")

        for row_num, record in enumerate(records, 2):
            sheet.cell(row=row_num, column=1, value=record.file_name)
            if record.data is None:
                continue

            for col, name in enumerate(SCORED_FIELDS, 2):
                sheet.cell(row=row_num, column=col, value=round(record.data.get_confidence(name), 2))

            sheet.cell(
                row=row_num,
                column=len(headers),
                value=round(record.data.overall_confidence, 2)
            )

        self._fit_columns(sheet, len(headers))
        sheet.freeze_panes = 'B2'

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _write_header(sheet, headers: List[str], color: str, border: Optional[Border] = None) -> None:
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
        header_alignment = Alignment(horizontal="center", vertical="center")

        for col, header in enumerate(headers, 1):
            cell = sheet.cell(row=1, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = header_alignment
            if border is not None:
                cell.border = border

    @staticmethod
    def _fit_columns(sheet, column_count: int) -> None:
        for col in range(1, column_count + 1):
            max_length = 0
            for row in range(1, sheet.max_row + 1):
                value = sheet.cell(row=row, column=col).value
                if value is not None:
                    max_length = max(max_length, len(str(value)))

            # Width with padding, capped
            sheet.column_dimensions[get_column_letter(col)].width = min(max_length + 2, 50)

    def get_default_filename(self) -> str:
        """
        Generate a default filename with timestamp.

        Returns:
            Default filename string.
        """
        pattern = get_config(
            "output.excel.filename_pattern",
            "expense_extractions_{timestamp}.xlsx"
        )
        return pattern.format(timestamp=generate_timestamp())
