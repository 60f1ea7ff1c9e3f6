"""
Main Output Handler Module.

This module provides the unified OutputHandler class that coordinates
the JSON and Excel reports.

Author: ML Engineering Team
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config import get_config
from expense_extraction.utils.exceptions import OutputError
from expense_extraction.utils.logger import get_logger
from .excel_exporter import ExcelExporter
from .extraction_record import ExtractionRecord
from .json_exporter import JsonExporter

# Initialize module logger
logger = get_logger(__name__)


class OutputHandler:
    """
    Unified output handler for extraction records.

    The JSON report is always written; the Excel workbook is optional.

    Attributes:
        excel_enabled: Whether Excel export is enabled
        json_exporter: JsonExporter instance
        excel_exporter: ExcelExporter instance (created on first use)

    Example:
        >>> handler = OutputHandler(excel_enabled=True)
        >>> info = handler.save(records, json_path="outputs/results.json")
        >>> info['excel_path']
        'outputs/results.xlsx'
    """

    def __init__(self, excel_enabled: Optional[bool] = None) -> None:
        """
        Initialize the output handler.

        Args:
            excel_enabled: Override config for Excel output.
        """
        self.excel_enabled = excel_enabled if excel_enabled is not None else \
            get_config("output.excel.enabled", False)

        self.json_exporter = JsonExporter()
        self._excel_exporter = None

        logger.debug(f"OutputHandler initialized (excel={self.excel_enabled})")

    @property
    def excel_exporter(self) -> ExcelExporter:
        """Get or create the Excel exporter."""
        if self._excel_exporter is None:
            self._excel_exporter = ExcelExporter()
        return self._excel_exporter

    def save(
        self,
        records: Union[ExtractionRecord, List[ExtractionRecord]],
        json_path: Optional[Union[str, Path]] = None,
        excel_path: Optional[Union[str, Path]] = None
    ) -> Dict[str, Any]:
        """
        Save records to all enabled outputs.

        When Excel is enabled and no excel_path is given but json_path is,
        the workbook is written next to the JSON file with an .xlsx suffix.

        Args:
            records: Single record or list of records.
            json_path: JSON report path (optional).
            excel_path: Excel workbook path (optional).

        Returns:
            Dictionary with output details:
            {
                'json_path': 'path/to/results.json',
                'excel_path': 'path/to/results.xlsx' or None
            }

        Raises:
            ReportExportError: If the JSON report cannot be written.
        """
        if isinstance(records, ExtractionRecord):
            records = [records]

        output_info = {
            'json_path': self.to_json(records, json_path),
            'excel_path': None,
        }

        if self.excel_enabled:
            if excel_path is None and json_path is not None:
                excel_path = Path(json_path).with_suffix('.xlsx')
            try:
                output_info['excel_path'] = self.to_excel(records, excel_path)
            except OutputError as e:
                logger.error(f"Excel export failed: {e}")

        return output_info

    def to_json(
        self,
        records: Union[ExtractionRecord, List[ExtractionRecord]],
        filepath: Optional[Union[str, Path]] = None
    ) -> str:
        return self.json_exporter.export(records, filepath)

    def to_excel(
        self,
        records: Union[ExtractionRecord, List[ExtractionRecord]],
        filepath: Optional[Union[str, Path]] = None
    ) -> str:
        return self.excel_exporter.export(records, filepath)
