"""
JSON Exporter Module.

Writes extraction records as a JSON list, one object per input file:

    {"file_name": ..., "ocr_text_length": ..., "extraction": {...}, "error": null}

Hebrew text is written as-is (``ensure_ascii`` defaults to False).

Author: ML Engineering Team
"""

import json
from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from expense_extraction.utils.exceptions import ReportExportError
from expense_extraction.utils.helpers import ensure_directory, generate_timestamp
from expense_extraction.utils.logger import get_logger
from .extraction_record import ExtractionRecord

# Initialize module logger
logger = get_logger(__name__)


class JsonExporter:
    """
    Exports extraction records to a JSON file.

    Attributes:
        output_dir: Directory used when no explicit path is given
        indent: JSON indentation
        ensure_ascii: Escape non-ASCII characters

    Example:
        >>> exporter = JsonExporter()
        >>> path = exporter.export(records, "outputs/results.json")
    """

    def __init__(self) -> None:
        self.output_dir = Path(get_config("paths.output_dir", "outputs"))
        self.indent = get_config("output.json.indent", 2)
        self.ensure_ascii = get_config("output.json.ensure_ascii", False)

    def export(
        self,
        records: Union[ExtractionRecord, List[ExtractionRecord]],
        filepath: Optional[Union[str, Path]] = None
    ) -> str:
        """
        Write records to a JSON file.

        Args:
            records: Single record or list of records.
            filepath: Target file. If None, a timestamped file in
                output_dir is used.

        Returns:
            Path to the written file.

        Raises:
            ReportExportError: If the file cannot be written.
        """
        if isinstance(records, ExtractionRecord):
            records = [records]

        path = Path(filepath) if filepath else self.output_dir / self.get_default_filename()

        try:
            ensure_directory(path.parent)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(
                    [record.to_dict() for record in records],
                    f,
                    indent=self.indent,
                    ensure_ascii=self.ensure_ascii
                )
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"JSON export failed: {e}")
            raise ReportExportError(str(path), str(e))

        logger.info(f"JSON report saved: {path} ({len(records)} records)")
        return str(path)

    def get_default_filename(self) -> str:
        pattern = get_config(
            "output.json.filename_pattern",
            "extraction_results_{timestamp}.json"
        )
        return pattern.format(timestamp=generate_timestamp())
