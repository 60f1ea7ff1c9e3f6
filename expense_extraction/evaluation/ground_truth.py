"""
Ground Truth Loader Module.

This module handles loading and managing ground truth data
for evaluation of expense extraction results.

Supported Formats:
    - JSON files (list of records, {"records": [...]}, or a dict keyed
      by file name)
    - CSV files
    - Excel files

Every record is indexed by its file name, taken from ``file_name``,
``source_file`` or ``filename``.

Author: ML Engineering Team
"""

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import openpyxl

from expense_extraction.utils.exceptions import GroundTruthError
from expense_extraction.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

# Keys that may hold the source file name, in lookup order
FILE_NAME_KEYS = ('file_name', 'source_file', 'filename')


class GroundTruthLoader:
    """
    Loads ground truth data from JSON, CSV and Excel files.

    Attributes:
        data: Loaded ground truth records
        file_path: Path to ground truth file

    Example:
        >>> loader = GroundTruthLoader("ground_truth.json")
        >>> loader.get_by_filename("receipt_01.txt")["invoice_number"]
        'JZMYWEKA-0003'
    """

    def __init__(self, file_path: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize the ground truth loader.

        Args:
            file_path: Path to ground truth file. If None, creates empty loader.
        """
        self.file_path = Path(file_path) if file_path else None
        self.data: List[Dict[str, Any]] = []
        self._file_index: Dict[str, int] = {}

        if self.file_path:
            self.load(self.file_path)

    def load(self, file_path: Union[str, Path]) -> List[Dict[str, Any]]:
        """
        Load ground truth from file.

        Args:
            file_path: Path to ground truth file.

        Returns:
            List of ground truth records.

        Raises:
            GroundTruthError: If the file doesn't exist, has an unsupported
                format or cannot be parsed.
        """
        path = Path(file_path)

        if not path.exists():
            raise GroundTruthError(str(path), "File not found")

        extension = path.suffix.lower()

        try:
            if extension == '.json':
                self.data = self._load_json(path)
            elif extension == '.csv':
                self.data = self._load_csv(path)
            elif extension == '.xlsx':
                self.data = self._load_excel(path)
            else:
                raise GroundTruthError(str(path), f"Unsupported format: {extension}")
        except (OSError, ValueError, csv.Error) as e:
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            raise GroundTruthError(str(path), str(e))

        self._build_index()

        logger.info(f"Loaded {len(self.data)} ground truth records from {path.name}")
        return self.data

    def _load_json(self, path: Path) -> List[Dict[str, Any]]:
        with open(path, 'r', encoding='utf-8-sig') as f:
            data = json.load(f)

        if isinstance(data, dict):
            if 'records' in data:
                data = data['records']
            else:
                # Keyed by file name
                data = [{**v, 'file_name': k} for k, v in data.items()]

        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise ValueError("Expected a list of records")

        return data

    def _load_csv(self, path: Path) -> List[Dict[str, Any]]:
        with open(path, 'r', encoding='utf-8-sig', newline='') as f:
            return [dict(row) for row in csv.DictReader(f)]

    def _load_excel(self, path: Path) -> List[Dict[str, Any]]:
        """First row holds the headers."""
        workbook = openpyxl.load_workbook(path, read_only=True)
        sheet = workbook.active

        data = []
        headers = None

        for row in sheet.iter_rows(values_only=True):
            if headers is None:
                headers = [str(cell).strip() if cell else f'col_{i}' for i, cell in enumerate(row)]
                continue
            data.append({
                headers[i]: cell for i, cell in enumerate(row) if i < len(headers)
            })

        workbook.close()
        return data

    def _build_index(self) -> None:
        self._file_index = {}

        for idx, record in enumerate(self.data):
            filename = record_file_name(record)
            if filename:
                self._file_index[filename] = idx
                self._file_index[Path(filename).name] = idx

    def get_all(self) -> List[Dict[str, Any]]:
        return self.data

    def get_by_filename(self, filename: str) -> Optional[Dict[str, Any]]:
        """
        Get ground truth record by source file name.

        Args:
            filename: Source file name (with or without path).

        Returns:
            Ground truth record or None.
        """
        if filename in self._file_index:
            return self.data[self._file_index[filename]]

        normalized = Path(filename).name
        if normalized in self._file_index:
            return self.data[self._file_index[normalized]]

        return None

    def validate(self, fields: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Check the loaded records for a file name and the given fields.

        Returns:
            Dictionary with total/valid/invalid counts and, per field,
            how many records leave it empty.
        """
        results = {
            'total_records': len(self.data),
            'valid_records': 0,
            'invalid_records': 0,
            'missing_fields': {},
        }

        for record in self.data:
            is_valid = record_file_name(record) is not None

            for field_name in fields or []:
                if record.get(field_name) in (None, ''):
                    results['missing_fields'][field_name] = results['missing_fields'].get(field_name, 0) + 1

            if is_valid:
                results['valid_records'] += 1
            else:
                results['invalid_records'] += 1

        logger.debug(
            f"Ground truth validation: {results['valid_records']}/{results['total_records']} valid"
        )
        return results

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self.data)

    def __getitem__(self, index: int) -> Dict[str, Any]:
        return self.data[index]


def record_file_name(record: Dict[str, Any]) -> Optional[str]:
    """File name of a ground truth record, None if it has none."""
    for key in FILE_NAME_KEYS:
        value = record.get(key)
        if value:
            return str(value)
    return None
