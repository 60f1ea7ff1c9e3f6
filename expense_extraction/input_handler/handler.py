"""
OCR Text Input Handler Module.

Loads OCR text dumps (one document per file) for batch extraction runs.
The extraction engine never invokes OCR itself; an upstream stage writes
the recognized text to ``.txt`` files which this handler reads.

Usage:
    from expense_extraction.input_handler import OcrTextLoader

    loader = OcrTextLoader()
    document = loader.load("ocr/receipt_01.txt")

    # Process batch
    documents = loader.load_batch("./ocr/")

Classes:
    OcrDocument: One loaded OCR text
    OcrTextLoader: Validation and decoding of OCR text files
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from config import get_config
from expense_extraction.utils.exceptions import (
    EmptyInputError,
    InputError,
    InputFileNotFoundError,
    UnsupportedFileTypeError,
)
from expense_extraction.utils.helpers import get_file_extension
from expense_extraction.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class OcrDocument:
    """
    Result of loading one OCR text file.

    Attributes:
        filepath: Original file path
        filename: File name without directories
        text: Decoded OCR text ('' on failure)
        success: Whether loading succeeded
        error: Error message if loading failed
    """
    filepath: str
    filename: str
    text: str = ""
    success: bool = True
    error: Optional[str] = None

    @property
    def char_count(self) -> int:
        return len(self.text)

    def __repr__(self) -> str:
        return (
            f"OcrDocument(filename='{self.filename}', "
            f"chars={self.char_count}, "
            f"success={self.success})"
        )


class OcrTextLoader:
    """
    Loader for OCR text files.

    Attributes:
        supported_extensions: Lowercase extensions accepted by ``load``
        encoding: Text encoding; the default tolerates a UTF-8 BOM

    Example:
        >>> loader = OcrTextLoader()
        >>> docs = loader.load_path("./ocr/")
        >>> [d.filename for d in docs if d.success]
        ['receipt_01.txt', 'receipt_02.txt']
    """

    DEFAULT_EXTENSIONS = ['.txt']
    DEFAULT_ENCODING = 'utf-8-sig'

    def __init__(
        self,
        supported_extensions: Optional[Iterable[str]] = None,
        encoding: Optional[str] = None
    ) -> None:
        """
        Args:
            supported_extensions: Overrides ``input.supported_extensions``.
            encoding: Overrides ``input.encoding``.
        """
        if supported_extensions is None:
            supported_extensions = get_config("input.supported_extensions", self.DEFAULT_EXTENSIONS)
        self.supported_extensions = {ext.lower() for ext in supported_extensions}
        self.encoding = encoding or get_config("input.encoding", self.DEFAULT_ENCODING)

        logger.debug(f"OcrTextLoader initialized with extensions: {sorted(self.supported_extensions)}")

    def validate_file(self, filepath: Union[str, Path]) -> Path:
        """
        Validate that a file exists, has a supported extension and is not
        empty.

        Raises:
            InputFileNotFoundError: If the file doesn't exist.
            InputError: If the path is not a file.
            UnsupportedFileTypeError: If the extension is not supported.
            EmptyInputError: If the file is empty.
        """
        path = Path(filepath)

        if not path.exists():
            raise InputFileNotFoundError(str(filepath))

        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        extension = get_file_extension(path)
        if extension not in self.supported_extensions:
            raise UnsupportedFileTypeError(extension, sorted(self.supported_extensions))

        if path.stat().st_size == 0:
            raise EmptyInputError(str(filepath), "File is empty")

        return path

    def load(self, filepath: Union[str, Path]) -> OcrDocument:
        """
        Load one OCR text file.

        Errors are reported on the returned document rather than raised,
        so one bad file does not stop a batch.
        """
        filepath = str(filepath)
        logger.debug(f"Loading OCR text: {filepath}")

        try:
            path = self.validate_file(filepath)
            text = path.read_text(encoding=self.encoding)
            return OcrDocument(filepath=filepath, filename=path.name, text=text)

        except InputError as e:
            logger.error(f"Input error for {filepath}: {e}")
            return OcrDocument(
                filepath=filepath,
                filename=Path(filepath).name,
                success=False,
                error=str(e)
            )

        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Could not read {filepath}: {e}")
            return OcrDocument(
                filepath=filepath,
                filename=Path(filepath).name,
                success=False,
                error=f"Could not read file: {e}"
            )

    def load_batch(self, directory: Union[str, Path], recursive: bool = False) -> List[OcrDocument]:
        """
        Load every supported file in a directory, sorted by path.

        Raises:
            InputFileNotFoundError: If the directory doesn't exist.
            InputError: If the path is not a directory.
            EmptyInputError: If no supported files were found.
        """
        directory = Path(directory)

        if not directory.exists():
            raise InputFileNotFoundError(str(directory))

        if not directory.is_dir():
            raise InputError(f"Path is not a directory: {directory}")

        pattern = "**/*" if recursive else "*"
        files = sorted(
            path for path in directory.glob(pattern)
            if path.is_file() and get_file_extension(path) in self.supported_extensions
        )

        if not files:
            raise EmptyInputError(str(directory), "No supported files found")

        logger.info(f"Found {len(files)} OCR text files in {directory}")

        documents = [self.load(path) for path in files]

        loaded = sum(1 for d in documents if d.success)
        logger.info(f"Loaded {loaded}/{len(documents)} files")
        return documents

    def load_path(self, path: Union[str, Path], recursive: bool = False) -> List[OcrDocument]:
        """Load a single file or every file in a directory."""
        if Path(path).is_dir():
            return self.load_batch(path, recursive=recursive)
        return [self.load(path)]
