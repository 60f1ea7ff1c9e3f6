#!/usr/bin/env python3
"""
Expense Extraction Engine - Main Entry Point.

Batch runner over OCR text dumps: parses every file, prints a per-document
summary, writes a JSON report (and optionally an Excel workbook) and can
evaluate the results against ground truth.

Usage:
    Command Line:
        python main.py --input receipt.txt
        python main.py --input ./ocr/ --output results.json --excel
        python main.py --input ./ocr/ --evaluate --ground-truth data/ground_truth.json

    Python:
        from main import run_extraction
        records = run_extraction("ocr/")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import sys
from typing import List, Optional

from config import get_config, load_config
from expense_extraction.evaluation import Evaluator
from expense_extraction.input_handler import OcrDocument, OcrTextLoader
from expense_extraction.output_handler import ExtractionRecord, OutputHandler
from expense_extraction.parser import InvoiceParser
from expense_extraction.utils.exceptions import ExpenseExtractionError
from expense_extraction.utils.helpers import confidence_icon
from expense_extraction.utils.logger import get_logger, setup_logger_from_config


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Expense Extraction Engine - invoice fields from OCR text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Process single OCR dump:
        python main.py --input receipt.txt

    Process directory with Excel output:
        python main.py --input ./ocr/ --output results.json --excel

    With evaluation:
        python main.py --input ./ocr/ --evaluate --ground-truth data/ground_truth.json
        """
    )

    # Input/Output arguments
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="OCR text file or directory of .txt files"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="JSON report path (default: timestamped file in paths.output_dir)"
    )

    parser.add_argument(
        "--excel",
        action="store_true",
        help="Also write an Excel workbook next to the JSON report"
    )

    parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Search input directory recursively"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    # Evaluation options
    parser.add_argument(
        "--evaluate",
        action="store_true",
        help="Run evaluation after extraction"
    )

    parser.add_argument(
        "--ground-truth", "-gt",
        type=str,
        default=None,
        help="Path to ground truth file (JSON, CSV or XLSX)"
    )

    # Logging options
    log_group = parser.add_mutually_exclusive_group()
    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    log_group.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors and skip the per-document summary"
    )

    args = parser.parse_args(argv)

    if args.evaluate and not args.ground_truth:
        parser.error("--evaluate requires --ground-truth")

    return args


def initialize_system(args: argparse.Namespace) -> None:
    """
    Load configuration and set up logging.
    """
    if args.config:
        load_config(args.config)

    level = "DEBUG" if args.debug else ("ERROR" if args.quiet else None)
    logger = setup_logger_from_config(level_override=level)

    logger.info("=" * 60)
    logger.info("EXPENSE EXTRACTION ENGINE")
    logger.info("=" * 60)
    logger.info(f"Version: {get_config('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")


def extract_document(parser: InvoiceParser, document: OcrDocument) -> ExtractionRecord:
    """Parse one loaded document into a record."""
    if not document.success:
        return ExtractionRecord(
            file_name=document.filename,
            error=document.error
        )

    return ExtractionRecord(
        file_name=document.filename,
        ocr_text_length=document.char_count,
        data=parser.parse(document.text)
    )


def run_extraction(input_path: str, recursive: bool = False) -> List[ExtractionRecord]:
    """
    Run the extraction pipeline over a file or directory.

    This is the main programmatic entry point.

    Args:
        input_path: OCR text file or directory.
        recursive: Search directories recursively.

    Returns:
        One ExtractionRecord per input file, in path order.

    Raises:
        InputError: If the input path doesn't exist or holds no
            supported files.

    Example:
        >>> records = run_extraction("ocr/")
        >>> for r in records:
        ...     print(r.file_name, r.data.invoice_number)
    """
    logger = get_logger(__name__)

    loader = OcrTextLoader()
    parser = InvoiceParser()

    documents = loader.load_path(input_path, recursive=recursive)
    logger.info(f"Processing {len(documents)} files...")

    records = [extract_document(parser, document) for document in documents]

    failed = sum(1 for r in records if not r.success)
    if failed:
        logger.warning(f"{failed} of {len(records)} files could not be processed")

    return records


def print_summary(records: List[ExtractionRecord]) -> None:
    """Print a per-document summary with confidence icons."""
    print()
    for record in records:
        if not record.success:
            print(f"❌ {record.file_name}: {record.error}")
            continue

        data = record.data
        confidence = data.overall_confidence
        print(f"{confidence_icon(confidence)} {record.file_name} ({confidence:.2f})")
        print(f"    Type:     {data.document_type.value}")
        print(f"    Business: {data.business_name or '-'} [{data.business_id or '-'}]")
        print(f"    Invoice:  {data.invoice_number or '-'}")
        print(f"    Date:     {data.transaction_date.isoformat() if data.transaction_date else '-'}")
        print(
            f"    Amounts:  {data.amount_before_vat or '-'} + "
            f"{data.vat_amount or '-'} VAT = {data.amount_after_vat or '-'}"
        )
        if data.reference_number:
            print(f"    Ref:      {data.reference_number} ({data.reference_type.value})")

    successful = [r for r in records if r.success]
    if successful:
        average = sum(r.data.overall_confidence for r in successful) / len(successful)
        print()
        print(f"Average confidence: {average:.2f} over {len(successful)} documents")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, 1 for errors, 130 if interrupted).
    """
    args = parse_arguments(argv)

    try:
        initialize_system(args)
        logger = get_logger(__name__)

        records = run_extraction(args.input, recursive=args.recursive)

        if not args.quiet:
            print_summary(records)

        output_handler = OutputHandler(excel_enabled=True if args.excel else None)
        output_info = output_handler.save(records, json_path=args.output)
        logger.info(f"JSON report: {output_info['json_path']}")
        if output_info['excel_path']:
            logger.info(f"Excel output: {output_info['excel_path']}")

        if args.evaluate:
            evaluator = Evaluator(args.ground_truth)
            result = evaluator.evaluate(records)
            print(result.print_report())

        logger.info("=" * 60)
        logger.info(f"Extraction complete. Processed {len(records)} files.")
        logger.info("=" * 60)

        return 0 if any(r.success for r in records) else 1

    except ExpenseExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
