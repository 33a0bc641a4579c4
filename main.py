#!/usr/bin/env python3
"""
Sales-Order Extraction Engine - Main Entry Point.

Extracts header fields and the item table from one sales-order document
(an OCR text transcript or an image), stores them for a case and prints
the extraction report as JSON.

Usage:
    Command Line:
        python main.py --input pedido.jpg --case-id case-42
        python main.py --input pedido.txt --case-id case-42 --db outputs/cases.db --excel

    Python:
        from main import run_extraction
        report = run_extraction("pedido.txt", "case-42")
"""

import argparse
import json
import sys
from typing import Any, Dict, Optional

from config import ConfigurationManager
from order_extraction.utils.exceptions import OrderExtractionError
from order_extraction.utils.logger import get_logger, setup_logger_from_config


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Sales-Order Extraction Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Extract from an image with Tesseract:
        python main.py --input pedido.jpg --case-id case-42

    Use Google Vision (GOOGLE_VISION_API_KEY must be set):
        python main.py --input pedido.jpg --case-id case-42 --provider google_vision

    Re-run on a saved transcript and write a review workbook:
        python main.py --input pedido.txt --case-id case-42 --excel
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Order document: .txt transcript or image"
    )

    parser.add_argument(
        "--case-id",
        type=str,
        required=True,
        help="Case the extracted data belongs to"
    )

    parser.add_argument(
        "--provider",
        type=str,
        choices=["tesseract", "google_vision", "easyocr"],
        default=None,
        help="OCR provider (default: ocr.provider from the configuration)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="SQLite database file (default: outputs/case_records.db)"
    )

    parser.add_argument(
        "--excel",
        action="store_true",
        help="Also write a review workbook"
    )

    parser.add_argument(
        "--preview",
        action="store_true",
        help="Include the normalized text preview in the report"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def build_overrides(
    provider: Optional[str] = None,
    excel: bool = False
) -> Dict[str, Any]:
    """Configuration overrides from command-line switches."""
    overrides: Dict[str, Any] = {}
    if provider:
        overrides['ocr'] = {'provider': provider}
    if excel:
        overrides['output'] = {'excel': {'enabled': True}}
    return overrides


def run_extraction(
    input_path: str,
    case_id: str,
    config_path: Optional[str] = None,
    provider: Optional[str] = None,
    db_path: Optional[str] = None,
    excel: bool = False,
    preview: bool = False
) -> Dict[str, Any]:
    """
    Run the extraction pipeline on one document.

    Args:
        input_path: .txt transcript or image.
        case_id: Owning case.
        config_path: Optional custom configuration file path.
        provider: OCR provider overriding the configuration.
        db_path: SQLite file overriding the configuration.
        excel: Whether to write a review workbook.
        preview: Whether to keep the text preview in the report.

    Returns:
        Extraction report dictionary.
    """
    from order_extraction.pipeline import ExtractionPipeline

    config = ConfigurationManager(config_path, overrides=build_overrides(provider, excel))
    pipeline = ExtractionPipeline(config, db_path=db_path)

    report = pipeline.run_file(input_path, case_id)
    if not preview:
        report.pop('text_preview', None)
    return report


def main(argv=None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_arguments(argv)

    try:
        overrides = {"logging": {"level": "DEBUG"}} if args.debug else None
        config = ConfigurationManager(args.config, overrides=overrides)
        setup_logger_from_config(config)
        logger = get_logger(__name__)
        logger.info(f"Version: {config.get('project.version', '1.0.0')}")

        report = run_extraction(
            input_path=args.input,
            case_id=args.case_id,
            config_path=args.config,
            provider=args.provider,
            db_path=args.db,
            excel=args.excel,
            preview=args.preview
        )

    except OrderExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    print(json.dumps(report, indent=2, ensure_ascii=False))

    summary = report.get('write_summary') or {}
    if summary.get('fields_failed') or summary.get('rows_failed'):
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
