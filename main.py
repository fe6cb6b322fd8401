#!/usr/bin/env python3
"""
Shipping Label Extraction System - Main Entry Point.

This is the main entry point for the label extraction system.
It provides both a command-line interface and programmatic access
to the extraction pipeline.

Usage:
    Command Line:
        label-extract --input label.pdf --output results.json
        label-extract --input ./labels/ --output results.xlsx
        label-extract --input manifest.pdf --split --pages-dir ./pages/

    Python:
        from main import run_extraction
        records = run_extraction("label.pdf")
"""

import argparse
import sys
from collections import Counter
from pathlib import Path
from typing import List, Optional

from config import ConfigurationManager, get_config
from label_extraction.utils.logger import setup_logger_from_config, get_logger
from label_extraction.utils.exceptions import LabelExtractionError


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Argument list; ``sys.argv[1:]`` when None.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="label-extract",
        description="Shipping Label Extraction System",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Process a single label:
        label-extract --input label.pdf --output results.json

    Process a directory of labels:
        label-extract --input ./labels/ --output results.xlsx

    Split a manifest into pages first:
        label-extract --input manifest.pdf --split --pages-dir ./pages/
        """
    )

    # Input/Output arguments
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Label PDF or directory containing label PDFs"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default="outputs/label_results.xlsx",
        help="Output file, .xlsx or .json (default: outputs/label_results.xlsx)"
    )

    # Processing options
    parser.add_argument(
        "--split",
        action="store_true",
        help="Split each PDF into single pages and extract every page"
    )

    parser.add_argument(
        "--pages-dir",
        type=str,
        default=None,
        help="Directory receiving split pages (default: <output_dir>/pages)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize the extraction system with configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)

    if args.debug:
        level = "DEBUG"
    elif args.quiet:
        level = "WARNING"
    else:
        level = None

    logger = setup_logger_from_config(level)

    logger.info("=" * 60)
    logger.info("SHIPPING LABEL EXTRACTION SYSTEM")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output}")

    return config


def validate_inputs(input_path: str) -> List[Path]:
    """
    Validate the input path and return the PDFs to process.

    Args:
        input_path: File or directory.

    Returns:
        Sorted list of PDF paths.

    Raises:
        FileNotFoundError: If input path doesn't exist.
        ValueError: If a file input is not a PDF.
    """
    logger = get_logger(__name__)
    path = Path(input_path)

    if not path.exists():
        raise FileNotFoundError(f"Input path not found: {path}")

    if path.is_file():
        if path.suffix.lower() != '.pdf':
            raise ValueError(f"Unsupported file type: {path.suffix}")
        return [path]

    files = sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() == '.pdf')
    if not files:
        logger.warning(f"No PDF files found in: {path}")
    else:
        logger.info(f"Found {len(files)} files to process")
    return files


def run_extraction(
    input_path: str,
    output_path: Optional[str] = None,
    split: bool = False,
    pages_dir: Optional[str] = None
) -> list:
    """
    Run the label extraction pipeline.

    Each input PDF is either extracted as one label, or, with ``split``,
    split into single pages that are extracted independently. Files
    that cannot be read are logged and skipped.

    Args:
        input_path: Path to input file or directory.
        output_path: Output file (.xlsx or .json); nothing is written when None.
        split: Whether to split multi-page PDFs.
        pages_dir: Directory for split pages.

    Returns:
        List of PageExtraction records.

    Example:
        >>> records = run_extraction("labels/", "outputs/labels.json")
        >>> for r in records:
        ...     print(r.filename, r.result.order_number)
    """
    logger = get_logger(__name__)

    from label_extraction.extractors import PageExtraction
    from label_extraction.pipeline import LabelExtractor, PageSplitter
    from label_extraction.output_handler import OutputHandler

    files = validate_inputs(input_path)

    extractor = LabelExtractor()
    splitter = PageSplitter(extractor=extractor) if split else None
    pages_root = Path(pages_dir) if pages_dir else Path(get_config("paths.output_dir", "outputs")) / "pages"

    records = []

    for file_path in files:
        logger.info(f"Processing: {file_path.name}")

        try:
            if splitter is not None:
                records.extend(splitter.split_and_extract(file_path, pages_root / file_path.stem))
            else:
                records.append(PageExtraction(
                    page_number=1,
                    file_path=str(file_path),
                    filename=file_path.name,
                    result=extractor.extract(file_path)
                ))
        except LabelExtractionError as e:
            logger.error(f"Error processing {file_path.name}: {e}")
            continue

    if records and output_path:
        saved = OutputHandler().save(records, output_path)
        logger.info(f"Output written: {saved}")
    elif not records:
        logger.warning("No labels were extracted")

    return records


def log_summary(records: list) -> None:
    """Log how many labels were read per courier and how many carry warnings."""
    logger = get_logger(__name__)
    couriers = Counter(r.result.courier_name or "unknown" for r in records)
    with_warnings = sum(1 for r in records if r.result.warnings)

    logger.info("=" * 60)
    logger.info(f"Extraction complete. {len(records)} labels extracted.")
    for courier, count in couriers.most_common():
        logger.info(f"  {courier}: {count}")
    if with_warnings:
        logger.warning(f"{with_warnings} labels have partial results (see warnings column)")
    logger.info("=" * 60)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        args = parse_arguments(argv)

        initialize_system(args)
        logger = get_logger(__name__)

        records = run_extraction(
            input_path=args.input,
            output_path=args.output,
            split=args.split,
            pages_dir=args.pages_dir
        )

        if not records:
            logger.error("No labels extracted")
            return 1

        log_summary(records)
        return 0

    except (FileNotFoundError, ValueError, LabelExtractionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if "--debug" in (sys.argv if argv is None else argv):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
