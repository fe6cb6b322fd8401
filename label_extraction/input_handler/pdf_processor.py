"""
PDF Processor Module.

This module handles the parts of PDF processing that need no rasterization:
    - Native text-layer extraction (pdfplumber)
    - Page counting (PyMuPDF)
    - Splitting a multi-page PDF into single-page files (PyMuPDF)

Any failure to open or parse the document surfaces as DocumentReadError,
the one error that aborts an extraction call.
"""

from pathlib import Path
from typing import List, Tuple, Union

import fitz  # PyMuPDF
import pdfplumber

from config import get_config
from label_extraction.utils.logger import get_logger
from label_extraction.utils.exceptions import DocumentReadError
from label_extraction.utils.helpers import ensure_directory, page_filename

logger = get_logger(__name__)


class PDFProcessor:
    """
    Processor for label PDFs.

    Attributes:
        layout_text: Whether pdfplumber should preserve column gaps.
        min_text_length: Text shorter than this marks an image-only PDF.

    Example:
        >>> processor = PDFProcessor()
        >>> text = processor.extract_text("label.pdf")
        >>> processor.is_image_only(text)
        False
    """

    def __init__(self) -> None:
        """Initialize the PDF processor with configuration."""
        self.layout_text = get_config("input.pdf.layout_text", False)
        self.min_text_length = get_config("input.pdf.min_text_length", 50)

        logger.debug(
            f"PDFProcessor initialized (layout_text={self.layout_text}, "
            f"min_text_length={self.min_text_length})"
        )

    def extract_text(self, filepath: Union[str, Path]) -> str:
        """
        Extract the embedded text layer of every page.

        Args:
            filepath: Path to the PDF file.

        Returns:
            Page texts joined with newlines; empty for scanned PDFs.

        Raises:
            DocumentReadError: If the PDF cannot be opened or parsed.
        """
        filepath = Path(filepath)
        if not filepath.is_file():
            raise DocumentReadError(str(filepath), "File not found")

        try:
            with pdfplumber.open(filepath) as pdf:
                page_texts = [
                    page.extract_text(layout=self.layout_text) or ""
                    for page in pdf.pages
                ]
        except Exception as e:
            logger.error(f"pdfplumber could not read {filepath.name}: {e}")
            raise DocumentReadError(str(filepath), str(e))

        text = "\n".join(page_texts)
        logger.debug(f"Native text layer: {len(text.strip())} characters")
        return text

    def extract_header_text(self, filepath: Union[str, Path]) -> str:
        """
        First-page text with horizontal spacing kept.

        Plain extraction joins side-by-side columns with a single space;
        layout mode keeps the gap between a ``BRAND      COURIER`` header,
        which the courier header scan splits on.

        Raises:
            DocumentReadError: If the PDF cannot be opened or parsed.
        """
        filepath = Path(filepath)
        try:
            with pdfplumber.open(filepath) as pdf:
                if not pdf.pages:
                    return ""
                return pdf.pages[0].extract_text(layout=True) or ""
        except Exception as e:
            logger.error(f"pdfplumber could not lay out {filepath.name}: {e}")
            raise DocumentReadError(str(filepath), str(e))

    def is_image_only(self, text: str) -> bool:
        """
        Decide whether extracted text is too short to be a real text layer.

        Args:
            text: Native text of the document.

        Returns:
            True if the document should go through OCR instead.
        """
        return len((text or "").strip()) < self.min_text_length

    def get_page_count(self, filepath: Union[str, Path]) -> int:
        """
        Get the total number of pages in a PDF.

        Args:
            filepath: Path to PDF file.

        Returns:
            Number of pages.

        Raises:
            DocumentReadError: If the PDF cannot be opened.
        """
        try:
            with fitz.open(str(filepath)) as doc:
                return doc.page_count
        except Exception as e:
            raise DocumentReadError(str(filepath), str(e))

    def split_pages(
        self,
        filepath: Union[str, Path],
        output_dir: Union[str, Path]
    ) -> List[Tuple[int, Path]]:
        """
        Write every page of a PDF as its own single-page PDF.

        A page that fails to copy is logged and skipped; the remaining
        pages are still written.

        Args:
            filepath: Path to the multi-page PDF.
            output_dir: Directory receiving the page files.

        Returns:
            List of (1-based page number, page file path), in page order.

        Raises:
            DocumentReadError: If the source PDF cannot be opened.
        """
        output_dir = ensure_directory(output_dir)

        try:
            source = fitz.open(str(filepath))
        except Exception as e:
            logger.error(f"PyMuPDF could not open {filepath}: {e}")
            raise DocumentReadError(str(filepath), str(e))

        pages: List[Tuple[int, Path]] = []
        try:
            logger.info(f"Splitting PDF with {source.page_count} pages...")

            for index in range(source.page_count):
                page_number = index + 1
                page_path = output_dir / page_filename(page_number)
                try:
                    with fitz.open() as page_doc:
                        page_doc.insert_pdf(source, from_page=index, to_page=index)
                        page_doc.save(str(page_path))
                    pages.append((page_number, page_path))
                except Exception as e:
                    logger.error(f"Error splitting page {page_number}: {e}")
        finally:
            source.close()

        return pages


def get_pdf_page_count(filepath: Union[str, Path]) -> int:
    """
    Page count of a PDF, or 1 when the file cannot be read.

    Args:
        filepath: Path to PDF file.

    Returns:
        Number of pages (at least 1).
    """
    try:
        return PDFProcessor().get_page_count(filepath)
    except DocumentReadError as e:
        logger.error(f"Error getting PDF page count: {e}")
        return 1
