"""
Page Splitter Module.

Batch entry point for shipment manifests that bundle many labels into one
PDF. The manifest is split into single-page PDFs first, then each page is
extracted independently on a small thread pool. All threads share one
OCR engine through the worker pool; up to ``concurrency`` recognitions run
at the same time.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Union

from config import get_config
from label_extraction.utils.logger import get_logger
from label_extraction.utils.exceptions import LabelExtractionError
from label_extraction.input_handler import PDFProcessor
from label_extraction.extractors import PageExtraction
from .orchestrator import LabelExtractor

logger = get_logger(__name__)


class PageSplitter:
    """
    Split a multi-page PDF and extract every page.

    Attributes:
        extractor: Pipeline run on each page.
        concurrency: Maximum pages extracted at once.

    Example:
        >>> splitter = PageSplitter()
        >>> pages = splitter.split_and_extract("manifest.pdf", "uploads/pages")
        >>> [p.page_number for p in pages]
        [1, 2, 3]
    """

    def __init__(
        self,
        extractor: Optional[LabelExtractor] = None,
        pdf_processor: Optional[PDFProcessor] = None,
        concurrency: Optional[int] = None
    ) -> None:
        self.pdf_processor = pdf_processor or PDFProcessor()
        self.extractor = extractor or LabelExtractor(pdf_processor=self.pdf_processor)
        self.concurrency = max(1, concurrency or get_config("splitter.concurrency", 3))

    def split_and_extract(
        self,
        pdf_path: Union[str, Path],
        output_dir: Union[str, Path]
    ) -> List[PageExtraction]:
        """
        Split ``pdf_path`` into ``output_dir`` and extract each page.

        Pages whose extraction fails are logged and left out; the rest
        are returned in page order.

        Raises:
            DocumentReadError: If the source PDF cannot be opened.
        """
        pages = self.pdf_processor.split_pages(pdf_path, output_dir)
        logger.info(f"Extracting {len(pages)} pages (concurrency={self.concurrency})")

        results: List[PageExtraction] = []

        with ThreadPoolExecutor(max_workers=self.concurrency) as executor:
            futures = [
                executor.submit(self._extract_page, page_number, page_path)
                for page_number, page_path in pages
            ]
            for future in as_completed(futures):
                page = future.result()
                if page is not None:
                    results.append(page)

        results.sort(key=lambda page: page.page_number)
        logger.info(f"Extracted {len(results)}/{len(pages)} pages")
        return results

    def _extract_page(self, page_number: int, page_path: Path) -> Optional[PageExtraction]:
        try:
            result = self.extractor.extract(page_path)
        except LabelExtractionError as e:
            logger.error(f"Error processing page {page_number}: {e}")
            return None
        except Exception:
            logger.exception(f"Unexpected error processing page {page_number}")
            return None

        return PageExtraction(
            page_number=page_number,
            file_path=str(page_path),
            filename=page_path.name,
            result=result
        )


def split_and_extract(pdf_path: Union[str, Path], output_dir: Union[str, Path]) -> List[PageExtraction]:
    """
    Split a manifest PDF into pages and extract each one.

    Args:
        pdf_path: Multi-page PDF.
        output_dir: Directory receiving the single-page PDFs.

    Returns:
        Per-page results ordered by page number.
    """
    return PageSplitter().split_and_extract(pdf_path, output_dir)
