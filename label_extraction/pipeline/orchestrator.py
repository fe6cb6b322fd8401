"""
Extraction Orchestrator Module.

Runs the end-to-end extraction of one single-page label PDF. The stages
run strictly in order, each reading the text and fields left by the one
before:

    1. NativeTextAttempt        - embedded text layer (pdfplumber)
    2. OCRFallback              - full-page OCR when the layer is too short
    3. CourierResolution        - courier chain, then header OCR
    4. FormatOverride           - segmentation OCR for formats that need it
    5. GenericProductExtraction - the profile's product chain, then
                                  segmentation OCR when allowed
    6. OrderNumberResolution    - order-number chain
    7. Terminal                 - assemble the result, remove temp files

Only an unreadable PDF (DocumentReadError) aborts the call. Rendering
and recognition failures are logged, recorded in ``warnings`` and leave
the affected field empty.

Usage:
    from label_extraction.pipeline import extract_label_metadata

    result = extract_label_metadata("label.pdf")
    print(result.courier_name, result.order_number)
"""

from pathlib import Path
from typing import Any, Callable, Optional, Union

from config import get_config
from label_extraction.utils.logger import get_logger
from label_extraction.utils.exceptions import OCRError, RasterError
from label_extraction.input_handler import FULL_PAGE, LabelDocument, PDFProcessor, Rasterizer
from label_extraction.ocr_engine import OCRWorkerPool
from label_extraction.extractors import (
    ExtractionResult,
    RegionOCR,
    clean_legacy_product_name,
    extract_brand,
    extract_courier,
    extract_customer_name,
    extract_legacy_product_name,
    extract_order_number,
    get_profile,
)
from label_extraction.extractors.courier import AMAZON_SHIPPING

logger = get_logger(__name__)


class LabelExtractor:
    """
    Shipping label extraction pipeline.

    Attributes:
        pdf_processor: Text layer reader.
        region_ocr: OCR-backed extractor sharing the worker pool.
        min_text_length: Shortest text layer treated as usable.
        brand_enabled: Whether the brand chain runs.
        customer_enabled: Whether the customer chain runs.

    Example:
        >>> extractor = LabelExtractor()
        >>> result = extractor.extract("label.pdf")
        >>> result.courier_name
        'Ekart'
    """

    def __init__(
        self,
        pool: Optional[OCRWorkerPool] = None,
        pdf_processor: Optional[PDFProcessor] = None,
        rasterizer: Optional[Rasterizer] = None,
        region_ocr: Optional[RegionOCR] = None,
        temp_root: Optional[Union[str, Path]] = None
    ) -> None:
        """
        Initialize the pipeline components.

        Args:
            pool: OCR worker pool; the process-wide pool when None.
            pdf_processor: Text layer reader.
            rasterizer: Page renderer shared by every OCR stage.
            region_ocr: OCR-backed extractor; built from the above when None.
            temp_root: Parent of per-document temp directories.
        """
        self.pdf_processor = pdf_processor or PDFProcessor()
        self.rasterizer = rasterizer or Rasterizer()
        self.temp_root = temp_root if temp_root is not None else get_config("paths.temp_dir")
        self.region_ocr = region_ocr or RegionOCR(
            pool=pool,
            rasterizer=self.rasterizer,
            temp_root=self.temp_root
        )

        self.min_text_length = get_config("input.pdf.min_text_length", 50)
        self.brand_enabled = get_config("extraction.brand.enabled", False)
        self.customer_enabled = get_config("extraction.customer.enabled", True)

        logger.debug("LabelExtractor initialized")

    def extract(self, pdf_path: Union[str, Path]) -> ExtractionResult:
        """
        Extract shipment fields from one label PDF.

        Args:
            pdf_path: Path to a single-page label PDF.

        Returns:
            ExtractionResult; unresolved fields are empty.

        Raises:
            DocumentReadError: If the PDF cannot be opened or parsed.
        """
        pdf_path = Path(pdf_path)
        logger.info(f"Extracting label: {pdf_path.name}")

        # NativeTextAttempt
        text = self.pdf_processor.extract_text(pdf_path)
        result = ExtractionResult()

        with LabelDocument(pdf_path, rasterizer=self.rasterizer, temp_root=self.temp_root) as document:
            text = self._resolve_text(pdf_path, text, document, result)

            if self.brand_enabled:
                result.brand_name = extract_brand(text)
            if self.customer_enabled:
                result.customer_name = extract_customer_name(text)

            self._resolve_courier(pdf_path, text, document, result)
            self._resolve_products(pdf_path, text, document, result)

            # OrderNumberResolution
            profile = get_profile(result.courier_name)
            result.order_number = extract_order_number(text, profile.order_strategies)

        logger.info(
            f"Extracted {pdf_path.name}: courier={result.courier_name or 'N/A'}, "
            f"products={len(result.products)}, order={result.order_number or 'N/A'}"
        )
        return result

    def _run_stage(self, stage: str, result: ExtractionResult, func: Callable, *args) -> Any:
        """
        Run an OCR-backed stage, turning field-level failures into warnings.

        Returns:
            The stage's return value, or None if it failed.
        """
        try:
            return func(*args)
        except (RasterError, OCRError) as e:
            logger.warning(f"{stage} failed: {e}")
            result.add_warning(f"{stage}: {e.message}")
            return None

    def _resolve_text(
        self,
        pdf_path: Path,
        text: str,
        document: LabelDocument,
        result: ExtractionResult
    ) -> str:
        if not self.pdf_processor.is_image_only(text):
            result.text_source = "native"
            return text

        # OCRFallback
        logger.info(f"Text layer too short ({len(text.strip())} chars), running full-page OCR")
        ocr_text = self._run_stage(
            "ocr_fallback", result,
            self.region_ocr.extract_text_from_region, pdf_path, FULL_PAGE, document
        )

        if ocr_text and len(ocr_text.strip()) > self.min_text_length:
            logger.info(f"Full-page OCR recovered {len(ocr_text)} chars")
            result.text_source = "ocr"
            return ocr_text

        logger.info("Full-page OCR returned little or no text")
        result.text_source = "native" if text.strip() else "none"
        return text

    def _resolve_courier(
        self,
        pdf_path: Path,
        text: str,
        document: LabelDocument,
        result: ExtractionResult
    ) -> None:
        header_text = None
        if result.text_source == "native":
            header_text = self.pdf_processor.extract_header_text(pdf_path)

        result.courier_name = extract_courier(text, header_text)
        if result.courier_name:
            return

        logger.info("Courier not found in text, trying header OCR")
        courier = self._run_stage(
            "courier_ocr", result,
            self.region_ocr.extract_courier_from_image, pdf_path, document
        )
        result.courier_name = courier or ""

    def _resolve_products(
        self,
        pdf_path: Path,
        text: str,
        document: LabelDocument,
        result: ExtractionResult
    ) -> None:
        profile = get_profile(result.courier_name)
        segmentation_ran = False

        # FormatOverride
        if profile.segmentation_override:
            logger.info(f"{result.courier_name} label, running segmentation OCR for products")
            product = self._run_stage(
                "segmentation_ocr", result,
                self.region_ocr.extract_segmented_product, pdf_path, document
            )
            segmentation_ran = True
            if product:
                result.products = [product]

        # GenericProductExtraction
        if not result.products:
            result.products = profile.product_chain().run(text) or []

        if not result.products and profile.segmentation_fallback and not segmentation_ran:
            logger.info("No products in text, running segmentation OCR")
            product = self._run_stage(
                "segmentation_ocr", result,
                self.region_ocr.extract_segmented_product, pdf_path, document
            )
            if product:
                result.products = [product]
                if not result.courier_name:
                    result.courier_name = AMAZON_SHIPPING

        if result.products:
            result.product_name = result.products[0].product_name
        else:
            result.product_name = clean_legacy_product_name(extract_legacy_product_name(text))


def extract_label_metadata(pdf_path: Union[str, Path], pool: Optional[OCRWorkerPool] = None) -> ExtractionResult:
    """
    Extract shipment fields from one label PDF.

    Args:
        pdf_path: Path to a single-page label PDF.
        pool: OCR worker pool; the process-wide pool when None.

    Returns:
        ExtractionResult for the label.

    Raises:
        DocumentReadError: If the PDF cannot be opened or parsed.
    """
    return LabelExtractor(pool=pool).extract(pdf_path)
