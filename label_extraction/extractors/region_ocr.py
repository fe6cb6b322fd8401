"""
Region OCR Module.

OCR-backed extraction for labels whose text layer is missing or
untrustworthy. Every operation renders page 1, crops a region, and runs
it through the shared OCR worker pool:

    - extract_text_from_region:  plain OCR of a fractional page region
    - extract_courier_from_image: OCR of the page header, matched against
                                  the courier pattern table
    - extract_segmented_product:  line segmentation of the item-table band,
                                  then OCR of the row under the
                                  "Item description" header

Operations accept an open LabelDocument so one render can serve several
stages; without one they open (and remove) a private document.
"""

import re
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from config import get_config
from label_extraction.utils.logger import get_logger
from label_extraction.input_handler import (
    LabelDocument,
    PixelBox,
    RasterImage,
    Rasterizer,
    Region,
    RegionCropper,
)
from label_extraction.ocr_engine import LineSegmenter, OCRWorkerPool, TextLineBlob, get_shared_pool
from .courier import match_courier
from .extraction_result import ProductLine
from .text_cleanup import apply_transforms, SEGMENTED_PRODUCT_CLEANUP

logger = get_logger(__name__)

ITEM_HEADER = re.compile(r'Item\s*description', re.IGNORECASE)
OCR_QTY = re.compile(r'QTY\s*[-–—:]?\s*(\d+)', re.IGNORECASE)


class RegionOCR:
    """
    Region-based OCR extractor.

    Attributes:
        pool: OCR worker pool providing the engine.
        page_scale: Render size for full-page and header OCR.
        segmentation_scale: Render size for line segmentation.

    Example:
        >>> ocr = RegionOCR(pool=OCRWorkerPool())
        >>> ocr.extract_courier_from_image("label.pdf")
        'Xpressbees'
    """

    def __init__(
        self,
        pool: Optional[OCRWorkerPool] = None,
        cropper: Optional[RegionCropper] = None,
        segmenter: Optional[LineSegmenter] = None,
        rasterizer: Optional[Rasterizer] = None,
        temp_root: Optional[Union[str, Path]] = None
    ) -> None:
        self.pool = pool or get_shared_pool()
        self.cropper = cropper or RegionCropper()
        self.segmenter = segmenter or LineSegmenter()
        self.rasterizer = rasterizer or Rasterizer()
        self.temp_root = temp_root

        self.page_scale = get_config("render.page_scale", 2000)
        self.segmentation_scale = get_config("render.segmentation_scale", 6000)

        self.courier_region = Region(
            left=0.0, top=0.0, width=1.0,
            height=get_config("extraction.courier_region_height", 0.30)
        )
        self.item_band = Region(
            left=0.0,
            top=get_config("segmentation.band_top", 0.35),
            width=1.0,
            height=get_config("segmentation.band_height", 0.20)
        )
        self.header_search_limit = get_config("segmentation.header_search_limit", 5)
        self.blob_padding = get_config("segmentation.blob_padding", 10)

    @contextmanager
    def _open(self, pdf_path: Union[str, Path], document: Optional[LabelDocument]) -> Iterator[LabelDocument]:
        if document is not None:
            yield document
            return
        with LabelDocument(pdf_path, rasterizer=self.rasterizer, temp_root=self.temp_root) as owned:
            yield owned

    def extract_text_from_region(
        self,
        pdf_path: Union[str, Path],
        region: Region,
        document: Optional[LabelDocument] = None
    ) -> str:
        """
        OCR a fractional region of page 1.

        Args:
            pdf_path: Label PDF.
            region: Fractional bounds to recognize.
            document: Open document to reuse renders from.

        Returns:
            Raw recognized text.

        Raises:
            RenderError: If page 1 cannot be rendered.
            InvalidRegionError: If the region has no area.
            RecognitionError: If the OCR engine fails.
            OCREngineNotAvailableError: If no engine can be started.
        """
        with self._open(pdf_path, document) as doc:
            raster = doc.render(self.page_scale)
            image = self.cropper.encode(raster, region)

            with self.pool.lease() as engine:
                return engine.recognize(image)

    def extract_courier_from_image(
        self,
        pdf_path: Union[str, Path],
        document: Optional[LabelDocument] = None
    ) -> str:
        """
        Identify the courier from the OCR'd page header.

        Returns:
            Courier name, or an empty string.
        """
        text = self.extract_text_from_region(pdf_path, self.courier_region, document)
        logger.debug(f"Courier OCR text: {' '.join(text[:100].split())!r}")

        courier = match_courier(text) or ''
        if courier:
            logger.info(f"Courier identified from image: {courier}")
        return courier

    def extract_segmented_product(
        self,
        pdf_path: Union[str, Path],
        document: Optional[LabelDocument] = None
    ) -> Optional[ProductLine]:
        """
        Read the first item row of an OCR-only label.

        The item-table band is segmented into text lines; the first few
        are recognized one at a time until the ``Item description`` header
        is found, and the line right below it is taken as the product.

        Returns:
            ProductLine with price 0, or None when no header or product
            line was found.
        """
        with self._open(pdf_path, document) as doc:
            raster = doc.render(self.segmentation_scale)
            band = self.cropper.resolve(raster, self.item_band)
            blobs = self.segmenter.segment(self.cropper.grayscale(raster, band))

            if not blobs:
                logger.debug("No text lines found in item band")
                return None

            with self.pool.lease() as engine:
                header_index = self._find_header(engine, raster, band, blobs)
                if header_index is None or header_index + 1 >= len(blobs):
                    logger.debug("Item description header not found")
                    return None

                text = self._recognize_blob(engine, raster, band, blobs[header_index + 1]).strip()

        logger.debug(f"Product line OCR: {text!r}")
        name = apply_transforms(text, SEGMENTED_PRODUCT_CLEANUP)
        if not name:
            return None

        qty = OCR_QTY.search(text)
        return ProductLine(
            product_name=name,
            quantity=int(qty.group(1)) if qty else 1,
            price=0.0
        )

    def _find_header(self, engine, raster: RasterImage, band: PixelBox, blobs: List[TextLineBlob]) -> Optional[int]:
        for index, blob in enumerate(blobs[:self.header_search_limit]):
            text = self._recognize_blob(engine, raster, band, blob).strip()
            logger.debug(f"Line {index}: {text!r}")
            if ITEM_HEADER.search(text):
                return index
        return None

    def _recognize_blob(self, engine, raster: RasterImage, band: PixelBox, blob: TextLineBlob) -> str:
        top = max(0, band.top + blob.start_row - self.blob_padding)
        box = self.cropper.clamp(
            raster,
            left=0,
            top=top,
            width=raster.width,
            height=blob.height + 2 * self.blob_padding
        )
        return engine.recognize(self.cropper.encode(raster, box))
