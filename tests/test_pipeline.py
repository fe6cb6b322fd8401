"""End-to-end tests for the extraction orchestrator and the page splitter."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from label_extraction.extractors import ExtractionResult, ProductLine, RegionOCR
from label_extraction.extractors.courier import AMAZON_SHIPPING
from label_extraction.input_handler import FULL_PAGE, PDFProcessor
from label_extraction.ocr_engine import OCRWorkerPool
from label_extraction.pipeline import LabelExtractor, PageSplitter
from label_extraction.utils.exceptions import DocumentReadError, RenderError

from conftest import EngineFactory, FakeRasterizer, write_two_column_label

EKART_LABEL = (
    "560001 12/01/2026 SURFACE\n"
    "Shipping Address\n"
    "Ship To: Amar Singh\n"
    "Product Price Qty\n"
    "Revolving Spice Rack Pack of 16 1999.00 1\n"
    "Total 1999.00\n"
    "EKART IOIC0123456789"
)

NO_COURIER_LABEL = (
    "Seller: Lakeview Home Essentials, Bengaluru dispatch\n"
    "Ship To: Amar Singh\n"
    "Order ID: ORD12345"
)


def text_processor(text: str) -> PDFProcessor:
    processor = PDFProcessor()
    processor.extract_text = MagicMock(return_value=text)
    processor.extract_header_text = MagicMock(return_value=text)
    return processor


def build_extractor(temp_root, text, responses=(), rasterizer=None, stripes=()):
    factory = EngineFactory(responses)
    pool = OCRWorkerPool(engine_factory=factory, idle_timeout=10)
    rasterizer = rasterizer or FakeRasterizer(stripes=stripes)
    region_ocr = RegionOCR(pool=pool, rasterizer=rasterizer, temp_root=temp_root)
    extractor = LabelExtractor(
        pool=pool,
        pdf_processor=text_processor(text),
        rasterizer=rasterizer,
        region_ocr=region_ocr,
        temp_root=temp_root
    )
    return extractor, factory


class TestNativeText:

    def test_ekart_label(self, temp_root):
        extractor, factory = build_extractor(temp_root, EKART_LABEL)

        result = extractor.extract("label.pdf")

        assert result.text_source == "native"
        assert result.courier_name == "Ekart"
        assert result.products == [ProductLine("Revolving Spice Rack Pack of 16", 1, 1999.0)]
        assert result.product_name == "Revolving Spice Rack Pack of 16"
        assert result.order_number == "IOIC0123456789"
        assert result.customer_name == "Amar Singh"
        assert result.warnings == []
        assert factory.created == []

    def test_brand_disabled_by_default(self, temp_root):
        extractor, _ = build_extractor(temp_root, "Invoice No: #SK671079\n" + EKART_LABEL)

        assert extractor.extract("label.pdf").brand_name == ""

    def test_brand_enabled(self, temp_root):
        extractor, _ = build_extractor(temp_root, "Invoice No: #SK671079\n" + EKART_LABEL)
        extractor.brand_enabled = True

        assert extractor.extract("label.pdf").brand_name == "SHOPPERS KART"

    def test_idempotent(self, temp_root):
        extractor, _ = build_extractor(temp_root, EKART_LABEL)

        first = extractor.extract("label.pdf")
        second = extractor.extract("label.pdf")

        assert first.to_json() == second.to_json()

    def test_courier_from_header_column(self, temp_root, tmp_path):
        pdf_path = write_two_column_label(tmp_path / "label.pdf")
        extractor, factory = build_extractor(temp_root, "")
        extractor.pdf_processor = PDFProcessor()

        result = extractor.extract(pdf_path)

        assert result.text_source == "native"
        assert result.courier_name == "SMARTR"
        assert result.order_number == "ORD12345"
        assert factory.created == []

    def test_unreadable_pdf_propagates(self, temp_root):
        extractor, _ = build_extractor(temp_root, "")
        extractor.pdf_processor.extract_text.side_effect = DocumentReadError("label.pdf", "No /Root object")

        with pytest.raises(DocumentReadError):
            extractor.extract("label.pdf")

        assert list(temp_root.iterdir()) == []


class TestOCRFallback:

    def test_short_text_goes_through_full_page_ocr(self, temp_root):
        ocr_text = (
            "Ship To: Amar Singh\n"
            "Product Price Qty\n"
            "Revolving Spice Rack Pack of 16 1999.00 1\n"
            "Total 1999.00\n"
            "EKART"
        )
        extractor, factory = build_extractor(temp_root, "AWB", responses=[ocr_text])
        extractor.region_ocr.extract_text_from_region = MagicMock(
            wraps=extractor.region_ocr.extract_text_from_region
        )

        result = extractor.extract("label.pdf")

        first_call = extractor.region_ocr.extract_text_from_region.call_args_list[0]
        assert first_call.args[1] == FULL_PAGE
        assert result.text_source == "ocr"
        assert result.courier_name == "Ekart"
        assert len(result.products) == 1
        assert len(factory.created) == 1

    def test_ocr_returns_nothing(self, temp_root):
        extractor, _ = build_extractor(temp_root, "", responses=["", "", ""])

        result = extractor.extract("label.pdf")

        assert result.text_source == "none"
        assert result.courier_name == ""
        assert result.products == []
        assert result.order_number == ""


class TestFieldFailures:

    def test_render_failure_keeps_text_fields(self, temp_root):
        rasterizer = MagicMock()
        rasterizer.render.side_effect = RenderError("label.pdf", "pdftocairo exited with status 1")
        extractor, _ = build_extractor(temp_root, NO_COURIER_LABEL, rasterizer=rasterizer)

        result = extractor.extract("label.pdf")

        assert result.text_source == "native"
        assert result.order_number == "ORD12345"
        assert result.customer_name == "Amar Singh"
        assert result.courier_name == ""
        assert result.products == []
        assert [w.split(":")[0] for w in result.warnings] == ["courier_ocr", "segmentation_ocr"]
        assert rasterizer.render.call_count == 2
        assert list(temp_root.iterdir()) == []

    def test_engine_unavailable_is_a_warning(self, temp_root):
        from label_extraction.utils.exceptions import OCREngineNotAvailableError

        def broken_factory():
            raise OCREngineNotAvailableError("tesseract")

        pool = OCRWorkerPool(engine_factory=broken_factory, idle_timeout=10)
        rasterizer = FakeRasterizer(stripes=[(370, 390)])
        extractor = LabelExtractor(
            pool=pool,
            pdf_processor=text_processor(NO_COURIER_LABEL),
            rasterizer=rasterizer,
            region_ocr=RegionOCR(pool=pool, rasterizer=rasterizer, temp_root=temp_root),
            temp_root=temp_root
        )

        result = extractor.extract("label.pdf")

        assert result.order_number == "ORD12345"
        assert len(result.warnings) == 2


class TestSegmentationPasses:

    def test_segmentation_fallback_implies_amazon(self, temp_root):
        extractor, _ = build_extractor(
            temp_root,
            NO_COURIER_LABEL,
            responses=["Deliver with care", "Item description", "1 Garden Manual Sprayer QTY-1"],
            stripes=[(370, 390), (420, 440)]
        )

        result = extractor.extract("label.pdf")

        assert result.courier_name == AMAZON_SHIPPING
        assert result.products == [ProductLine("Garden Manual Sprayer", 1, 0.0)]
        assert result.product_name == "Garden Manual Sprayer"

    def test_amazon_override_prefers_segmented_product(self, temp_root):
        text = (
            "AMAZON SHIPPING\n"
            "Ordered From: Shopperskart\n"
            "AWB 3456789012\n"
            "Item description\n"
            "1 Garden Sprayer QTY-1"
        )
        extractor, _ = build_extractor(
            temp_root,
            text,
            responses=["Item description", "1 Garden Hose Pipe QTY-3"],
            stripes=[(370, 390), (420, 440)]
        )

        result = extractor.extract("label.pdf")

        assert result.courier_name == AMAZON_SHIPPING
        assert result.products == [ProductLine("Garden Hose Pipe", 3, 0.0)]
        assert result.order_number == "3456789012"

    def test_amazon_override_falls_back_to_text(self, temp_root):
        text = (
            "AMAZON SHIPPING\n"
            "Ordered From: Shopperskart\n"
            "AWB 3456789012\n"
            "Item description\n"
            "1 Garden Sprayer QTY-2"
        )
        extractor, _ = build_extractor(temp_root, text, responses=["Sold by"], stripes=[(370, 390)])

        result = extractor.extract("label.pdf")

        assert result.products == [ProductLine("Garden Sprayer", 2, 0.0)]


class TestPageSplitter:

    def _splitter(self, tmp_path, pages, failing=(), error=None):
        processor = MagicMock()
        processor.split_pages.return_value = [(n, tmp_path / f"page-{n}.pdf") for n in pages]

        def extract(path):
            number = int(Path(path).stem.split("-")[1])
            if number in failing:
                raise error or DocumentReadError(str(path), "corrupt page")
            return ExtractionResult(order_number=f"ORD{number}")

        extractor = MagicMock()
        extractor.extract.side_effect = extract
        return PageSplitter(extractor=extractor, pdf_processor=processor, concurrency=2)

    def test_results_in_page_order(self, tmp_path):
        splitter = self._splitter(tmp_path, [1, 2, 3, 4])

        pages = splitter.split_and_extract("manifest.pdf", tmp_path)

        assert [p.page_number for p in pages] == [1, 2, 3, 4]
        assert [p.result.order_number for p in pages] == ["ORD1", "ORD2", "ORD3", "ORD4"]
        assert pages[0].filename == "page-1.pdf"

    def test_failed_pages_omitted(self, tmp_path):
        splitter = self._splitter(tmp_path, [1, 2, 3], failing={2})

        pages = splitter.split_and_extract("manifest.pdf", tmp_path)

        assert [p.page_number for p in pages] == [1, 3]

    def test_unexpected_page_error_omitted(self, tmp_path):
        splitter = self._splitter(tmp_path, [1, 2, 3], failing={2}, error=ValueError("cannot identify image"))

        pages = splitter.split_and_extract("manifest.pdf", tmp_path)

        assert [p.page_number for p in pages] == [1, 3]
        assert [p.result.order_number for p in pages] == ["ORD1", "ORD3"]

    def test_unreadable_manifest(self, tmp_path):
        splitter = self._splitter(tmp_path, [])
        splitter.pdf_processor.split_pages.side_effect = DocumentReadError("manifest.pdf", "bad xref")

        with pytest.raises(DocumentReadError):
            splitter.split_and_extract("manifest.pdf", tmp_path)

    def test_concurrency_from_config(self):
        assert PageSplitter(extractor=MagicMock(), pdf_processor=MagicMock()).concurrency == 3
