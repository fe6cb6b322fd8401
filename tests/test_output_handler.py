"""Tests for JSON and Excel output."""

import json
from pathlib import Path
from unittest.mock import patch

import openpyxl
import pytest

from label_extraction.extractors import ExtractionResult, PageExtraction, ProductLine
from label_extraction.output_handler import ExcelExporter, OutputHandler
from label_extraction.utils.exceptions import ExcelExportError

import main


@pytest.fixture
def records():
    return [
        PageExtraction(1, "/tmp/page-1.pdf", "page-1.pdf", ExtractionResult(
            courier_name="Ekart",
            products=[ProductLine("Spice Rack", 1, 1999.0), ProductLine("Wall Clock", 2, 349.0)],
            order_number="IOIC0123456789",
            text_source="native",
        )),
        PageExtraction(2, "/tmp/page-2.pdf", "page-2.pdf", ExtractionResult(
            warnings=["courier_ocr: Failed to render PDF page: page-2.pdf"],
        )),
    ]


class TestJSONOutput:

    def test_writes_array(self, tmp_path, records):
        path = OutputHandler().save(records, tmp_path / "out" / "labels.json")

        data = json.loads(Path(path).read_text(encoding="utf-8"))

        assert [d["page_number"] for d in data] == [1, 2]
        assert data[0]["result"]["products"][1] == {"product_name": "Wall Clock", "quantity": 2, "price": 349.0}
        assert data[1]["result"]["courier_name"] == ""

    def test_single_record(self, tmp_path, records):
        path = OutputHandler().save(records[0], tmp_path / "one.json")

        assert len(json.loads(Path(path).read_text(encoding="utf-8"))) == 1


class TestExcelOutput:

    def test_labels_and_product_sheets(self, tmp_path, records):
        path = OutputHandler().save(records, tmp_path / "labels.xlsx")

        workbook = openpyxl.load_workbook(path)

        assert workbook.sheetnames == ["Labels", "Product Lines"]

        labels = workbook["Labels"]
        headers = [cell.value for cell in labels[1]]
        assert headers[:3] == ["Source File", "Page", "Courier"]
        assert labels.max_row == 3
        assert labels.cell(row=2, column=3).value == "Ekart"

        products = workbook["Product Lines"]
        assert products.max_row == 3
        assert [products.cell(row=3, column=c).value for c in (4, 5, 6)] == ["Wall Clock", 2, 349.0]

    def test_products_sheet_optional(self, tmp_path, records):
        exporter = ExcelExporter()
        exporter.include_products = False

        path = exporter.export(records, "labels.xlsx", str(tmp_path))

        assert openpyxl.load_workbook(path).sheetnames == ["Labels"]

    def test_default_filename(self):
        name = ExcelExporter().get_default_filename()

        assert name.startswith("label_extractions_")
        assert name.endswith(".xlsx")

    def test_nothing_to_export(self, tmp_path):
        with pytest.raises(ExcelExportError):
            ExcelExporter().export([], "empty.xlsx", str(tmp_path))


class TestCommandLine:

    def test_missing_input(self, tmp_path):
        assert main.main(["--input", str(tmp_path / "nope.pdf"), "--quiet"]) == 1

    def test_non_pdf_input(self, tmp_path):
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")

        assert main.main(["--input", str(notes), "--quiet"]) == 1

    def test_directory_run(self, tmp_path):
        labels = tmp_path / "labels"
        labels.mkdir()
        for name in ("a.pdf", "b.PDF", "notes.txt"):
            (labels / name).write_bytes(b"%PDF-1.4")
        output = tmp_path / "results.json"

        with patch("label_extraction.pipeline.LabelExtractor") as extractor_cls:
            extractor_cls.return_value.extract.return_value = ExtractionResult(courier_name="DTDC")
            exit_code = main.main(["--input", str(labels), "--output", str(output), "--quiet"])

        assert exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert [d["filename"] for d in data] == ["a.pdf", "b.PDF"]
        assert data[0]["result"]["courier_name"] == "DTDC"

    def test_split_run(self, tmp_path):
        manifest = tmp_path / "manifest.pdf"
        manifest.write_bytes(b"%PDF-1.4")
        page = PageExtraction(1, "p1.pdf", "p1.pdf", ExtractionResult(order_number="ORD1"))

        with patch("label_extraction.pipeline.LabelExtractor"), \
                patch("label_extraction.pipeline.PageSplitter") as splitter_cls:
            splitter_cls.return_value.split_and_extract.return_value = [page]
            records = main.run_extraction(str(manifest), split=True, pages_dir=str(tmp_path / "pages"))

        assert records == [page]
        args = splitter_cls.return_value.split_and_extract.call_args.args
        assert args[1] == tmp_path / "pages" / "manifest"
