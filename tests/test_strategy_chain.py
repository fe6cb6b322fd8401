"""Tests for strategy chains, cleanup transforms and the result model."""

import json

from label_extraction.extractors import (
    ExtractionResult,
    PageExtraction,
    ProductLine,
    Strategy,
    StrategyChain,
    apply_transforms,
)
from label_extraction.extractors.text_cleanup import (
    CUSTOMER_NAME_CLEANUP,
    ORDERED_FROM_CLEANUP,
    PRODUCT_NAME_CLEANUP,
    SEGMENTED_PRODUCT_CLEANUP,
    regex_transform,
)


class TestStrategyChain:

    def test_first_success_wins(self):
        calls = []

        def make(name, value):
            def strategy(text):
                calls.append(name)
                return value
            return Strategy(name, strategy)

        chain = StrategyChain("field", [make("a", None), make("b", "B"), make("c", "C")])

        assert chain.run_with_source("text") == ("B", "b")
        assert calls == ["a", "b"]

    def test_empty_values_fall_through(self):
        chain = StrategyChain("field", [
            Strategy("empty_list", lambda text: []),
            Strategy("empty_str", lambda text: ""),
            Strategy("value", lambda text: text.upper()),
        ])

        assert chain.run("abc") == "ABC"

    def test_nothing_matches(self):
        chain = StrategyChain("field", [Strategy("none", lambda text: None)])

        assert chain.run_with_source("abc") == (None, None)
        assert chain.run("abc") is None

    def test_names_and_len(self):
        chain = StrategyChain("field", [Strategy("x", str), Strategy("y", str)])

        assert chain.names == ["x", "y"]
        assert len(chain) == 2


class TestCleanupTransforms:

    def test_segmented_product_line(self):
        raw = "[4 | Garden Manual Sprayer QTY -1"

        assert apply_transforms(raw, SEGMENTED_PRODUCT_CLEANUP) == "Garden Manual Sprayer"

    def test_each_transform_is_named(self):
        names = [t.name for t in SEGMENTED_PRODUCT_CLEANUP]

        assert names == [
            "strip_qty_suffix",
            "strip_trailing_pipes_digits",
            "strip_leading_garbage",
            "strip_special_chars",
        ]

    def test_gst_suffix(self):
        assert apply_transforms("Steel Bottle BOTTLE-GST-18", PRODUCT_NAME_CLEANUP) == "Steel Bottle"

    def test_ordered_from_noise(self):
        assert apply_transforms("Shopperskart pi -", ORDERED_FROM_CLEANUP) == "Shopperskart"
        assert apply_transforms("Shopperskart a I", ORDERED_FROM_CLEANUP) == "Shopperskart"

    def test_customer_title_case(self):
        assert apply_transforms("ravi KUMAR", CUSTOMER_NAME_CLEANUP) == "Ravi Kumar"

    def test_regex_transform(self):
        transform = regex_transform("digits", r"\d+", "#")

        assert transform("a1b22") == "a#b#"

    def test_empty_input(self):
        assert apply_transforms("", SEGMENTED_PRODUCT_CLEANUP) == ""


class TestExtractionResult:

    def test_product_line_clamps(self):
        line = ProductLine("Mug", quantity=0, price=-5)

        assert line.quantity == 1
        assert line.price == 0.0

    def test_empty_result(self):
        result = ExtractionResult()

        assert result.products == []
        assert result.order_number == ""
        assert "products" in result.missing_fields

    def test_json_round_trip(self):
        result = ExtractionResult(
            courier_name="Ekart",
            products=[ProductLine("Spice Rack", 1, 1999.0)],
            order_number="IOIC0123456789",
            text_source="native",
        )

        restored = ExtractionResult.from_dict(json.loads(result.to_json()))

        assert restored == result

    def test_flat_dict(self):
        result = ExtractionResult(products=[ProductLine("Mug", 2), ProductLine("Plate", 1)])

        flat = result.to_flat_dict()

        assert flat["product_count"] == 2
        assert flat["products"] == "Mug x2; Plate x1"

    def test_page_extraction_dict(self):
        page = PageExtraction(1, "/tmp/page-1.pdf", "page-1.pdf", ExtractionResult(courier_name="DTDC"))

        data = page.to_dict()

        assert data["page_number"] == 1
        assert data["result"]["courier_name"] == "DTDC"
