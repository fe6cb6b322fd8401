"""Tests for courier, order number, brand and customer extraction."""

import pytest

from label_extraction.extractors import (
    COURIER_CHAIN,
    build_order_number_chain,
    extract_brand,
    extract_courier,
    extract_customer_name,
    extract_order_number,
    get_profile,
    match_courier,
)
from label_extraction.extractors.brand import (
    brand_from_email,
    brand_from_first_lines,
    brand_from_invoice_prefix,
    brand_from_keywords,
    brand_from_ordered_from,
)
from label_extraction.extractors.courier import (
    AMAZON_SHIPPING,
    courier_from_header_lines,
    courier_from_tracking_shape,
    is_known_courier,
)
from label_extraction.extractors.customer import clean_customer_name


class TestCourier:

    @pytest.mark.parametrize("text,expected", [
        ("Shipped via DELHIVERY surface", "Delhivery"),
        ("Blue Dart Express", "Blue Dart"),
        ("XYXPRESSEBEES", "Xpressbees"),
        ("Xpress Bees", "Xpressbees"),
        ("Amazon Transport Services", AMAZON_SHIPPING),
        ("E KART LOGISTICS", "Ekart"),
    ])
    def test_pattern_table(self, text, expected):
        assert match_courier(text) == expected

    def test_no_match(self):
        assert match_courier("Handle with care") is None
        assert match_courier("") is None

    def test_ekart_tracking_shape(self):
        assert courier_from_tracking_shape("Tracking IOIC0123456789") == "Ekart"

    def test_delhivery_awb_prefix(self):
        assert courier_from_tracking_shape("28123456789012") == "Delhivery"

    def test_generic_awb_needs_delhivery_captions(self):
        assert courier_from_tracking_shape("12345678901234") is None
        assert courier_from_tracking_shape("Ref./Invoice #55\n12345678901234") == "Delhivery"

    def test_header_courier_column(self):
        text = "ZEN GOODS   SMARTR\nCOD: Rs 499"

        assert courier_from_header_lines(text) == "SMARTR"

    def test_header_text_used_for_column_scan(self):
        plain = "ZEN GOODS SMARTR\nCOD: Rs 499"
        laid_out = "     ZEN GOODS                         SMARTR\n     COD: Rs 499"

        assert extract_courier(plain) == ""
        assert extract_courier(plain, laid_out) == "SMARTR"

    def test_header_text_does_not_override_full_text_match(self):
        assert extract_courier("EKART\nShip To: Amar", "ZEN GOODS      SMARTR") == "Ekart"

    def test_header_skips_captions(self):
        assert courier_from_header_lines("ORDER\nINVOICE") is None

    def test_chain_order(self):
        assert COURIER_CHAIN.names == ["full_text", "tracking_shape", "header_lines"]

    def test_full_text_wins(self):
        assert extract_courier("Product Price Qty\nTotal 1999.00\nEKART") == "Ekart"

    def test_unresolved_is_empty(self):
        assert extract_courier("item description\n1 garden sprayer") == ""

    def test_known_courier_tokens(self):
        assert is_known_courier("Delhivery")
        assert is_known_courier("blue dart surface")
        assert not is_known_courier("Dazara")


class TestOrderNumber:

    def test_bare_number_beats_order_id(self):
        text = "Shipment 12345678901234\nOrder ID: ABC123"

        assert extract_order_number(text) == "12345678901234"

    def test_ekart_tracking_first(self):
        text = "Order ID: OD4455667788\nIOIC0123456789"

        assert extract_order_number(text) == "IOIC0123456789"

    def test_amazon_awb_only_on_amazon_labels(self):
        assert extract_order_number("Amazon Shipping\nAWB 3456789012") == "3456789012"

    def test_caption_without_digits_is_not_tracking(self):
        assert extract_order_number("Waybill Number\nOrder ID: ABC12345") == "ABC12345"

    def test_phone_numbers_skipped(self):
        assert extract_order_number("Phone 919876543210\nOrder ID: ABC123") == "ABC123"

    def test_ref_invoice_fallback(self):
        assert extract_order_number("Ref/Invoice: INV-2291") == "INV-2291"

    def test_delhivery_profile_awb(self):
        text = "AWB: 281234567890\nOrder ID: ORD-55123"
        strategies = get_profile("Delhivery").order_strategies

        assert extract_order_number(text, strategies) == "281234567890"

    def test_courier_strategies_between_literals_and_generic(self):
        chain = build_order_number_chain(get_profile("Delhivery").order_strategies)

        assert chain.names == [
            "ekart_tracking", "amazon_awb", "delhivery_awb",
            "labelled_tracking", "bare_number", "order_id",
        ]

    def test_nothing_found(self):
        assert extract_order_number("Handle with care") == ""


class TestBrand:

    def test_ordered_from_next_line(self):
        assert brand_from_ordered_from("Ordered From:\nShopperskart a I") == "Shopperskart"

    def test_ordered_from_inline_noise(self):
        assert brand_from_ordered_from("Ordered From: Shopperskart pi -") == "Shopperskart"

    def test_known_keyword(self):
        assert brand_from_keywords("Sold by zen goods pvt") == "ZEN GOODS"

    def test_email_domain(self):
        assert brand_from_email("Email: support@dazara.in") == "Dazara"

    def test_free_mail_ignored(self):
        assert brand_from_email("Email: seller123@gmail.com") is None

    def test_invoice_prefix(self):
        assert brand_from_invoice_prefix("Invoice No: #SK671079") == "SHOPPERS KART"

    def test_multi_line_brand(self):
        assert brand_from_first_lines("SHOPPERS\nKART\nTo:\nAmar Singh") == "SHOPPERS KART"

    def test_recipient_not_taken_as_brand(self):
        assert brand_from_first_lines("To:\nAmar Singh") is None

    def test_ekart_layout_skipped(self):
        text = "560001 12/01/2026 SURFACE\nShipping Address\nAmar Singh"

        assert brand_from_first_lines(text) is None

    def test_chain_returns_empty_string(self):
        assert extract_brand("12345") == ""


class TestCustomer:

    def test_inline_ship_to(self):
        assert extract_customer_name("Ship To: Amar Singh\nHouse 12") == "Amar Singh"

    def test_caption_then_name(self):
        text = "Shipping Address:\nRahul Verma\nFlat 12, MG Road"

        assert extract_customer_name(text) == "Rahul Verma"

    def test_name_field(self):
        assert extract_customer_name("Customer Name: PRIYA SHARMA") == "Priya Sharma"

    def test_address_cut(self):
        assert clean_customer_name("AMAR SINGH, House 12") == "Amar Singh"
        assert clean_customer_name("Neha Gupta Near Bus Stand") == "Neha Gupta"

    @pytest.mark.parametrize("raw", ["560001", "Pin Code 560001", "COD 499", "x"])
    def test_rejects_non_names(self, raw):
        assert clean_customer_name(raw) == ""

    def test_unusable_inline_value_reads_next_line(self):
        assert extract_customer_name("Ship To: 31/01\nMeera Iyer\n560034") == "Meera Iyer"
