"""
Courier Format Profiles.

A format profile describes how labels from one courier are read: which
product strategies apply and in what order, which courier-specific
tracking patterns lead the order-number chain, and whether products
should come from the pixel-segmentation OCR pass.

    segmentation_override - run the segmentation pass even when the text
                            layer produced products, and prefer its result
    segmentation_fallback - run the segmentation pass when no strategy
                            found products
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .courier import AMAZON_SHIPPING
from .order_number import find_amazon_awb, find_delhivery_awb
from .products import (
    PRODUCT_STRATEGIES,
    extract_item_description_table,
    extract_price_qty_table,
    extract_qty_price_table,
)
from .strategy_chain import Strategy, StrategyChain


@dataclass(frozen=True)
class FormatProfile:
    """
    Extraction behaviour for one courier's label format.

    Attributes:
        name: Profile identifier.
        product_strategies: Ordered product strategies.
        order_strategies: Courier-specific order-number strategies.
        segmentation_override: Prefer segmentation OCR products.
        segmentation_fallback: Use segmentation OCR when products are empty.
    """
    name: str
    product_strategies: List[Strategy] = field(default_factory=lambda: list(PRODUCT_STRATEGIES))
    order_strategies: List[Strategy] = field(default_factory=list)
    segmentation_override: bool = False
    segmentation_fallback: bool = False

    def product_chain(self) -> StrategyChain:
        return StrategyChain("products", self.product_strategies)


DEFAULT = FormatProfile(name="default")

# Courier could not be identified; the label may be an OCR-only Amazon label
UNKNOWN = FormatProfile(name="unknown", segmentation_fallback=True)

AMAZON = FormatProfile(
    name="amazon",
    order_strategies=[Strategy("amazon_awb", find_amazon_awb)],
    segmentation_override=True,
    segmentation_fallback=True,
)

DELHIVERY = FormatProfile(
    name="delhivery",
    product_strategies=[
        Strategy("qty_price_table", extract_qty_price_table),
        Strategy("item_description_table", extract_item_description_table),
        Strategy("price_qty_table", extract_price_qty_table),
    ],
    order_strategies=[Strategy("delhivery_awb", find_delhivery_awb)],
)

EKART = FormatProfile(
    name="ekart",
    product_strategies=[
        Strategy("price_qty_table", extract_price_qty_table),
        Strategy("item_description_table", extract_item_description_table),
        Strategy("qty_price_table", extract_qty_price_table),
    ],
)

PROFILES: Dict[str, FormatProfile] = {
    AMAZON_SHIPPING: AMAZON,
    'Delhivery': DELHIVERY,
    'Ekart': EKART,
}


def get_profile(courier_name: str) -> FormatProfile:
    """
    Get the format profile for a courier.

    Returns:
        The courier's profile, UNKNOWN for an empty courier, else DEFAULT.
    """
    if not courier_name:
        return UNKNOWN
    return PROFILES.get(courier_name, DEFAULT)
