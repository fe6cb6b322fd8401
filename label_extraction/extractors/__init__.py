"""
Field Extractors Module for Label Extraction System.

Each label field is read by an ordered chain of strategies:
    - Courier identification
    - Product lines (plus the legacy single product name)
    - Order number / dedup key
    - Brand and customer name

Courier-specific behaviour is described by format profiles, and the
OCR-backed strategies live in RegionOCR.
"""

from .extraction_result import ExtractionResult, ProductLine, PageExtraction
from .strategy_chain import Strategy, StrategyChain
from .text_cleanup import CleanupTransform, apply_transforms
from .courier import extract_courier, match_courier, COURIER_CHAIN
from .products import PRODUCT_STRATEGIES, extract_legacy_product_name, clean_legacy_product_name
from .order_number import extract_order_number, build_order_number_chain
from .brand import extract_brand, BRAND_CHAIN
from .customer import extract_customer_name, CUSTOMER_CHAIN
from .profiles import FormatProfile, get_profile
from .region_ocr import RegionOCR

__all__ = [
    'ExtractionResult',
    'ProductLine',
    'PageExtraction',
    'Strategy',
    'StrategyChain',
    'CleanupTransform',
    'apply_transforms',
    'extract_courier',
    'match_courier',
    'COURIER_CHAIN',
    'PRODUCT_STRATEGIES',
    'extract_legacy_product_name',
    'clean_legacy_product_name',
    'extract_order_number',
    'build_order_number_chain',
    'extract_brand',
    'BRAND_CHAIN',
    'extract_customer_name',
    'CUSTOMER_CHAIN',
    'FormatProfile',
    'get_profile',
    'RegionOCR',
]
