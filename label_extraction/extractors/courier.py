"""
Courier Identification Module.

Identifies the courier that printed a label. Text strategies, in priority
order:
    1. full_text      - known courier patterns anywhere in the text
    2. tracking_shape - tracking number formats that imply a courier
    3. header_lines   - positional scan of the first lines

A fourth, image-based attempt (OCR of the page header) runs the same
pattern table through ``match_courier`` and is driven by the orchestrator.
"""

import re
from typing import List, Optional, Tuple

from label_extraction.utils.logger import get_logger
from label_extraction.utils.helpers import normalize_lines
from .strategy_chain import Strategy, StrategyChain

logger = get_logger(__name__)


AMAZON_SHIPPING = "Amazon Shipping"

# Order matters: the first pattern found anywhere in the text wins.
COURIER_PATTERNS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r'DELHIVERY', re.IGNORECASE), 'Delhivery'),
    (re.compile(r'DELHIV', re.IGNORECASE), 'Delhivery'),
    (re.compile(r'FEDEX', re.IGNORECASE), 'FedEx'),
    (re.compile(r'DHL', re.IGNORECASE), 'DHL'),
    (re.compile(r'BLUE\s*DART', re.IGNORECASE), 'Blue Dart'),
    (re.compile(r'DTDC', re.IGNORECASE), 'DTDC'),
    (re.compile(r'ECOM\s*EXPRESS', re.IGNORECASE), 'Ecom Express'),
    (re.compile(r'XPRESS\s*BEES', re.IGNORECASE), 'Xpressbees'),
    # OCR misreads of the Xpressbees logo
    (re.compile(r'XYXPRESSEBEES', re.IGNORECASE), 'Xpressbees'),
    (re.compile(r'PRESSEBEES', re.IGNORECASE), 'Xpressbees'),
    (re.compile(r'>>XPRESS', re.IGNORECASE), 'Xpressbees'),
    (re.compile(r'SHIP\s*ROCKET', re.IGNORECASE), 'Shiprocket'),
    (re.compile(r'PICKRR', re.IGNORECASE), 'Pickrr'),
    (re.compile(r'EKART', re.IGNORECASE), 'Ekart'),
    (re.compile(r'E\s*KART', re.IGNORECASE), 'Ekart'),
    (re.compile(r'INDIA\s*POST', re.IGNORECASE), 'India Post'),
    (re.compile(r'SPEED\s*POST', re.IGNORECASE), 'Speed Post'),
    (re.compile(r'FIRST\s*FLIGHT', re.IGNORECASE), 'First Flight'),
    (re.compile(r'PROFESSIONAL', re.IGNORECASE), 'Professional'),
    (re.compile(r'SURFACE', re.IGNORECASE), 'Surface'),
    (re.compile(r'AMAZON\s*SHIPPING', re.IGNORECASE), AMAZON_SHIPPING),
    (re.compile(r'AMAZON\s*TRANSPORT', re.IGNORECASE), AMAZON_SHIPPING),
]

# Lowercase courier names, used by other extractors to skip courier tokens
KNOWN_COURIERS = [
    'delhivery', 'fedex', 'dhl', 'bluedart', 'blue dart', 'dtdc',
    'ecom express', 'xpressbees', 'xpress bees', 'shiprocket', 'ship rocket',
    'pickrr', 'ekart', 'e kart', 'india post', 'speed post', 'first flight',
    'professional', 'gati', 'surface'
]

EKART_TRACKING = re.compile(r'IOIC\d{10,}')
DELHIVERY_AWB = re.compile(r'\b(?:27|28|29)\d{12}\b')
GENERIC_14_DIGIT_AWB = re.compile(r'\b\d{14}\b')
DELHIVERY_LABEL_HINTS = re.compile(r'Ref\./Invoice|Order\s*Number', re.IGNORECASE)

WAREHOUSE_CODE = re.compile(r'^\([A-Z]{3}/[A-Z]{3}\)$')
BARCODE_LINE = re.compile(r'^\d{13,}$')
COLUMN_GAP = re.compile(r'\s{3,}')
UPPERCASE_TOKEN = re.compile(r'^[A-Z]{3,20}$')
BRAND_INDICATOR = re.compile(r'\b(GOODS|STORE|SHOP|MART|BRAND|SHOPPERS|KART)\b', re.IGNORECASE)
NON_COURIER_WORD = re.compile(
    r'^(COD|PIN|SKU|QTY|DATE|ORDER|INVOICE|TOTAL|PRICE|RS|ADDRESS|DELIVER|TO|FROM'
    r'|NUMBER|VALUE|KART|SHOPPERS)$',
    re.IGNORECASE
)
KNOWN_BRAND_WORDS = {'zen', 'goods', 'shoppers', 'kart'}

HEADER_SCAN_LINES = 5


def is_known_courier(text: str) -> bool:
    """Check whether a short token names a known courier."""
    lowered = text.lower().strip()
    return any(lowered == c or lowered.startswith(c + ' ') for c in KNOWN_COURIERS)


def match_courier(text: str) -> Optional[str]:
    """
    Match text against the courier pattern table.

    Returns:
        Canonical courier name of the first matching pattern, or None.
    """
    if not text:
        return None
    for pattern, name in COURIER_PATTERNS:
        if pattern.search(text):
            return name
    return None


def courier_from_tracking_shape(text: str) -> Optional[str]:
    """
    Infer the courier from tracking number formats.

    ``IOIC`` tracking numbers are Ekart; 14-digit AWBs starting 27/28/29
    are Delhivery, as is any 14-digit AWB on a label carrying Delhivery
    field captions.
    """
    has_ekart_tracking = bool(EKART_TRACKING.search(text))
    if has_ekart_tracking:
        return 'Ekart'

    if DELHIVERY_AWB.search(text):
        return 'Delhivery'

    if GENERIC_14_DIGIT_AWB.search(text) and not has_ekart_tracking:
        if DELHIVERY_LABEL_HINTS.search(text):
            return 'Delhivery'

    return None


def courier_from_header_lines(text: str) -> Optional[str]:
    """
    Scan the first lines for a courier column.

    Lines are split on wide gaps so a ``BRAND      COURIER`` header yields
    both columns. An unknown all-caps token that is not a brand or
    field caption is returned as-is.
    """
    lines = normalize_lines(text)

    for line in lines[:HEADER_SCAN_LINES]:
        if WAREHOUSE_CODE.match(line) or BARCODE_LINE.match(line):
            continue

        for part in COLUMN_GAP.split(line):
            if len(part) < 3:
                continue

            name = match_courier(part)
            if name:
                return name

            if UPPERCASE_TOKEN.match(part):
                if BRAND_INDICATOR.search(part):
                    continue
                if NON_COURIER_WORD.match(part) or part.lower() in KNOWN_BRAND_WORDS:
                    continue
                return part

    return None


COURIER_CHAIN = StrategyChain("courier", [
    Strategy("full_text", match_courier),
    Strategy("tracking_shape", courier_from_tracking_shape),
    Strategy("header_lines", courier_from_header_lines),
])


def extract_courier(text: str, header_text: Optional[str] = None) -> str:
    """
    Identify the courier from label text.

    Args:
        text: Label text used by every strategy.
        header_text: Layout-preserving first-page text; when given, the
            header-line scan reads it instead of ``text``.

    Returns:
        Courier name, or an empty string if unresolved.
    """
    chain = COURIER_CHAIN
    if header_text:
        chain = StrategyChain("courier", [
            Strategy("header_lines", lambda _: courier_from_header_lines(header_text))
            if strategy.name == "header_lines" else strategy
            for strategy in COURIER_CHAIN.strategies
        ])
    return chain.run(text) or ''
