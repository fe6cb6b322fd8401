"""
Order Number Extraction Module.

Finds the dedup key of a label. Barcode-backed tracking numbers are
preferred over order IDs, which some sellers reuse across split
shipments. Priority:
    1. courier tracking literals (IOIC..., Amazon AWB, Delhivery AWB)
    2. AWB / Tracking ID / Waybill labelled fields
    3. bare 12-20 digit numbers that do not look like phone numbers
    4. Order ID / Order No labelled fields, then Ref/Invoice
"""

import re
from typing import List, Optional

from .strategy_chain import Strategy, StrategyChain

EKART_TRACKING = re.compile(r'\b(IOIC\d{9,})\b')
AMAZON_SHIPPING_TEXT = re.compile(r'Amazon\s*Shipping', re.IGNORECASE)
AMAZON_AWB = re.compile(r'AWB\s*([0-9]{10,})', re.IGNORECASE)
DELHIVERY_LABELLED_AWB = re.compile(r'(?:AWB|Tracking\s*ID)[\s:]*([0-9]{12,})', re.IGNORECASE)
DELHIVERY_BARCODE = re.compile(r'\b(2[0-9]{11,})\b')
# The token must contain a digit so captions like "Waybill Number" don't match
LABELLED_TRACKING = re.compile(
    r'(?:AWB|Tracking\s*ID|Waybill)[\s#:]*((?=[A-Z]*\d)[A-Z0-9]{8,})',
    re.IGNORECASE
)
BARE_NUMBER = re.compile(r'\b\d{12,20}\b')
PHONE_PREFIXES = ('91', '0')
ORDER_ID = re.compile(r'(?:Order\s*ID|Order\s*No\.?|Order\s*#)[\s:]*([A-Z0-9\-_]{5,})', re.IGNORECASE)
ORDER_ID_STOPWORDS = re.compile(r'^(SKU|QTY|DATE|INVOICE)$', re.IGNORECASE)
REF_INVOICE = re.compile(r'Ref/?Invoice[\s:]*([A-Z0-9\-_]+)', re.IGNORECASE)


def find_ekart_tracking(text: str) -> Optional[str]:
    match = EKART_TRACKING.search(text)
    return match.group(1) if match else None


def find_amazon_awb(text: str) -> Optional[str]:
    match = AMAZON_AWB.search(text)
    return match.group(1) if match else None


def find_amazon_awb_if_amazon(text: str) -> Optional[str]:
    """Amazon AWB, only on labels that say Amazon Shipping."""
    if not AMAZON_SHIPPING_TEXT.search(text):
        return None
    return find_amazon_awb(text)


def find_delhivery_awb(text: str) -> Optional[str]:
    """Labelled 12+ digit AWB, else the first barcode number starting with 2."""
    match = DELHIVERY_LABELLED_AWB.search(text)
    if match:
        return match.group(1)
    match = DELHIVERY_BARCODE.search(text)
    return match.group(1) if match else None


def find_labelled_tracking(text: str) -> Optional[str]:
    match = LABELLED_TRACKING.search(text)
    return match.group(1) if match else None


def find_bare_number(text: str) -> Optional[str]:
    """First 12-20 digit number not starting with a phone prefix."""
    for match in BARE_NUMBER.finditer(text):
        code = match.group(0)
        if not code.startswith(PHONE_PREFIXES):
            return code
    return None


def find_order_id(text: str) -> Optional[str]:
    """Order ID / Order No field, else a Ref/Invoice field, line by line."""
    for line in text.split('\n'):
        line = line.strip()
        match = ORDER_ID.search(line)
        if match and not ORDER_ID_STOPWORDS.match(match.group(1)):
            return match.group(1)

        match = REF_INVOICE.search(line)
        if match:
            return match.group(1)
    return None


# Tried ahead of the generic chain whatever the courier
LEADING_STRATEGIES: List[Strategy] = [
    Strategy("ekart_tracking", find_ekart_tracking),
    Strategy("amazon_awb", find_amazon_awb_if_amazon),
]

GENERIC_STRATEGIES: List[Strategy] = [
    Strategy("labelled_tracking", find_labelled_tracking),
    Strategy("bare_number", find_bare_number),
    Strategy("order_id", find_order_id),
]


def build_order_number_chain(courier_strategies: Optional[List[Strategy]] = None) -> StrategyChain:
    """
    Build the order-number chain for a courier format.

    Args:
        courier_strategies: Courier-specific tracking strategies, tried
            after the leading literals and before the generic ones.
    """
    return StrategyChain(
        "order_number",
        LEADING_STRATEGIES + list(courier_strategies or []) + GENERIC_STRATEGIES
    )


def extract_order_number(text: str, courier_strategies: Optional[List[Strategy]] = None) -> str:
    """
    Extract the dedup key from label text.

    Returns:
        Order / tracking number, or an empty string.
    """
    return build_order_number_chain(courier_strategies).run(text) or ''
