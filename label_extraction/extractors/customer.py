"""
Customer Name Extraction Module.

Reads the recipient name from the shipping address block:
    1. inline      - "Ship To: Amar Singh" on one line
    2. next_line   - "Ship To" caption, name on one of the next two lines
    3. name_field  - "Customer Name: ..." / "Recipient: ..." / "Buyer: ..."
"""

import re
from typing import Optional

from label_extraction.utils.helpers import normalize_lines
from .strategy_chain import Strategy, StrategyChain
from .text_cleanup import apply_transforms, CUSTOMER_NAME_CLEANUP

CAPTION_ONLY = [
    re.compile(
        r'^(?:Ship\s*To|Deliver\s*To|Delivery\s*Address|Shipping\s*Address|Consignee)\s*:?\s*$',
        re.IGNORECASE
    ),
    re.compile(r'^To\s*:?\s*$', re.IGNORECASE),
]
INLINE_CAPTION = [
    re.compile(r'^(?:Ship\s*To|Deliver\s*To|Consignee)\s*:\s*(.+)', re.IGNORECASE),
    re.compile(r'^To\s*:\s*([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)', re.IGNORECASE),
]
NAME_FIELD = re.compile(r'(?:Customer\s*Name|Recipient|Buyer)\s*:\s*(.+)', re.IGNORECASE)
NOT_A_NAME = re.compile(
    r'^(COD|PIN|SKU|QTY|DATE|ORDER|INVOICE|TOTAL|PRICE|ADDRESS|PHONE|MOBILE|EMAIL)',
    re.IGNORECASE
)

LOOKAHEAD_LINES = 2


def clean_customer_name(text: str) -> str:
    """
    Validate and tidy a recipient name candidate.

    Address-looking candidates (long digit runs, pin codes, field
    captions) are rejected; the rest is cut at the first comma or address
    word and title-cased.

    Example:
        >>> clean_customer_name("AMAR SINGH, House 12")
        'Amar Singh'
    """
    if not text or len(text) < 2:
        return ''

    trimmed = apply_transforms(text, CUSTOMER_NAME_CLEANUP[:2])
    if re.search(r'\d{5,}', trimmed) or re.search(r'pin\s*code', trimmed, re.IGNORECASE):
        return ''
    if NOT_A_NAME.match(trimmed):
        return ''
    if not 2 <= len(trimmed) <= 60:
        return ''

    name = apply_transforms(trimmed, CUSTOMER_NAME_CLEANUP[2:])
    if not re.search(r'[a-zA-Z]', name):
        return ''
    return name if len(name) >= 2 else ''


def _first_name_after(lines, index: int) -> Optional[str]:
    for line in lines[index + 1:index + 1 + LOOKAHEAD_LINES]:
        candidate = clean_customer_name(line)
        if candidate:
            return candidate
    return None


def customer_from_inline_caption(text: str) -> Optional[str]:
    """Inline caption value; if it is unusable ("Ship To: 31/01"), the next lines."""
    lines = normalize_lines(text)
    for i, line in enumerate(lines):
        for pattern in INLINE_CAPTION:
            match = pattern.match(line)
            if not match:
                continue
            candidate = clean_customer_name(match.group(1).strip())
            if candidate:
                return candidate
            candidate = _first_name_after(lines, i)
            if candidate:
                return candidate
    return None


def customer_from_caption_line(text: str) -> Optional[str]:
    lines = normalize_lines(text)
    for i, line in enumerate(lines[:-1]):
        if any(p.match(line) for p in CAPTION_ONLY):
            candidate = _first_name_after(lines, i)
            if candidate:
                return candidate
    return None


def customer_from_name_field(text: str) -> Optional[str]:
    for line in normalize_lines(text):
        match = NAME_FIELD.search(line)
        if match:
            candidate = clean_customer_name(match.group(1).strip())
            if candidate:
                return candidate
    return None


CUSTOMER_CHAIN = StrategyChain("customer", [
    Strategy("inline", customer_from_inline_caption),
    Strategy("next_line", customer_from_caption_line),
    Strategy("name_field", customer_from_name_field),
])


def extract_customer_name(text: str) -> str:
    """
    Extract the recipient name.

    Returns:
        Title-cased name, or an empty string.
    """
    return CUSTOMER_CHAIN.run(text) or ''
