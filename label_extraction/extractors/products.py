"""
Product Line Extraction Module.

Parses the product table of a label into ProductLine items. Each label
family prints its table differently, so there is one strategy per layout:

    amazon_item_block      - Amazon "Item description" block, QTY-<n> rows
    item_description_table - "<index> <name> QTY <n>" rows under an
                             "Item description" header
    price_qty_table        - "Product ... Price ... Qty" header, rows end
                             "<price> <qty>" (Ekart / Flipkart)
    qty_price_table        - "Product Name ... SKU Qty Price" header, rows
                             end "<qty> <price>" (Delhivery / Shiprocket)

Product names may wrap over several lines; text before the closing
numbers is accumulated until the row closes.

The module also provides the legacy single product name scan used when
no product rows were found.
"""

import re
from typing import List, Optional

from label_extraction.utils.logger import get_logger
from label_extraction.utils.helpers import normalize_lines
from .extraction_result import ProductLine
from .strategy_chain import Strategy
from .text_cleanup import apply_transforms, ITEM_ROW_CLEANUP, PRODUCT_NAME_CLEANUP

logger = get_logger(__name__)


# =============================================================================
# SHARED PATTERNS
# =============================================================================

# Label footer codes printed under Amazon item tables
FOOTER_MARKERS = re.compile(r'(?i:STVM|MSTA|MRJA|PTAF|amazon\s*shipping)|amazon')
FOOTER_MARKERS_ANY_CASE = re.compile(r'STVM|MSTA|MRJA|PTAF|amazon', re.IGNORECASE)
PE_GARBAGE = re.compile(r'^pE[\s\-–—T]+|\bpE\s*\d+')
LEGACY_GARBAGE = re.compile(
    r'STVM|MSTA|MRJA|PTAF|amazon\s*shipping|M1B|F17|^pE[—\-_]*T?$',
    re.IGNORECASE
)

QTY_MARKER = re.compile(r'QTY\s*[-–—:]\s*(\d+)', re.IGNORECASE)

# Row index prefixes ("1 ", "| ", "l ") are matched case-sensitively
ITEM_ROW = re.compile(
    r'^(?-i:[\d|Il\-–.#]+\s+)*(.+?)\s*(?:QTY|OTY|QTV)[\s:\-–]*(\d+)',
    re.IGNORECASE
)
ITEM_INDEX_PREFIX = re.compile(r'^(?:[\d|Il\-–.#]+\s+)*')
QTY_SPLIT = re.compile(r'(.+?)\s*(?:QTY|OTY|QTV)', re.IGNORECASE)

PRICE_QTY_TAIL = re.compile(
    r'(?:^|\s)((?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{1,2})?)\s+(\d+)\s*$'
)
QTY_PRICE_TAIL = re.compile(
    r'(?:^|\s)(\d+)\s+((?:Rs\.?|₹)?\s?\d+(?:\.\d{1,2})?)\s*$'
)

TOTALS_LINE = re.compile(r'^(Total|Subtotal|Grand\s*Total|Discount)', re.IGNORECASE)
SKU_ONLY_LINES = [
    re.compile(r'^[A-Z\s]+-GST-\d+-HSN\d+$', re.IGNORECASE),
    re.compile(r'^[A-Z]+\s+[A-Z]+-GST-', re.IGNORECASE),
    re.compile(r'GST-\d+-HSN', re.IGNORECASE),
]
TAX_TOKEN = re.compile(r'GST|HSN', re.IGNORECASE)
SKU_CODE_WORD = re.compile(r'^[A-Z]+-\d+-')
ALL_CAPS_WORD = re.compile(r'^[A-Z]+$')
SKU_TOKEN = re.compile(r'^[A-Z0-9.-]+$')
TITLE_CASE_FRAGMENT = re.compile(r'[A-Z][a-z]')


def _parse_int(value: str, default: int = 1) -> int:
    try:
        return int(value) or default
    except (TypeError, ValueError):
        return default


def _parse_price(value: str) -> float:
    cleaned = re.sub(r'Rs\.?|₹|,|\s', '', value)
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


# =============================================================================
# SKU FILTERING
# =============================================================================

def _is_sku_like(word: str) -> bool:
    return word.endswith('...') or (len(word) > 2 and bool(SKU_TOKEN.match(word)))


def strip_leading_sku_tokens(words: List[str]) -> List[str]:
    """
    Drop leading SKU-looking tokens ("HAIR CUTT... Hair Trimmer").

    A token is dropped only while something that still looks like a name
    follows it.
    """
    words = list(words)
    while len(words) > 1:
        if _is_sku_like(words[0]):
            rest = ' '.join(words[1:])
            if TITLE_CASE_FRAGMENT.search(rest) or len(words) > 2:
                words.pop(0)
                continue
        break
    return words


def filter_out_sku(text: str) -> str:
    """
    Remove SKU and tax-code noise from a product name fragment.

    Leading SKU tokens are stripped first; the word scan then stops at a
    GST/HSN token, a ``WORD-<digits>-`` code, or an all-caps duplicate of
    the previous word.

    Example:
        >>> filter_out_sku("Suction Cup Handle BATHROOM-GST-18-HSN3924")
        'Suction Cup Handle'
    """
    if not text:
        return ''
    if any(p.search(text) for p in SKU_ONLY_LINES):
        return ''

    kept: List[str] = []
    for word in strip_leading_sku_tokens(text.split()):
        if TAX_TOKEN.search(word) or SKU_CODE_WORD.match(word):
            break
        if kept and kept[-1].lower() == word.lower() and ALL_CAPS_WORD.match(word):
            break
        kept.append(word)

    return ' '.join(kept).strip()


# =============================================================================
# STRATEGIES
# =============================================================================

AMAZON_SIGNALS = re.compile(r'AMAZON SHIPPING', re.IGNORECASE)
ITEM_BLOCK = re.compile(r'Item\s*description(.*?)(?:\n\s*\n|\Z)', re.IGNORECASE | re.DOTALL)
BLOCK_NOISE_LINE = re.compile(r'^#|^\d+$|^qty$', re.IGNORECASE)
LOOSE_LINE_SKIP = re.compile(
    r'\b(?:awb|invoice|date|ship|gst|cod|order|address|from|to|pin|sector|zone)\b'
    r'|^\d+$|STVM|MSTA|MRJA|PTAF|amazon|shipping',
    re.IGNORECASE
)
LOOSE_QTY_ROW = re.compile(r'(.+?)\s*QTY\s*[-–—:]\s*(\d+)', re.IGNORECASE)


def _is_amazon_label(text: str) -> bool:
    upper = text.upper()
    return bool(AMAZON_SIGNALS.search(text)) or (
        'ITEM DESCRIPTION' in upper and 'ORDERED FROM' in upper
    )


def extract_amazon_item_block(text: str) -> List[ProductLine]:
    """
    Parse the Amazon item table.

    Rows in the ``Item description`` block read ``<index> <name> QTY-<n>``.
    When the block yields nothing, any ``<name> QTY-<n>`` line on the label
    is taken instead. Only runs on labels carrying Amazon signals.
    """
    if not _is_amazon_label(text):
        return []

    products: List[ProductLine] = []

    block = ITEM_BLOCK.search(text)
    if block:
        for line in normalize_lines(block.group(1)):
            if BLOCK_NOISE_LINE.match(line) or len(line) < 4:
                continue
            if LEGACY_GARBAGE.search(line):
                continue
            qty = QTY_MARKER.search(line)
            if not qty:
                continue
            name = re.sub(r'^\d+\s+', '', line[:qty.start()]).strip()
            name = apply_transforms(name, ITEM_ROW_CLEANUP)
            if len(name) > 3:
                products.append(ProductLine(name, _parse_int(qty.group(1)), 0.0))

    if not products:
        for line in normalize_lines(text):
            if LOOSE_LINE_SKIP.search(line) or not 6 <= len(line) <= 100:
                continue
            match = LOOSE_QTY_ROW.search(line)
            if match:
                name = re.sub(r'^\d+\s+', '', match.group(1)).strip()
                if len(name) > 3:
                    products.append(ProductLine(name, _parse_int(match.group(2)), 0.0))

    return products


def extract_item_description_table(text: str) -> List[ProductLine]:
    """
    Parse rows under an ``Item description`` header.

    Rows matching ``<index> <name> QTY|OTY|QTV <n>`` become products with
    that quantity; other non-noise rows become quantity-1 products. Footer
    codes, Total, Subtotal and Page end the table.

    Example:
        >>> extract_item_description_table(
        ...     "Item description\\n1 Garden Manual Sprayer QTY-1")
        [ProductLine(product_name='Garden Manual Sprayer', quantity=1, price=0.0)]
    """
    lines = normalize_lines(text)

    for i, header in enumerate(lines):
        if 'item description' not in header.lower():
            continue

        products: List[ProductLine] = []
        for line in lines[i + 1:]:
            if FOOTER_MARKERS.search(line):
                break
            if re.match(r'^_{3,}', line):
                continue

            match = ITEM_ROW.match(line)
            if match:
                name = apply_transforms(match.group(1), ITEM_ROW_CLEANUP)
                if name:
                    products.append(ProductLine(name, _parse_int(match.group(2)), 0.0))
                continue

            candidate = ITEM_INDEX_PREFIX.sub('', line).strip()
            split = QTY_SPLIT.match(candidate)
            if split:
                candidate = split.group(1).strip()
            candidate = apply_transforms(candidate, ITEM_ROW_CLEANUP)

            if FOOTER_MARKERS_ANY_CASE.search(candidate):
                break
            if re.match(r'^Item\s*description', candidate, re.IGNORECASE):
                continue
            if re.match(r'^(Total|Subtotal|Page)', candidate, re.IGNORECASE):
                break
            if re.match(r'^[\d|Il]*$', candidate) or PE_GARBAGE.search(candidate):
                continue
            if len(candidate) > 3 and '__' not in candidate:
                products.append(ProductLine(candidate, 1, 0.0))

        if products:
            return products

    return []


PRICE_QTY_HEADER = [
    re.compile(r'Product', re.IGNORECASE),
    re.compile(r'Price', re.IGNORECASE),
    re.compile(r'Qty', re.IGNORECASE),
]
PRICE_QTY_END = [
    re.compile(r'Total|Subtotal', re.IGNORECASE),
    re.compile(r'^EKART', re.IGNORECASE),
    re.compile(r'^Instructions', re.IGNORECASE),
]


def extract_price_qty_table(text: str) -> List[ProductLine]:
    """
    Parse a ``Product | Price | Qty`` table.

    A row ending ``<price> <qty>`` closes one product; earlier lines are
    accumulated as the wrapped start of its name.

    Example:
        >>> extract_price_qty_table(
        ...     "Product Price Qty\\nSpice Rack Pack of 16 1999.00 1\\nTotal 1999.00")
        [ProductLine(product_name='Spice Rack Pack of 16', quantity=1, price=1999.0)]
    """
    lines = normalize_lines(text)

    for i, header in enumerate(lines):
        if not all(p.search(header) for p in PRICE_QTY_HEADER):
            continue

        products: List[ProductLine] = []
        name_parts: List[str] = []

        for line in lines[i + 1:]:
            if any(p.search(line) for p in PRICE_QTY_END):
                break
            if len(line) < 2:
                continue

            match = PRICE_QTY_TAIL.search(line)
            if match:
                name_part = line[:match.start()].strip()
                if name_part:
                    name_parts.append(name_part)
                if name_parts:
                    products.append(ProductLine(
                        product_name=' '.join(name_parts).strip(),
                        quantity=_parse_int(match.group(2)),
                        price=_parse_price(match.group(1))
                    ))
                    name_parts = []
            elif not line.isdigit():
                name_parts.append(line)

        if products:
            return products

    return []


def find_product_table_header(lines: List[str]) -> int:
    """
    Locate a ``Product Name`` / ``Item Name`` table header.

    Returns:
        Index of the last header line, or -1.
    """
    for i, line in enumerate(lines):
        if re.search(r'Product\s*Name|Item\s*Name', line, re.IGNORECASE) and \
                re.search(r'SKU|Qty|Price|Amount', line, re.IGNORECASE):
            return i

    for i in range(len(lines) - 1):
        if re.match(r'^Product$', lines[i], re.IGNORECASE) and \
                re.match(r'^Name$', lines[i + 1], re.IGNORECASE):
            return i + 1

    for i, line in enumerate(lines):
        if re.match(r'^(Product|Item)\s*Name$', line, re.IGNORECASE):
            return i

    return -1


def extract_qty_price_table(text: str) -> List[ProductLine]:
    """
    Parse a ``Product Name | SKU | Qty | Price`` table.

    A row ending ``<qty> <price>`` closes one product. Other rows continue
    the current name after SKU noise is removed. Total, Subtotal and
    Discount rows flush a pending name as a quantity-1, price-0 product;
    Total ends the table.
    """
    lines = normalize_lines(text)
    header = find_product_table_header(lines)
    if header == -1:
        return []

    products: List[ProductLine] = []
    name_parts: List[str] = []

    for line in lines[header + 1:]:
        if TOTALS_LINE.match(line):
            if name_parts:
                products.append(ProductLine(' '.join(name_parts).strip(), 1, 0.0))
                name_parts = []
            if re.search(r'Total', line, re.IGNORECASE):
                break
            continue

        if len(line) < 2:
            continue
        if SKU_ONLY_LINES[0].match(line) or SKU_ONLY_LINES[1].match(line):
            continue

        match = QTY_PRICE_TAIL.search(line)
        if match:
            name_part = filter_out_sku(line[:match.start()].strip())
            if name_part:
                name_parts.append(name_part)

            name = apply_transforms(' '.join(name_parts), PRODUCT_NAME_CLEANUP)
            if len(name) > 2:
                products.append(ProductLine(
                    product_name=name,
                    quantity=_parse_int(match.group(1)),
                    price=_parse_price(match.group(2))
                ))
            name_parts = []
        else:
            fragment = filter_out_sku(line)
            if fragment:
                name_parts.append(fragment)

    return products


# Default product strategy order; format profiles may reorder or trim it
PRODUCT_STRATEGIES: List[Strategy] = [
    Strategy("amazon_item_block", extract_amazon_item_block),
    Strategy("item_description_table", extract_item_description_table),
    Strategy("price_qty_table", extract_price_qty_table),
    Strategy("qty_price_table", extract_qty_price_table),
]


# =============================================================================
# LEGACY SINGLE PRODUCT NAME
# =============================================================================

LEGACY_SKIP_LINES = [
    re.compile(r'^[A-Z\s]+-[A-Z0-9-]+$'),
    re.compile(r'^[A-Z]{3,}\s*-\d+-'),
]
LEGACY_QTY_PRICE_TAIL = re.compile(r'\s+\d+\s+(?:Rs\.?|₹)?\d+[\d.]*\s*$')


def _find_legacy_header(lines: List[str]) -> int:
    header = find_product_table_header(lines)
    if header != -1:
        return header

    for i, line in enumerate(lines):
        if re.search(r'(Product|Item)\s*description', line, re.IGNORECASE):
            return i

    for i, line in enumerate(lines):
        if re.match(r'^SKU$', line, re.IGNORECASE) or re.search(r'SKU\s+Qty', line, re.IGNORECASE):
            return i

    return -1


def extract_legacy_product_name(text: str) -> str:
    """
    Collect a single product name from the lines after a table header.

    Used only when no product rows were found. Words are taken until a
    tax code, a SKU-shaped word or the totals row.
    """
    lines = normalize_lines(text)
    header = _find_legacy_header(lines)
    if header == -1:
        return ''

    words: List[str] = []

    for index in range(header + 1, len(lines)):
        line = lines[index]

        if TOTALS_LINE.match(line):
            break
        if PE_GARBAGE.search(line) or len(line) < 2:
            continue
        if TAX_TOKEN.search(line) or any(p.match(line) for p in LEGACY_SKIP_LINES):
            continue

        line = LEGACY_QTY_PRICE_TAIL.sub('', line).strip()
        if not line:
            continue

        line_words = strip_leading_sku_tokens(line.split())
        stop = False

        for position, word in enumerate(line_words):
            if TAX_TOKEN.search(word):
                stop = True
                break
            if re.match(r'^[A-Z]+-\d+', word) or re.match(r'^\d+-[A-Z]+', word):
                stop = True
                break
            if word.isdigit():
                continue

            if len(word) >= 4 and ALL_CAPS_WORD.match(word) and words:
                if position < len(line_words) - 1 and \
                        re.search(r'^GST|HSN|-', line_words[position + 1], re.IGNORECASE):
                    stop = True
                    break
                if words[-1].lower() == word.lower():
                    stop = True
                    break

            words.append(word)

        if stop:
            break
        if index + 1 < len(lines) and re.match(r'^(Total|Subtotal|Discount)', lines[index + 1], re.IGNORECASE):
            break

    name = apply_transforms(' '.join(words), PRODUCT_NAME_CLEANUP[:2])
    return name if len(name) > 2 else ''


def clean_legacy_product_name(name: Optional[str]) -> str:
    """
    Clear legacy names that are footer garbage or not words at all.

    Example:
        >>> clean_legacy_product_name("MSTA 12")
        ''
    """
    if not name:
        return ''
    if LEGACY_GARBAGE.search(name):
        logger.debug(f"Legacy product name looks like footer garbage, clearing: {name!r}")
        return ''
    if len(name) < 4 or not re.search(r'[a-zA-Z]', name):
        logger.debug(f"Legacy product name too short or has no letters, clearing: {name!r}")
        return ''
    return name
