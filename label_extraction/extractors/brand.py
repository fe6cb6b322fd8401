"""
Brand Extraction Module.

Finds the seller / store name printed on a label. Brand extraction is
off by default (``extraction.brand.enabled``); the chain is kept so a
deployment can switch it on without code changes.

Strategies, in priority order:
    1. ordered_from   - Amazon "Ordered From:" field
    2. known_brand    - known store keywords anywhere in the text
    3. email_domain   - domain of a support email address
    4. invoice_prefix - invoice number prefix ("#SK671079" -> SHOPPERS KART)
    5. first_lines    - positional scan of the top-left label box
"""

import re
from typing import Dict, List, Optional

from label_extraction.utils.logger import get_logger
from label_extraction.utils.helpers import normalize_lines
from .courier import is_known_courier
from .strategy_chain import Strategy, StrategyChain
from .text_cleanup import apply_transforms, ORDERED_FROM_CLEANUP

logger = get_logger(__name__)


KNOWN_BRANDS: Dict[str, List[str]] = {
    'SHOPPERS KART': ['shopperskart', 'shoppers kart', 'shoppers  kart'],
    'DAZARA': ['dazara'],
    'ZEN GOODS': ['zen goods', 'zengoods'],
    'LiveOnEase': ['liveonease', 'live on ease'],
}

INVOICE_PREFIXES: Dict[str, str] = {
    'SK': 'SHOPPERS KART',
    'ZG': 'ZEN GOODS',
    'DZ': 'DAZARA',
    'LO': 'LiveOnEase',
}

FREE_MAIL_DOMAINS = re.compile(r'gmail\.com|yahoo\.com|outlook\.com|hotmail\.com', re.IGNORECASE)

KNOWN_LOCATIONS = {
    'punjab', 'haryana', 'rajasthan', 'maharashtra', 'gujarat', 'bihar',
    'karnataka', 'kerala', 'telangana', 'andhra pradesh', 'tamil nadu',
    'uttar pradesh', 'madhya pradesh', 'west bengal', 'odisha', 'assam',
    'jharkhand', 'chhattisgarh', 'uttarakhand', 'himachal pradesh', 'goa',
    'tripura', 'meghalaya', 'manipur', 'nagaland', 'mizoram', 'arunachal pradesh',
    'sikkim', 'delhi', 'chandigarh', 'jammu', 'kashmir', 'ladakh',
    'mumbai', 'kolkata', 'chennai', 'bangalore', 'hyderabad', 'pune', 'jaipur',
    'lucknow', 'ahmedabad', 'surat', 'indore', 'bhopal', 'patna', 'india'
}

ADDRESS_WORDS = {
    'station', 'railway', 'masjid', 'nagar', 'road', 'street', 'lane', 'colony', 'building',
    'apartment', 'flat', 'house', 'floor', 'block', 'sector', 'plot', 'near',
    'opposite', 'behind', 'village', 'town', 'city', 'district', 'tehsil',
    'chowk', 'bazaar', 'market', 'gali', 'mohalla', 'ward', 'post', 'office',
    'temple', 'church', 'mosque', 'school', 'college', 'hospital', 'park',
    'garden', 'tower', 'complex', 'enclave', 'vihar', 'puram', 'abad',
    'centre', 'center', 'tiffin', 'resort', 'stop', 'bus', 'ghat',
    'address', 'shipping', 'deliver', 'invoice', 'order', 'product', 'price',
    'total', 'weight', 'dimensions', 'please', 'reach', 'complaints',
    'great', 'placed', 'barcode', 'sunti', 'kumar', 'singh', 'sharma',
    'nath', 'das', 'devi', 'ram', 'lal', 'prasad', 'lakshmi', 'gour',
    'mali', 'karan', 'charan'
}

ORDERED_FROM = re.compile(r'^Ordered From:?(.*)', re.IGNORECASE)
EMAIL_LABELLED = re.compile(r'Email:\s*([a-zA-Z0-9._%+-]+@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,}))', re.IGNORECASE)
EMAIL_ANY = re.compile(r'\b([a-zA-Z0-9._%+-]+@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,}))\b')
INVOICE_NUMBER = re.compile(r'Invoice\s*No[:\s]*#?([A-Z]{2,4})\d+', re.IGNORECASE)

EKART_FIRST_LINE = re.compile(r'^\d{6}\s+\d{2}/\d{2}/\d{4}')
SHIPPING_ADDRESS = re.compile(r'Shipping\s*Address', re.IGNORECASE)
WAREHOUSE_CODE = re.compile(r'^\([A-Z]{3}/[A-Z]{3}\)$')
BARCODE_LINE = re.compile(r'^\d{13,}$')
NON_BRAND_KEYWORD = re.compile(
    r'^(COD|PIN|SKU|QTY|DATE|ORDER|INVOICE|TOTAL|PRICE|RS|ADDRESS|DELIVER|TO\b|FROM\b|NUMBER|VALUE)$',
    re.IGNORECASE
)
RECIPIENT_HEADER = re.compile(r'^(To|Ship\s*To|Shipping\s*Address)\b', re.IGNORECASE)
BRAND_SUFFIX = re.compile(r'\b(GOODS|BRAND|STORE|SHOP|MART|KART|INC|LLC|LTD)$', re.IGNORECASE)
BRAND_TEXT = re.compile(r"^[A-Za-z\s&'-]+$")

BRAND_SCAN_LINES = 6
MAX_BRAND_PARTS = 4


def brand_from_ordered_from(text: str) -> Optional[str]:
    """Amazon ``Ordered From:`` value, on the same or the next line."""
    lines = [line.strip() for line in text.split('\n')]
    for i, line in enumerate(lines):
        match = ORDERED_FROM.match(line)
        if not match:
            continue

        candidate = match.group(1).strip()
        if len(candidate) <= 1:
            candidate = lines[i + 1] if i + 1 < len(lines) else ''

        candidate = apply_transforms(candidate, ORDERED_FROM_CLEANUP)
        if len(candidate) >= 3:
            return candidate
    return None


def brand_from_keywords(text: str) -> Optional[str]:
    lowered = text.lower()
    for name, keywords in KNOWN_BRANDS.items():
        for keyword in keywords:
            if keyword in lowered:
                logger.debug(f"Known brand keyword '{keyword}' -> {name}")
                return name
    return None


def brand_from_email(text: str) -> Optional[str]:
    """Store name from the domain of a non-free-mail address."""
    match = EMAIL_LABELLED.search(text) or EMAIL_ANY.search(text)
    if not match:
        return None

    domain = match.group(2)
    if FREE_MAIL_DOMAINS.search(domain):
        return None

    store = domain.split('.')[0]
    return store[:1].upper() + store[1:]


def brand_from_invoice_prefix(text: str) -> Optional[str]:
    match = INVOICE_NUMBER.search(text)
    if not match:
        return None
    return INVOICE_PREFIXES.get(match.group(1).upper())


def _is_brand_part(line: str) -> bool:
    if not line or len(line) < 2:
        return False
    if line.lower() in KNOWN_LOCATIONS:
        return False
    if WAREHOUSE_CODE.match(line) or BARCODE_LINE.match(line):
        return False
    if NON_BRAND_KEYWORD.match(line):
        return False
    if re.match(r'^(To|From)\s*:', line, re.IGNORECASE):
        return False
    if re.match(r'^(Shipping\s*Address|Ship\s*To)', line, re.IGNORECASE):
        return False
    if is_known_courier(line):
        return False

    words = [w for w in line.lower().split() if len(w) > 1]
    if words and all(w in ADDRESS_WORDS for w in words):
        return False

    return len(line) <= 30 and bool(BRAND_TEXT.match(line))


def brand_from_first_lines(text: str) -> Optional[str]:
    """
    Read the brand from the top-left box of the label.

    Multi-line brands ("SHOPPERS" / "KART") are joined. Recipient names
    following a ``To:`` caption are skipped. Ekart labels print the
    brand as an image, so they yield nothing here.
    """
    lines = normalize_lines(text)

    if len(lines) > 1 and EKART_FIRST_LINE.match(lines[0]) and \
            any(SHIPPING_ADDRESS.search(line) for line in lines[:3]):
        return None

    parts: List[str] = []
    skip_next = False

    for i, line in enumerate(lines[:BRAND_SCAN_LINES]):
        if RECIPIENT_HEADER.match(line):
            skip_next = True
            continue
        if skip_next:
            skip_next = False
            continue
        if WAREHOUSE_CODE.match(line) or BARCODE_LINE.match(line):
            continue

        if '   ' in line:
            first = re.split(r'\s{3,}', line)[0].strip()
            if _is_brand_part(first):
                parts.append(first)
                break

        if _is_brand_part(line):
            parts.append(line)

            if BRAND_SUFFIX.search(' '.join(parts)):
                break
            if 2 <= len(parts) <= MAX_BRAND_PARTS and i + 1 < len(lines):
                following = lines[i + 1]
                if BARCODE_LINE.match(following) or \
                        re.match(r'^(COD|PIN|SKU|QTY|DATE|ORDER)', following, re.IGNORECASE) or \
                        is_known_courier(following):
                    break
            if len(parts) >= MAX_BRAND_PARTS:
                break
        elif parts:
            break

    brand = ' '.join(parts).strip()
    if 3 <= len(brand) <= 50:
        return brand
    return None


BRAND_CHAIN = StrategyChain("brand", [
    Strategy("ordered_from", brand_from_ordered_from),
    Strategy("known_brand", brand_from_keywords),
    Strategy("email_domain", brand_from_email),
    Strategy("invoice_prefix", brand_from_invoice_prefix),
    Strategy("first_lines", brand_from_first_lines),
])


def extract_brand(text: str) -> str:
    """
    Identify the seller brand from label text.

    Returns:
        Brand name, or an empty string.
    """
    return BRAND_CHAIN.run(text) or ''
