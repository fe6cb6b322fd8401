"""
Text Cleanup Transforms.

OCR and text-layer names arrive with recurring noise: quantity markers,
stray pipes and digits, GST/HSN tax codes, trailing OCR letters after a
store name. Each kind of noise is removed by a named transform, and every
cleanup is an ordered list of them.

Usage:
    name = apply_transforms(raw, SEGMENTED_PRODUCT_CLEANUP)
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Sequence


@dataclass(frozen=True)
class CleanupTransform:
    """A named ``str -> str`` cleanup step."""
    name: str
    func: Callable[[str], str]

    def __call__(self, text: str) -> str:
        return self.func(text)


def regex_transform(name: str, pattern: str, replacement: str = '', flags: int = 0) -> CleanupTransform:
    """Build a transform that substitutes every match of ``pattern``."""
    compiled = re.compile(pattern, flags)
    return CleanupTransform(name, lambda text: compiled.sub(replacement, text))


def apply_transforms(text: str, transforms: Sequence[CleanupTransform]) -> str:
    """
    Apply transforms in order and strip the result.

    Args:
        text: Raw text.
        transforms: Ordered cleanup steps.

    Returns:
        Cleaned text, possibly empty.
    """
    if not text:
        return ''
    for transform in transforms:
        text = transform(text)
    return text.strip()


# =============================================================================
# SEGMENTED OCR PRODUCT LINE
# "[4 | Garden Manual Sprayer QTY -1" -> "Garden Manual Sprayer"
# =============================================================================

SEGMENTED_PRODUCT_CLEANUP: List[CleanupTransform] = [
    regex_transform('strip_qty_suffix', r'QTY.*$', flags=re.IGNORECASE),
    regex_transform('strip_trailing_pipes_digits', r'[|\d\[\]]+$'),
    regex_transform('strip_leading_garbage', r'^[|\d\s\[\]]+'),
    regex_transform('strip_special_chars', r'[^\w\s()-]'),
]


# =============================================================================
# PRODUCT NAMES FROM THE TEXT LAYER
# =============================================================================

PRODUCT_NAME_CLEANUP: List[CleanupTransform] = [
    regex_transform('strip_gst_suffix', r'\s+[A-Z]+-GST.*$', flags=re.IGNORECASE),
    regex_transform('strip_hsn_suffix', r'\s+[A-Z0-9-]*HSN.*$', flags=re.IGNORECASE),
    regex_transform('strip_rat_trap_sku', r'\s+RAT\s+TRAP-.*$', flags=re.IGNORECASE),
]

ITEM_ROW_CLEANUP: List[CleanupTransform] = [
    regex_transform('strip_leading_pipe_hash', r'^[|#]\s*'),
]


# =============================================================================
# AMAZON "ORDERED FROM" STORE NAME
# "Shopperskart pi -" / "Shopperskart a I" -> "Shopperskart"
# =============================================================================

ORDERED_FROM_CLEANUP: List[CleanupTransform] = [
    regex_transform('strip_pi_aa_noise', r'\s+(pi|aa)\s*[-~]?.*$', flags=re.IGNORECASE),
    regex_transform('strip_two_short_tokens', r'\s+[a-zA-Z]{1,2}\s+[a-zA-Z]{1,2}\s*$'),
    regex_transform('strip_short_token_symbol', r'\s+[a-zA-Z]{1,2}\s*[-~=|]?\s*$'),
    regex_transform('strip_trailing_symbol', r'\s+[-~=|]\s*$'),
    regex_transform('strip_trailing_non_alnum', r'[^a-zA-Z0-9.]+$'),
]


# =============================================================================
# CUSTOMER NAMES
# =============================================================================

def _title_case(text: str) -> str:
    return ' '.join(w[:1].upper() + w[1:].lower() for w in text.split())


CUSTOMER_NAME_CLEANUP: List[CleanupTransform] = [
    regex_transform('strip_leading_non_alpha', r'^[^a-zA-Z]+'),
    regex_transform('strip_trailing_non_alpha', r'[^a-zA-Z.\s]+$'),
    CleanupTransform('cut_at_comma', lambda text: re.split(r'[,\n]', text)[0].strip()),
    regex_transform(
        'cut_at_address_word',
        r'\s+(House|Floor|Flat|Block|Street|Road|Lane|Sector|Plot|Near|Opp|Behind'
        r'|Village|Dist|Tehsil|PO|Post)\b.*',
        flags=re.IGNORECASE
    ),
    CleanupTransform('title_case', _title_case),
]
