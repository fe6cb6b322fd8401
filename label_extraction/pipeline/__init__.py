"""
Pipeline Module for Label Extraction System.

Entry points:
    - extract_label_metadata: one single-page label PDF
    - split_and_extract: a multi-page manifest, one result per page
"""

from .orchestrator import LabelExtractor, extract_label_metadata
from .page_splitter import PageSplitter, split_and_extract

__all__ = [
    'LabelExtractor',
    'extract_label_metadata',
    'PageSplitter',
    'split_and_extract',
]
