"""
Utility Module for Label Extraction System.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File and naming helpers
"""

from .logger import setup_logger, get_logger
from .helpers import (
    ensure_directory,
    generate_timestamp,
    normalize_lines,
    page_filename,
)

__all__ = [
    'setup_logger',
    'get_logger',
    'ensure_directory',
    'generate_timestamp',
    'normalize_lines',
    'page_filename',
]
