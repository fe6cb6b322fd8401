"""
Output Handler Module for Label Extraction System.

This module provides functionality for:
    - JSON output of extraction results
    - Excel workbook generation (labels and product lines)
"""

from .handler import OutputHandler
from .excel_exporter import ExcelExporter

__all__ = ['OutputHandler', 'ExcelExporter']
