"""
Input Handler Module for Label Extraction System.

This module provides functionality for:
    - Reading the native PDF text layer
    - Counting and splitting PDF pages
    - Rendering page 1 to a raster image
    - Cropping rendered pages for segmentation and OCR
"""

from .pdf_processor import PDFProcessor, get_pdf_page_count
from .rasterizer import Rasterizer, RasterImage
from .region_cropper import RegionCropper, Region, PixelBox, GrayscaleRegion, FULL_PAGE
from .label_document import LabelDocument

__all__ = [
    'PDFProcessor',
    'get_pdf_page_count',
    'Rasterizer',
    'RasterImage',
    'RegionCropper',
    'Region',
    'PixelBox',
    'GrayscaleRegion',
    'FULL_PAGE',
    'LabelDocument',
]
