"""
OCR Engine Module for Label Extraction System.

This module provides OCR functionality including:
    - The Tesseract recognition backend
    - A shared, reference-counted engine pool with idle shutdown
    - Pixel-density segmentation of crops into text lines
"""

from .tesseract_backend import TesseractBackend
from .worker_pool import OCRWorkerPool, get_shared_pool
from .line_segmenter import LineSegmenter, TextLineBlob

__all__ = [
    'TesseractBackend',
    'OCRWorkerPool',
    'get_shared_pool',
    'LineSegmenter',
    'TextLineBlob',
]
