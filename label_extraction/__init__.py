"""
Shipping Label Extraction System - Source Package.

Extracts courier, product lines and order number from shipping-label
PDFs, degrading from the native text layer to full-page OCR to
segmented region OCR.

Modules:
    - input_handler: Text layer, page splitting, rendering and cropping
    - ocr_engine: Tesseract backend, shared worker pool, line segmentation
    - extractors: Per-field strategy chains and format profiles
    - pipeline: Extraction orchestrator and page splitter
    - output_handler: JSON and Excel output
    - utils: Logging, exceptions and helpers

Architecture:
    Page Splitter → Orchestrator → Field Extractors
                                        ↓
                     Line Segmenter + OCR Worker Pool → Cropper → Rasterizer
"""

__version__ = "1.0.0"

__all__ = [
    'input_handler',
    'ocr_engine',
    'extractors',
    'pipeline',
    'output_handler',
    'utils'
]
