"""
Exceptions raised by the label extraction pipeline.

Only ``DocumentReadError`` ends an extraction call. Everything raised by a
rendering, cropping or OCR stage is caught by the orchestrator and recorded
as a warning on the result, leaving the affected fields empty.

    LabelExtractionError
    ├── InputError
    │   └── DocumentReadError
    ├── RasterError
    │   ├── RenderError
    │   └── InvalidRegionError
    ├── OCRError
    │   ├── OCREngineNotAvailableError
    │   └── RecognitionError
    └── OutputError
        └── ExcelExportError
"""

from typing import Any, Dict, Optional


class LabelExtractionError(Exception):
    """
    Root of the hierarchy.

    Attributes:
        message: Short description, safe to show in result warnings.
        details: Extra context (paths, library error text) for logs.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class _SubjectError(LabelExtractionError):
    """Error about one subject (a file, a region, an engine) with an optional reason."""

    template = "{subject}"
    subject_key = "subject"

    def __init__(self, subject: str, reason: Optional[str] = None):
        self.subject = subject
        self.reason = reason
        details = {self.subject_key: subject}
        if reason is not None:
            details["reason"] = reason
        super().__init__(self.template.format(subject=subject), details)


class InputError(LabelExtractionError):
    """Problems with the input documents."""


class DocumentReadError(_SubjectError, InputError):
    """The PDF cannot be opened or parsed at all."""

    template = "Cannot read PDF document: {subject}"
    subject_key = "filepath"


class RasterError(LabelExtractionError):
    """Problems turning a page into pixels."""


class RenderError(_SubjectError, RasterError):
    """PDF-to-image conversion failed or timed out."""

    template = "Failed to render PDF page: {subject}"
    subject_key = "filepath"


class InvalidRegionError(_SubjectError, RasterError):
    """A crop request resolved to zero or negative size."""

    template = "Invalid crop region: {subject}"
    subject_key = "region"


class OCRError(LabelExtractionError):
    """Problems in the OCR engine."""


class OCREngineNotAvailableError(_SubjectError, OCRError):
    """Tesseract or its language data is missing."""

    template = "OCR engine not available: {subject}"
    subject_key = "engine"


class RecognitionError(_SubjectError, OCRError):
    """The engine failed on one image."""

    template = "Text recognition failed for: {subject}"
    subject_key = "source"


class OutputError(LabelExtractionError):
    """Writing results failed."""


class ExcelExportError(_SubjectError, OutputError):
    template = "Failed to export Excel file: {subject}"
    subject_key = "filepath"


__all__ = [
    'LabelExtractionError',
    'InputError',
    'DocumentReadError',
    'RasterError',
    'RenderError',
    'InvalidRegionError',
    'OCRError',
    'OCREngineNotAvailableError',
    'RecognitionError',
    'OutputError',
    'ExcelExportError',
]
