"""
Tesseract OCR Backend.

This module provides the recognition engine used by the OCR worker pool.
Constructing a backend verifies that the Tesseract binary and the
requested language data are installed, which is the slow part of engine
start-up; the pool pays it once per burst of extraction calls.

Requirements:
    - Tesseract OCR installed on the system
    - pytesseract Python package
"""

import io
import time
from typing import Union

import pytesseract
from PIL import Image

from config import get_config
from label_extraction.utils.logger import get_logger
from label_extraction.utils.exceptions import OCREngineNotAvailableError, RecognitionError

logger = get_logger(__name__)


class TesseractBackend:
    """
    Tesseract OCR engine handle.

    Attributes:
        language: Tesseract language code (e.g., "eng")
        psm: Page Segmentation Mode (1-13)
        oem: OCR Engine Mode (0-3)
        extra_config: Additional Tesseract configuration
        timeout: Per-call limit in seconds, 0 for none

    Example:
        >>> backend = TesseractBackend()
        >>> backend.recognize(png_bytes)
        'Item description'
        >>> backend.terminate()
    """

    def __init__(self, language: str = None) -> None:
        """
        Initialize the Tesseract backend with configuration.

        Raises:
            OCREngineNotAvailableError: If Tesseract or the language is missing.
        """
        self.language = language or get_config("ocr.tesseract.lang", "eng")
        self.psm = get_config("ocr.tesseract.psm", 6)
        self.oem = get_config("ocr.tesseract.oem", 3)
        self.extra_config = get_config("ocr.tesseract.config", "")
        self.timeout = get_config("ocr.tesseract.timeout", 0)
        self._terminated = False

        self._check_dependencies()

        logger.debug(
            f"TesseractBackend initialized (lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_dependencies(self) -> None:
        """
        Check that Tesseract and the configured language data are available.

        Raises:
            OCREngineNotAvailableError: If Tesseract is not usable.
        """
        try:
            version = pytesseract.get_tesseract_version()
            logger.info(f"Tesseract version: {version}")
        except pytesseract.TesseractNotFoundError as e:
            raise OCREngineNotAvailableError("tesseract", f"Not installed or not in PATH: {e}")

        try:
            available = set(pytesseract.get_languages(config=""))
        except pytesseract.TesseractError as e:
            logger.debug(f"Could not list Tesseract languages: {e}")
            return

        missing = [lang for lang in self.language.split('+') if lang not in available]
        if missing:
            raise OCREngineNotAvailableError("tesseract", f"Language data missing: {', '.join(missing)}")

    def _build_config(self) -> str:
        """
        Build Tesseract configuration string.

        Returns:
            Configuration string for Tesseract.
        """
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]

        if self.extra_config:
            config_parts.append(self.extra_config)

        return ' '.join(config_parts)

    def recognize(self, image: Union[bytes, Image.Image], source: str = "region") -> str:
        """
        Recognize the text in one image.

        Args:
            image: Encoded image bytes or a PIL Image.
            source: Label used in logs and errors.

        Returns:
            Raw recognized text.

        Raises:
            RecognitionError: If the image is unreadable or Tesseract fails.
        """
        if self._terminated:
            raise RecognitionError(source, "Engine has been terminated")

        start_time = time.time()

        try:
            if isinstance(image, bytes):
                image = Image.open(io.BytesIO(image))
                image.load()

            text = pytesseract.image_to_string(
                image,
                lang=self.language,
                config=self._build_config(),
                timeout=self.timeout
            )
        except (pytesseract.TesseractError, RuntimeError, OSError) as e:
            logger.error(f"OCR failed for {source}: {e}")
            raise RecognitionError(source, str(e))

        logger.debug(f"OCR {source}: {len(text.strip())} chars ({time.time() - start_time:.2f}s)")
        return text

    def terminate(self) -> None:
        """Release the engine; further recognize() calls fail."""
        self._terminated = True
        logger.debug("TesseractBackend terminated")

    @property
    def is_terminated(self) -> bool:
        return self._terminated
