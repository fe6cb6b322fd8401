"""
Rasterizer Module.

Renders page 1 of a PDF to a PNG on disk using poppler's pdftocairo,
driven through pdf2image. The output is sized by its longer edge
("-scale-to"), which keeps OCR input resolution stable across label
paper sizes.

The rendered file is written into a caller-provided directory and is
never removed here; the caller owns cleanup so one render can feed
many crops.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image
from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)

from config import get_config
from label_extraction.utils.logger import get_logger
from label_extraction.utils.exceptions import RenderError

logger = get_logger(__name__)


@dataclass(frozen=True)
class RasterImage:
    """
    A rendered page image on disk.

    Attributes:
        path: PNG file location.
        width: Width in pixels.
        height: Height in pixels.
        scale: Longer-edge size requested when rendering.
    """
    path: Path
    width: int
    height: int
    scale: int


class Rasterizer:
    """
    PDF page renderer backed by pdftocairo.

    Attributes:
        timeout: Wall-clock limit for the external process, in seconds.
        poppler_path: Optional directory holding the poppler binaries.

    Example:
        >>> rasterizer = Rasterizer()
        >>> raster = rasterizer.render("label.pdf", "/tmp/work", scale=2000)
        >>> raster.height
        2000
    """

    OUTPUT_STEM = "page"

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout if timeout is not None else get_config("render.timeout", 60)
        self.poppler_path = get_config("render.poppler_path")

        logger.debug(f"Rasterizer initialized (timeout={self.timeout}s)")

    def render(
        self,
        pdf_path: Union[str, Path],
        output_dir: Union[str, Path],
        scale: int
    ) -> RasterImage:
        """
        Render page 1 of a PDF.

        Args:
            pdf_path: Source PDF.
            output_dir: Existing directory that receives the PNG.
            scale: Target size of the longer edge, in pixels.

        Returns:
            RasterImage describing the rendered file.

        Raises:
            RenderError: If the conversion fails, times out or writes nothing.
        """
        pdf_path = Path(pdf_path)
        output_dir = Path(output_dir)
        logger.debug(f"Rendering {pdf_path.name} (scale-to {scale}px)")

        try:
            paths = convert_from_path(
                str(pdf_path),
                first_page=1,
                last_page=1,
                fmt="png",
                size=scale,
                output_folder=str(output_dir),
                output_file=self.OUTPUT_STEM,
                single_file=True,
                paths_only=True,
                use_pdftocairo=True,
                timeout=self.timeout,
                poppler_path=self.poppler_path,
            )
        except PDFPopplerTimeoutError as e:
            logger.error(f"Rendering timed out after {self.timeout}s: {pdf_path.name}")
            raise RenderError(str(pdf_path), f"Timed out: {e}")
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError, OSError) as e:
            logger.error(f"Rendering failed for {pdf_path.name}: {e}")
            raise RenderError(str(pdf_path), str(e))

        if not paths or not Path(paths[0]).is_file():
            raise RenderError(str(pdf_path), "PDF conversion produced no output file")

        image_path = Path(paths[0])
        try:
            with Image.open(image_path) as image:
                width, height = image.size
        except OSError as e:
            raise RenderError(str(pdf_path), f"Unreadable render output: {e}")

        logger.debug(f"Rendered {image_path.name}: {width}x{height}")
        return RasterImage(path=image_path, width=width, height=height, scale=scale)
