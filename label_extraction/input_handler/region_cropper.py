"""
Region Cropper Module.

Cuts rectangles out of a rendered page. A crop is either handed to the
line segmenter as grayscale pixels or encoded as PNG bytes for the OCR
engine. Bounds are given as page fractions (``Region``) or in pixels
(``PixelBox``) and are always clamped to the image.
"""

import io
from dataclasses import dataclass
from typing import Union

import numpy as np
from PIL import Image

from label_extraction.utils.logger import get_logger
from label_extraction.utils.exceptions import InvalidRegionError
from .rasterizer import RasterImage

logger = get_logger(__name__)


@dataclass(frozen=True)
class Region:
    """
    Fractional page bounds, each in [0, 1].

    Example:
        >>> Region(left=0.0, top=0.35, width=1.0, height=0.20)
    """
    left: float
    top: float
    width: float
    height: float


FULL_PAGE = Region(left=0.0, top=0.0, width=1.0, height=1.0)


@dataclass(frozen=True)
class PixelBox:
    """Pixel rectangle inside a raster image."""
    left: int
    top: int
    width: int
    height: int


@dataclass
class GrayscaleRegion:
    """
    Grayscale pixels of a crop.

    Attributes:
        pixels: uint8 array of shape (height, width); 0 is black.
        box: Where the crop sits in the source image.
    """
    pixels: np.ndarray
    box: PixelBox

    @property
    def width(self) -> int:
        return self.box.width

    @property
    def height(self) -> int:
        return self.box.height


class RegionCropper:
    """
    Crops raster images for density analysis and OCR.

    Example:
        >>> cropper = RegionCropper()
        >>> box = cropper.resolve(raster, Region(0, 0, 1, 0.3))
        >>> png = cropper.encode(raster, box)
    """

    def resolve(self, raster: RasterImage, region: Region) -> PixelBox:
        """
        Convert fractional bounds to a clamped pixel box.

        Raises:
            InvalidRegionError: If the box has no area.
        """
        left = int(raster.width * region.left)
        top = int(raster.height * region.top)
        width = int(raster.width * region.width)
        height = int(raster.height * region.height)
        return self.clamp(raster, left, top, width, height)

    def clamp(self, raster: RasterImage, left: int, top: int, width: int, height: int) -> PixelBox:
        """
        Clamp a pixel rectangle to the image bounds.

        Raises:
            InvalidRegionError: If the clamped width or height is not positive.
        """
        left = max(0, min(left, raster.width))
        top = max(0, min(top, raster.height))
        width = min(width, raster.width - left)
        height = min(height, raster.height - top)

        if width <= 0 or height <= 0:
            raise InvalidRegionError(
                f"left={left} top={top} width={width} height={height}",
                f"Image is {raster.width}x{raster.height}"
            )
        return PixelBox(left=left, top=top, width=width, height=height)

    def grayscale(self, raster: RasterImage, area: Union[Region, PixelBox]) -> GrayscaleRegion:
        """
        Crop and convert to 8-bit grayscale.

        Args:
            raster: Rendered page.
            area: Fractional region or pixel box.

        Returns:
            GrayscaleRegion with a (height, width) uint8 array.
        """
        box = self._to_box(raster, area)
        with Image.open(raster.path) as image:
            cropped = image.crop(_pil_box(box)).convert("L")
            pixels = np.asarray(cropped, dtype=np.uint8)
        return GrayscaleRegion(pixels=pixels, box=box)

    def encode(self, raster: RasterImage, area: Union[Region, PixelBox], fmt: str = "PNG") -> bytes:
        """
        Crop and encode as an image buffer for OCR.

        Args:
            raster: Rendered page.
            area: Fractional region or pixel box.
            fmt: Pillow output format.

        Returns:
            Encoded image bytes.
        """
        box = self._to_box(raster, area)
        buffer = io.BytesIO()
        with Image.open(raster.path) as image:
            image.crop(_pil_box(box)).save(buffer, format=fmt)
        return buffer.getvalue()

    def _to_box(self, raster: RasterImage, area: Union[Region, PixelBox]) -> PixelBox:
        if isinstance(area, Region):
            return self.resolve(raster, area)
        return self.clamp(raster, area.left, area.top, area.width, area.height)


def _pil_box(box: PixelBox):
    return (box.left, box.top, box.left + box.width, box.top + box.height)
