"""
Label Document Module.

A LabelDocument is one single-page label PDF together with the private
temporary directory that holds its renders. Renders are produced lazily,
once per scale, and the whole directory is removed when the document is
closed, on success and on failure alike.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from config import get_config
from label_extraction.utils.logger import get_logger
from label_extraction.utils.exceptions import RenderError
from label_extraction.utils.helpers import ensure_directory
from .rasterizer import Rasterizer, RasterImage

logger = get_logger(__name__)


class LabelDocument:
    """
    Scoped workspace for one label PDF.

    Use as a context manager; the temp directory exists only inside the
    ``with`` block.

    Example:
        >>> with LabelDocument("label.pdf") as document:
        ...     raster = document.render(2000)
        ...     raster.path.exists()
        True
    """

    TEMP_PREFIX = "label-ocr-"

    def __init__(
        self,
        pdf_path: Union[str, Path],
        rasterizer: Optional[Rasterizer] = None,
        temp_root: Optional[Union[str, Path]] = None
    ) -> None:
        self.pdf_path = Path(pdf_path)
        self.rasterizer = rasterizer or Rasterizer()
        self.temp_root = temp_root if temp_root is not None else get_config("paths.temp_dir")
        self.temp_dir: Optional[Path] = None
        self._renders: Dict[int, RasterImage] = {}
        self._failures: Dict[int, RenderError] = {}

    def __enter__(self) -> 'LabelDocument':
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def open(self) -> None:
        """Create the private temp directory."""
        if self.temp_dir is not None:
            return
        if self.temp_root:
            ensure_directory(self.temp_root)
        self.temp_dir = Path(tempfile.mkdtemp(
            prefix=self.TEMP_PREFIX,
            dir=str(self.temp_root) if self.temp_root else None
        ))

    def close(self) -> None:
        """Delete every render and the temp directory itself."""
        if self.temp_dir is None:
            return
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        logger.debug(f"Removed workspace {self.temp_dir}")
        self.temp_dir = None
        self._renders.clear()
        self._failures.clear()

    def render(self, scale: int) -> RasterImage:
        """
        Render page 1 at the given scale, reusing an earlier render.

        A failed render is remembered so later stages do not rerun a
        conversion that already timed out.

        Raises:
            RenderError: If rasterization fails.
        """
        if self.temp_dir is None:
            self.open()

        if scale in self._renders:
            return self._renders[scale]
        if scale in self._failures:
            raise self._failures[scale]

        render_dir = self.temp_dir / f"scale-{scale}"
        render_dir.mkdir(exist_ok=True)
        try:
            raster = self.rasterizer.render(self.pdf_path, render_dir, scale)
        except RenderError as e:
            self._failures[scale] = e
            raise

        self._renders[scale] = raster
        return raster
