"""Shared fixtures: fresh configuration, a fake OCR engine and a fake rasterizer."""

from pathlib import Path
from typing import List, Sequence, Tuple

import fitz
import pytest
from PIL import Image, ImageDraw

from config import CONFIG_ENV_VAR, ConfigurationManager
from label_extraction.input_handler import RasterImage


class FakeEngine:
    """OCR engine stand-in returning canned text, one response per call."""

    def __init__(self, responses: Sequence[str] = ()):
        self.responses = list(responses)
        self.images: List[bytes] = []
        self.terminate_calls = 0

    def recognize(self, image, source: str = "region") -> str:
        self.images.append(image)
        return self.responses.pop(0) if self.responses else ""

    def terminate(self) -> None:
        self.terminate_calls += 1


class EngineFactory:
    """Callable handed to OCRWorkerPool; records every engine it builds."""

    def __init__(self, responses: Sequence[str] = ()):
        self.responses = list(responses)
        self.created: List[FakeEngine] = []

    def __call__(self) -> FakeEngine:
        engine = FakeEngine(self.responses)
        self.created.append(engine)
        return engine


class FakeRasterizer:
    """
    Writes a white page with black full-width stripes instead of calling poppler.

    Stripes are (top, bottom) pixel rows.
    """

    def __init__(self, size: Tuple[int, int] = (1000, 1000), stripes: Sequence[Tuple[int, int]] = ()):
        self.size = size
        self.stripes = list(stripes)
        self.scales: List[int] = []

    def render(self, pdf_path, output_dir, scale: int) -> RasterImage:
        self.scales.append(scale)
        width, height = self.size
        image = Image.new("L", self.size, 255)
        draw = ImageDraw.Draw(image)
        for top, bottom in self.stripes:
            draw.rectangle([0, top, width - 1, bottom - 1], fill=0)

        path = Path(output_dir) / "page.png"
        image.save(path)
        return RasterImage(path=path, width=width, height=height, scale=scale)


def write_two_column_label(path):
    """Single-page label whose header has the brand and the courier in separate columns."""
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((40, 60), "SHOPPERS KART", fontsize=9)
    page.insert_text((400, 60), "SMARTR", fontsize=9)
    page.insert_text((40, 100), "Ship To: Amar Singh, 12 Lake Road, Bengaluru 560001", fontsize=9)
    page.insert_text((40, 120), "Order ID: ORD12345", fontsize=9)
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def temp_root(tmp_path):
    root = tmp_path / "work"
    root.mkdir()
    return root


@pytest.fixture
def make_raster(tmp_path):
    """Build a RasterImage on disk from a PIL image."""
    def _make(image: Image.Image, name: str = "raster.png") -> RasterImage:
        path = tmp_path / name
        image.save(path)
        return RasterImage(path=path, width=image.width, height=image.height, scale=max(image.size))
    return _make
