"""Tests for pixel-density line segmentation."""

import numpy as np
import pytest

from label_extraction.input_handler import GrayscaleRegion, PixelBox
from label_extraction.ocr_engine import LineSegmenter, TextLineBlob


def striped(height: int, width: int, stripes) -> np.ndarray:
    pixels = np.full((height, width), 255, dtype=np.uint8)
    for top, bottom in stripes:
        pixels[top:bottom, :] = 0
    return pixels


def as_region(pixels: np.ndarray) -> GrayscaleRegion:
    height, width = pixels.shape
    return GrayscaleRegion(pixels=pixels, box=PixelBox(0, 0, width, height))


@pytest.fixture
def segmenter():
    return LineSegmenter(sample_stride=10, dark_threshold=200, line_threshold=5, min_blob_height=10)


class TestRowDensity:

    def test_counts_sampled_dark_pixels(self, segmenter):
        pixels = striped(4, 100, [(1, 2)])

        density = segmenter.compute_row_density(pixels)

        assert list(density) == [0, 10, 0, 0]

    def test_light_gray_is_not_dark(self, segmenter):
        pixels = np.full((3, 50), 220, dtype=np.uint8)

        assert segmenter.compute_row_density(pixels).sum() == 0

    def test_rejects_colour_arrays(self, segmenter):
        with pytest.raises(ValueError):
            segmenter.compute_row_density(np.zeros((4, 4, 3), dtype=np.uint8))


class TestBlobs:

    def test_finds_each_text_line(self, segmenter):
        pixels = striped(100, 200, [(20, 40), (60, 75)])

        blobs = segmenter.segment(as_region(pixels))

        assert blobs == [TextLineBlob(20, 20), TextLineBlob(60, 15)]

    def test_short_bands_are_dropped(self, segmenter):
        pixels = striped(100, 200, [(10, 15), (30, 41)])

        blobs = segmenter.segment(as_region(pixels))

        assert blobs == [TextLineBlob(30, 11)]

    def test_band_height_must_exceed_minimum(self, segmenter):
        pixels = striped(50, 200, [(10, 20)])

        assert segmenter.segment(as_region(pixels)) == []

    def test_blob_open_at_bottom_is_closed(self, segmenter):
        pixels = striped(100, 200, [(85, 100)])

        blobs = segmenter.segment(as_region(pixels))

        assert blobs == [TextLineBlob(85, 15)]
        assert blobs[0].end_row == 100

    def test_blank_region(self, segmenter):
        assert segmenter.segment(as_region(striped(80, 80, []))) == []

    def test_blobs_ascend_without_overlap(self, segmenter):
        rng = np.random.default_rng(7)

        for _ in range(25):
            pixels = rng.choice([0, 255], size=(300, 120), p=[0.3, 0.7]).astype(np.uint8)
            for top in rng.integers(0, 280, size=5):
                pixels[top:top + rng.integers(1, 30), :] = 0

            blobs = segmenter.segment(as_region(pixels))

            for blob in blobs:
                assert blob.height > segmenter.min_blob_height
            for earlier, later in zip(blobs, blobs[1:]):
                assert earlier.start_row < later.start_row
                assert earlier.end_row <= later.start_row
