"""
Unit tests for region drawing.
"""

import numpy as np
import pytest

from face_age import FaceRegion, Image, InvalidRegionError
from face_age.visualize import draw_region


class TestDrawRegion:
    """Tests for draw_region()."""

    @pytest.fixture
    def image(self):
        return Image(np.zeros((100, 100, 3), dtype=np.uint8), "BGR")

    def test_returns_rgb_copy(self, image):
        canvas = draw_region(image, FaceRegion(10, 10, 50, 50))

        assert canvas.shape == (100, 100, 3)
        assert canvas.dtype == np.uint8
        assert image.pixels.max() == 0

    def test_outline_color(self, image):
        canvas = draw_region(image, FaceRegion(10, 10, 50, 50), color=(255, 0, 0), thickness=1)

        assert tuple(canvas[10, 30]) == (255, 0, 0)
        assert tuple(canvas[35, 35]) == (0, 0, 0)

    def test_no_region(self, image):
        canvas = draw_region(image, None)
        assert canvas.max() == 0

    def test_with_label(self, image):
        canvas = draw_region(image, FaceRegion(10, 40, 50, 50), label="25-32")
        assert canvas.max() > 0

    def test_invalid_region(self, image):
        with pytest.raises(InvalidRegionError):
            draw_region(image, FaceRegion(90, 90, 20, 20))
