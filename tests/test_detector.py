"""
Unit tests for face localization and canonical selection.
"""

import numpy as np
import pytest

from face_age import (
    FaceLocator,
    FaceRegion,
    Image,
    LoadError,
    LoadErrorReason,
    LocatorParams,
    select_canonical,
)
from face_age.detector import default_cascade_path


class TestFaceLocator:
    """Tests for the Haar cascade locator."""

    @pytest.fixture(scope="class")
    def locator(self):
        return FaceLocator()

    def test_default_cascade_is_frontal_face(self, locator):
        assert locator.cascade_path == default_cascade_path()
        assert locator.cascade_path.endswith("haarcascade_frontalface_default.xml")
        assert locator.params == LocatorParams()

    def test_blank_image_has_no_faces(self, locator):
        image = Image(np.full((240, 320, 3), 128, dtype=np.uint8), "RGB")
        assert locator.locate(image) == []

    def test_smaller_than_min_size_has_no_faces(self, locator):
        image = Image(np.full((60, 60, 3), 128, dtype=np.uint8), "RGB")
        assert locator.locate(image) == []

    def test_deterministic(self, locator, rgb_image):
        first = locator.locate(rgb_image)
        second = locator.locate(rgb_image)

        assert first == second
        assert all(isinstance(region, FaceRegion) for region in first)

    def test_regions_are_within_bounds(self, locator, rgb_image):
        for region in locator.locate(rgb_image, LocatorParams(min_neighbors=0, min_size=(24, 24))):
            region.validate(rgb_image)

    def test_accepts_every_channel_order(self, locator, rgb_image):
        gray = Image(rgb_image.to_gray(), "GRAY")
        bgr = Image(rgb_image.to_bgr(), "BGR")
        assert locator.locate(gray) == locator.locate(bgr) == locator.locate(rgb_image)

    def test_missing_cascade(self, tmp_path):
        with pytest.raises(LoadError) as exc_info:
            FaceLocator(str(tmp_path / "missing.xml"))
        assert exc_info.value.reason is LoadErrorReason.NOT_FOUND

    def test_malformed_cascade(self, tmp_path):
        cascade = tmp_path / "broken.xml"
        cascade.write_text("<opencv_storage><cascade>nonsense</cascade></opencv_storage>")

        with pytest.raises(LoadError) as exc_info:
            FaceLocator(str(cascade))
        assert exc_info.value.reason is LoadErrorReason.MALFORMED_TOPOLOGY

    def test_non_xml_cascade(self, tmp_path):
        cascade = tmp_path / "garbage.xml"
        cascade.write_bytes(b"\x00\x01 not a cascade")

        with pytest.raises(LoadError) as exc_info:
            FaceLocator(str(cascade))
        assert exc_info.value.reason is LoadErrorReason.MALFORMED_TOPOLOGY


class TestSelectCanonical:
    """Tests for the canonical-face policy."""

    @pytest.fixture
    def regions(self):
        return [FaceRegion(0, 0, 70, 70), FaceRegion(100, 0, 90, 90), FaceRegion(200, 0, 90, 90)]

    def test_empty(self):
        assert select_canonical([]) is None
        assert select_canonical([], "largest") is None

    def test_first_is_default(self, regions):
        assert select_canonical(regions) == FaceRegion(0, 0, 70, 70)

    def test_largest_takes_earliest_on_ties(self, regions):
        assert select_canonical(regions, "largest") == FaceRegion(100, 0, 90, 90)

    def test_invalid_policy(self, regions):
        with pytest.raises(ValueError, match="Invalid selection policy"):
            select_canonical(regions, "confidence")
