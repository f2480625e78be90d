"""
Frontal face localization with an OpenCV Haar cascade.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Sequence

import cv2

from .config import SELECTION_POLICIES, LocatorParams
from .errors import LoadError, LoadErrorReason
from .image import FaceRegion, Image

logger = logging.getLogger(__name__)

DEFAULT_CASCADE = "haarcascade_frontalface_default.xml"


def default_cascade_path() -> str:
    """Path of the frontal-face cascade shipped with opencv-python."""
    return str(Path(cv2.data.haarcascades) / DEFAULT_CASCADE)


class FaceLocator:
    """
    Multiscale sliding-window face detector.

    Raw hits are grouped by overlap and only groups with at least
    ``min_neighbors`` members are reported, in discovery order.
    """

    def __init__(self, cascade_path: Optional[str] = None, params: Optional[LocatorParams] = None):
        self.cascade_path = cascade_path or default_cascade_path()
        self.params = params or LocatorParams()

        if not Path(self.cascade_path).is_file():
            raise LoadError(
                f"Face cascade not found: {self.cascade_path}",
                LoadErrorReason.NOT_FOUND,
                self.cascade_path,
            )

        # Load into an empty classifier; the constructor reports parse errors as SystemError
        self._cascade = cv2.CascadeClassifier()
        try:
            loaded = self._cascade.load(self.cascade_path)
        except cv2.error as e:
            raise LoadError(
                f"Could not parse face cascade: {self.cascade_path}: {e}",
                LoadErrorReason.MALFORMED_TOPOLOGY,
                self.cascade_path,
            ) from e
        if not loaded or self._cascade.empty():
            raise LoadError(
                f"Could not parse face cascade: {self.cascade_path}",
                LoadErrorReason.MALFORMED_TOPOLOGY,
                self.cascade_path,
            )
        self._lock = threading.Lock()
        logger.info("Face cascade loaded from %s", self.cascade_path)

    def locate(self, image: Image, params: Optional[LocatorParams] = None) -> list[FaceRegion]:
        """
        Find candidate face rectangles.

        Args:
            image: Image to scan
            params: Scan parameters (defaults to the locator's own)

        Returns:
            Regions in discovery order; empty when no face is present
        """
        params = params or self.params
        gray = image.to_gray()

        kwargs = {
            "scaleFactor": params.scale_factor,
            "minNeighbors": params.min_neighbors,
            "minSize": tuple(params.min_size),
        }
        if params.max_size is not None:
            kwargs["maxSize"] = tuple(params.max_size)

        with self._lock:
            hits = self._cascade.detectMultiScale(gray, **kwargs)

        regions = [FaceRegion.from_sequence(hit) for hit in hits]
        logger.debug("Located %d face(s) in %dx%d image", len(regions), image.width, image.height)
        return regions


def select_canonical(regions: Sequence[FaceRegion], policy: str = "first") -> Optional[FaceRegion]:
    """
    Pick the single region carried forward for a request.

    "first" takes the detector's first hit. "largest" takes the region with the
    greatest area, the earliest one on ties.
    """
    if policy not in SELECTION_POLICIES:
        raise ValueError(f"Invalid selection policy: {policy}. Available: {list(SELECTION_POLICIES)}")
    if not regions:
        return None
    if policy == "largest":
        best = regions[0]
        for region in regions[1:]:
            if region.area > best.area:
                best = region
        return best
    return regions[0]
