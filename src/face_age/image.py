"""
Image and face-region value types.
"""

import io
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union

import cv2
import numpy as np
from PIL import Image as PILImage
from PIL import ImageOps

from .errors import InvalidImageError, InvalidRegionError

CHANNEL_COUNTS = {"GRAY": 1, "RGB": 3, "BGR": 3, "RGBA": 4, "BGRA": 4}

# cvtColor codes from a native channel order; None means already in place
_TO_BGR = {
    "GRAY": cv2.COLOR_GRAY2BGR,
    "RGB": cv2.COLOR_RGB2BGR,
    "BGR": None,
    "RGBA": cv2.COLOR_RGBA2BGR,
    "BGRA": cv2.COLOR_BGRA2BGR,
}
_TO_GRAY = {
    "GRAY": None,
    "RGB": cv2.COLOR_RGB2GRAY,
    "BGR": cv2.COLOR_BGR2GRAY,
    "RGBA": cv2.COLOR_RGBA2GRAY,
    "BGRA": cv2.COLOR_BGRA2GRAY,
}
_TO_RGB = {
    "GRAY": cv2.COLOR_GRAY2RGB,
    "RGB": None,
    "BGR": cv2.COLOR_BGR2RGB,
    "RGBA": cv2.COLOR_RGBA2RGB,
    "BGRA": cv2.COLOR_BGRA2RGB,
}


def _convert(pixels: np.ndarray, code) -> np.ndarray:
    if code is None:
        return pixels.copy()
    return cv2.cvtColor(pixels, code)


def to_bgr(pixels: np.ndarray, channel_order: str) -> np.ndarray:
    """Convert an H x W (x C) buffer to 3-channel BGR."""
    return _convert(pixels, _TO_BGR[channel_order])


def to_gray(pixels: np.ndarray, channel_order: str) -> np.ndarray:
    """Convert an H x W (x C) buffer to a single 2-D grayscale plane."""
    gray = _convert(pixels, _TO_GRAY[channel_order])
    return gray.reshape(gray.shape[:2])


def to_rgb(pixels: np.ndarray, channel_order: str) -> np.ndarray:
    """Convert an H x W (x C) buffer to 3-channel RGB."""
    return _convert(pixels, _TO_RGB[channel_order])


@dataclass(frozen=True, eq=False)
class Image:
    """
    A captured pixel buffer and its channel order.

    The buffer is copied on construction so later changes to the caller's
    array never leak into a request.
    """

    pixels: np.ndarray
    channel_order: str = "RGB"

    def __post_init__(self):
        if self.channel_order not in CHANNEL_COUNTS:
            raise InvalidImageError(
                f"Unknown channel order: {self.channel_order}. "
                f"Available: {list(CHANNEL_COUNTS)}"
            )

        pixels = np.asarray(self.pixels)
        if pixels.dtype != np.uint8:
            raise InvalidImageError(f"Expected uint8 pixels, got {pixels.dtype}")

        expected = CHANNEL_COUNTS[self.channel_order]
        if pixels.ndim == 2 and expected == 1:
            pixels = pixels[:, :, np.newaxis]
        if pixels.ndim != 3 or pixels.shape[2] != expected:
            raise InvalidImageError(
                f"Shape {pixels.shape} does not match channel order {self.channel_order}"
            )
        if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
            raise InvalidImageError(f"Image must be non-empty, got shape {pixels.shape}")

        object.__setattr__(self, "pixels", np.ascontiguousarray(pixels).copy())

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2])

    def to_bgr(self) -> np.ndarray:
        return to_bgr(self.pixels, self.channel_order)

    def to_gray(self) -> np.ndarray:
        return to_gray(self.pixels, self.channel_order)

    def to_rgb(self) -> np.ndarray:
        return to_rgb(self.pixels, self.channel_order)

    @classmethod
    def from_array(cls, array: np.ndarray, channel_order: str = "RGB") -> "Image":
        return cls(array, channel_order)

    @classmethod
    def from_pil(cls, image: PILImage.Image) -> "Image":
        """Capture a PIL image, applying EXIF orientation and converting to RGB."""
        image = ImageOps.exif_transpose(image).convert("RGB")
        return cls(np.asarray(image), "RGB")

    @classmethod
    def from_bytes(cls, data: bytes) -> "Image":
        """Decode encoded image bytes (JPEG, PNG, ...)."""
        try:
            with PILImage.open(io.BytesIO(data)) as image:
                return cls.from_pil(image)
        except (OSError, SyntaxError) as e:
            raise InvalidImageError(f"Could not decode image: {e}") from e

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "Image":
        return cls.from_bytes(Path(path).read_bytes())


@dataclass(frozen=True)
class FaceRegion:
    """Integer rectangle in image pixel coordinates."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_sequence(cls, values: Sequence) -> "FaceRegion":
        """Build from an (x, y, width, height) sequence such as a cascade hit."""
        if len(values) != 4:
            raise InvalidRegionError(f"Expected 4 values, got {len(values)}", tuple(values))
        x, y, w, h = (int(v) for v in values)
        return cls(x, y, w, h)

    @property
    def area(self) -> int:
        return self.width * self.height

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    def validate(self, image: Image) -> "FaceRegion":
        """
        Check the region against an image.

        Raises:
            InvalidRegionError: if the rectangle is degenerate or out of bounds
        """
        region = self.as_tuple()
        if not all(isinstance(v, numbers.Integral) for v in region):
            raise InvalidRegionError(f"Region coordinates must be integers, got {region}", region)
        if self.width <= 0 or self.height <= 0:
            raise InvalidRegionError(
                f"Region must have positive size, got {self.width}x{self.height}", region
            )
        if self.x < 0 or self.y < 0:
            raise InvalidRegionError(
                f"Region origin must be non-negative, got ({self.x}, {self.y})", region
            )
        if self.x + self.width > image.width or self.y + self.height > image.height:
            raise InvalidRegionError(
                f"Region {region} exceeds image bounds {image.width}x{image.height}", region
            )
        return self
