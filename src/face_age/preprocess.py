"""
Conversion of a face region into the age network's input tensor.
"""

import cv2
import numpy as np

from .config import INPUT_SIZE, MEAN_BGR
from .image import FaceRegion, Image, to_bgr


def crop(image: Image, region: FaceRegion) -> np.ndarray:
    """Return the pixels inside ``region`` (validated against ``image``)."""
    region.validate(image)
    return image.pixels[region.y:region.y + region.height, region.x:region.x + region.width]


def preprocess(
    image: Image,
    region: FaceRegion,
    size: int = INPUT_SIZE,
    mean: tuple[float, float, float] = MEAN_BGR,
) -> np.ndarray:
    """
    Build the network input for one face.

    Steps run in a fixed order: crop, bilinear resize to size x size, convert to
    BGR, then lay out planar and subtract the per-channel means. Values are not
    scaled or clamped.

    Args:
        image: Source image
        region: Face rectangle inside ``image``
        size: Output spatial resolution
        mean: Per-channel means in B, G, R order

    Returns:
        float32 array of shape (1, 3, size, size)

    Raises:
        InvalidRegionError: if the region is degenerate or out of bounds
    """
    face = crop(image, region)
    resized = cv2.resize(face, (size, size), interpolation=cv2.INTER_LINEAR)
    bgr = to_bgr(resized, image.channel_order)

    # Already size x size and BGR, so the blob step only lays out planar and subtracts
    blob = cv2.dnn.blobFromImage(
        bgr, 1.0, (size, size), tuple(float(m) for m in mean), swapRB=False, crop=False
    )
    return np.ascontiguousarray(blob, dtype=np.float32)
