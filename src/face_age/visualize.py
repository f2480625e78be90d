"""
Drawing of detected face regions for display.
"""

from typing import Optional

import cv2
import numpy as np

from .image import FaceRegion, Image


def draw_region(
    image: Image,
    region: Optional[FaceRegion],
    label: Optional[str] = None,
    color: tuple[int, int, int] = (0, 255, 0),
    thickness: int = 2,
) -> np.ndarray:
    """
    Highlight a face region on an RGB copy of the image.

    Args:
        image: Source image (left untouched)
        region: Region to outline; None returns the plain RGB copy
        label: Optional caption drawn above the rectangle
        color: RGB outline color
        thickness: Outline thickness in pixels

    Returns:
        H x W x 3 uint8 RGB array
    """
    canvas = np.ascontiguousarray(image.to_rgb())
    if region is None:
        return canvas

    region.validate(image)
    x, y, w, h = region.as_tuple()
    cv2.rectangle(canvas, (x, y), (x + w - 1, y + h - 1), color, thickness)

    if label:
        (tw, th), baseline = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.7, 2)
        top = max(y - th - baseline - 4, 0)
        cv2.rectangle(canvas, (x, top), (x + tw + 6, top + th + baseline + 4), (0, 0, 0), -1)
        cv2.putText(
            canvas, label, (x + 3, top + th + 2), cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2
        )

    return canvas
