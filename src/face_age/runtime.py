"""
Process-wide OpenCV runtime initialization.
"""

import logging
import threading
from typing import Optional

import cv2

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_version: Optional[str] = None


def initialize_runtime(num_threads: Optional[int] = None) -> str:
    """
    Initialize the OpenCV runtime once for the process.

    Safe to call from any thread and any number of times; only the first call
    has an effect.

    Args:
        num_threads: Worker thread count for OpenCV's parallel regions
            (None keeps OpenCV's default)

    Returns:
        The OpenCV version string
    """
    global _version

    with _lock:
        if _version is not None:
            return _version

        if num_threads is not None:
            cv2.setNumThreads(num_threads)

        _version = cv2.__version__
        logger.info(
            "OpenCV runtime initialized (version %s, threads %d)", _version, cv2.getNumThreads()
        )
        return _version
