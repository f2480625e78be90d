"""
Exception hierarchy for the face-age pipeline.

All errors inherit from FaceAgeError for unified handling. "No face found" is
deliberately absent: it is a result status, not a failure.
"""

from enum import Enum
from typing import Any, Optional


class FaceAgeError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional error details
    """

    code = "ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        result = {"code": self.code, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


class InvalidImageError(FaceAgeError, ValueError):
    """Pixel buffer is empty, has the wrong dtype, or does not match its channel order."""

    code = "INVALID_IMAGE"


class InvalidRegionError(FaceAgeError, ValueError):
    """Face rectangle is malformed or lies outside the image."""

    code = "INVALID_REGION"

    def __init__(self, message: str, region: Optional[tuple] = None):
        super().__init__(message, {"region": list(region)} if region is not None else None)


class LoadErrorReason(str, Enum):
    NOT_FOUND = "not_found"
    MALFORMED_TOPOLOGY = "malformed_topology"
    INCOMPATIBLE_WEIGHTS = "incompatible_weights"


class LoadError(FaceAgeError):
    """A model or detector artifact could not be turned into a usable handle."""

    code = "LOAD_ERROR"

    def __init__(self, message: str, reason: LoadErrorReason, path: Optional[str] = None):
        self.reason = reason
        self.path = path
        details = {"reason": reason.value}
        if path is not None:
            details["path"] = str(path)
        super().__init__(message, details)


class ModelError(FaceAgeError):
    """Inference needs a usable model, or the model produced an unexpected output."""

    code = "MODEL_ERROR"


class RequestCancelled(FaceAgeError):
    """An in-flight request was superseded or cancelled between stages."""

    code = "CANCELLED"

    def __init__(self, message: str = "Request cancelled"):
        super().__init__(message)
