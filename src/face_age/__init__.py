"""
Face Age - coarse age bracket estimation for a face in a photo

Locates a frontal face with an OpenCV Haar cascade and classifies its age
bracket with a pretrained Caffe network through OpenCV's DNN module.
"""

__version__ = "1.0.0"

from .classifier import argmax_first, classify, classify_gender, label_for, score
from .config import AGE_LABELS, GENDER_LABELS, INPUT_SIZE, MEAN_BGR, Config, LocatorParams
from .detector import FaceLocator, select_canonical
from .errors import (
    FaceAgeError,
    InvalidImageError,
    InvalidRegionError,
    LoadError,
    LoadErrorReason,
    ModelError,
    RequestCancelled,
)
from .image import FaceRegion, Image
from .inference import (
    AgeEstimator,
    CancellationToken,
    DetectionResult,
    EstimationResult,
    EstimationStatus,
    RequestSequencer,
    load_estimator,
)
from .models import ModelHandle, ModelSlot, load_model
from .preprocess import preprocess
from .runtime import initialize_runtime

__all__ = [
    "Config",
    "LocatorParams",
    "AGE_LABELS",
    "GENDER_LABELS",
    "INPUT_SIZE",
    "MEAN_BGR",
    "Image",
    "FaceRegion",
    "FaceLocator",
    "select_canonical",
    "preprocess",
    "ModelHandle",
    "ModelSlot",
    "load_model",
    "argmax_first",
    "label_for",
    "score",
    "classify",
    "classify_gender",
    "AgeEstimator",
    "CancellationToken",
    "RequestSequencer",
    "DetectionResult",
    "EstimationResult",
    "EstimationStatus",
    "load_estimator",
    "initialize_runtime",
    "FaceAgeError",
    "InvalidImageError",
    "InvalidRegionError",
    "LoadError",
    "LoadErrorReason",
    "ModelError",
    "RequestCancelled",
]
