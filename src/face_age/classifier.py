"""
Age (and optional gender) classification over a loaded network.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from .config import AGE_LABELS, GENDER_LABELS
from .errors import ModelError
from .models import ModelHandle

logger = logging.getLogger(__name__)


def argmax_first(scores: Sequence[float]) -> int:
    """Index of the largest score; the lowest index wins on exact ties."""
    if len(scores) == 0:
        raise ModelError("Cannot take argmax of an empty score vector")

    best_idx = 0
    best = scores[0]
    for idx in range(1, len(scores)):
        if scores[idx] > best:
            best = scores[idx]
            best_idx = idx
    return best_idx


def label_for(scores: Sequence[float], labels: Sequence[str] = AGE_LABELS) -> str:
    """Map a score vector to its label by position."""
    if len(scores) != len(labels):
        raise ModelError(f"Score vector has {len(scores)} entries, expected {len(labels)}")
    return labels[argmax_first(scores)]


def score(handle: Optional[ModelHandle], tensor: np.ndarray) -> np.ndarray:
    """
    Run one forward pass and return the score vector.

    Raises:
        ModelError: if the handle is missing or unusable, or its output length
            does not match its class count
    """
    if handle is None or not handle.usable:
        raise ModelError("Model handle is not initialized")

    scores = handle.forward(tensor)
    if scores.size != handle.num_classes:
        raise ModelError(
            f"{handle.name} network returned {scores.size} scores, expected {handle.num_classes}"
        )
    return scores


def classify(
    handle: Optional[ModelHandle], tensor: np.ndarray, labels: Sequence[str] = AGE_LABELS
) -> str:
    """Classify a preprocessed face tensor into one of ``labels``."""
    if handle is not None and handle.num_classes != len(labels):
        raise ModelError(
            f"{handle.name} model has {handle.num_classes} classes, label table has {len(labels)}"
        )
    scores = score(handle, tensor)
    label = label_for(scores, labels)
    logger.debug("Result is: %s (scores %s)", label, np.round(scores, 4).tolist())
    return label


def classify_gender(handle: Optional[ModelHandle], tensor: np.ndarray) -> str:
    return classify(handle, tensor, GENDER_LABELS)
