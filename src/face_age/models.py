"""
Loading of Caffe classification networks into ready-to-use handles.
"""

import logging
import threading
from pathlib import Path
from typing import Optional, Sequence, Union

import cv2
import numpy as np

from .config import INPUT_SIZE, ModelSpec
from .errors import LoadError, LoadErrorReason, ModelError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ModelHandle:
    """
    A loaded network plus the label table its output maps to.

    Immutable after construction. The underlying ``cv2.dnn.Net`` keeps its input
    and intermediate blobs on the object, so forward passes are serialized here
    and callers never need their own lock.
    """

    def __init__(
        self,
        net,
        labels: Sequence[str],
        name: str = "age",
        input_name: str = "data",
        output_name: str = "prob",
    ):
        self._net = net
        self._lock = threading.Lock()
        self.labels = tuple(labels)
        self.name = name
        self.input_name = input_name
        self.output_name = output_name

    @property
    def num_classes(self) -> int:
        return len(self.labels)

    @property
    def usable(self) -> bool:
        return self._net is not None and not self._net.empty()

    def forward(self, tensor: np.ndarray) -> np.ndarray:
        """
        Run one forward pass.

        Args:
            tensor: Input blob, shape (1, 3, H, W)

        Returns:
            Flat float32 score vector (a private copy)
        """
        if not self.usable:
            raise ModelError(f"{self.name} model is not loaded")

        with self._lock:
            try:
                self._net.setInput(tensor, self.input_name)
                output = self._net.forward(self.output_name)
            except cv2.error as e:
                raise ModelError(f"{self.name} forward pass failed: {e}") from e

        return np.array(output, dtype=np.float32).reshape(-1)

    def __repr__(self) -> str:
        return f"ModelHandle(name={self.name!r}, num_classes={self.num_classes}, usable={self.usable})"


def load_model(
    topology: PathLike,
    weights: PathLike,
    labels: Sequence[str],
    name: str = "age",
    input_name: str = "data",
    output_name: str = "prob",
    input_size: int = INPUT_SIZE,
) -> ModelHandle:
    """
    Load a Caffe network and verify it is usable.

    Usability is checked here with a probe forward pass over a zero tensor, so a
    broken model is reported at load time rather than on the first request.

    Args:
        topology: Path to the text-format network description (.prototxt)
        weights: Path to the binary weights (.caffemodel)
        labels: Label table; its length is the expected class count
        name: Name used in logs and errors
        input_name: Name of the network's input blob
        output_name: Name of the output layer to read scores from
        input_size: Spatial size of the probe tensor

    Returns:
        A usable ModelHandle

    Raises:
        LoadError: with reason NOT_FOUND, MALFORMED_TOPOLOGY or INCOMPATIBLE_WEIGHTS
    """
    topology, weights = Path(topology), Path(weights)
    logger.info("Loading %s model | proto: %s, weights: %s", name, topology, weights)

    for path in (topology, weights):
        if not path.is_file():
            raise LoadError(
                f"{name} model artifact not found: {path}", LoadErrorReason.NOT_FOUND, str(path)
            )

    try:
        cv2.dnn.readNetFromCaffe(str(topology))
    except cv2.error as e:
        raise LoadError(
            f"Malformed {name} topology {topology}: {e}",
            LoadErrorReason.MALFORMED_TOPOLOGY,
            str(topology),
        ) from e

    try:
        net = cv2.dnn.readNetFromCaffe(str(topology), str(weights))
    except cv2.error as e:
        raise LoadError(
            f"{name} weights {weights} do not fit topology {topology}: {e}",
            LoadErrorReason.INCOMPATIBLE_WEIGHTS,
            str(weights),
        ) from e

    if net is None or net.empty():
        raise LoadError(
            f"{name} network is empty after loading", LoadErrorReason.INCOMPATIBLE_WEIGHTS, str(weights)
        )

    handle = ModelHandle(net, labels, name=name, input_name=input_name, output_name=output_name)

    probe = np.zeros((1, 3, input_size, input_size), dtype=np.float32)
    try:
        scores = handle.forward(probe)
    except ModelError as e:
        raise LoadError(
            f"{name} network failed its probe forward pass: {e.message}",
            LoadErrorReason.INCOMPATIBLE_WEIGHTS,
            str(weights),
        ) from e

    if scores.size != handle.num_classes:
        raise LoadError(
            f"{name} network outputs {scores.size} classes, expected {handle.num_classes}",
            LoadErrorReason.INCOMPATIBLE_WEIGHTS,
            str(weights),
        )

    logger.info("%s model loaded (%d classes)", name, handle.num_classes)
    return handle


class ModelSlot:
    """
    Process-wide holder for one classifier's current handle.

    A failed load leaves the slot empty (unusable) until a later load succeeds.
    """

    def __init__(self, spec: ModelSpec, input_size: int = INPUT_SIZE):
        self.spec = spec
        self.input_size = input_size
        self.last_error: Optional[LoadError] = None
        self._handle: Optional[ModelHandle] = None
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def handle(self) -> Optional[ModelHandle]:
        return self._handle

    @property
    def usable(self) -> bool:
        handle = self._handle
        return handle is not None and handle.usable

    def load(self, topology: PathLike, weights: PathLike) -> ModelHandle:
        """Load artifacts into this slot, replacing any previous handle."""
        try:
            handle = load_model(
                topology,
                weights,
                self.spec.labels,
                name=self.spec.name,
                input_name=self.spec.input_name,
                output_name=self.spec.output_name,
                input_size=self.input_size,
            )
        except LoadError as e:
            self.mark_failed(e)
            raise

        with self._lock:
            self._handle = handle
            self.last_error = None
        return handle

    def require(self) -> ModelHandle:
        """Return the loaded handle or raise ModelError."""
        handle = self._handle
        if handle is None or not handle.usable:
            reason = f": {self.last_error.message}" if self.last_error else ""
            raise ModelError(f"{self.name} model is not loaded{reason}")
        return handle

    def mark_failed(self, error: LoadError) -> None:
        """Drop the current handle after a failed (re)load."""
        with self._lock:
            self._handle = None
            self.last_error = error
        logger.error("Network loading failed: %s", error.message)
