"""
High-level face detection and age estimation actions.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from .artifacts import stage_model
from .classifier import classify, classify_gender, label_for, score
from .config import Config
from .detector import FaceLocator, select_canonical
from .errors import FaceAgeError, InvalidRegionError, LoadError, ModelError, RequestCancelled
from .image import FaceRegion, Image
from .models import ModelSlot
from .preprocess import preprocess
from .runtime import initialize_runtime

logger = logging.getLogger(__name__)


class EstimationStatus(str, Enum):
    ESTIMATED = "estimated"
    NO_FACE = "no_face"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class DetectionResult:
    """Regions found in one image and the one selected for estimation."""

    regions: tuple[FaceRegion, ...]
    selected: Optional[FaceRegion]

    @property
    def found(self) -> bool:
        return self.selected is not None


@dataclass(frozen=True)
class EstimationResult:
    """Outcome of one "estimate age" request."""

    status: EstimationStatus
    label: Optional[str] = None
    region: Optional[FaceRegion] = None
    scores: Optional[tuple[float, ...]] = None
    error: Optional[FaceAgeError] = None

    @property
    def ok(self) -> bool:
        return self.status is EstimationStatus.ESTIMATED

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "label": self.label,
            "region": list(self.region.as_tuple()) if self.region else None,
            "scores": list(self.scores) if self.scores is not None else None,
            "error": self.error.to_dict() if self.error else None,
        }


class CancellationToken:
    """Cancellation signal checked between pipeline stages."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelled()


class RequestSequencer:
    """Issues tokens so that only the most recent request stays live."""

    def __init__(self):
        self._lock = threading.Lock()
        self._current: Optional[CancellationToken] = None

    def begin(self) -> CancellationToken:
        token = CancellationToken()
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            self._current = token
        return token

    def cancel_all(self) -> None:
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            self._current = None


def _check(token: Optional[CancellationToken]) -> None:
    if token is not None:
        token.raise_if_cancelled()


class AgeEstimator:
    """
    Face detection and age estimation over process-wide model handles.

    Handles model staging/loading (synchronously or in the background), the
    "detect face" and "estimate age" actions, and sequenced requests.
    """

    def __init__(self, config: Optional[Config] = None, locator: Optional[FaceLocator] = None):
        """
        Initialize the estimator.

        Args:
            config: Configuration object
            locator: Face locator to use (built lazily from config if None)
        """
        self.config = config or Config()
        initialize_runtime(self.config.num_threads)

        self.age_model = ModelSlot(self.config.age_model(), self.config.input_size)
        self.gender_model = (
            ModelSlot(self.config.gender_model(), self.config.input_size)
            if self.config.enable_gender
            else None
        )

        self._locator = locator
        self._locator_lock = threading.Lock()
        self._sequencer = RequestSequencer()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="face-age")
        self._load_future: Optional[Future] = None

    # Model lifecycle

    def load_models(self) -> None:
        """
        Stage and load every configured model.

        A gender model failure is logged and leaves only that slot unusable;
        age estimation does not depend on it.

        Raises:
            LoadError: if an age artifact is missing or unusable; the slot
                stays unusable until a later successful load
        """
        self._load_slot(self.age_model)
        logger.info("Network loading success")

        if self.gender_model is not None:
            try:
                self._load_slot(self.gender_model)
            except LoadError as e:
                logger.warning("Gender model unavailable: %s", e.message)

    def _load_slot(self, slot: ModelSlot) -> None:
        try:
            topology, weights = stage_model(slot.spec, self.config.bundle_dir, self.config.storage_dir)
        except LoadError as e:
            slot.mark_failed(e)
            raise
        slot.load(topology, weights)

    def start_loading(self) -> Future:
        """Load models on the background worker; returns the pending future."""
        self._load_future = self._executor.submit(self.load_models)
        return self._load_future

    @property
    def ready(self) -> bool:
        return self.age_model.usable

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until background loading finishes; True once the age model is usable."""
        if self._load_future is not None:
            try:
                self._load_future.result(timeout=timeout)
            except FaceAgeError:
                pass
            except FutureTimeoutError:
                return False
        return self.ready

    @property
    def locator(self) -> FaceLocator:
        with self._locator_lock:
            if self._locator is None:
                self._locator = FaceLocator(self.config.cascade_path, self.config.locator)
            return self._locator

    # Actions

    def detect(self, image: Image, token: Optional[CancellationToken] = None) -> DetectionResult:
        """Locate faces and apply the canonical selection policy."""
        _check(token)
        regions = tuple(self.locator.locate(image, self.config.locator))
        selected = select_canonical(regions, self.config.selection_policy)
        if selected is None:
            logger.info("No face found in %dx%d image", image.width, image.height)
        return DetectionResult(regions=regions, selected=selected)

    def estimate(
        self, image: Image, region: FaceRegion, token: Optional[CancellationToken] = None
    ) -> EstimationResult:
        """Preprocess ``region`` of ``image`` and classify its age bracket."""
        try:
            _check(token)
            handle = self.age_model.require()
            tensor = preprocess(image, region, self.config.input_size, self.config.mean)
            _check(token)
            scores = score(handle, tensor)
            label = label_for(scores, handle.labels)
            _check(token)
        except RequestCancelled:
            return EstimationResult(EstimationStatus.CANCELLED, region=region)
        except (InvalidRegionError, ModelError) as e:
            logger.warning("Error processing age: %s", e.message)
            return EstimationResult(EstimationStatus.FAILED, region=region, error=e)

        logger.info("Result is: %s", label)
        return EstimationResult(
            EstimationStatus.ESTIMATED,
            label=label,
            region=region,
            scores=tuple(float(s) for s in scores),
        )

    def predict(self, image: Image, token: Optional[CancellationToken] = None) -> EstimationResult:
        """Run the full pipeline: detect, select, then estimate."""
        try:
            detection = self.detect(image, token)
        except RequestCancelled:
            return EstimationResult(EstimationStatus.CANCELLED)
        except LoadError as e:
            logger.warning("Error detecting face: %s", e.message)
            return EstimationResult(EstimationStatus.FAILED, error=e)

        if not detection.found:
            return EstimationResult(EstimationStatus.NO_FACE)
        return self.estimate(image, detection.selected, token)

    def submit(self, image: Image) -> Future:
        """
        Queue a full-pipeline request, cancelling whichever request came before.

        Returns:
            Future resolving to an EstimationResult
        """
        token = self._sequencer.begin()
        return self._executor.submit(self.predict, image, token)

    def estimate_gender(self, image: Image, region: FaceRegion) -> str:
        """Classify gender for a region (only when the gender model is enabled)."""
        if self.gender_model is None:
            raise ModelError("Gender classification is not enabled")
        tensor = preprocess(image, region, self.config.input_size, self.config.mean)
        return classify_gender(self.gender_model.require(), tensor)

    def classify_region(self, image: Image, region: FaceRegion) -> str:
        """Like estimate(), but raises instead of returning a FAILED result."""
        tensor = preprocess(image, region, self.config.input_size, self.config.mean)
        return classify(self.age_model.require(), tensor)

    def predict_batch(self, images: list[Image]) -> list[EstimationResult]:
        """
        Run the full pipeline over several images, one at a time.

        Args:
            images: List of images

        Returns:
            List of results in input order
        """
        results = []
        for image in images:
            results.append(self.predict(image))
        return results

    def benchmark(
        self,
        image: Image,
        region: Optional[FaceRegion] = None,
        num_runs: int = 100,
        warmup_runs: int = 10,
    ) -> dict:
        """
        Benchmark preprocessing plus inference latency.

        Args:
            image: Input image
            region: Face region (whole image if None)
            num_runs: Number of timed runs
            warmup_runs: Number of warmup runs

        Returns:
            Dictionary with timing statistics
        """
        region = region or FaceRegion(0, 0, image.width, image.height)
        handle = self.age_model.require()

        for _ in range(warmup_runs):
            score(handle, preprocess(image, region, self.config.input_size, self.config.mean))

        times = []
        for _ in range(num_runs):
            start = time.perf_counter()
            score(handle, preprocess(image, region, self.config.input_size, self.config.mean))
            end = time.perf_counter()
            times.append((end - start) * 1000)  # Convert to ms

        times = np.array(times)

        return {
            "mean_ms": float(np.mean(times)),
            "std_ms": float(np.std(times)),
            "min_ms": float(np.min(times)),
            "max_ms": float(np.max(times)),
            "median_ms": float(np.median(times)),
            "p95_ms": float(np.percentile(times, 95)),
            "p99_ms": float(np.percentile(times, 99)),
            "throughput_fps": float(1000 / np.mean(times)),
        }

    def close(self) -> None:
        self._sequencer.cancel_all()
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "AgeEstimator":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def load_estimator(config: Optional[Config] = None, background: bool = False) -> AgeEstimator:
    """
    Convenience function to build an estimator and load its models.

    Args:
        config: Configuration object (defaults to Config.from_env())
        background: Load on the worker thread instead of blocking

    Returns:
        AgeEstimator instance
    """
    estimator = AgeEstimator(config or Config.from_env())
    if background:
        estimator.start_loading()
    else:
        estimator.load_models()
    return estimator

