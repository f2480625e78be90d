"""
Staging of bundled model artifacts into private local storage.
"""

import logging
import shutil
from pathlib import Path
from typing import Union

from .config import ModelSpec
from .errors import LoadError, LoadErrorReason

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def stage_artifact(name: str, bundle_dir: PathLike, storage_dir: PathLike) -> Path:
    """
    Copy a bundled artifact byte-for-byte into local storage.

    The copy is refreshed on every call so a stale or truncated file left by a
    previous run is never trusted.

    Args:
        name: Artifact file name inside the bundle
        bundle_dir: Directory the application ships its artifacts in
        storage_dir: Private directory the loader reads from

    Returns:
        Absolute path of the staged copy
    """
    source = Path(bundle_dir) / name
    if not source.is_file():
        raise LoadError(f"Artifact not found: {source}", LoadErrorReason.NOT_FOUND, str(source))

    storage = Path(storage_dir)
    storage.mkdir(parents=True, exist_ok=True)
    target = storage / name

    try:
        shutil.copyfile(source, target)
    except OSError as e:
        raise LoadError(
            f"Could not stage {name}: {e}", LoadErrorReason.NOT_FOUND, str(source)
        ) from e

    logger.debug("Staged %s -> %s", source, target)
    return target.resolve()


def stage_model(spec: ModelSpec, bundle_dir: PathLike, storage_dir: PathLike) -> tuple[Path, Path]:
    """Stage a classifier's topology and weights, returning both local paths."""
    topology = stage_artifact(spec.topology, bundle_dir, storage_dir)
    weights = stage_artifact(spec.weights, bundle_dir, storage_dir)
    logger.info("%s model staged | proto: %s, weights: %s", spec.name, topology, weights)
    return topology, weights
