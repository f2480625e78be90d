"""
Configuration settings for face localization and age inference.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

# Age brackets, ordered to match the network's class index
AGE_LABELS = ("0-2", "4-6", "8-13", "15-20", "25-32", "38-43", "48-53", "60+")
GENDER_LABELS = ("male", "female")

NUM_AGE_CLASSES = len(AGE_LABELS)

# Spatial resolution of the Caffe age/gender networks
INPUT_SIZE = 227

# Per-channel means in blue, green, red order
MEAN_BGR = (114.895847746, 87.7689143744, 78.4263377603)

SELECTION_POLICIES = ("first", "largest")


@dataclass(frozen=True)
class LocatorParams:
    """Parameters for the multiscale cascade scan."""

    scale_factor: float = 1.1
    min_neighbors: int = 5
    min_size: tuple[int, int] = (65, 65)
    max_size: Optional[tuple[int, int]] = None


@dataclass(frozen=True)
class ModelSpec:
    """A classifier's artifacts and the label table its output maps to."""

    name: str
    topology: str
    weights: str
    labels: tuple[str, ...]
    input_name: str = "data"
    output_name: str = "prob"


@dataclass
class Config:
    """Runtime configuration."""

    # Artifact locations
    bundle_dir: str = "./models"
    storage_dir: str = "./.model_cache"
    age_topology: str = "deploy_age.prototxt"
    age_weights: str = "age_net.caffemodel"
    gender_topology: str = "deploy_gender.prototxt"
    gender_weights: str = "gender_net.caffemodel"
    enable_gender: bool = False

    # Face locator
    cascade_path: Optional[str] = None
    selection_policy: str = "first"  # "first", "largest"
    locator: LocatorParams = field(default_factory=LocatorParams)

    # Preprocessing
    input_size: int = INPUT_SIZE
    mean: tuple[float, float, float] = MEAN_BGR

    # Runtime
    num_threads: Optional[int] = None
    log_level: str = "INFO"

    def __post_init__(self):
        if self.selection_policy not in SELECTION_POLICIES:
            raise ValueError(
                f"Invalid selection policy: {self.selection_policy}. "
                f"Available: {list(SELECTION_POLICIES)}"
            )

    def age_model(self) -> ModelSpec:
        return ModelSpec("age", self.age_topology, self.age_weights, AGE_LABELS)

    def gender_model(self) -> ModelSpec:
        return ModelSpec("gender", self.gender_topology, self.gender_weights, GENDER_LABELS)

    @classmethod
    def from_env(cls, prefix: str = "FACE_AGE_") -> "Config":
        """
        Build a configuration from environment variables.

        Recognised variables (with the default prefix): FACE_AGE_BUNDLE_DIR,
        FACE_AGE_STORAGE_DIR, FACE_AGE_CASCADE_PATH, FACE_AGE_ENABLE_GENDER,
        FACE_AGE_SELECTION_POLICY, FACE_AGE_NUM_THREADS, FACE_AGE_LOG_LEVEL.
        """
        env = {k[len(prefix):].lower(): v for k, v in os.environ.items() if k.startswith(prefix)}
        config = cls()

        for name in ("bundle_dir", "storage_dir", "cascade_path", "selection_policy", "log_level"):
            if name in env:
                setattr(config, name, env[name])
        if "enable_gender" in env:
            config.enable_gender = env["enable_gender"].strip().lower() in ("1", "true", "yes", "on")
        if "num_threads" in env:
            config.num_threads = int(env["num_threads"])

        config.__post_init__()
        return config


def get_age_label(class_idx: int) -> str:
    """Get the bracket label for an age class index."""
    if 0 <= class_idx < NUM_AGE_CLASSES:
        return AGE_LABELS[class_idx]
    return "Unknown"
