"""
Shared fixtures: a stand-in for cv2.dnn.Net so classifier, loader and pipeline
tests run without the real Caffe artifacts.
"""

from pathlib import Path

import cv2
import numpy as np
import pytest

from face_age import AGE_LABELS, Config, FaceRegion, Image, ModelHandle

AGE_SCORES = [0.1, 0.05, 0.6, 0.05, 0.05, 0.05, 0.05, 0.05]
GENDER_SCORES = [0.3, 0.7]


class FakeNet:
    """Mimics the parts of cv2.dnn.Net the package uses."""

    def __init__(self, scores, empty=False):
        self.scores = np.asarray(scores, dtype=np.float32).reshape(1, -1)
        self._empty = empty
        self.inputs = []
        self.forward_calls = 0

    def empty(self):
        return self._empty

    def setInput(self, blob, name=""):
        self.inputs.append((tuple(blob.shape), name))

    def forward(self, name=""):
        self.forward_calls += 1
        return self.scores.copy()


@pytest.fixture
def age_handle():
    return ModelHandle(FakeNet(AGE_SCORES), AGE_LABELS)


@pytest.fixture
def fake_caffe(monkeypatch):
    """
    Replace cv2.dnn.readNetFromCaffe.

    Returns a dict mapping topology file name -> scores; tests may edit it.
    Weights files whose content is b"corrupt" raise cv2.error like a bad
    caffemodel, and topology files containing b"garbage" fail to parse.
    Every created net is recorded under "nets".
    """
    registry = {
        "scores": {
            "deploy_age.prototxt": AGE_SCORES,
            "deploy_gender.prototxt": GENDER_SCORES,
        },
        "nets": [],
    }

    def read_net(prototxt, caffe_model=None):
        if b"garbage" in Path(prototxt).read_bytes():
            raise cv2.error("Failed to parse NetParameter file")
        if caffe_model is not None and Path(caffe_model).read_bytes() == b"corrupt":
            raise cv2.error("FAILED: ReadProtoFromBinaryFile")
        net = FakeNet(registry["scores"].get(Path(prototxt).name, AGE_SCORES))
        registry["nets"].append(net)
        return net

    monkeypatch.setattr(cv2.dnn, "readNetFromCaffe", read_net)
    return registry


@pytest.fixture
def bundle(tmp_path):
    """A bundle directory holding placeholder age and gender artifacts."""
    bundle_dir = tmp_path / "bundle"
    bundle_dir.mkdir()
    for name in ("deploy_age.prototxt", "deploy_gender.prototxt"):
        (bundle_dir / name).write_text('name: "CaffeNet"\n')
    for name in ("age_net.caffemodel", "gender_net.caffemodel"):
        (bundle_dir / name).write_bytes(b"\x00weights")
    return bundle_dir


@pytest.fixture
def config(bundle, tmp_path):
    return Config(bundle_dir=str(bundle), storage_dir=str(tmp_path / "storage"))


@pytest.fixture
def rgb_image():
    rng = np.random.default_rng(0)
    return Image(rng.integers(0, 256, (240, 320, 3), dtype=np.uint8), "RGB")


@pytest.fixture
def face_region():
    return FaceRegion(40, 30, 120, 150)
