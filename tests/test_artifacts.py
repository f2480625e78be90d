"""
Unit tests for artifact staging.
"""

import pytest

from face_age import Config, LoadError, LoadErrorReason
from face_age.artifacts import stage_artifact, stage_model


class TestStageArtifact:
    """Tests for copying bundled artifacts to local storage."""

    def test_copy_is_byte_identical(self, bundle, tmp_path):
        staged = stage_artifact("age_net.caffemodel", bundle, tmp_path / "storage")

        assert staged.is_absolute()
        assert staged.read_bytes() == (bundle / "age_net.caffemodel").read_bytes()

    def test_stale_copy_is_replaced(self, bundle, tmp_path):
        storage = tmp_path / "storage"
        staged = stage_artifact("age_net.caffemodel", bundle, storage)
        staged.write_bytes(b"stale")

        staged = stage_artifact("age_net.caffemodel", bundle, storage)

        assert staged.read_bytes() == b"\x00weights"

    def test_missing_artifact(self, bundle, tmp_path):
        with pytest.raises(LoadError) as exc_info:
            stage_artifact("missing.caffemodel", bundle, tmp_path / "storage")

        assert exc_info.value.reason is LoadErrorReason.NOT_FOUND

    def test_stage_model(self, bundle, tmp_path):
        topology, weights = stage_model(Config().age_model(), bundle, tmp_path / "storage")

        assert topology.name == "deploy_age.prototxt"
        assert weights.name == "age_net.caffemodel"
        assert topology.parent == weights.parent == (tmp_path / "storage").resolve()
