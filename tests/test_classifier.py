"""
Unit tests for score interpretation and classification.
"""

import numpy as np
import pytest

from face_age import (
    AGE_LABELS,
    GENDER_LABELS,
    ModelError,
    ModelHandle,
    argmax_first,
    classify,
    classify_gender,
    label_for,
    score,
)

from conftest import AGE_SCORES, FakeNet


@pytest.fixture
def tensor():
    return np.zeros((1, 3, 227, 227), dtype=np.float32)


class TestArgmax:
    """Tests for the first-maximum argmax."""

    def test_unique_maximum(self):
        assert argmax_first([0.1, 0.05, 0.6, 0.05, 0.05, 0.05, 0.05, 0.05]) == 2

    def test_tie_takes_lowest_index(self):
        assert argmax_first([0.1, 0.5, 0.1, 0.1, 0.5, 0.1, 0.05, 0.05]) == 1

    def test_all_equal(self):
        assert argmax_first([0.125] * 8) == 0

    def test_negative_scores(self):
        assert argmax_first(np.array([-3.0, -1.0, -2.0])) == 1

    def test_empty_raises(self):
        with pytest.raises(ModelError):
            argmax_first([])

    def test_label_for_length_mismatch(self):
        with pytest.raises(ModelError, match="expected 8"):
            label_for([0.5, 0.5], AGE_LABELS)


class TestClassify:
    """Tests for classify() over a model handle."""

    def test_unique_maximum_label(self, tensor):
        handle = ModelHandle(FakeNet(AGE_SCORES), AGE_LABELS)
        assert classify(handle, tensor) == "8-13"

    def test_tie_label(self, tensor):
        handle = ModelHandle(FakeNet([0.1, 0.5, 0.1, 0.1, 0.5, 0.1, 0.05, 0.05]), AGE_LABELS)
        assert classify(handle, tensor) == "4-6"

    @pytest.mark.parametrize("class_idx", range(8))
    def test_positional_mapping(self, tensor, class_idx):
        scores = [0.0] * 8
        scores[class_idx] = 1.0
        handle = ModelHandle(FakeNet(scores), AGE_LABELS)
        assert classify(handle, tensor) == AGE_LABELS[class_idx]

    def test_single_forward_pass(self, tensor):
        net = FakeNet(AGE_SCORES)
        classify(ModelHandle(net, AGE_LABELS), tensor)

        assert net.forward_calls == 1
        assert net.inputs == [((1, 3, 227, 227), "data")]

    def test_repeatable(self, age_handle, tensor):
        results = {classify(age_handle, tensor) for _ in range(5)}
        assert results == {"8-13"}

    def test_score_returns_copy(self, age_handle, tensor):
        scores = score(age_handle, tensor)
        scores[:] = 0
        assert classify(age_handle, tensor) == "8-13"

    def test_missing_handle_raises(self, tensor):
        with pytest.raises(ModelError, match="not initialized"):
            classify(None, tensor)

    def test_empty_net_raises(self, tensor):
        handle = ModelHandle(FakeNet(AGE_SCORES, empty=True), AGE_LABELS)
        with pytest.raises(ModelError):
            classify(handle, tensor)

    def test_output_shape_mismatch_raises(self, tensor):
        handle = ModelHandle(FakeNet([0.2] * 7), AGE_LABELS)
        with pytest.raises(ModelError, match="expected 8"):
            classify(handle, tensor)

    def test_label_table_mismatch_raises(self, age_handle, tensor):
        with pytest.raises(ModelError, match="label table"):
            classify(age_handle, tensor, GENDER_LABELS)


class TestGender:
    """Tests for the optional gender classifier."""

    def test_gender_label(self, tensor):
        handle = ModelHandle(FakeNet([0.3, 0.7]), GENDER_LABELS, name="gender")
        assert classify_gender(handle, tensor) == "female"

    def test_gender_tie_is_male(self, tensor):
        handle = ModelHandle(FakeNet([0.5, 0.5]), GENDER_LABELS, name="gender")
        assert classify_gender(handle, tensor) == "male"
