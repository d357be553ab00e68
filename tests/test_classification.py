"""
Tests for the label table and result decoding.
"""

import json

import numpy as np
import pytest

from classification.decoder import decode
from classification.labels import LabelTable
from inference.backend import InferenceResult
from models.errors import ConfigurationMismatchError, LabelTableMismatchError
from models.outcome import BelowThreshold, Classified, NotReady, outcome_to_dict

LABELS = LabelTable(["cat", "dog", "fox", "owl"])


class TestLabelTable:
    def test_from_json_classes_object(self):
        table = LabelTable.from_json(json.dumps({"classes": ["a", "b"]}))
        assert table.as_list() == ["a", "b"]

    def test_from_json_bare_list(self):
        assert len(LabelTable.from_json('["a", "b", "c"]')) == 3

    def test_from_json_rejects_empty(self):
        with pytest.raises(ValueError):
            LabelTable.from_json('{"classes": []}')

    def test_from_file(self, tmp_path):
        path = tmp_path / "class_labels.json"
        path.write_text(json.dumps({"classes": ["x", "y"]}))

        assert list(LabelTable.from_file(str(path))) == ["x", "y"]

    @pytest.mark.parametrize("index", [-1, 4, 100])
    def test_out_of_range_raises(self, index):
        with pytest.raises(LabelTableMismatchError) as exc_info:
            LABELS.label_for(index)
        assert exc_info.value.class_index == index
        assert exc_info.value.label_count == 4


class TestDecode:
    """Tests for decode."""

    def test_not_ready(self):
        assert decode(InferenceResult(3, 0.99), False, LABELS, 0.5) == NotReady()

    def test_classified(self):
        outcome = decode(InferenceResult(3, 0.82), True, LABELS, 0.5)

        assert outcome == Classified("owl", 0.82)
        assert outcome.confidence_percent == "82.00"

    def test_threshold_inclusive(self):
        """A confidence exactly at the threshold is classified."""
        assert isinstance(decode(InferenceResult(0, 0.5), True, LABELS, 0.5), Classified)

    def test_threshold_inclusive_after_float32_round_trip(self):
        """0.82 written into the float32 result vector still passes a 0.82 threshold."""
        vector = np.array([3, 0.82], dtype=np.float32)
        result = InferenceResult.from_vector(vector)

        assert result.confidence < 0.82
        assert decode(result, True, LABELS, 0.82) == Classified("owl", result.confidence)

    def test_just_below_threshold(self):
        outcome = decode(InferenceResult(0, float(np.nextafter(np.float32(0.5), np.float32(0)))), True, LABELS, 0.5)

        assert isinstance(outcome, BelowThreshold)
        assert outcome.describe() == "None"

    def test_below_threshold_does_not_check_labels(self):
        """Index validity only matters for a prediction that is shown."""
        assert isinstance(decode(InferenceResult(99, 0.1), True, LABELS, 0.5), BelowThreshold)

    def test_out_of_range_index_raises(self):
        with pytest.raises(ConfigurationMismatchError):
            decode(InferenceResult(4, 0.9), True, LABELS, 0.5)

    def test_negative_index_raises(self):
        with pytest.raises(LabelTableMismatchError):
            decode(InferenceResult(-1, 0.9), True, LABELS, 0.5)


class TestOutcome:
    def test_describe(self):
        assert NotReady().describe() == "Loading Model..."
        assert Classified("owl", 0.8234).describe() == "owl 82.34%"

    def test_to_dict(self):
        assert outcome_to_dict(Classified("owl", 0.82)) == {
            "status": "classified",
            "label": "owl",
            "confidence": 0.82,
            "confidence_percent": "82.00",
        }
        assert outcome_to_dict(BelowThreshold(0.2)) == {"status": "below_threshold", "confidence": 0.2}
        assert outcome_to_dict(NotReady()) == {"status": "not_ready"}
