"""
Result decoding.

Turns the backend's [class_index, confidence] vector into an Outcome:
NotReady when the backend has no trustworthy result, BelowThreshold when the
confidence is under the threshold, otherwise Classified. The threshold is
inclusive: a confidence equal to it passes. The comparison is done in float32,
the precision the backend writes confidence in, so a threshold of 0.82 passes
a confidence the backend wrote as 0.82.
"""

from __future__ import annotations

import numpy as np

from inference.backend import InferenceResult
from models.outcome import BelowThreshold, Classified, NotReady, Outcome
from .labels import LabelTable


def decode(result: InferenceResult, ready: bool, labels: LabelTable, threshold: float) -> Outcome:
    """
    Decode one inference result.

    Raises:
        LabelTableMismatchError: If the class index has no label.
    """
    if not ready:
        return NotReady()
    if np.float32(result.confidence) < np.float32(threshold):
        return BelowThreshold(confidence=result.confidence)
    return Classified(label=labels.label_for(result.class_index), confidence=result.confidence)
