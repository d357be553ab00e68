"""
Inference backend interface.

A backend is loaded with a model path and a result vector. On every infer()
call it writes [class_index, confidence] into that same vector and returns
whether the result can be trusted. The vector is bound once per model load and
must not be resized while the model is loaded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import numpy as np

# [class_index, confidence]
RESULT_LENGTH = 2


@dataclass(frozen=True)
class InferenceResult:
    """
    Snapshot of the result vector after one inference call.

    Attributes:
        class_index: Predicted class index (float-encoded by the backend).
        confidence: Confidence score in [0, 1].
    """
    class_index: int
    confidence: float

    @classmethod
    def from_vector(cls, vector: np.ndarray) -> "InferenceResult":
        return cls(class_index=int(vector[0]), confidence=float(vector[1]))


class InferenceBackend(Protocol):
    def load_model(self, path: str, output: np.ndarray) -> None:
        ...

    def set_compute_backend(self, name: str) -> None:
        ...

    def infer(self, pixels: np.ndarray, byte_count: int, width: int, height: int) -> bool:
        ...
