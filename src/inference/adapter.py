"""
Inference invocation adapter.

Sits between the pipeline and an InferenceBackend. It owns the result vector,
checks the buffer size contract before every call and tracks readiness.
Readiness is False until a model has been loaded and has produced a result,
and goes back to False whenever the model or compute backend changes.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from models.errors import ByteCountMismatchError
from .backend import RESULT_LENGTH, InferenceBackend, InferenceResult


class InferenceAdapter:
    """
    Calls the backend once per tick and exposes the latest result.

    The result vector is a single float32 array created here and handed to the
    backend on every model load. The backend is its only writer (during
    infer); the tick reads it right after infer returns.
    """

    def __init__(self, backend: InferenceBackend):
        self._backend = backend
        self._output = np.zeros(RESULT_LENGTH, dtype=np.float32)
        self._ready = False
        self._model_path: Optional[str] = None
        self._compute_backend: Optional[str] = None

    @property
    def output(self) -> np.ndarray:
        """The shared result vector bound to the backend."""
        return self._output

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def model_path(self) -> Optional[str]:
        return self._model_path

    @property
    def compute_backend(self) -> Optional[str]:
        return self._compute_backend

    @property
    def result(self) -> InferenceResult:
        return InferenceResult.from_vector(self._output)

    def load_model(self, path: str) -> None:
        """Load a model and bind the result vector to it."""
        self._ready = False
        self._model_path = None
        logging.info(f"Loading model: {path}")
        self._backend.load_model(path, self._output)
        self._model_path = path

    def set_compute_backend(self, name: str) -> None:
        self._ready = False
        logging.info(f"Setting compute backend: {name}")
        self._backend.set_compute_backend(name)
        self._compute_backend = name

    def infer(self, pixels: np.ndarray, byte_count: int, width: int, height: int) -> bool:
        """
        Submit one RGB pixel buffer.

        Args:
            pixels: Flat uint8 buffer of length width * height * 3.
            byte_count: Number of bytes in pixels.
            width: Image width.
            height: Image height.

        Returns:
            Whether the result vector holds a trustworthy prediction.

        Raises:
            ByteCountMismatchError: If byte_count, width, height and the
                buffer length disagree.
        """
        expected = width * height * 3
        if byte_count != expected or pixels.size != expected:
            raise ByteCountMismatchError(
                f"Pixel buffer mismatch: byte_count={byte_count}, buffer={pixels.size}, "
                f"expected {width}x{height}x3={expected}"
            )

        if self._model_path is None:
            self._ready = False
            return False

        try:
            self._ready = bool(self._backend.infer(pixels, byte_count, width, height))
        except Exception as e:
            logging.error(f"Inference failed with {self._model_path}: {e}")
            self._ready = False
        return self._ready
