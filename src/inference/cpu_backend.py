"""
Ultralytics classification backend.

Runs YOLO classification models (e.g. yolov8n-cls.pt) through Ultralytics.
The compute backend name is passed straight through as the Ultralytics
device ("cpu", "cuda", "cuda:0", "mps").
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import numpy as np

from .backend import InferenceBackend

ModelLoader = Callable[[str], Any]


def _load_yolo(path: str) -> Any:
    try:
        from ultralytics import YOLO  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError(
            "Ultralytics is not installed. Install with `pip install ultralytics` "
            "or `pip install frame-classifier[yolo]`."
        ) from e
    return YOLO(path, task="classify")


@dataclass(frozen=True)
class CpuClassifierConfig:
    device: str = "cpu"
    imgsz: Optional[int] = None


class UltralyticsClassifierBackend(InferenceBackend):
    def __init__(self, cfg: CpuClassifierConfig, model_loader: ModelLoader = _load_yolo):
        self.cfg = cfg
        self._load = model_loader
        self._device = cfg.device
        self._model: Any = None
        self._output: Optional[np.ndarray] = None

    @property
    def device(self) -> str:
        return self._device

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def load_model(self, path: str, output: np.ndarray) -> None:
        self._model = None
        self._output = output
        self._model = self._load(path)
        logging.info(f"Classification model loaded: {path}")

    def set_compute_backend(self, name: str) -> None:
        self._device = name

    def infer(self, pixels: np.ndarray, byte_count: int, width: int, height: int) -> bool:
        if self._model is None or self._output is None:
            return False

        # Ultralytics expects BGR arrays, the buffer is RGB
        image = pixels[:byte_count].reshape(height, width, 3)[..., ::-1]
        kwargs = {"source": image, "device": self._device, "verbose": False}
        if self.cfg.imgsz is not None:
            kwargs["imgsz"] = self.cfg.imgsz
        results = self._model.predict(**kwargs)
        if not results:
            return False

        probs = getattr(results[0], "probs", None)
        if probs is None:
            raise RuntimeError("Model returned no class probabilities; is it a classification model?")

        conf = probs.top1conf
        conf = conf.item() if hasattr(conf, "item") else float(conf)
        self._output[0] = float(probs.top1)
        self._output[1] = conf
        return True
