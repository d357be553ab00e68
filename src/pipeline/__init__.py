"""
Pipeline module for the frame classifier.

The pipeline orchestrates one classification pass per tick:
- Frame acquisition from the active frame source
- Input dimension negotiation and buffer transfer
- Inference and result decoding
- Overlay display and status snapshots for the control surface
"""

from .engine import ClassifierEngine, EngineConfig, PipelineState
from .control import (
    ControlEvent,
    UseLiveCapture,
    SelectDevice,
    SelectModel,
    SelectComputeBackend,
    SetConfidenceThreshold,
)
from .overlay import FpsCounter, draw_overlay, prediction_text

__all__ = [
    "ClassifierEngine",
    "EngineConfig",
    "PipelineState",
    "ControlEvent",
    "UseLiveCapture",
    "SelectDevice",
    "SelectModel",
    "SelectComputeBackend",
    "SetConfidenceThreshold",
    "FpsCounter",
    "draw_overlay",
    "prediction_text",
]
