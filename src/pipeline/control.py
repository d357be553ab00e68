"""
Configuration-change events.

The control surface (HTTP API, CLI) never touches the pipeline directly. It
submits one of these events; the engine applies all pending events at the
start of the next tick, before any frame is read, so a change can never land
in the middle of a transfer or inference call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class UseLiveCapture:
    """Toggle between the live capture device and the static image."""
    enabled: bool


@dataclass(frozen=True)
class SelectDevice:
    """Choose the capture device used when live capture is on."""
    device_id: Union[int, str]


@dataclass(frozen=True)
class SelectModel:
    """Load a model from the catalog by name."""
    name: str


@dataclass(frozen=True)
class SelectComputeBackend:
    name: str


@dataclass(frozen=True)
class SetConfidenceThreshold:
    value: float


ControlEvent = Union[
    UseLiveCapture,
    SelectDevice,
    SelectModel,
    SelectComputeBackend,
    SetConfidenceThreshold,
]
