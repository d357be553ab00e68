"""
FrameSource interface for the two kinds of visual input.

A source is described by an immutable spec value:
- LiveCaptureSpec: a capture device with a requested resolution and rate
- StaticImageSpec: a still image read from disk (or given as an array)

The pipeline only needs four things from a running source: start/stop, whether
it is playing, its current resolution and its current frame. Switching input
means stopping one source and starting another built from a new spec; a
running source is never reconfigured in place.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from models.frame import FrameData, Resolution


@dataclass(frozen=True)
class LiveCaptureSpec:
    """
    Live capture device request.

    Attributes:
        device_id: Camera index (int) or capture URL/path (str).
        resolution: Requested (width, height). Devices may negotiate down.
        fps: Requested frame rate.
    """
    device_id: Union[int, str] = 0
    resolution: Tuple[int, int] = (1280, 720)
    fps: int = 60


@dataclass(frozen=True)
class StaticImageSpec:
    """
    Still image request.

    Attributes:
        path: Image file readable by cv2.imread.
        image: Pre-loaded BGR image; takes precedence over path.
    """
    path: Optional[str] = None
    image: Optional[np.ndarray] = None

    def __post_init__(self):
        if self.path is None and self.image is None:
            raise ValueError("StaticImageSpec needs a path or an image")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StaticImageSpec):
            return NotImplemented
        return self.path == other.path and self.image is other.image

    def __hash__(self) -> int:
        return hash((self.path, id(self.image)))


SourceSpec = Union[LiveCaptureSpec, StaticImageSpec]


class FrameSource(ABC):
    """
    Abstract base class for frame sources.

    Lifecycle:
        1. Create instance from a spec
        2. Call start(); check is_playing
        3. Call read() once per tick
        4. Call stop() to release the capture handle

    Can also be used as a context manager:
        with StaticImageSource(spec) as source:
            frame_data = source.read()
    """

    def __init__(self, source_id: str):
        self._source_id = source_id
        self._frame_index = 0

    @property
    def source_id(self) -> str:
        """Identifier for this source."""
        return self._source_id

    @property
    def frame_index(self) -> int:
        """Number of frames read since start."""
        return self._frame_index

    @property
    def is_live(self) -> bool:
        """Whether this source owns a capture handle."""
        return False

    @property
    @abstractmethod
    def spec(self) -> SourceSpec:
        """The spec this source was built from."""

    @property
    @abstractmethod
    def is_playing(self) -> bool:
        """Whether the source is started and able to produce frames."""

    @property
    @abstractmethod
    def resolution(self) -> Resolution:
        """Current native resolution, (0, 0) when unknown."""

    @abstractmethod
    def start(self) -> None:
        """
        Start the source.

        A live capture that fails to open does not raise; it reports
        is_playing == False and the caller decides what to fall back to.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """
        Return the current frame.

        Returns:
            FrameData, or None if no frame is available this tick.
        """

    @abstractmethod
    def stop(self) -> None:
        """Stop the source and release its handle. Safe to call multiple times."""

    def __enter__(self) -> "FrameSource":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
