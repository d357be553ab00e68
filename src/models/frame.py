"""
Frame and resolution models for captured video frames.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


# Sources at or below this width have not produced a usable frame yet
MIN_READY_WIDTH = 16


@dataclass(frozen=True)
class Resolution:
    """Integer width x height pair."""
    width: int
    height: int

    @classmethod
    def of(cls, frame: np.ndarray) -> "Resolution":
        """Resolution of an image array shaped (height, width[, channels])."""
        h, w = frame.shape[:2]
        return cls(width=int(w), height=int(h))

    @property
    def is_landscape(self) -> bool:
        """True for landscape and square resolutions."""
        return self.width >= self.height

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def as_tuple(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass
class FrameData:
    """
    Metadata and payload for a captured video frame.

    Attributes:
        frame: The raw frame data as a numpy array (BGR format).
        width: Frame width in pixels.
        height: Frame height in pixels.
        timestamp: Unix timestamp when frame was captured.
        frame_index: Sequential frame number since the source started.
        source: Identifier for the camera/image source.
    """
    frame: np.ndarray
    width: int
    height: int
    timestamp: float
    frame_index: int = 0
    source: Optional[str] = None

    @classmethod
    def from_numpy(
        cls,
        frame: np.ndarray,
        timestamp: float,
        frame_index: int = 0,
        source: Optional[str] = None,
    ) -> "FrameData":
        """Create FrameData from a numpy array."""
        h, w = frame.shape[:2]
        return cls(
            frame=frame,
            width=w,
            height=h,
            timestamp=timestamp,
            frame_index=frame_index,
            source=source,
        )

    @property
    def resolution(self) -> Resolution:
        return Resolution(self.width, self.height)

    @property
    def is_warmed_up(self) -> bool:
        """Whether the frame is large enough to be processed."""
        return self.width > MIN_READY_WIDTH
