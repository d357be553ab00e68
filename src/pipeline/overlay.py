"""
On-screen overlay: predicted class text and frame rate.
"""

from __future__ import annotations

import time
from typing import Callable, Sequence, Tuple

import cv2
import numpy as np

from models.outcome import NotReady, Outcome


def prediction_text(outcome: Outcome) -> str:
    if isinstance(outcome, NotReady):
        return outcome.describe()
    return f"Predicted Class: {outcome.describe()}"


class FpsCounter:
    """
    Instantaneous frame rate, refreshed at most every refresh_rate seconds
    so the displayed value stays readable.
    """

    def __init__(self, refresh_rate: float = 0.1, clock: Callable[[], float] = time.perf_counter):
        self._refresh_rate = refresh_rate
        self._clock = clock
        self._last_tick = clock()
        self._next_refresh = 0.0
        self.fps = 0

    def tick(self) -> int:
        now = self._clock()
        delta = now - self._last_tick
        self._last_tick = now
        if now > self._next_refresh and delta > 0:
            self.fps = int(1.0 / delta)
            self._next_refresh = now + self._refresh_rate
        return self.fps


def draw_overlay(
    frame: np.ndarray,
    lines: Sequence[str],
    color: Tuple[int, int, int] = (0, 255, 255),
    font_scale: float = 0.7,
) -> np.ndarray:
    """Draw text lines top-left on frame (in place) and return it."""
    font = cv2.FONT_HERSHEY_SIMPLEX
    thickness = max(1, int(round(font_scale * 2)))
    y = 10
    for line in lines:
        (_, th), baseline = cv2.getTextSize(line, font, font_scale, thickness)
        y += th + baseline
        cv2.putText(frame, line, (10, y), font, font_scale, color, thickness, cv2.LINE_AA)
        y += th // 2
    return frame
