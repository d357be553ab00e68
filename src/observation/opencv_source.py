"""
OpenCV-based live capture source.

Supports:
- USB webcams (device_id as int, e.g., 0)
- RTSP/IP cameras (device_id as str URL)
- Video files (device_id as file path)

The device may not honour the requested resolution; resolution always
reports what the capture handle or the last frame actually delivers.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

import cv2

from models.frame import FrameData, Resolution
from .base import FrameSource, LiveCaptureSpec
from .rtsp_utils import sanitize_url


class LiveCaptureSource(FrameSource):
    """
    Live capture device wrapping cv2.VideoCapture.

    Example:
        source = LiveCaptureSource(LiveCaptureSpec(device_id=0, resolution=(1280, 720)))
        source.start()
        if source.is_playing:
            frame_data = source.read()
    """

    def __init__(
        self,
        spec: LiveCaptureSpec,
        rtsp_transport: str = "tcp",
        buffer_size: int = 1,
        max_read_failures: int = 3,
    ):
        super().__init__(source_id=f"capture-{sanitize_url(spec.device_id)}")
        self._spec = spec
        self._rtsp_transport = rtsp_transport
        self._buffer_size = buffer_size
        self._max_read_failures = max_read_failures
        self._cap: Optional[cv2.VideoCapture] = None
        self._consecutive_failures = 0
        self._last_resolution: Optional[Resolution] = None

    @property
    def spec(self) -> LiveCaptureSpec:
        return self._spec

    @property
    def is_live(self) -> bool:
        return True

    @property
    def device_id(self):
        return self._spec.device_id

    @property
    def is_rtsp(self) -> bool:
        """Check if this is an RTSP stream."""
        return isinstance(self.device_id, str) and (
            self.device_id.startswith("rtsp://") or
            self.device_id.startswith("rtsps://")
        )

    @property
    def is_playing(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    @property
    def resolution(self) -> Resolution:
        if self._last_resolution is not None:
            return self._last_resolution
        if not self.is_playing:
            return Resolution(0, 0)
        return Resolution(
            int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )

    def start(self) -> None:
        """Open the capture device and request the configured format."""
        if self._cap is not None:
            self.stop()

        if self.is_rtsp:
            os.environ["OPENCV_FFMPEG_CAPTURE_OPTIONS"] = f"rtsp_transport;{self._rtsp_transport}"

        self._cap = cv2.VideoCapture(self.device_id)
        self._frame_index = 0
        self._consecutive_failures = 0
        self._last_resolution = None

        if not self._cap.isOpened():
            logging.warning(f"Failed to open capture device {sanitize_url(self.device_id)}")
            self._cap.release()
            self._cap = None
            return

        if isinstance(self.device_id, int):
            w, h = self._spec.resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            if self._spec.fps:
                self._cap.set(cv2.CAP_PROP_FPS, self._spec.fps)
            self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self._buffer_size)

        actual = self.resolution
        logging.info(
            f"Capture device {sanitize_url(self.device_id)} playing: "
            f"requested={self._spec.resolution[0]}x{self._spec.resolution[1]}, actual={actual}, "
            f"fps={self._cap.get(cv2.CAP_PROP_FPS)}"
        )

    def read(self) -> Optional[FrameData]:
        """Grab the latest frame; stops the handle after repeated failures."""
        if not self.is_playing:
            return None

        ret, frame = self._cap.read()
        if not ret or frame is None:
            self._consecutive_failures += 1
            if self._consecutive_failures >= self._max_read_failures:
                logging.error(
                    f"Too many consecutive read failures ({self._consecutive_failures}), "
                    f"stopping {sanitize_url(self.device_id)}"
                )
                self.stop()
            return None

        self._consecutive_failures = 0
        self._frame_index += 1
        frame_data = FrameData.from_numpy(
            frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )
        self._last_resolution = frame_data.resolution
        return frame_data

    def stop(self) -> None:
        """Release the capture handle."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logging.info(f"Capture device {sanitize_url(self.device_id)} stopped")
        self._last_resolution = None
