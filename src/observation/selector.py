"""
Active frame source ownership and the switch discipline.

Only one source is active at a time. Switching always stops the current
source before the next one starts, so two capture handles are never open
together. A capture device that does not report playing right after start is
released and the configured static image takes its place.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from .base import FrameSource, LiveCaptureSpec, SourceSpec, StaticImageSpec
from .devices import CaptureDevice
from .image_source import StaticImageSource
from .opencv_source import LiveCaptureSource
from .rtsp_utils import sanitize_url

SourceFactory = Callable[[SourceSpec], FrameSource]


def create_source(spec: SourceSpec) -> FrameSource:
    """Build an unstarted source for a spec."""
    if isinstance(spec, LiveCaptureSpec):
        return LiveCaptureSource(spec)
    return StaticImageSource(spec)


class SourceSelector:
    """
    Owns the active FrameSource.

    Example:
        selector = SourceSelector(StaticImageSpec(path="assets/test_image.ppm"), devices)
        selector.switch_to(LiveCaptureSpec(device_id=0))
        source = selector.ensure_playing()
    """

    def __init__(
        self,
        fallback: StaticImageSpec,
        devices: Sequence[CaptureDevice] = (),
        factory: SourceFactory = create_source,
    ):
        self._fallback = fallback
        self._devices: List[CaptureDevice] = list(devices)
        self._factory = factory
        self._current: Optional[FrameSource] = None
        self._stalled = False

    @property
    def current(self) -> Optional[FrameSource]:
        return self._current

    @property
    def fallback(self) -> StaticImageSpec:
        """Static image spec used when no capture device can run."""
        return self._fallback

    @property
    def devices(self) -> List[CaptureDevice]:
        return list(self._devices)

    @property
    def has_capture_devices(self) -> bool:
        return bool(self._devices)

    @property
    def is_live(self) -> bool:
        return self._current is not None and self._current.is_live

    def switch_to(self, spec: SourceSpec) -> bool:
        """
        Stop the active source and start the requested one.

        Live capture requests for a camera index are downgraded to the static
        image when no capture device was enumerated. URL and file device ids
        are not enumerable and are always attempted.

        Returns:
            True if the requested spec is now active, False if the static
            image fallback was started instead (or could not be started
            either, leaving no active source).
        """
        is_camera_index = isinstance(spec, LiveCaptureSpec) and isinstance(spec.device_id, int)
        if is_camera_index and not self.has_capture_devices:
            logging.info("Live capture requested but no capture devices available, using static image")
            self._start(self._fallback)
            return False

        source = self._start(spec)
        if source.is_playing:
            return True
        if spec == self._fallback:
            return False

        logging.warning(
            f"Capture device {sanitize_url(getattr(spec, 'device_id', '?'))} not playing, "
            f"reverting to static image"
        )
        self._start(self._fallback)
        return False

    def ensure_playing(self) -> Optional[FrameSource]:
        """
        Return the active source, restarting a live capture that stopped.

        Called at the start of every tick. Returns None while not even the
        static image can be started; the next call tries again.
        """
        if self._current is None:
            self._start(self._fallback)
        elif self._current.is_live and not self._current.is_playing:
            logging.warning(f"{self._current.source_id} stopped playing, restarting")
            self.switch_to(self._current.spec)
        return self._current

    def close(self) -> None:
        """Stop the active source."""
        if self._current is not None:
            self._current.stop()
            self._current = None

    def _start(self, spec: SourceSpec) -> FrameSource:
        self.close()
        source = self._factory(spec)
        try:
            source.start()
        except RuntimeError as e:
            if not self._stalled:
                logging.warning(f"Failed to start {source.source_id}: {e}")
            self._stalled = True
        if source.is_playing:
            self._current = source
            self._stalled = False
        else:
            source.stop()
        return source
