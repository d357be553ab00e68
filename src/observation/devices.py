"""
Capture device enumeration.

OpenCV has no portable device listing, so indices are probed by opening and
immediately releasing each one. Run this once at startup, before any source
is started; probing an index that is already open by this process would fail.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

import cv2


@dataclass(frozen=True)
class CaptureDevice:
    """A capture device that could be opened during enumeration."""
    index: int
    name: str

    def to_dict(self) -> dict:
        return {"index": self.index, "name": self.name}


def enumerate_capture_devices(max_devices: int = 4) -> List[CaptureDevice]:
    """
    Probe camera indices 0..max_devices-1.

    Returns:
        Devices that opened successfully, in index order.
    """
    devices: List[CaptureDevice] = []
    for index in range(max(0, max_devices)):
        cap = cv2.VideoCapture(index)
        try:
            if cap.isOpened():
                devices.append(CaptureDevice(index=index, name=f"Camera {index}"))
        finally:
            cap.release()

    for device in devices:
        logging.info(f"Capture device found: {device.name}")
    if not devices:
        logging.info("No capture devices found, live capture disabled")
    return devices
