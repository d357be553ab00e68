"""
Frame sources for the classification pipeline.

A source is either a live capture device or a static image. The selector owns
the single active source and handles switching and fallback.
"""

from .base import FrameSource, LiveCaptureSpec, StaticImageSpec, SourceSpec
from .devices import CaptureDevice, enumerate_capture_devices
from .image_source import StaticImageSource
from .opencv_source import LiveCaptureSource
from .selector import SourceSelector, create_source

__all__ = [
    "FrameSource",
    "LiveCaptureSpec",
    "StaticImageSpec",
    "SourceSpec",
    "CaptureDevice",
    "enumerate_capture_devices",
    "StaticImageSource",
    "LiveCaptureSource",
    "SourceSelector",
    "create_source",
]
