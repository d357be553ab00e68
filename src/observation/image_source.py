"""
Static image source.

Serves the same still image on every read. Used as the default input and as
the fallback whenever a live capture device cannot be started.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

import cv2
import numpy as np

from models.frame import FrameData, Resolution
from .base import FrameSource, StaticImageSpec


class StaticImageSource(FrameSource):
    """
    Frame source backed by one BGR image.

    Example:
        with StaticImageSource(StaticImageSpec(path="assets/test_image.ppm")) as source:
            frame_data = source.read()
    """

    def __init__(self, spec: StaticImageSpec):
        source_id = f"image-{os.path.basename(spec.path)}" if spec.path else "image"
        super().__init__(source_id=source_id)
        self._spec = spec
        self._image: Optional[np.ndarray] = None

    @classmethod
    def from_array(cls, image: np.ndarray) -> "StaticImageSource":
        return cls(StaticImageSpec(image=image))

    @property
    def spec(self) -> StaticImageSpec:
        return self._spec

    @property
    def is_playing(self) -> bool:
        return self._image is not None

    @property
    def resolution(self) -> Resolution:
        if self._image is None:
            return Resolution(0, 0)
        return Resolution.of(self._image)

    def start(self) -> None:
        """
        Load the image.

        Raises:
            RuntimeError: If the image file cannot be read.
        """
        if self._spec.image is not None:
            self._image = self._spec.image
        else:
            image = cv2.imread(self._spec.path, cv2.IMREAD_COLOR)
            if image is None:
                raise RuntimeError(f"Failed to read image: {self._spec.path}")
            self._image = image
        self._frame_index = 0
        logging.info(f"Static image loaded: source_id={self.source_id}, resolution={self.resolution}")

    def read(self) -> Optional[FrameData]:
        if self._image is None:
            return None
        self._frame_index += 1
        return FrameData.from_numpy(
            self._image,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def stop(self) -> None:
        self._image = None
