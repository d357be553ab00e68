"""
Transfer buffers for moving a scaled frame into a flat RGB pixel buffer.

A TransferBuffer pairs a 4-channel scratch surface (the render target the
source frame is scaled into) with the CPU-side RGB buffer the inference
backend reads. Both halves always have the same dimensions. The manager keeps
one pair alive and only replaces it when the target dimensions change, so a
steady stream of same-sized frames allocates nothing per tick.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from models.errors import ResourceExhaustedError
from models.frame import Resolution

# Conversion into the BGRA scratch surface, keyed by input channel count
_TO_SURFACE = {
    1: cv2.COLOR_GRAY2BGRA,
    3: cv2.COLOR_BGR2BGRA,
}


@dataclass
class TransferBuffer:
    """
    Scratch surface and pixel buffer allocated for one resolution.

    Attributes:
        resolution: Dimensions both halves were allocated for.
        surface: BGRA scratch surface, shape (height, width, 4).
        pixels: RGB readback buffer, shape (height, width, 3), C-contiguous.
    """
    resolution: Resolution
    surface: np.ndarray
    pixels: np.ndarray

    @property
    def byte_count(self) -> int:
        """Number of bytes handed to the backend (width * height * 3)."""
        return self.pixels.nbytes

    def flat(self) -> np.ndarray:
        """Flat uint8 view over the pixel buffer (no copy)."""
        return self.pixels.reshape(-1)


class SurfacePool:
    """
    Recycles scratch surfaces by size.

    Surfaces released when the target resolution changes are kept so that
    switching back to a previous resolution reuses memory instead of
    allocating again.
    """

    def __init__(self, max_free_per_size: int = 2):
        self._free: Dict[Tuple[int, int], List[np.ndarray]] = {}
        self._max_free_per_size = max_free_per_size
        self.allocated = 0

    @property
    def free_count(self) -> int:
        return sum(len(v) for v in self._free.values())

    def acquire(self, resolution: Resolution) -> np.ndarray:
        free = self._free.get(resolution.as_tuple())
        if free:
            return free.pop()
        try:
            surface = np.empty((resolution.height, resolution.width, 4), dtype=np.uint8)
        except MemoryError as e:
            raise ResourceExhaustedError(
                f"Failed to allocate {resolution} scratch surface"
            ) from e
        self.allocated += 1
        return surface

    def release(self, surface: np.ndarray) -> None:
        h, w = surface.shape[:2]
        free = self._free.setdefault((w, h), [])
        if len(free) < self._max_free_per_size:
            free.append(surface)

    def clear(self) -> None:
        self._free.clear()


class TransferBufferManager:
    """
    Owns the current TransferBuffer and performs the per-tick transfer.

    Example:
        manager = TransferBufferManager()
        buffer = manager.ensure(Resolution(384, 216))
        pixels = manager.transfer(frame_data.frame, buffer)
        backend.infer(pixels, buffer.byte_count, 384, 216)
    """

    def __init__(
        self,
        pool: Optional[SurfacePool] = None,
        interpolation: int = cv2.INTER_LINEAR,
    ):
        self._pool = pool or SurfacePool()
        self._interpolation = interpolation
        self._buffer: Optional[TransferBuffer] = None
        self._active: Optional[np.ndarray] = None
        self.reallocations = 0

    @property
    def buffer(self) -> Optional[TransferBuffer]:
        return self._buffer

    @property
    def active_surface(self) -> Optional[np.ndarray]:
        """Surface currently being read from, None between transfers."""
        return self._active

    def ensure(self, target: Resolution) -> TransferBuffer:
        """
        Return a buffer pair sized to target, reusing the current one if it fits.

        Raises:
            ResourceExhaustedError: If the surface or pixel buffer cannot be
                allocated. The previous buffer is left in place.
        """
        current = self._buffer
        if current is not None and current.resolution == target:
            return current

        surface = self._pool.acquire(target)
        try:
            pixels = np.empty((target.height, target.width, 3), dtype=np.uint8)
        except MemoryError as e:
            self._pool.release(surface)
            raise ResourceExhaustedError(f"Failed to allocate {target} pixel buffer") from e

        if current is not None:
            self._pool.release(current.surface)

        self._buffer = TransferBuffer(resolution=target, surface=surface, pixels=pixels)
        self.reallocations += 1
        logging.info(f"Transfer buffer allocated: {target} ({self._buffer.byte_count} bytes)")
        return self._buffer

    def transfer(self, frame: np.ndarray, buffer: TransferBuffer) -> np.ndarray:
        """
        Scale frame into the scratch surface and read it back as RGB.

        Args:
            frame: Source image, uint8 grey, BGR or BGRA.
            buffer: Buffer returned by ensure() for this tick.

        Returns:
            Flat uint8 RGB pixel buffer, top-left origin, no row padding.
            Overwritten by the next transfer.
        """
        if self._active is not None:
            raise RuntimeError("A transfer is already in progress")
        if frame.dtype != np.uint8:
            raise ValueError(f"Expected uint8 frame, got {frame.dtype}")

        w, h = buffer.resolution.as_tuple()
        self._active = buffer.surface
        try:
            scaled = cv2.resize(frame, (w, h), interpolation=self._interpolation)
            channels = 1 if scaled.ndim == 2 else scaled.shape[2]
            if channels == 4:
                np.copyto(buffer.surface, scaled)
            else:
                np.copyto(buffer.surface, cv2.cvtColor(scaled, _TO_SURFACE[channels]))
            np.copyto(buffer.pixels, cv2.cvtColor(buffer.surface, cv2.COLOR_BGRA2RGB))
        except MemoryError as e:
            raise ResourceExhaustedError(f"Out of memory during {w}x{h} transfer") from e
        finally:
            self._active = None

        return buffer.flat()

    def release(self) -> None:
        """Drop the current buffer and any pooled surfaces."""
        if self._buffer is not None:
            self._pool.release(self._buffer.surface)
            self._buffer = None
        self._pool.clear()
