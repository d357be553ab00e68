"""
Frame processing stages that run before inference.

- dimensions: aspect-preserving target size calculation
- transfer: scratch surface + CPU pixel buffer reuse and readback
"""

from .dimensions import calculate_input_dims, MIN_TARGET_DIM
from .transfer import TransferBuffer, TransferBufferManager, SurfacePool

__all__ = [
    "calculate_input_dims",
    "MIN_TARGET_DIM",
    "TransferBuffer",
    "TransferBufferManager",
    "SurfacePool",
]
