"""
Scale a source resolution to model input dimensions.

The shorter edge is set to the target dimension and the longer edge follows
the source aspect ratio. Arithmetic is done in float32 and truncated toward
zero so that buffer sizes match what the model side computes
(1280x720 at 216 gives 384x216, not 383x216).
"""

from __future__ import annotations

import numpy as np

from models.frame import Resolution

MIN_TARGET_DIM = 64


def calculate_input_dims(source: Resolution, target_dim: int) -> Resolution:
    """
    Scale the source resolution so its shorter edge equals target_dim.

    Args:
        source: Native resolution of the frame source (both edges >= 1).
        target_dim: Desired minimum edge length, clamped to at least 64.

    Returns:
        Resolution with the source aspect ratio preserved.
    """
    target_dim = max(int(target_dim), MIN_TARGET_DIM)
    target = np.float32(target_dim)

    if source.width >= source.height:
        scale = np.float32(source.height) / target
        width = int(np.float32(source.width) / scale)
        return Resolution(width=width, height=target_dim)

    scale = np.float32(source.width) / target
    height = int(np.float32(source.height) / scale)
    return Resolution(width=target_dim, height=height)
