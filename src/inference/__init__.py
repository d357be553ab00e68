"""
Inference backends and the adapter the pipeline calls them through.
"""

from .backend import RESULT_LENGTH, InferenceBackend, InferenceResult
from .adapter import InferenceAdapter
from .cpu_backend import CpuClassifierConfig, UltralyticsClassifierBackend

__all__ = [
    "RESULT_LENGTH",
    "InferenceBackend",
    "InferenceResult",
    "InferenceAdapter",
    "CpuClassifierConfig",
    "UltralyticsClassifierBackend",
]
