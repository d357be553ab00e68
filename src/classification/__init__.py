"""
Label table and result decoding.
"""

from .labels import LabelTable
from .decoder import decode

__all__ = ["LabelTable", "decode"]
