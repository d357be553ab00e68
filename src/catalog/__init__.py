"""
Model catalog: discovering model files and the models.json manifest.
"""

from .manifest import (
    ModelEntry,
    ModelCatalog,
    discover_models,
    write_manifest,
    parse_manifest,
    load_manifest,
)

__all__ = [
    "ModelEntry",
    "ModelCatalog",
    "discover_models",
    "write_manifest",
    "parse_manifest",
    "load_manifest",
]
