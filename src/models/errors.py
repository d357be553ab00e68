"""
Error taxonomy for the classification pipeline.

Transient conditions (source warming up, model still loading) are not errors
and never raise. Everything here is raised deliberately:

- ConfigurationMismatchError: fatal, the run loop stops.
- ResourceExhaustedError: the current tick is dropped and retried next tick.
- ManifestError: the model catalog could not be loaded.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for pipeline errors."""


class ConfigurationMismatchError(PipelineError):
    """Static configuration does not match what the model or backend produces."""


class LabelTableMismatchError(ConfigurationMismatchError, LookupError):
    """A predicted class index has no entry in the label table."""

    def __init__(self, class_index: int, label_count: int):
        self.class_index = class_index
        self.label_count = label_count
        super().__init__(
            f"Class index {class_index} out of range for label table with "
            f"{label_count} entries"
        )


class ByteCountMismatchError(ConfigurationMismatchError, ValueError):
    """Pixel buffer size does not match width * height * 3."""


class ResourceExhaustedError(PipelineError):
    """A transfer surface or pixel buffer could not be allocated."""


class ManifestError(PipelineError):
    """The model manifest could not be fetched or parsed."""
