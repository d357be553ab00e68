"""
Typed models for the frame classifier.

Frames and resolutions, classification outcomes, the error taxonomy and the
typed configuration views.
"""

from .frame import FrameData, Resolution, MIN_READY_WIDTH
from .outcome import Outcome, NotReady, BelowThreshold, Classified, outcome_to_dict
from .errors import (
    PipelineError,
    ConfigurationMismatchError,
    LabelTableMismatchError,
    ByteCountMismatchError,
    ResourceExhaustedError,
    ManifestError,
)
from .config import (
    Config,
    SourceConfig,
    ClassifierConfig,
    InferenceConfig,
    DisplayConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    "Resolution",
    "MIN_READY_WIDTH",
    # Outcomes
    "Outcome",
    "NotReady",
    "BelowThreshold",
    "Classified",
    "outcome_to_dict",
    # Errors
    "PipelineError",
    "ConfigurationMismatchError",
    "LabelTableMismatchError",
    "ByteCountMismatchError",
    "ResourceExhaustedError",
    "ManifestError",
    # Config
    "Config",
    "SourceConfig",
    "ClassifierConfig",
    "InferenceConfig",
    "DisplayConfig",
    "WebConfig",
]
