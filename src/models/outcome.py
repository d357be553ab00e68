"""
Classification outcomes produced by the result decoder.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class NotReady:
    """The backend has no trustworthy result (model missing or loading)."""

    def describe(self) -> str:
        return "Loading Model..."


@dataclass(frozen=True)
class BelowThreshold:
    """A prediction was made but its confidence is under the threshold."""
    confidence: float = 0.0

    def describe(self) -> str:
        return "None"


@dataclass(frozen=True)
class Classified:
    """
    A prediction at or above the confidence threshold.

    Attributes:
        label: Class name from the label table.
        confidence: Raw confidence score in [0, 1].
    """
    label: str
    confidence: float

    @property
    def confidence_percent(self) -> str:
        """Confidence as a percentage with two decimals, e.g. "82.00"."""
        return f"{self.confidence * 100:.2f}"

    def describe(self) -> str:
        return f"{self.label} {self.confidence_percent}%"


Outcome = Union[NotReady, BelowThreshold, Classified]


def outcome_to_dict(outcome: Outcome) -> dict:
    """Serialize an outcome for status endpoints."""
    if isinstance(outcome, Classified):
        return {
            "status": "classified",
            "label": outcome.label,
            "confidence": outcome.confidence,
            "confidence_percent": outcome.confidence_percent,
        }
    if isinstance(outcome, BelowThreshold):
        return {"status": "below_threshold", "confidence": outcome.confidence}
    return {"status": "not_ready"}
