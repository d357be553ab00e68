from __future__ import annotations

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field


class OutcomeModel(BaseModel):
    status: str = Field(..., description="classified|below_threshold|not_ready")
    label: Optional[str] = None
    confidence: Optional[float] = None
    confidence_percent: Optional[str] = None


class StatusResponse(BaseModel):
    """
    Pipeline status for UI polling.
    """
    running: bool = Field(..., description="True if frames are being classified")
    ready: bool = Field(..., description="True if the last inference result is trustworthy")
    outcome: OutcomeModel
    text: str
    fps: int
    frame_count: int
    skipped_ticks: int
    source_resolution: Optional[List[int]] = None
    target_resolution: Optional[List[int]] = None
    last_frame_age_s: Optional[float] = None
    uptime_seconds: int
    use_live_capture: bool
    device_id: str
    model: Optional[str] = None
    compute_backend: Optional[str] = None
    threshold: float
    warnings: List[str] = Field(default_factory=list)


class DeviceModel(BaseModel):
    index: int
    name: str


class ModelInfo(BaseModel):
    name: str
    path: str


class SourceRequest(BaseModel):
    use_live_capture: bool
    device_id: Optional[Union[int, str]] = None


class ModelRequest(BaseModel):
    name: str


class BackendRequest(BaseModel):
    name: str


class ThresholdRequest(BaseModel):
    value: float = Field(..., ge=0.0, le=1.0)


class AcceptedResponse(BaseModel):
    accepted: bool = True
    event: Dict[str, object]
