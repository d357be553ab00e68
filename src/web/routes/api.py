"""
Control and status routes.

Every POST only queues a control event on the engine; the change takes
effect at the start of the next pipeline tick.
"""

from __future__ import annotations

import time
from dataclasses import asdict
from typing import List, Optional

import cv2
from fastapi import APIRouter, HTTPException, Request, Response

from pipeline.control import (
    SelectComputeBackend,
    SelectDevice,
    SelectModel,
    SetConfidenceThreshold,
    UseLiveCapture,
)
from ..api_models import (
    AcceptedResponse,
    BackendRequest,
    DeviceModel,
    ModelInfo,
    ModelRequest,
    SourceRequest,
    StatusResponse,
    ThresholdRequest,
)

router = APIRouter()


def _engine(request: Request):
    return request.app.state.engine


def _compute_warnings(last_frame_age_s: Optional[float], ready: bool) -> List[str]:
    """
    Compute warning flags for the status endpoint.

    Thresholds:
    - source_stale: last_frame_age_s > 2
    - source_offline: last_frame_age_s > 10 or no frame yet
    - model_not_ready: last inference result not trustworthy
    """
    warnings = []

    if last_frame_age_s is None or last_frame_age_s > 10:
        warnings.append("source_offline")
    elif last_frame_age_s > 2:
        warnings.append("source_stale")

    if not ready:
        warnings.append("model_not_ready")

    return warnings


@router.get("/status", response_model=StatusResponse)
def status(request: Request):
    snap = _engine(request).snapshot()
    last_frame_ts = snap.pop("last_frame_ts")
    last_frame_age_s = (time.time() - last_frame_ts) if last_frame_ts else None
    warnings = _compute_warnings(last_frame_age_s, snap["ready"])
    return StatusResponse(
        running="source_offline" not in warnings,
        last_frame_age_s=last_frame_age_s,
        warnings=warnings,
        **snap,
    )


@router.get("/devices", response_model=List[DeviceModel])
def devices(request: Request):
    return [d.to_dict() for d in _engine(request).selector.devices]


@router.get("/models", response_model=List[ModelInfo])
def models(request: Request):
    return _engine(request).catalog.to_list()


@router.get("/backends", response_model=List[str])
def backends(request: Request):
    return list(_engine(request).config.compute_backends)


@router.get("/frame.jpg")
def frame_jpeg(request: Request):
    frame = _engine(request).latest_frame()
    if frame is None:
        raise HTTPException(status_code=503, detail="No frame available yet")
    ok, buf = cv2.imencode(".jpg", frame)
    if not ok:
        raise HTTPException(status_code=500, detail="Failed to encode JPEG")
    return Response(content=buf.tobytes(), media_type="image/jpeg")


@router.post("/source", response_model=AcceptedResponse)
def select_source(req: SourceRequest, request: Request):
    engine = _engine(request)
    events = []
    if req.device_id is not None:
        known = {d.index for d in engine.selector.devices}
        if isinstance(req.device_id, int) and req.device_id not in known:
            raise HTTPException(status_code=404, detail=f"Unknown capture device: {req.device_id}")
        events.append(SelectDevice(device_id=req.device_id))
    events.append(UseLiveCapture(enabled=req.use_live_capture))
    for event in events:
        engine.submit(event)
    return AcceptedResponse(event={"use_live_capture": req.use_live_capture, "device_id": req.device_id})


@router.post("/model", response_model=AcceptedResponse)
def select_model(req: ModelRequest, request: Request):
    engine = _engine(request)
    if req.name not in engine.catalog:
        raise HTTPException(status_code=404, detail=f"Unknown model: {req.name}")
    event = SelectModel(name=req.name)
    engine.submit(event)
    return AcceptedResponse(event=asdict(event))


@router.post("/backend", response_model=AcceptedResponse)
def select_backend(req: BackendRequest, request: Request):
    engine = _engine(request)
    if req.name not in engine.config.compute_backends:
        raise HTTPException(status_code=404, detail=f"Unknown compute backend: {req.name}")
    event = SelectComputeBackend(name=req.name)
    engine.submit(event)
    return AcceptedResponse(event=asdict(event))


@router.post("/threshold", response_model=AcceptedResponse)
def set_threshold(req: ThresholdRequest, request: Request):
    event = SetConfidenceThreshold(value=req.value)
    _engine(request).submit(event)
    return AcceptedResponse(event=asdict(event))
