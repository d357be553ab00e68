"""
Tests for the HTTP control surface.
"""

import numpy as np
import pytest
from fastapi.testclient import TestClient

from catalog.manifest import ModelCatalog, ModelEntry
from classification.labels import LabelTable
from conftest import FakeBackend, MockSourceFactory
from inference.adapter import InferenceAdapter
from observation.base import StaticImageSpec
from observation.devices import CaptureDevice
from observation.selector import SourceSelector
from pipeline.control import SelectDevice, SelectModel, UseLiveCapture
from pipeline.engine import ClassifierEngine, EngineConfig
from processing.transfer import TransferBufferManager
from web.app import create_app
from web.routes.api import _compute_warnings


@pytest.fixture
def engine():
    factory = MockSourceFactory(frames={"image": np.zeros((720, 1280, 3), dtype=np.uint8)})
    selector = SourceSelector(StaticImageSpec(path="assets/test_image.ppm"), [CaptureDevice(0, "Camera 0")], factory=factory)
    catalog = ModelCatalog([ModelEntry("asl", "asl/model.pt")], base_dir="models")
    return ClassifierEngine(
        selector,
        TransferBufferManager(),
        InferenceAdapter(FakeBackend()),
        LabelTable(["cat", "dog", "fox", "owl"]),
        EngineConfig(compute_backends=["cpu", "cuda"]),
        catalog,
    )


@pytest.fixture
def client(engine):
    return TestClient(create_app(engine))


def _drain(engine):
    events = []
    while not engine._events.empty():
        events.append(engine._events.get_nowait())
    return events


class TestComputeWarnings:
    """Tests for warning computation logic."""

    def test_no_warnings_when_healthy(self):
        assert _compute_warnings(last_frame_age_s=0.5, ready=True) == []

    def test_source_stale_warning(self):
        warnings = _compute_warnings(last_frame_age_s=5.0, ready=True)
        assert "source_stale" in warnings
        assert "source_offline" not in warnings

    def test_source_offline_when_no_timestamp(self):
        assert "source_offline" in _compute_warnings(last_frame_age_s=None, ready=True)

    def test_model_not_ready(self):
        assert _compute_warnings(last_frame_age_s=0.5, ready=False) == ["model_not_ready"]


class TestStatusEndpoint:
    def test_status_before_first_tick(self, client):
        response = client.get("/api/status")

        assert response.status_code == 200
        data = response.json()
        assert data["running"] is False
        assert data["text"] == "Loading Model..."
        assert data["outcome"]["status"] == "not_ready"
        assert "source_offline" in data["warnings"]

    def test_status_after_tick(self, engine, client):
        engine.submit(SelectModel("asl"))
        engine.tick()

        data = client.get("/api/status").json()

        assert data["running"] is True
        assert data["ready"] is True
        assert data["text"] == "Predicted Class: owl 82.00%"
        assert data["outcome"]["confidence_percent"] == "82.00"
        assert data["source_resolution"] == [1280, 720]
        assert data["target_resolution"] == [384, 216]
        assert data["model"] == "asl"
        assert data["warnings"] == []

    def test_frame_unavailable_before_tick(self, client):
        assert client.get("/api/frame.jpg").status_code == 503

    def test_frame_jpeg(self, engine, client):
        engine.tick()
        response = client.get("/api/frame.jpg")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"


class TestOptionEndpoints:
    def test_devices(self, client):
        assert client.get("/api/devices").json() == [{"index": 0, "name": "Camera 0"}]

    def test_models(self, client):
        assert client.get("/api/models").json() == [{"name": "asl", "path": "asl/model.pt"}]

    def test_backends(self, client):
        assert client.get("/api/backends").json() == ["cpu", "cuda"]


class TestControlEndpoints:
    """POST routes only enqueue events."""

    def test_source_enqueues_device_then_toggle(self, engine, client):
        response = client.post("/api/source", json={"use_live_capture": True, "device_id": 0})

        assert response.status_code == 200
        assert _drain(engine) == [SelectDevice(0), UseLiveCapture(True)]
        assert engine.use_live_capture is False

    def test_source_unknown_device(self, engine, client):
        response = client.post("/api/source", json={"use_live_capture": True, "device_id": 5})

        assert response.status_code == 404
        assert _drain(engine) == []

    def test_model(self, engine, client):
        response = client.post("/api/model", json={"name": "asl"})

        assert response.status_code == 200
        assert response.json()["event"] == {"name": "asl"}
        assert _drain(engine) == [SelectModel("asl")]

    def test_unknown_model(self, client):
        assert client.post("/api/model", json={"name": "nope"}).status_code == 404

    def test_unknown_backend(self, client):
        assert client.post("/api/backend", json={"name": "tpu"}).status_code == 404

    def test_threshold_out_of_range(self, client):
        assert client.post("/api/threshold", json={"value": 1.5}).status_code == 422

    def test_threshold_applied_on_tick(self, engine, client):
        client.post("/api/threshold", json={"value": 0.9})
        assert engine.threshold == 0.5

        engine.tick()
        assert engine.threshold == 0.9
