"""
Pytest configuration and shared fixtures.
"""

import os
import sys
import time

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models.frame import FrameData, Resolution
from observation.base import FrameSource, LiveCaptureSpec, StaticImageSpec


class MockSource(FrameSource):
    """In-memory frame source; records every open handle in a shared registry."""

    def __init__(self, spec, frame=None, playing_on_start=True, registry=None):
        if isinstance(spec, LiveCaptureSpec):
            source_id = f"mock-capture-{spec.device_id}"
        else:
            source_id = "mock-image"
        super().__init__(source_id=source_id)
        self._spec = spec
        self._frame = frame if frame is not None else np.zeros((720, 1280, 3), dtype=np.uint8)
        self._playing_on_start = playing_on_start
        self._playing = False
        self._registry = registry if registry is not None else []
        self.start_calls = 0
        self.stop_calls = 0

    @property
    def spec(self):
        return self._spec

    @property
    def is_live(self):
        return isinstance(self._spec, LiveCaptureSpec)

    @property
    def is_playing(self):
        return self._playing

    @property
    def resolution(self):
        return Resolution.of(self._frame) if self._playing else Resolution(0, 0)

    def set_frame(self, frame):
        self._frame = frame

    def start(self):
        self.start_calls += 1
        self._playing = self._playing_on_start
        if self._playing:
            self._registry.append(self)

    def read(self):
        if not self._playing:
            return None
        self._frame_index += 1
        return FrameData.from_numpy(
            self._frame,
            timestamp=time.time(),
            frame_index=self._frame_index,
            source=self.source_id,
        )

    def stop(self):
        self.stop_calls += 1
        if self._playing:
            self._playing = False
            self._registry.remove(self)


class MockSourceFactory:
    """
    Builds MockSources for a SourceSelector.

    Attributes:
        open_sources: Sources currently playing.
        max_open: Highest number of sources that were playing at once.
        created: Every source built, in order.
    """

    def __init__(self, frames=None, failing_devices=()):
        self.frames = frames or {}
        self.failing_devices = set(failing_devices)
        self.open_sources = []
        self.created = []
        self.max_open = 0

    def __call__(self, spec):
        key = spec.device_id if isinstance(spec, LiveCaptureSpec) else "image"
        playing = not (isinstance(spec, LiveCaptureSpec) and spec.device_id in self.failing_devices)
        source = _TrackingSource(self, spec, frame=self.frames.get(key), playing_on_start=playing)
        self.created.append(source)
        return source


class _TrackingSource(MockSource):
    def __init__(self, factory, spec, **kwargs):
        super().__init__(spec, registry=factory.open_sources, **kwargs)
        self._factory = factory

    def start(self):
        super().start()
        self._factory.max_open = max(self._factory.max_open, len(self._factory.open_sources))


class FakeBackend:
    """InferenceBackend that writes a fixed [class_index, confidence] result."""

    def __init__(self, class_index=3, confidence=0.82, fail_paths=()):
        self.class_index = class_index
        self.confidence = confidence
        self.fail_paths = set(fail_paths)
        self.output = None
        self.loaded = []
        self.device = None
        self.calls = []

    def load_model(self, path, output):
        if path in self.fail_paths:
            raise RuntimeError(f"cannot load {path}")
        self.output = output
        self.loaded.append(path)

    def set_compute_backend(self, name):
        self.device = name

    def infer(self, pixels, byte_count, width, height):
        self.calls.append((byte_count, width, height))
        self.output[0] = self.class_index
        self.output[1] = self.confidence
        return True


@pytest.fixture
def static_spec():
    return StaticImageSpec(image=np.zeros((720, 1280, 3), dtype=np.uint8))


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
source:
  use_live_capture: false
  device_id: 0
  resolution: [640, 480]
  fps: 30
  static_image: "assets/test_image.ppm"

classifier:
  target_dim: 216
  min_confidence: 0.5
  class_labels: "config/class_labels.json"

inference:
  backend: "ultralytics"
  compute_backends: ["cpu"]
  compute_backend: "cpu"
  manifest: "models/models.json"

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "source": {
            "use_live_capture": False,
            "device_id": 0,
            "resolution": [1280, 720],
            "fps": 60,
            "static_image": "assets/test_image.ppm",
        },
        "classifier": {
            "target_dim": 216,
            "min_confidence": 0.5,
            "class_labels": "config/class_labels.json",
        },
        "inference": {
            "backend": "ultralytics",
            "compute_backends": ["cpu", "cuda"],
            "compute_backend": "cpu",
            "manifest": "models/models.json",
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
