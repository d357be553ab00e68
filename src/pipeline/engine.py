"""
Pipeline engine for the frame classifier.

One tick runs the whole chain for the current frame:

    source.read -> calculate_input_dims -> transfer (scale + RGB readback)
    -> adapter.infer -> decode

Ticks never overlap. Configuration changes from other threads are queued and
applied at the start of the next tick. All mutable runtime values live in
PipelineState, owned by the engine.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

import cv2
import numpy as np

from catalog.manifest import ModelCatalog
from classification.decoder import decode
from classification.labels import LabelTable
from inference.adapter import InferenceAdapter
from inference.backend import InferenceResult
from models.errors import ConfigurationMismatchError, ResourceExhaustedError
from models.frame import FrameData, Resolution
from models.outcome import NotReady, Outcome, outcome_to_dict
from observation.base import LiveCaptureSpec
from observation.selector import SourceSelector
from observation.rtsp_utils import sanitize_url
from processing.dimensions import calculate_input_dims
from processing.transfer import TransferBufferManager
from .control import (
    ControlEvent,
    SelectComputeBackend,
    SelectDevice,
    SelectModel,
    SetConfidenceThreshold,
    UseLiveCapture,
)
from .overlay import FpsCounter, draw_overlay, prediction_text


@dataclass
class EngineConfig:
    """
    Configuration for the pipeline engine.

    Attributes:
        target_dim: Minimum edge length of the model input (clamped to >= 64).
        min_confidence: Confidence threshold, inclusive.
        use_live_capture: Start with the capture device instead of the image.
        capture: Requested capture device, resolution and rate.
        compute_backends: Compute backend names that may be selected.
        print_debug_messages: Log input dims and predictions every tick.
        display: Show an OpenCV window with the overlay.
        show_predicted_class: Overlay the prediction line.
        show_fps: Overlay the FPS line.
        text_color: Overlay text color (BGR).
        font_scale: Overlay font scale.
        fps_refresh_rate: Seconds between FPS value refreshes.
    """
    target_dim: int = 216
    min_confidence: float = 0.5
    use_live_capture: bool = False
    capture: LiveCaptureSpec = field(default_factory=LiveCaptureSpec)
    compute_backends: List[str] = field(default_factory=lambda: ["cpu"])
    print_debug_messages: bool = False
    display: bool = False
    show_predicted_class: bool = True
    show_fps: bool = True
    text_color: Tuple[int, int, int] = (0, 255, 255)
    font_scale: float = 0.7
    fps_refresh_rate: float = 0.1


@dataclass
class PipelineState:
    """Runtime values updated once per tick."""
    ready: bool = False
    result: InferenceResult = field(default_factory=lambda: InferenceResult(0, 0.0))
    outcome: Outcome = field(default_factory=NotReady)
    fps: int = 0
    frame_count: int = 0
    skipped_ticks: int = 0
    source_resolution: Optional[Resolution] = None
    target_resolution: Optional[Resolution] = None
    start_time: float = field(default_factory=time.time)
    last_frame_ts: Optional[float] = None


class ClassifierEngine:
    """
    Tick-driven classification pipeline.

    Example:
        engine = ClassifierEngine(selector, TransferBufferManager(), adapter, labels, config)
        engine.submit(SelectModel("asl-resnet18"))
        engine.run()
    """

    def __init__(
        self,
        selector: SourceSelector,
        transfer: TransferBufferManager,
        adapter: InferenceAdapter,
        labels: LabelTable,
        config: EngineConfig,
        catalog: Optional[ModelCatalog] = None,
    ):
        self.selector = selector
        self.transfer = transfer
        self.adapter = adapter
        self.labels = labels
        self.config = config
        self.catalog = catalog or ModelCatalog([])
        self.state = PipelineState()

        self._use_live_capture = config.use_live_capture
        self._capture_spec = config.capture
        self._threshold = config.min_confidence
        self._model_name: Optional[str] = None
        self._events: "queue.Queue[ControlEvent]" = queue.Queue()
        self._state_lock = threading.Lock()
        self._fps = FpsCounter(config.fps_refresh_rate)
        self._last_frame: Optional[FrameData] = None
        self._running = False
        self._started = False

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def use_live_capture(self) -> bool:
        return self._use_live_capture

    @property
    def model_name(self) -> Optional[str]:
        return self._model_name

    def submit(self, event: ControlEvent) -> None:
        """Queue a configuration change; safe to call from any thread."""
        self._events.put(event)

    def start(self) -> None:
        """Activate the initial source. Called by run(), or before manual ticks."""
        if self._started:
            return
        self._apply_source()
        self._started = True

    def tick(self) -> Optional[Outcome]:
        """
        Run one pass of the pipeline.

        Returns:
            The decoded outcome, or None if the tick was skipped (source not
            warmed up, no frame, transfer resources unavailable).

        Raises:
            ConfigurationMismatchError: Label table or buffer size does not
                match the model. Not recoverable.
        """
        self.start()
        self._apply_pending_events()

        source = self.selector.ensure_playing()
        if source is None:
            logging.debug("No frame source could be started, skipping tick")
            self._skip()
            return None
        if self._use_live_capture and not source.is_live:
            self._use_live_capture = False
        frame_data = source.read()
        if frame_data is None or not frame_data.is_warmed_up:
            logging.debug(f"{source.source_id} not ready, skipping tick")
            self._skip()
            return None

        target = self._track_resolution(frame_data.resolution)

        try:
            buffer = self.transfer.ensure(target)
            pixels = self.transfer.transfer(frame_data.frame, buffer)
        except ResourceExhaustedError as e:
            logging.warning(f"Transfer failed, retrying next tick: {e}")
            self._skip()
            return None

        if self.config.print_debug_messages:
            logging.debug(f"Input Dims: {target}")

        ready = self.adapter.infer(pixels, buffer.byte_count, target.width, target.height)
        result = self.adapter.result
        outcome = decode(result, ready, self.labels, self._threshold)

        if self.config.print_debug_messages:
            logging.debug(prediction_text(outcome) if ready else "Not Initialized")

        with self._state_lock:
            self.state.ready = ready
            self.state.result = result
            self.state.outcome = outcome
            self.state.frame_count += 1
            self.state.last_frame_ts = frame_data.timestamp
            self._last_frame = frame_data
        return outcome

    def run(self, max_ticks: Optional[int] = None) -> None:
        """
        Run ticks until stopped, interrupted or max_ticks is reached.

        Configuration mismatches are logged and re-raised; everything else
        that is recoverable is handled inside tick().
        """
        self._running = True
        ticks = 0
        try:
            self.start()
            logging.info(f"Pipeline started: source={self._current_source_id()}")
            while self._running:
                self.tick()
                with self._state_lock:
                    self.state.fps = self._fps.tick()

                if self.config.display and not self._handle_display():
                    break  # User pressed 'q'

                ticks += 1
                if max_ticks is not None and ticks >= max_ticks:
                    break
        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        except ConfigurationMismatchError as e:
            logging.critical(f"Configuration mismatch, stopping pipeline: {e}")
            raise
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Signal the pipeline to stop after the current tick."""
        self._running = False

    def snapshot(self) -> Dict[str, Any]:
        """Thread-safe copy of the current state for status endpoints."""
        with self._state_lock:
            state = self.state
            return {
                "ready": state.ready,
                "outcome": outcome_to_dict(state.outcome),
                "text": prediction_text(state.outcome),
                "fps": state.fps,
                "frame_count": state.frame_count,
                "skipped_ticks": state.skipped_ticks,
                "source_resolution": state.source_resolution.as_tuple() if state.source_resolution else None,
                "target_resolution": state.target_resolution.as_tuple() if state.target_resolution else None,
                "uptime_seconds": int(time.time() - state.start_time),
                "last_frame_ts": state.last_frame_ts,
                "use_live_capture": self._use_live_capture,
                "device_id": sanitize_url(self._capture_spec.device_id),
                "model": self._model_name,
                "compute_backend": self.adapter.compute_backend,
                "threshold": self._threshold,
            }

    def latest_frame(self) -> Optional[np.ndarray]:
        """Copy of the last classified frame (BGR), None before the first one."""
        with self._state_lock:
            if self._last_frame is None:
                return None
            return self._last_frame.frame.copy()

    def _skip(self) -> None:
        with self._state_lock:
            self.state.skipped_ticks += 1

    def _track_resolution(self, resolution: Resolution) -> Resolution:
        """Re-derive input dims whenever the actual source resolution changes."""
        with self._state_lock:
            if resolution != self.state.source_resolution or self.state.target_resolution is None:
                target = calculate_input_dims(resolution, self.config.target_dim)
                logging.info(
                    f"Source resolution {self.state.source_resolution} -> {resolution}, "
                    f"input dims {target}"
                )
                self.state.source_resolution = resolution
                self.state.target_resolution = target
            return self.state.target_resolution

    def _apply_pending_events(self) -> None:
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return
            self._apply_event(event)

    def _apply_event(self, event: ControlEvent) -> None:
        if isinstance(event, UseLiveCapture):
            self._use_live_capture = event.enabled
            self._apply_source()
        elif isinstance(event, SelectDevice):
            self._capture_spec = replace(self._capture_spec, device_id=event.device_id)
            logging.info(f"Selected capture device: {sanitize_url(event.device_id)}")
            if self._use_live_capture:
                self._apply_source()
        elif isinstance(event, SelectModel):
            self._select_model(event.name)
        elif isinstance(event, SelectComputeBackend):
            self._select_compute_backend(event.name)
        elif isinstance(event, SetConfidenceThreshold):
            self._threshold = min(max(float(event.value), 0.0), 1.0)
            logging.info(f"Confidence threshold set to {self._threshold}")
        else:
            logging.warning(f"Ignoring unknown control event: {event!r}")

    def _apply_source(self) -> None:
        if self._use_live_capture:
            if not self.selector.switch_to(self._capture_spec):
                # Keep the toggle consistent with what is actually running
                self._use_live_capture = False
        else:
            self.selector.switch_to(self.selector.fallback)

    def _select_model(self, name: str) -> None:
        with self._state_lock:
            self.state.ready = False
            self.state.outcome = NotReady()
        try:
            path = self.catalog.path_for(name)
            self.adapter.load_model(path)
        except Exception as e:
            logging.error(f"Failed to load model {name}: {e}")
            return
        self._model_name = name

    def _select_compute_backend(self, name: str) -> None:
        if name not in self.config.compute_backends:
            logging.warning(f"Unknown compute backend {name}, available: {self.config.compute_backends}")
            return
        with self._state_lock:
            self.state.ready = False
            self.state.outcome = NotReady()
        self.adapter.set_compute_backend(name)

    def _current_source_id(self) -> str:
        current = self.selector.current
        return current.source_id if current is not None else "none"

    def _handle_display(self) -> bool:
        """
        Show the last frame with the overlay.

        Returns False if user pressed 'q' to quit.
        """
        with self._state_lock:
            last_frame = self._last_frame
            outcome = self.state.outcome
            fps = self.state.fps
        if last_frame is not None:
            frame = last_frame.frame.copy()
            lines = []
            if self.config.show_predicted_class:
                lines.append(prediction_text(outcome))
            if self.config.show_fps:
                lines.append(f"FPS: {fps}")
            draw_overlay(frame, lines, tuple(self.config.text_color), self.config.font_scale)
            cv2.imshow("Frame Classifier", frame)
        key = cv2.waitKey(1) & 0xFF
        return key != ord('q')

    def _cleanup(self) -> None:
        self._running = False

        try:
            self.selector.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        self.transfer.release()

        if self.config.display:
            cv2.destroyAllWindows()

        logging.info("Pipeline stopped")
