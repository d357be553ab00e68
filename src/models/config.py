"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class SourceConfig:
    """Frame source configuration."""
    use_live_capture: bool = False
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [1280, 720])
    fps: int = 60
    max_probe_devices: int = 4
    static_image: str = "assets/test_image.ppm"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SourceConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            use_live_capture=d.get("use_live_capture", False),
            device_id=d.get("device_id", 0),
            resolution=d.get("resolution", [1280, 720]),
            fps=d.get("fps", 60),
            max_probe_devices=d.get("max_probe_devices", 4),
            static_image=d.get("static_image", "assets/test_image.ppm"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "use_live_capture": self.use_live_capture,
            "device_id": self.device_id,
            "resolution": self.resolution,
            "fps": self.fps,
            "max_probe_devices": self.max_probe_devices,
            "static_image": self.static_image,
        }


@dataclass
class ClassifierConfig:
    """Pre- and post-processing around the model."""
    target_dim: int = 216
    min_confidence: float = 0.5
    class_labels: str = "config/class_labels.json"
    print_debug_messages: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ClassifierConfig":
        return cls(
            target_dim=d.get("target_dim", 216),
            min_confidence=d.get("min_confidence", 0.5),
            class_labels=d.get("class_labels", "config/class_labels.json"),
            print_debug_messages=d.get("print_debug_messages", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_dim": self.target_dim,
            "min_confidence": self.min_confidence,
            "class_labels": self.class_labels,
            "print_debug_messages": self.print_debug_messages,
        }


@dataclass
class InferenceConfig:
    """Inference backend and model catalog configuration."""
    backend: str = "ultralytics"
    compute_backends: List[str] = field(default_factory=lambda: ["cpu"])
    compute_backend: str = "cpu"
    models_dir: str = "models"
    manifest: str = "models/models.json"
    model: Optional[str] = None
    model_suffixes: List[str] = field(default_factory=lambda: [".pt", ".onnx"])

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "InferenceConfig":
        return cls(
            backend=d.get("backend", "ultralytics"),
            compute_backends=d.get("compute_backends", ["cpu"]),
            compute_backend=d.get("compute_backend", "cpu"),
            models_dir=d.get("models_dir", "models"),
            manifest=d.get("manifest", "models/models.json"),
            model=d.get("model"),
            model_suffixes=d.get("model_suffixes", [".pt", ".onnx"]),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "backend": self.backend,
            "compute_backends": self.compute_backends,
            "compute_backend": self.compute_backend,
            "models_dir": self.models_dir,
            "manifest": self.manifest,
            "model_suffixes": self.model_suffixes,
        }
        if self.model is not None:
            d["model"] = self.model
        return d


@dataclass
class DisplayConfig:
    """On-screen window and overlay text."""
    enabled: bool = False
    show_predicted_class: bool = True
    show_fps: bool = True
    text_color: List[int] = field(default_factory=lambda: [0, 255, 255])
    font_scale: float = 0.7
    fps_refresh_rate: float = 0.1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DisplayConfig":
        return cls(
            enabled=d.get("enabled", False),
            show_predicted_class=d.get("show_predicted_class", True),
            show_fps=d.get("show_fps", True),
            text_color=d.get("text_color", [0, 255, 255]),
            font_scale=d.get("font_scale", 0.7),
            fps_refresh_rate=d.get("fps_refresh_rate", 0.1),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "show_predicted_class": self.show_predicted_class,
            "show_fps": self.show_fps,
            "text_color": self.text_color,
            "font_scale": self.font_scale,
            "fps_refresh_rate": self.fps_refresh_rate,
        }


@dataclass
class WebConfig:
    """HTTP control surface."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(
            enabled=d.get("enabled", True),
            host=d.get("host", "0.0.0.0"),
            port=d.get("port", 5000),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    source: SourceConfig = field(default_factory=SourceConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/frame_classifier.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            source=SourceConfig.from_dict(d.get("source", {}) or {}),
            classifier=ClassifierConfig.from_dict(d.get("classifier", {}) or {}),
            inference=InferenceConfig.from_dict(d.get("inference", {}) or {}),
            display=DisplayConfig.from_dict(d.get("display", {}) or {}),
            web=WebConfig.from_dict(d.get("web", {}) or {}),
            log_path=d.get("log_path", "logs/frame_classifier.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        return {
            "source": self.source.to_dict(),
            "classifier": self.classifier.to_dict(),
            "inference": self.inference.to_dict(),
            "display": self.display.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
