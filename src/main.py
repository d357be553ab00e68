"""
Frame classifier entry point.

Captures frames from a webcam or a static image, classifies each frame with
the selected model and shows/serves the result.

Usage:
    python src/main.py --config config/config.yaml --display

Arguments:
    --config: Path to configuration file
    --display: Show an OpenCV window with the predicted class and FPS
    --webcam: Start with live capture instead of the static image
    --image: Static image to classify (overrides source.static_image)
    --no-web: Do not start the HTTP control surface
"""

import os
import sys
import argparse
import logging
from typing import Any, Dict, List, Optional, Tuple

import yaml

from catalog.manifest import ModelCatalog, load_manifest
from classification.labels import LabelTable
from inference.adapter import InferenceAdapter
from inference.cpu_backend import CpuClassifierConfig, UltralyticsClassifierBackend
from models.config import Config
from models.errors import ConfigurationMismatchError, ManifestError
from observation.base import LiveCaptureSpec, StaticImageSpec
from observation.devices import enumerate_capture_devices
from observation.selector import SourceSelector
from ops.logging import setup_logging
from pipeline.control import SelectModel
from pipeline.engine import ClassifierEngine, EngineConfig
from processing.transfer import TransferBufferManager

VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
INFERENCE_BACKENDS = ('ultralytics',)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load configuration with layering:
    - `config/default.yaml` (checked in)
    - `config/config.yaml` (local overrides)
    - plus any explicitly provided `--config` path (treated as overrides)
    """
    try:
        base_path = os.path.join(os.path.dirname(config_path), "default.yaml")
        base_cfg: Dict[str, Any] = {}
        if os.path.exists(base_path):
            with open(base_path, "r") as f:
                base_cfg = yaml.safe_load(f) or {}

        local_overrides_path = os.path.join(os.path.dirname(config_path), "config.yaml")
        local_cfg: Dict[str, Any] = {}
        if os.path.exists(local_overrides_path):
            with open(local_overrides_path, "r") as f:
                local_cfg = yaml.safe_load(f) or {}

        merged = _deep_merge(base_cfg, local_cfg)

        # Finally apply explicit config_path if it's not the local override file itself
        if os.path.exists(config_path) and os.path.abspath(config_path) != os.path.abspath(local_overrides_path):
            with open(config_path, "r") as f:
                explicit_cfg = yaml.safe_load(f) or {}
            merged = _deep_merge(merged, explicit_cfg)

        return merged
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['source', 'classifier', 'inference', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Source
    source = config.get('source') or {}
    device_id = source.get('device_id', 0)
    if not isinstance(device_id, (int, str)) or isinstance(device_id, bool):
        return False, "source.device_id must be an integer (index) or string (URL)"
    if isinstance(device_id, int) and device_id < 0:
        return False, "source.device_id integer must be non-negative"

    resolution = source.get('resolution', [1280, 720])
    if not isinstance(resolution, list) or len(resolution) != 2:
        return False, "source.resolution must be a list of [width, height]"
    if not all(isinstance(x, int) and x > 0 for x in resolution):
        return False, "source.resolution values must be positive integers"

    fps = source.get('fps', 60)
    if not isinstance(fps, int) or fps < 0:
        return False, "source.fps must be a non-negative integer"

    if not isinstance(source.get('static_image'), str) or not source.get('static_image'):
        return False, "source.static_image is required"

    # Classifier
    classifier = config.get('classifier') or {}
    target_dim = classifier.get('target_dim', 216)
    if not isinstance(target_dim, int) or target_dim <= 0:
        return False, "classifier.target_dim must be a positive integer"

    min_confidence = classifier.get('min_confidence', 0.5)
    if not isinstance(min_confidence, (int, float)) or not (0 <= min_confidence <= 1):
        return False, "classifier.min_confidence must be between 0 and 1"

    if not isinstance(classifier.get('class_labels'), str) or not classifier.get('class_labels'):
        return False, "classifier.class_labels is required"

    # Inference
    inference = config.get('inference') or {}
    if inference.get('backend', 'ultralytics') not in INFERENCE_BACKENDS:
        return False, f"inference.backend must be one of: {', '.join(INFERENCE_BACKENDS)}"

    compute_backends = inference.get('compute_backends', ['cpu'])
    if not isinstance(compute_backends, list) or not compute_backends:
        return False, "inference.compute_backends must be a non-empty list"
    if inference.get('compute_backend', compute_backends[0]) not in compute_backends:
        return False, "inference.compute_backend must be one of inference.compute_backends"

    if not isinstance(inference.get('manifest', ''), str):
        return False, "inference.manifest must be a string path or URL"

    # Logging
    if config['log_level'] not in VALID_LOG_LEVELS:
        return False, f"log_level must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return True, None


def load_catalog(cfg: Config) -> ModelCatalog:
    """Read the model manifest; an unreadable manifest leaves the catalog empty."""
    try:
        entries = load_manifest(cfg.inference.manifest)
    except ManifestError as e:
        logging.error(f"Model manifest unavailable, no model will be loaded: {e}")
        return ModelCatalog([], base_dir=cfg.inference.models_dir)
    return ModelCatalog(entries, base_dir=cfg.inference.models_dir)


def build_engine(cfg: Config, display: bool = False) -> ClassifierEngine:
    """Wire sources, transfer buffers, backend, labels and catalog into an engine."""
    labels = LabelTable.from_file(cfg.classifier.class_labels)
    logging.info(f"Loaded {len(labels)} class labels from {cfg.classifier.class_labels}")

    devices = enumerate_capture_devices(cfg.source.max_probe_devices)
    selector = SourceSelector(StaticImageSpec(path=cfg.source.static_image), devices)

    backend = UltralyticsClassifierBackend(CpuClassifierConfig(device=cfg.inference.compute_backend))
    adapter = InferenceAdapter(backend)
    adapter.set_compute_backend(cfg.inference.compute_backend)

    engine_config = EngineConfig(
        target_dim=cfg.classifier.target_dim,
        min_confidence=cfg.classifier.min_confidence,
        use_live_capture=cfg.source.use_live_capture,
        capture=LiveCaptureSpec(
            device_id=cfg.source.device_id,
            resolution=tuple(cfg.source.resolution),
            fps=cfg.source.fps,
        ),
        compute_backends=list(cfg.inference.compute_backends),
        print_debug_messages=cfg.classifier.print_debug_messages,
        display=display or cfg.display.enabled,
        show_predicted_class=cfg.display.show_predicted_class,
        show_fps=cfg.display.show_fps,
        text_color=tuple(cfg.display.text_color),
        font_scale=cfg.display.font_scale,
        fps_refresh_rate=cfg.display.fps_refresh_rate,
    )

    catalog = load_catalog(cfg)
    engine = ClassifierEngine(selector, TransferBufferManager(), adapter, labels, engine_config, catalog)

    model_name = cfg.inference.model
    if model_name is None and catalog.default() is not None:
        model_name = catalog.default().name
    if model_name is not None:
        engine.submit(SelectModel(name=model_name))
    else:
        logging.warning("No model available; predictions will stay 'Loading Model...'")

    return engine


def main(argv: Optional[List[str]] = None) -> int:
    """Main application function."""
    parser = argparse.ArgumentParser(description='Frame Classifier')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--display', action='store_true',
                        help='Show predictions in an OpenCV window')
    parser.add_argument('--webcam', action='store_true',
                        help='Start with live capture')
    parser.add_argument('--image', type=str, default=None,
                        help='Static image to classify')
    parser.add_argument('--no-web', action='store_true',
                        help='Do not start the HTTP control surface')
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.webcam:
        config.setdefault('source', {})['use_live_capture'] = True
    if args.image:
        config.setdefault('source', {})['static_image'] = args.image

    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        return 1

    setup_logging(config['log_path'], config['log_level'])
    logging.info("Starting Frame Classifier")

    cfg = Config.from_dict(config)
    engine = build_engine(cfg, display=args.display)

    if cfg.web.enabled and not args.no_web:
        from web.app import start_web_thread
        start_web_thread(engine, host=cfg.web.host, port=cfg.web.port)

    try:
        engine.run()
    except ConfigurationMismatchError:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
