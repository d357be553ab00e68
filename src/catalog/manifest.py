"""
Model catalog: discovery and the models.json manifest.

Layout on disk, one sub-directory per model:

    models/
      asl-resnet18/model.pt
      asl-mobilenet/model.onnx
      models.json

Manifest format:

    {"models": [{"name": "asl-resnet18", "path": "asl-resnet18/model.pt"}]}

Paths in the manifest are relative to the models directory. The manifest can
be read from disk or fetched over HTTP(S) once at startup.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

import httpx

from models.errors import ManifestError


@dataclass(frozen=True)
class ModelEntry:
    name: str
    path: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "path": self.path}


def discover_models(models_dir: str, suffixes: Sequence[str] = (".pt", ".onnx")) -> List[ModelEntry]:
    """
    List model files, one entry per model sub-directory.

    Sub-directories are visited in name order; within one, every file ending
    with one of the suffixes becomes an entry named after the directory.
    """
    entries: List[ModelEntry] = []
    if not os.path.isdir(models_dir):
        logging.warning(f"Models directory not found: {models_dir}")
        return entries

    for name in sorted(os.listdir(models_dir)):
        model_dir = os.path.join(models_dir, name)
        if not os.path.isdir(model_dir):
            continue
        for filename in sorted(os.listdir(model_dir)):
            if filename.endswith(tuple(suffixes)):
                entries.append(ModelEntry(name=name, path=f"{name}/{filename}"))

    logging.info(f"Available models: {[e.name for e in entries]}")
    return entries


def write_manifest(entries: Iterable[ModelEntry], path: str) -> None:
    manifest_dir = os.path.dirname(path)
    if manifest_dir and not os.path.exists(manifest_dir):
        os.makedirs(manifest_dir)
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"models": [e.to_dict() for e in entries]}, f, indent=2)


def parse_manifest(text: str) -> List[ModelEntry]:
    """
    Parse manifest JSON.

    Raises:
        ManifestError: If the JSON is malformed or entries lack name/path.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Manifest is not valid JSON: {e}") from e

    models = data.get("models") if isinstance(data, dict) else None
    if not isinstance(models, list):
        raise ManifestError("Manifest must contain a \"models\" list")

    entries = []
    for item in models:
        if not isinstance(item, dict) or not item.get("name") or not item.get("path"):
            raise ManifestError(f"Invalid manifest entry: {item!r}")
        entries.append(ModelEntry(name=str(item["name"]), path=str(item["path"])))
    return entries


def load_manifest(location: str, client: Optional[httpx.Client] = None, timeout: float = 10.0) -> List[ModelEntry]:
    """
    Read the manifest from a file path or an http(s) URL.

    Raises:
        ManifestError: On a missing file, transport error, non-2xx response
            or malformed content.
    """
    if location.startswith(("http://", "https://")):
        try:
            if client is not None:
                response = client.get(location)
            else:
                response = httpx.get(location, timeout=timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ManifestError(f"Failed to fetch manifest {location}: {e}") from e
        text = response.text
    else:
        try:
            with open(location, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise ManifestError(f"Failed to read manifest {location}: {e}") from e

    entries = parse_manifest(text)
    logging.info(f"Manifest {location}: {len(entries)} model(s)")
    return entries


class ModelCatalog:
    """
    Selectable models, resolved against the models directory.

    Example:
        catalog = ModelCatalog(load_manifest("models/models.json"), base_dir="models")
        adapter.load_model(catalog.path_for(catalog.default().name))
    """

    def __init__(self, entries: Sequence[ModelEntry], base_dir: str = ""):
        self._entries = list(entries)
        self._base_dir = base_dir

    @property
    def names(self) -> List[str]:
        return [e.name for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return any(e.name == name for e in self._entries)

    def default(self) -> Optional[ModelEntry]:
        return self._entries[0] if self._entries else None

    def get(self, name: str) -> ModelEntry:
        for entry in self._entries:
            if entry.name == name:
                return entry
        raise KeyError(f"Unknown model: {name}")

    def path_for(self, name: str) -> str:
        """Full path (or URL) of a model by name."""
        path = self.get(name).path
        if not self._base_dir or path.startswith(("http://", "https://")) or os.path.isabs(path):
            return path
        if self._base_dir.startswith(("http://", "https://")):
            return f"{self._base_dir.rstrip('/')}/{path}"
        return os.path.join(self._base_dir, path)

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._entries]
