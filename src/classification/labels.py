"""
Class label table.

Loaded once from JSON and immutable afterwards. Accepts either
{"classes": ["a", "b", ...]} or a bare list.
"""

from __future__ import annotations

import json
from typing import Iterator, List, Sequence, Tuple

from models.errors import LabelTableMismatchError


class LabelTable:
    """Ordered, index-addressable class names."""

    def __init__(self, labels: Sequence[str]):
        self._labels: Tuple[str, ...] = tuple(str(label) for label in labels)

    @classmethod
    def from_json(cls, text: str) -> "LabelTable":
        data = json.loads(text)
        if isinstance(data, dict):
            data = data.get("classes")
        if not isinstance(data, list) or not data:
            raise ValueError("Class labels must be a non-empty list or {\"classes\": [...]}")
        return cls(data)

    @classmethod
    def from_file(cls, path: str) -> "LabelTable":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_json(f.read())

    def label_for(self, class_index: int) -> str:
        """
        Look up a class name.

        Raises:
            LabelTableMismatchError: If the index is negative or past the end.
                Out-of-range indices mean the table does not match the model.
        """
        if not 0 <= class_index < len(self._labels):
            raise LabelTableMismatchError(class_index, len(self._labels))
        return self._labels[class_index]

    def as_list(self) -> List[str]:
        return list(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)
