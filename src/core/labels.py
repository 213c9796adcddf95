"""
Label side-car file handling for classifier outputs.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterator, List, Union

from .errors import LabelLoadError


def _label_from_entry(key: Any, entry: Any) -> str:
    # imagenet_class_index.json stores [wnid, name] pairs
    if isinstance(entry, (list, tuple)) and len(entry) == 2:
        entry = entry[1]
    if not isinstance(entry, str) or not entry.strip():
        raise LabelLoadError(f"Label {key!r} is not a non-empty string")
    return entry.strip()


class LabelSet:
    """Fixed ordered list of class labels."""

    def __init__(self, labels: List[str], source: str = ""):
        if not labels:
            raise LabelLoadError("Label list is empty")
        self._labels = list(labels)
        self.source = source

    @classmethod
    def load(cls, path: Union[str, Path]) -> "LabelSet":
        """Load labels from a JSON array or an index-keyed JSON object."""
        logger = logging.getLogger(__name__)
        path = Path(path)

        if not path.is_file():
            raise LabelLoadError(f"Label file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise LabelLoadError(f"Could not read label file {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise LabelLoadError(f"Label file {path} is not valid JSON: {e}") from e

        if isinstance(data, list):
            labels = [_label_from_entry(i, entry) for i, entry in enumerate(data)]
        elif isinstance(data, dict):
            try:
                indexed = {int(key): value for key, value in data.items()}
            except ValueError as e:
                raise LabelLoadError(
                    f"Label file {path} has a non-integer key: {e}") from e
            if len(indexed) != len(data):
                raise LabelLoadError(
                    f"Label file {path} has keys naming the same index")
            if sorted(indexed) != list(range(len(indexed))):
                raise LabelLoadError(
                    f"Label file {path} indices must run from 0 to {len(indexed) - 1}")
            labels = [_label_from_entry(i, indexed[i]) for i in range(len(indexed))]
        else:
            raise LabelLoadError(
                f"Label file {path} must hold a JSON array or object")

        label_set = cls(labels, source=str(path))
        logger.info(f"Loaded {len(label_set)} labels from {path}")
        return label_set

    def lookup(self, index: int) -> str:
        """Return the label for an output index."""
        if index < 0 or index >= len(self._labels):
            raise IndexError(
                f"Output index {index} is outside the {len(self._labels)} known labels")
        return self._labels[index]

    def __getitem__(self, index: int) -> str:
        return self.lookup(index)

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __repr__(self) -> str:
        return f"LabelSet({len(self._labels)} labels from {self.source or '<memory>'})"
