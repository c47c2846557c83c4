"""Whole-document JSON persistence for personas and messages.

The document is read and rewritten in full on every mutation. There is no
locking and no atomic rename: two concurrent writers can lose an update, and a
crash mid-write can leave a truncated file behind.
"""
from __future__ import annotations

import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import StorageError

logger = logging.getLogger(__name__)

DocumentDict = Dict[str, Any]
PathLike = Union[str, Path]


# -----------------------------
# Helpers
# -----------------------------
def empty_document() -> DocumentDict:
    return {"personas": [], "messages": []}


def has_document_shape(obj: Any) -> bool:
    """True if ``obj`` is a mapping whose ``personas`` and ``messages`` are lists of objects."""
    if not isinstance(obj, dict):
        return False
    for key in ("personas", "messages"):
        rows = obj.get(key)
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            return False
    return True


def _read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def _write_json(path: Path, obj: Any, indent: Optional[int]) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=indent)


# -----------------------------
# Store interface
# -----------------------------
class DocumentStore(ABC):
    """Contract shared by every backing: load / save / replace."""

    @abstractmethod
    def load(self) -> DocumentDict:
        """Return the full document. Raises StorageError when it cannot be read."""

    @abstractmethod
    def save(self, document: DocumentDict) -> None:
        """Overwrite the full document."""

    def replace(self, document: Any) -> None:
        """Shape-check an externally supplied document, then save it wholesale."""
        if not has_document_shape(document):
            raise StorageError("Document must contain 'personas' and 'messages'")
        self.save(document)


# -----------------------------
# JsonFileStore
# -----------------------------
class JsonFileStore(DocumentStore):
    """Single JSON file holding ``{"personas": [...], "messages": [...]}``.

    Layout:
        data_file           # pretty-printed (indent=2) JSON document

    The file is created with an empty document on first run unless
    ``create=False``.
    """

    def __init__(self, path: PathLike, *, indent: Optional[int] = 2, create: bool = True) -> None:
        self.path = Path(path)
        self.indent = indent
        if create and not self.path.exists():
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageError(f"Cannot create data directory {self.path.parent}: {e}") from e
            self.save(empty_document())
            logger.info("Initialized empty document at %s", self.path)

    def load(self) -> DocumentDict:
        if not self.path.exists():
            raise StorageError(f"Data file not found: {self.path}")
        try:
            data = _read_json(self.path)
        except json.JSONDecodeError as e:
            raise StorageError(f"Data file {self.path} is not valid JSON: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read data file {self.path}: {e}") from e

        if not has_document_shape(data):
            raise StorageError(f"Data file {self.path} is missing 'personas' or 'messages'")
        return data

    def save(self, document: DocumentDict) -> None:
        try:
            _write_json(self.path, document, self.indent)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Cannot write data file {self.path}: {e}") from e


# -----------------------------
# MemoryStore
# -----------------------------
class MemoryStore(DocumentStore):
    """In-process backing with the same contract, used by tests and demos."""

    def __init__(self, document: Optional[DocumentDict] = None) -> None:
        self._document = copy.deepcopy(document) if document is not None else empty_document()

    def load(self) -> DocumentDict:
        return copy.deepcopy(self._document)

    def save(self, document: DocumentDict) -> None:
        self._document = copy.deepcopy(document)
