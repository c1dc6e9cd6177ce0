"""Whole-document JSON stores.

The core never performs I/O; it hands parsed documents to and from a
``DocumentStore``. Loads and saves replace a whole document at a time. There
is no locking: two processes writing the same document are last-writer-wins.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Protocol, Union

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    def load_document(self, key: str, default: Any = None) -> Any: ...

    def save_document(self, key: str, value: Any) -> bool: ...

    def has_document(self, key: str) -> bool: ...

    def delete_document(self, key: str) -> bool: ...


class InMemoryDocumentStore:
    """Dict-backed store; values are deep-copied in and out."""

    def __init__(self, documents: Dict[str, Any] | None = None) -> None:
        self._documents: Dict[str, Any] = copy.deepcopy(documents or {})

    def load_document(self, key: str, default: Any = None) -> Any:
        if key not in self._documents:
            return default
        return copy.deepcopy(self._documents[key])

    def save_document(self, key: str, value: Any) -> bool:
        self._documents[key] = copy.deepcopy(value)
        return True

    def has_document(self, key: str) -> bool:
        return key in self._documents

    def delete_document(self, key: str) -> bool:
        if key not in self._documents:
            return False
        del self._documents[key]
        return True

    def snapshot(self) -> Dict[str, Any]:
        return copy.deepcopy(self._documents)


class JsonFileDocumentStore:
    """One UTF-8 JSON file per document key under ``root``."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / key

    def load_document(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError):
            # ValueError covers both JSON and UTF-8 decode failures.
            logger.exception("Error loading %s; using default", path)
            return default

    def save_document(self, key: str, value: Any) -> bool:
        path = self._path(key)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", dir=str(path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
            return True
        except (OSError, TypeError, ValueError):
            logger.exception("Error saving %s", path)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False

    def has_document(self, key: str) -> bool:
        return self._path(key).exists()

    def delete_document(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        try:
            path.unlink()
            return True
        except OSError:
            logger.exception("Failed to delete %s", path)
            return False
