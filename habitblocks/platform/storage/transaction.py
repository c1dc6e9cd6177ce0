"""Stage several documents and commit them together.

The underlying store cannot write two documents atomically, so a commit
remembers what each key held before it was written and puts those values back
if a later write fails.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from habitblocks.platform.storage.documents import DocumentStore

logger = logging.getLogger(__name__)

_MISSING = object()


class DocumentTransaction:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._staged: Dict[str, Any] = {}
        self.committed = False

    def stage(self, key: str, value: Any) -> "DocumentTransaction":
        if self.committed:
            raise RuntimeError("transaction already committed")
        self._staged[key] = value
        return self

    @property
    def staged_keys(self) -> List[str]:
        return list(self._staged)

    def commit(self) -> bool:
        """Write every staged document; on any failure restore the earlier ones."""
        if self.committed:
            raise RuntimeError("transaction already committed")
        written: List[Tuple[str, Any]] = []
        for key, value in self._staged.items():
            previous = self._store.load_document(key, _MISSING)
            if not self._store.save_document(key, value):
                logger.error("Write of %s failed; rolling back %d document(s)", key, len(written))
                self._rollback(written)
                return False
            written.append((key, previous))
        self.committed = True
        logger.info("Committed documents: %s", ", ".join(self._staged))
        return True

    def _rollback(self, written: List[Tuple[str, Any]]) -> None:
        for key, previous in reversed(written):
            if previous is _MISSING:
                restored = self._store.delete_document(key)
            else:
                restored = self._store.save_document(key, previous)
            if not restored:
                logger.error("Could not restore %s during rollback", key)
