"""
Record Store - JSON Key-Value Persistence.

Backing medium for reports, monitors and usage counters. Each collection
lives under a fixed key and the whole store is one JSON document on disk.
"""

import copy
import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from src.utils.logger import get_logger

logger = get_logger(__name__)

REPORTS_KEY = "reports"
MONITORS_KEY = "monitors"
USAGE_KEY = "usage"


class RecordStoreError(Exception):
    """Raised when the record store cannot be read or written."""
    pass


class RecordStore:
    """
    Key-value record store with optional JSON file persistence.

    Every read and write is atomic under a re-entrant lock. Writes made
    inside `transaction()` are committed together, so readers never see
    half of them. Callers racing on a read-modify-write cycle still get
    last-write-wins semantics.

    Usage:
        store = RecordStore(Path("data/doc_checker.json"))
        with store.transaction():
            store.write("reports", reports)
            store.write("usage", usage)
    """

    def __init__(self, persist_path: Path | None = None) -> None:
        """
        Initialize the store.

        Args:
            persist_path: JSON file to persist to (memory only if None)
        """
        self.persist_path = persist_path
        self._data: dict[str, Any] = {}
        self._pending: dict[str, Any] | None = None
        self._lock = threading.RLock()

        if persist_path and persist_path.exists():
            self._load()

    def read(self, key: str, default: Any = None) -> Any:
        """Return a deep copy of the value under `key`."""
        with self._lock:
            if self._pending is not None and key in self._pending:
                return copy.deepcopy(self._pending[key])
            if key not in self._data:
                return default
            return copy.deepcopy(self._data[key])

    def write(self, key: str, value: Any) -> None:
        """Store `value` under `key` (deferred inside a transaction)."""
        with self._lock:
            if self._pending is not None:
                self._pending[key] = copy.deepcopy(value)
                return
            self._commit({key: copy.deepcopy(value)})

    @contextmanager
    def transaction(self) -> Iterator["RecordStore"]:
        """
        Group writes so they become visible together.

        Nested transactions join the outermost one. If the block raises,
        pending writes are discarded.
        """
        with self._lock:
            if self._pending is not None:
                yield self
                return

            self._pending = {}
            try:
                yield self
                pending = self._pending
            finally:
                self._pending = None

            self._commit(pending)

    def _commit(self, changes: dict[str, Any]) -> None:
        if not changes:
            return
        previous = self._data
        self._data = {**previous, **changes}
        try:
            self._save()
        except OSError as e:
            self._data = previous
            raise RecordStoreError(f"Failed to persist store: {e}") from e

    def _save(self) -> None:
        """Write the whole store atomically via a temp file."""
        if not self.persist_path:
            return

        self.persist_path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.persist_path.with_suffix(self.persist_path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, indent=2, default=str), encoding="utf-8")
        os.replace(tmp, self.persist_path)

    def _load(self) -> None:
        """Load the store from disk."""
        try:
            with open(self.persist_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RecordStoreError(f"Failed to load store from {self.persist_path}: {e}") from e

        if not isinstance(data, dict):
            raise RecordStoreError(f"Store file {self.persist_path} is not a JSON object")

        self._data = data
        logger.info(f"Loaded record store from {self.persist_path} ({len(data)} keys)")
