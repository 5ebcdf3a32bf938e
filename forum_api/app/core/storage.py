"""
JSON snapshot storage for entity records.

Each entity type (users, posts, comments) lives in one JSON file that
holds the whole key -> record mapping.  ``PersistentMap`` loads the
full snapshot, applies one logical change and writes the full snapshot
back for every operation.  Snapshots are written to a temporary file
next to the target and moved into place with ``os.replace``, so readers
never see a half-written file.

All operations on one map run under a single re-entrant lock.  Services
that need several operations to appear atomic (check-then-insert,
cascade deletes) hold the lock through ``locked()``; the nested calls
re-enter it.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Generic, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .errors import StorageError

K = TypeVar("K", int, str)
V = TypeVar("V", bound=BaseModel)

logger = logging.getLogger(__name__)


class PersistentMap(Generic[K, V]):
    """Durable key -> record mapping for one entity type.

    Parameters
    ----------
    path : Path
        Snapshot file.  Created (with an empty mapping) on first use.
    model : Type[V]
        Pydantic model used to decode records.
    key_type : Callable[[str], K]
        Converts JSON object keys back to the map's key type
        (``int`` for posts and comments, ``str`` for users).
    """

    def __init__(self, path: Path, model: Type[V], key_type: Callable[[str], K]) -> None:
        self.path = Path(path)
        self.model = model
        self.key_type = key_type
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Snapshot I/O
    # ------------------------------------------------------------------
    def _ensure_snapshot(self) -> None:
        if self.path.exists() and self.path.stat().st_size > 0:
            return
        self._store({})

    def _load(self) -> Dict[K, V]:
        try:
            self._ensure_snapshot()
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read snapshot %s: %s", self.path, exc)
            raise StorageError(f"Cannot read snapshot {self.path.name}") from exc
        if not isinstance(raw, dict):
            raise StorageError(f"Snapshot {self.path.name} is not a JSON object")
        try:
            return {self.key_type(key): self.model.model_validate(value) for key, value in raw.items()}
        except (ValidationError, ValueError) as exc:
            logger.error("Snapshot %s holds an invalid record: %s", self.path, exc)
            raise StorageError(f"Snapshot {self.path.name} holds an invalid record") from exc

    def _store(self, data: Dict[K, V]) -> None:
        payload = {
            str(key): (value.model_dump(by_alias=True, mode="json") if isinstance(value, BaseModel) else value)
            for key, value in data.items()
        }
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error("Failed to write snapshot %s: %s", self.path, exc)
            raise StorageError(f"Cannot write snapshot {self.path.name}") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @contextmanager
    def locked(self) -> Iterator["PersistentMap[K, V]"]:
        """Hold this map's critical section across several operations."""
        with self._lock:
            yield self

    def get(self, key: K) -> Optional[V]:
        with self._lock:
            return self._load().get(key)

    def put(self, key: K, value: V) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._store(data)

    def put_if_absent(self, key: K, value: V) -> bool:
        """Insert ``value`` unless ``key`` exists; report whether it did."""
        with self._lock:
            data = self._load()
            if key in data:
                return False
            data[key] = value
            self._store(data)
            return True

    def remove(self, key: K) -> bool:
        with self._lock:
            data = self._load()
            if key not in data:
                return False
            del data[key]
            self._store(data)
            return True

    def remove_where(self, predicate: Callable[[V], bool]) -> List[V]:
        """Remove every record matching ``predicate`` in one write."""
        with self._lock:
            data = self._load()
            removed = [value for value in data.values() if predicate(value)]
            if removed:
                data = {key: value for key, value in data.items() if not predicate(value)}
                self._store(data)
            return removed

    def all_values(self) -> List[V]:
        with self._lock:
            return list(self._load().values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._load())


class IdentifierAllocator:
    """Hands out increasing numeric ids for one entity type.

    The counter is not persisted.  It starts at ``max(existing ids) + 1``
    (or 1 for an empty store), which is re-derived from the store every
    time the process starts.
    """

    def __init__(self, existing_ids: List[int]) -> None:
        self._next = max(existing_ids, default=0) + 1
        self._lock = threading.Lock()

    @classmethod
    def from_store(cls, store: PersistentMap[int, V], id_getter: Callable[[V], int]) -> "IdentifierAllocator":
        return cls([id_getter(value) for value in store.all_values()])

    def next(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value
