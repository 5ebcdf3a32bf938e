"""
Write-ahead record of post cascades in progress.

Removing a post touches two snapshots (comments, then the post).  The
journal records the post id before the first write and clears it after
the last one.  If the process dies in between, the id is still listed
at the next start and ``PostService.recover_pending_cascades`` finishes
the job.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import List

from .errors import StorageError

logger = logging.getLogger(__name__)


class CascadeJournal:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> List[int]:
        if not self.path.exists() or self.path.stat().st_size == 0:
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Cannot read journal {self.path.name}") from exc
        return [int(item) for item in data] if isinstance(data, list) else []

    def _save(self, entries: List[int]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(entries), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorageError(f"Cannot write journal {self.path.name}") from exc

    def begin(self, post_id: int) -> None:
        with self._lock:
            entries = self._load()
            if post_id not in entries:
                entries.append(post_id)
                self._save(entries)
        logger.debug("Cascade started for post %s", post_id)

    def complete(self, post_id: int) -> None:
        with self._lock:
            entries = self._load()
            if post_id in entries:
                entries.remove(post_id)
                self._save(entries)
        logger.debug("Cascade finished for post %s", post_id)

    def pending(self) -> List[int]:
        with self._lock:
            return self._load()
