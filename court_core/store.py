# court_core/store.py
"""
Snapshot store collaborator plus a debounced writer in front of it.

Settled mutations schedule a write; a later schedule inside the delay
window replaces the pending one, so a burst of gestures costs one write.
"""
from __future__ import annotations
import logging
import os
import time
from typing import Callable, Dict, List, Optional, Tuple

from .io import load_snapshot_table, save_snapshot_table
from .models import RotationKey, Snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    def load(self, key: RotationKey) -> Optional[Snapshot]:
        raise NotImplementedError

    def save(self, key: RotationKey, snapshot: Snapshot):
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError


class MemorySnapshotStore(SnapshotStore):
    """Per-lineup snapshot table keyed by "{rotation}_{phase}_{mode}"."""

    def __init__(self, table: Optional[Dict[str, Snapshot]] = None):
        self.table: Dict[str, Snapshot] = {k: v.clone() for k, v in (table or {}).items()}
        self.writes = 0

    def load(self, key: RotationKey) -> Optional[Snapshot]:
        snap = self.table.get(key.storage_key)
        return snap.clone() if snap is not None else None

    def save(self, key: RotationKey, snapshot: Snapshot):
        self.table[key.storage_key] = snapshot.clone()
        self.writes += 1

    def keys(self) -> List[str]:
        return sorted(self.table)


class JsonFileSnapshotStore(MemorySnapshotStore):
    def __init__(self, path: str):
        table = load_snapshot_table(path) if os.path.exists(path) else {}
        super().__init__(table)
        self.path = path

    def save(self, key: RotationKey, snapshot: Snapshot):
        super().save(key, snapshot)
        save_snapshot_table(self.path, self.table)


class DebouncedWriter:
    def __init__(self, store: SnapshotStore, delay: float = 0.4, clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.delay = delay
        self.clock = clock
        self._pending: Optional[Tuple[RotationKey, Snapshot]] = None
        self._due = 0.0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def schedule(self, key: RotationKey, snapshot: Snapshot):
        if self._pending is not None and self._pending[0] != key:
            # different slot: the earlier one must not be lost
            self.flush()
        self._pending = (key, snapshot.clone())
        self._due = self.clock() + self.delay
        logger.debug("Write for %s due in %.2fs", key.storage_key, self.delay)

    def poll(self) -> bool:
        if self._pending is not None and self.clock() >= self._due:
            return self.flush()
        return False

    def flush(self) -> bool:
        if self._pending is None:
            return False
        key, snapshot = self._pending
        self._pending = None
        self.store.save(key, snapshot)
        logger.debug("Saved snapshot %s", key.storage_key)
        return True

    def cancel(self):
        self._pending = None
