# court_core/history.py
from __future__ import annotations
from typing import List, Optional
from pydantic import BaseModel, Field

from .models import Snapshot


class HistoryStack(BaseModel):
    """Bounded undo stack of deep-copied snapshots plus a redo stack."""
    limit: int = 20
    undo_stack: List[Snapshot] = Field(default_factory=list)
    redo_stack: List[Snapshot] = Field(default_factory=list)

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)

    def _push_undo(self, snapshot: Snapshot):
        self.undo_stack.append(snapshot.clone())
        if len(self.undo_stack) > self.limit:
            del self.undo_stack[: len(self.undo_stack) - self.limit]

    def save(self, snapshot: Snapshot):
        # a new mutation invalidates every undone future
        self._push_undo(snapshot)
        self.redo_stack.clear()

    def undo(self, current: Snapshot) -> Optional[Snapshot]:
        if not self.undo_stack:
            return None
        self.redo_stack.append(current.clone())
        return self.undo_stack.pop()

    def redo(self, current: Snapshot) -> Optional[Snapshot]:
        if not self.redo_stack:
            return None
        self._push_undo(current)
        return self.redo_stack.pop()

    def clear(self):
        self.undo_stack.clear()
        self.redo_stack.clear()
