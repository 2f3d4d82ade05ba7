# court_core/board.py
"""
BoardController: one mounted court board.

Owns the BoardSession for the active RotationKey, the pointer
subscription while mounted, view switching (rotation / phase / mode) and
debounced persistence of settled mutations.
"""
from __future__ import annotations
import logging
import time
from typing import Callable, List, Optional

from . import controller
from .controller import BoardSession, InteractionState, ToolMode
from .events import EventSource, PointerEvent, Subscription, Viewport
from .formation import default_snapshot
from .models import EngineConfig, Player, RotationKey, Snapshot
from .render import DrawCommand, render_board
from .store import DebouncedWriter, SnapshotStore

logger = logging.getLogger(__name__)


class BoardController:
    def __init__(
        self,
        roster_provider: Callable[[], List[Player]],
        store: SnapshotStore,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        key: Optional[RotationKey] = None,
    ):
        self.roster_provider = roster_provider
        self.config = config or EngineConfig()
        self.clock = clock
        self.store = store
        self.writer = DebouncedWriter(store, self.config.debounce_seconds, clock)
        key = key or RotationKey()
        self.session: BoardSession = controller.new_session(self.roster, key, store.load(key), self.config)
        self.viewport: Optional[Viewport] = None
        self._subscription: Optional[Subscription] = None

    @property
    def roster(self) -> List[Player]:
        return list(self.roster_provider())

    @property
    def key(self) -> RotationKey:
        return self.session.key

    @property
    def mounted(self) -> bool:
        return self._subscription is not None and self._subscription.active

    # -----------------------
    # Lifecycle
    # -----------------------
    def mount(self, source: EventSource, viewport: Viewport):
        if self._subscription is not None:
            self.unmount()
        self.viewport = viewport
        controller.set_canvas(self.session, viewport.width, viewport.height)
        self._subscription = source.subscribe(self.handle)
        logger.debug("Board mounted for %s", self.key.storage_key)

    def unmount(self):
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        controller.reset_interaction(self.session)
        self.writer.flush()
        logger.debug("Board unmounted")

    def _persist(self):
        self.writer.schedule(self.session.key, self.session.snapshot)

    def handle(self, event: PointerEvent):
        viewport = self.viewport or Viewport(width=self.session.width, height=self.session.height)
        point = viewport.to_court(event.x, event.y)
        before = self.session.state
        if event.kind == "down":
            changed = controller.pointer_down(
                self.session, self.roster, point, self.config,
                bench_id=event.bench_id, double=event.double, modifiers=event.modifiers,
            )
        elif event.kind == "move":
            controller.pointer_move(self.session, point, self.config)
            changed = False
        else:
            changed = controller.pointer_up(self.session, self.roster, point, self.config)
        if self.session.state != before:
            logger.debug("%s -> %s", before.value, self.session.state.value)
        if changed:
            self._persist()

    # -----------------------
    # View / lineup
    # -----------------------
    def change_view(self, rotation: Optional[int] = None, phase: Optional[str] = None, mode: Optional[str] = None):
        current = self.session.key
        key = RotationKey(
            rotation=current.rotation if rotation is None else rotation,
            phase=current.phase if phase is None else phase,
            mode=current.mode if mode is None else mode,
        )
        self.writer.flush()
        roster = self.roster
        snapshot = self.store.load(key)
        if snapshot is None:
            snapshot = default_snapshot(key.rotation, roster)
        controller.load_snapshot(self.session, key, snapshot, roster)
        logger.info("Board view %s", key.storage_key)

    def load_lineup(self, store: SnapshotStore):
        self.writer.flush()
        self.store = store
        self.writer = DebouncedWriter(store, self.config.debounce_seconds, self.clock)
        self.change_view(rotation=1, phase="primary", mode=self.session.key.mode)

    def refresh_roster(self) -> bool:
        """Re-check the formation after external roster edits."""
        repaired = controller.ensure_formation(self.session, self.roster)
        if repaired:
            self._persist()
        return repaired

    # -----------------------
    # Toolbar
    # -----------------------
    def undo(self) -> bool:
        changed = controller.undo(self.session)
        if changed:
            self._persist()
        return changed

    def redo(self) -> bool:
        changed = controller.redo(self.session)
        if changed:
            self._persist()
        return changed

    def set_tool(self, tool: str):
        if controller.set_tool(self.session, ToolMode(tool)):
            self._persist()

    def set_color(self, color: str):
        self.session.color = color

    def toggle_rules(self, enabled: Optional[bool] = None) -> bool:
        self.session.enforce_rules = (not self.session.enforce_rules) if enabled is None else enabled
        return self.session.enforce_rules

    def clear_ink(self) -> bool:
        changed = controller.clear_paths(self.session)
        if changed:
            self._persist()
        return changed

    # -----------------------
    # Read side
    # -----------------------
    def current_snapshot(self) -> Snapshot:
        return controller.current_snapshot(self.session)

    def render(self) -> List[DrawCommand]:
        s = self.session
        roster = self.roster
        ghost = None
        if s.state == InteractionState.DRAGGING_BENCH and s.pointer is not None:
            player = next((p for p in roster if p.id == s.dragged_id), None)
            if player is not None:
                ghost = (player, s.pointer)
        return render_board(
            s.snapshot, roster, s.width, s.height, self.config,
            current_path=s.current_path, active_shape=s.active_shape, ghost=ghost,
        )

    def tick(self) -> bool:
        return self.writer.poll()
