# court_core/controller.py
"""
Interaction state machine over one explicit BoardSession.

States: idle, dragging-player, dragging-bench-player, drawing-path,
dragging-vertex, dragging-shape. Pointer coordinates arrive in percent court
space; mouse and touch are already unified by court_core.events.

Every mutating gesture snapshots history before it starts.
"""
from __future__ import annotations
import logging
from enum import Enum
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from .constraints import clamp_position
from .formation import default_snapshot, repair_formation
from .geometry import distance
from .hittest import hit_test
from .history import HistoryStack
from .models import (
    EngineConfig, HitTarget, HitType, Path, PathType, Player, Point, RotationKey,
    Snapshot,
)
from .paths import distinct_points, drop_repeats, is_degenerate, stored_point, to_pixels, translate
from .render import court_tokens

logger = logging.getLogger(__name__)


class ToolMode(str, Enum):
    MOVE = "move"
    DRAW = "draw"
    ARROW = "arrow"
    LINE = "line"
    POLYGON = "polygon"
    TRIANGLE = "triangle"
    RECT = "rect"


TOOL_PATH_TYPES: Dict[ToolMode, PathType] = {
    ToolMode.DRAW: PathType.DRAW,
    ToolMode.ARROW: PathType.ARROW,
    ToolMode.LINE: PathType.LINE,
    ToolMode.POLYGON: PathType.POLYGON,
    ToolMode.TRIANGLE: PathType.TRIANGLE,
    ToolMode.RECT: PathType.RECT,
}


class InteractionState(str, Enum):
    IDLE = "idle"
    DRAGGING_PLAYER = "dragging-player"
    DRAGGING_BENCH = "dragging-bench-player"
    DRAWING_PATH = "drawing-path"
    DRAGGING_VERTEX = "dragging-vertex"
    DRAGGING_SHAPE = "dragging-shape"


class BoardSession(BaseModel):
    key: RotationKey = Field(default_factory=RotationKey)
    snapshot: Snapshot = Field(default_factory=Snapshot)
    history: HistoryStack = Field(default_factory=HistoryStack)
    tool: ToolMode = ToolMode.MOVE
    color: str = "#000000"
    enforce_rules: bool = True
    width: float = 600.0
    height: float = 600.0

    state: InteractionState = InteractionState.IDLE
    dragged_id: Optional[str] = None
    selected_bench_id: Optional[str] = None
    pointer: Optional[Point] = None          # last pointer sample of a bench drag
    current_path: Optional[Path] = None      # path being authored
    active_shape: Optional[int] = None       # hovered / selected path index
    edit_target: Optional[HitTarget] = None
    last_pointer: Optional[Point] = None     # shape-move reference


def new_session(
    roster: List[Player],
    key: Optional[RotationKey] = None,
    snapshot: Optional[Snapshot] = None,
    config: Optional[EngineConfig] = None,
) -> BoardSession:
    config = config or EngineConfig()
    key = key or RotationKey()
    width, height = config.default_canvas
    session = BoardSession(
        key=key,
        snapshot=snapshot if snapshot is not None else default_snapshot(key.rotation, roster),
        history=HistoryStack(limit=config.history_limit),
        width=width,
        height=height,
    )
    ensure_formation(session, roster)
    return session


def set_canvas(session: BoardSession, width: float, height: float):
    if width <= 0 or height <= 0:
        raise ValueError("canvas dimensions must be positive")
    session.width = width
    session.height = height


def reset_interaction(session: BoardSession):
    session.state = InteractionState.IDLE
    session.dragged_id = None
    session.pointer = None
    session.current_path = None
    session.edit_target = None
    session.last_pointer = None


def save_to_history(session: BoardSession):
    session.history.save(session.snapshot)


def current_snapshot(session: BoardSession) -> Snapshot:
    return session.snapshot.clone()


def ensure_formation(session: BoardSession, roster: List[Player]) -> bool:
    return repair_formation(session.snapshot, session.key.rotation, roster)


def load_snapshot(session: BoardSession, key: RotationKey, snapshot: Snapshot, roster: List[Player]):
    """Replace the live snapshot wholesale (view change or lineup load)."""
    session.key = key
    session.snapshot = snapshot
    session.history.clear()
    session.selected_bench_id = None
    session.active_shape = None
    reset_interaction(session)
    ensure_formation(session, roster)


def token_at(session: BoardSession, roster: List[Player], point: Point, config: EngineConfig) -> Optional[str]:
    p = to_pixels(point, session.width, session.height)
    best_id, best = None, config.token_hit_radius_px
    for player, pos in court_tokens(session.snapshot, roster):
        d = distance(p, to_pixels(pos, session.width, session.height))
        if d <= best:
            best_id, best = player.id, d
    return best_id


# -----------------------
# Players
# -----------------------
def begin_drag(session: BoardSession, player_id: str):
    save_to_history(session)
    session.state = InteractionState.DRAGGING_PLAYER
    session.dragged_id = player_id


def drag_player(session: BoardSession, point: Point, config: EngineConfig):
    pid = session.dragged_id
    if pid is None:
        return
    clamped = clamp_position(
        pid, point, session.snapshot, session.key.rotation, session.key.phase,
        config, session.enforce_rules,
    )
    session.snapshot.positions[pid] = clamped


def begin_bench_drag(session: BoardSession, player_id: str):
    if session.selected_bench_id == player_id:
        session.selected_bench_id = None
    else:
        session.selected_bench_id = player_id
    save_to_history(session)
    session.state = InteractionState.DRAGGING_BENCH
    session.dragged_id = player_id


def swap(session: BoardSession, bench_id: str, court_id: str) -> bool:
    """Bench player takes the court player's slot and exact position."""
    snap = session.snapshot
    if bench_id == court_id or court_id not in snap.active_players or bench_id in snap.active_players:
        return False
    snap.active_players = [bench_id if pid == court_id else pid for pid in snap.active_players]
    pos = snap.positions.pop(court_id, None)
    if pos is not None:
        snap.positions[bench_id] = pos.model_copy()
    logger.info("Swapped %s in for %s", bench_id, court_id)
    return True


def drop_bench(session: BoardSession, point: Point, config: EngineConfig) -> bool:
    bench_id = session.dragged_id
    if bench_id is None:
        return False
    nearest, best = None, config.bench_swap_radius
    for pid in session.snapshot.active_players:
        pos = session.snapshot.positions.get(pid)
        if pos is None:
            continue
        d = distance(pos.as_tuple(), point.as_tuple())
        if d < best:
            nearest, best = pid, d
    if nearest is None or nearest == bench_id:
        return False
    if swap(session, bench_id, nearest):
        session.selected_bench_id = None
        return True
    return False


# -----------------------
# Paths
# -----------------------
def begin_path(
    session: BoardSession,
    roster: List[Player],
    point: Point,
    config: EngineConfig,
    modifiers: Sequence[str] = (),
):
    path_type = TOOL_PATH_TYPES.get(session.tool)
    if path_type is None:
        raise ValueError(f"Tool {session.tool} does not draw")
    save_to_history(session)
    anchor_id = token_at(session, roster, point, config)
    path = Path(color=session.color, type=path_type, anchor_id=anchor_id, modifiers=list(modifiers))
    start = stored_point(point, path, session.snapshot.positions)
    if path_type == PathType.TRIANGLE:
        for m in path.modifiers:
            if m in config.triangle_modifier_factors:
                path.width_factor = config.triangle_modifier_factors[m]
                break
    if path_type in (PathType.DRAW, PathType.ARROW):
        path.points = [start]
    else:
        # second point is the live end (or the polygon's preview vertex)
        path.points = [start, start.model_copy()]
    session.current_path = path
    session.state = InteractionState.DRAWING_PATH
    session.active_shape = None
    logger.debug("Begin %s path (anchor=%s)", path_type.value, anchor_id)


def extend_path(session: BoardSession, point: Point, config: EngineConfig):
    path = session.current_path
    if path is None:
        return
    stored = stored_point(point, path, session.snapshot.positions)
    if stored is None:
        return
    if path.type in (PathType.DRAW, PathType.ARROW):
        lo, hi = config.draw_bounds
        if not (lo < point.x < hi and lo < point.y < hi):
            logger.debug("Dropped out-of-range sample (%.1f, %.1f)", point.x, point.y)
            return
        path.points.append(stored)
    else:
        path.points[-1] = stored


def commit_path(session: BoardSession) -> bool:
    path = session.current_path
    reset_interaction(session)
    if path is None:
        return False
    if path.type in (PathType.DRAW, PathType.ARROW):
        ok = len(path.points) > 1
    else:
        ok = not is_degenerate(path)
    if ok:
        session.snapshot.paths.append(path)
    return ok


def finalize_polygon(session: BoardSession) -> bool:
    path = session.current_path
    reset_interaction(session)
    if path is None:
        return False
    vertices = drop_repeats(path.points[:-1])
    if len(distinct_points(vertices)) < 3:
        logger.debug("Discarded polygon with %d vertices", len(vertices))
        return False
    path.points = vertices
    session.snapshot.paths.append(path)
    return True


def commit_polygon_vertex(session: BoardSession, point: Point, config: EngineConfig, double: bool = False) -> bool:
    """Commit one authored vertex; returns True when the polygon was finalized."""
    path = session.current_path
    committed = path.points[:-1]
    if double:
        return finalize_polygon(session)
    stored = stored_point(point, path, session.snapshot.positions)
    if stored is None:
        return False
    if (
        len(distinct_points(committed)) >= 3
        and distance(stored.as_tuple(), committed[0].as_tuple()) <= config.polygon_close_tolerance
    ):
        return finalize_polygon(session)
    path.points = committed + [stored, stored.model_copy()]
    return False


def delete_path(session: BoardSession, index: int) -> bool:
    if index < 0 or index >= len(session.snapshot.paths):
        return False
    save_to_history(session)
    del session.snapshot.paths[index]
    session.active_shape = None
    return True


def clear_paths(session: BoardSession) -> bool:
    if not session.snapshot.paths:
        return False
    save_to_history(session)
    session.snapshot.paths = []
    session.active_shape = None
    return True


def begin_vertex_drag(session: BoardSession, target: HitTarget):
    save_to_history(session)
    session.state = InteractionState.DRAGGING_VERTEX
    session.edit_target = target
    session.active_shape = target.index


def drag_vertex(session: BoardSession, point: Point):
    target = session.edit_target
    if target is None or target.index >= len(session.snapshot.paths):
        return
    path = session.snapshot.paths[target.index]
    stored = stored_point(point, path, session.snapshot.positions)
    if stored is None or target.vertex_index is None or target.vertex_index >= len(path.points):
        return
    path.points[target.vertex_index] = stored


def begin_shape_drag(session: BoardSession, index: int, point: Point):
    save_to_history(session)
    session.state = InteractionState.DRAGGING_SHAPE
    session.edit_target = HitTarget(type=HitType.MOVE_SHAPE, index=index)
    session.active_shape = index
    session.last_pointer = point


def drag_shape(session: BoardSession, point: Point):
    target, last = session.edit_target, session.last_pointer
    if target is None or last is None or target.index >= len(session.snapshot.paths):
        return
    translate(session.snapshot.paths[target.index], point.x - last.x, point.y - last.y)
    session.last_pointer = point


# -----------------------
# Tools / history
# -----------------------
def set_tool(session: BoardSession, tool: ToolMode) -> bool:
    """Switch tool; an in-progress polygon is finalized (>= 3 vertices) or dropped."""
    changed = False
    if session.state == InteractionState.DRAWING_PATH and session.current_path is not None:
        if session.current_path.type == PathType.POLYGON:
            changed = finalize_polygon(session)
        else:
            changed = commit_path(session)
    reset_interaction(session)
    session.tool = ToolMode(tool)
    session.active_shape = None
    return changed


def undo(session: BoardSession) -> bool:
    if session.state != InteractionState.IDLE:
        return False
    previous = session.history.undo(session.snapshot)
    if previous is None:
        return False
    session.snapshot = previous
    session.active_shape = None
    return True


def redo(session: BoardSession) -> bool:
    if session.state != InteractionState.IDLE:
        return False
    following = session.history.redo(session.snapshot)
    if following is None:
        return False
    session.snapshot = following
    session.active_shape = None
    return True


# -----------------------
# Pointer dispatch
# -----------------------
def pointer_down(
    session: BoardSession,
    roster: List[Player],
    point: Point,
    config: EngineConfig,
    bench_id: Optional[str] = None,
    double: bool = False,
    modifiers: Sequence[str] = (),
) -> bool:
    """Returns True when the press itself settled a mutation (swap, delete, polygon close)."""
    if bench_id is not None:
        if session.tool == ToolMode.MOVE and session.state == InteractionState.IDLE:
            begin_bench_drag(session, bench_id)
        return False

    if session.state == InteractionState.DRAWING_PATH and session.current_path is not None \
            and session.current_path.type == PathType.POLYGON:
        return commit_polygon_vertex(session, point, config, double)
    if session.state != InteractionState.IDLE:
        return False

    snap = session.snapshot
    hit = hit_test(point, snap.paths, snap.positions, session.width, session.height, config, session.active_shape)
    if hit is not None and hit.type == HitType.DELETE:
        return delete_path(session, hit.index)
    if hit is not None and hit.type == HitType.MOVE_SHAPE:
        begin_shape_drag(session, hit.index, point)
        return False

    # court tokens win over path vertices underneath them
    if session.tool == ToolMode.MOVE:
        pid = token_at(session, roster, point, config)
        if pid is not None:
            bench = session.selected_bench_id
            if bench is not None and bench != pid:
                save_to_history(session)
                swapped = swap(session, bench, pid)
                session.selected_bench_id = None
                return swapped
            begin_drag(session, pid)
            return False

    if hit is not None and hit.type == HitType.VERTEX:
        begin_vertex_drag(session, hit)
        return False
    if hit is not None:
        session.active_shape = hit.index
        return False

    session.active_shape = None
    if session.tool == ToolMode.MOVE:
        session.selected_bench_id = None
        return False
    begin_path(session, roster, point, config, modifiers)
    return False


def pointer_move(session: BoardSession, point: Point, config: EngineConfig):
    state = session.state
    if state == InteractionState.DRAGGING_PLAYER:
        drag_player(session, point, config)
    elif state == InteractionState.DRAGGING_BENCH:
        session.pointer = point
    elif state == InteractionState.DRAWING_PATH:
        extend_path(session, point, config)
    elif state == InteractionState.DRAGGING_VERTEX:
        drag_vertex(session, point)
    elif state == InteractionState.DRAGGING_SHAPE:
        drag_shape(session, point)
    else:
        snap = session.snapshot
        hit = hit_test(point, snap.paths, snap.positions, session.width, session.height, config, session.active_shape)
        session.active_shape = hit.index if hit is not None else None


def pointer_up(session: BoardSession, roster: List[Player], point: Point, config: EngineConfig) -> bool:
    """End the current gesture wherever the release happens. True when state settled."""
    state = session.state
    if state == InteractionState.DRAGGING_PLAYER:
        reset_interaction(session)
        return True
    if state == InteractionState.DRAGGING_BENCH:
        changed = drop_bench(session, point, config)
        reset_interaction(session)
        return changed
    if state == InteractionState.DRAWING_PATH:
        if session.current_path is not None and session.current_path.type == PathType.POLYGON:
            return False
        return commit_path(session)
    if state in (InteractionState.DRAGGING_VERTEX, InteractionState.DRAGGING_SHAPE):
        reset_interaction(session)
        return True
    return False
