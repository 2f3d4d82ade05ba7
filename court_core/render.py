# court_core/render.py
"""
Rendering as a pure function: (Snapshot, roster, canvas size) -> draw commands.

Nothing here mutates state or touches input; any backend (PDF export, a
live canvas, tests) replays the command list.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .constants import ATTACK_LINE_Y, role_colors
from .geometry import Vec2
from .models import EngineConfig, Path, PathType, Player, Point, Snapshot
from .paths import (
    Segment, arrow_geometry, control_positions, outline, reference_point,
    resolve_pixels, smooth_segments, straight_segments, to_pixels,
)

logger = logging.getLogger(__name__)

COURT_FILL = "#FFFFFF"
COURT_LINE = "#0F172A"
CONTROL_DELETE = "#E11D48"
CONTROL_MOVE = "#2563EB"


@dataclass
class DrawCommand:
    op: str                                  # "path" | "polygon" | "circle" | "text" | "rect"
    segments: List[Segment] = field(default_factory=list)
    points: List[Vec2] = field(default_factory=list)
    stroke: Optional[str] = None
    fill: Optional[str] = None
    width: float = 0.0
    fill_opacity: float = 1.0
    center: Optional[Vec2] = None
    radius: float = 0.0
    text: str = ""
    size: float = 0.0
    tag: str = ""


@dataclass
class _Style:
    config: EngineConfig
    stroke_width: float
    preview: bool = False


# -----------------------
# Per-variant renderers
# -----------------------
def _render_draw(path: Path, pts: List[Vec2], style: _Style, tag: str) -> List[DrawCommand]:
    return [DrawCommand("path", segments=smooth_segments(pts), stroke=path.color,
                        width=style.stroke_width, tag=tag)]


def _render_arrow(path: Path, pts: List[Vec2], style: _Style, tag: str) -> List[DrawCommand]:
    shaft, head = arrow_geometry(pts, style.config)
    cmds = [DrawCommand("path", segments=smooth_segments(shaft), stroke=path.color,
                        width=style.stroke_width, tag=tag)]
    if head is not None:
        cmds.append(DrawCommand("polygon", points=head, fill=path.color, tag=tag))
    return cmds


def _render_line(path: Path, pts: List[Vec2], style: _Style, tag: str) -> List[DrawCommand]:
    return [DrawCommand("path", segments=straight_segments([pts[0], pts[-1]]), stroke=path.color,
                        width=style.stroke_width, tag=tag)]


def _render_closed(path: Path, pts: List[Vec2], style: _Style, tag: str) -> List[DrawCommand]:
    return [DrawCommand("polygon", points=outline(path, pts, style.config), fill=path.color,
                        fill_opacity=style.config.fill_opacity, stroke=path.color,
                        width=style.stroke_width, tag=tag)]


def _render_triangle(path: Path, pts: List[Vec2], style: _Style, tag: str) -> List[DrawCommand]:
    return [DrawCommand("polygon", points=outline(path, pts, style.config), fill=path.color,
                        stroke=path.color, width=style.stroke_width, tag=tag)]


def _render_polygon(path: Path, pts: List[Vec2], style: _Style, tag: str) -> List[DrawCommand]:
    if style.preview:
        # still being authored: open outline through the live preview point
        return [DrawCommand("path", segments=straight_segments(pts), stroke=path.color,
                            width=style.stroke_width, tag=tag)]
    return _render_closed(path, pts, style, tag)


PATH_RENDERERS: Dict[PathType, Callable[[Path, List[Vec2], _Style, str], List[DrawCommand]]] = {
    PathType.DRAW: _render_draw,
    PathType.ARROW: _render_arrow,
    PathType.LINE: _render_line,
    PathType.POLYGON: _render_polygon,
    PathType.TRIANGLE: _render_triangle,
    PathType.RECT: _render_closed,
}


def render_path(
    path: Path,
    positions: Dict[str, Point],
    width: float,
    height: float,
    config: EngineConfig,
    small: bool = False,
    preview: bool = False,
    tag: str = "",
) -> List[DrawCommand]:
    pts = resolve_pixels(path, positions, width, height)
    if pts is None:
        logger.debug("Skipping path %s: anchor %s not on court", tag, path.anchor_id)
        return []
    if len(pts) < 2:
        return []
    stroke = config.small_stroke_width_px if small else config.stroke_width_px
    renderer = PATH_RENDERERS.get(path.type)
    if renderer is None:
        raise ValueError(f"Unknown path type: {path.type}")
    return renderer(path, pts, _Style(config=config, stroke_width=stroke, preview=preview), tag)


# -----------------------
# Court, tokens, controls
# -----------------------
def render_court(width: float, height: float) -> List[DrawCommand]:
    attack_y = ATTACK_LINE_Y / 100.0 * height
    return [
        DrawCommand("rect", points=[(0.0, 0.0), (width, height)], fill=COURT_FILL,
                    stroke=COURT_LINE, width=2.0, tag="court"),
        DrawCommand("path", segments=straight_segments([(0.0, 0.0), (width, 0.0)]),
                    stroke=COURT_LINE, width=4.0, tag="court:net"),
        DrawCommand("path", segments=straight_segments([(0.0, attack_y), (width, attack_y)]),
                    stroke=COURT_LINE, width=1.0, tag="court:attack-line"),
    ]


def _token(player: Player, center: Vec2, radius: float, small: bool, tag: str) -> List[DrawCommand]:
    fill, text = role_colors(player.role)
    cmds = [
        DrawCommand("circle", center=center, radius=radius, fill=fill, stroke=COURT_LINE,
                    width=1.0 if small else 2.0, tag=tag),
        DrawCommand("text", center=center, text=player.number, fill=text,
                    size=radius * (0.9 if small else 0.7), tag=tag),
    ]
    if not small:
        cmds.append(DrawCommand("text", center=(center[0], center[1] + radius * 0.55),
                                text=player.role, fill=text, size=radius * 0.35, tag=tag))
    return cmds


def court_tokens(snapshot: Snapshot, roster: List[Player]) -> List[Tuple[Player, Point]]:
    """Active players that resolve to a roster entry and a position; ghosts are dropped."""
    by_id = {p.id: p for p in roster}
    out: List[Tuple[Player, Point]] = []
    seen = set()
    for pid in snapshot.active_players:
        if pid in seen:
            continue
        seen.add(pid)
        player = by_id.get(pid)
        pos = snapshot.positions.get(pid)
        if player is None or pos is None:
            continue
        out.append((player, pos))
    return out


def render_tokens(
    snapshot: Snapshot, roster: List[Player], width: float, height: float,
    config: EngineConfig, small: bool = False,
) -> List[DrawCommand]:
    radius = config.small_token_radius_px if small else config.token_hit_radius_px
    cmds: List[DrawCommand] = []
    for player, pos in court_tokens(snapshot, roster):
        cmds.extend(_token(player, to_pixels(pos, width, height), radius, small, f"token:{player.id}"))
    return cmds


def render_controls(
    index: int, snapshot: Snapshot, width: float, height: float, config: EngineConfig,
) -> List[DrawCommand]:
    if index < 0 or index >= len(snapshot.paths):
        return []
    path = snapshot.paths[index]
    pts = resolve_pixels(path, snapshot.positions, width, height)
    if not pts or len(pts) < 2:
        return []
    ctrls = control_positions(reference_point(path, pts, config), config)
    r = config.control_hit_radius_px
    return [
        DrawCommand("circle", center=ctrls["delete"], radius=r, fill=CONTROL_DELETE,
                    stroke=COURT_FILL, width=1.5, tag=f"control:delete:{index}"),
        DrawCommand("circle", center=ctrls["move"], radius=r, fill=CONTROL_MOVE,
                    stroke=COURT_FILL, width=1.5, tag=f"control:move:{index}"),
    ]


def render_board(
    snapshot: Snapshot,
    roster: List[Player],
    width: float,
    height: float,
    config: Optional[EngineConfig] = None,
    current_path: Optional[Path] = None,
    active_shape: Optional[int] = None,
    ghost: Optional[Tuple[Player, Point]] = None,
    small: bool = False,
) -> List[DrawCommand]:
    """Full frame: court, committed paths, in-progress path, tokens, overlays."""
    config = config or EngineConfig()
    cmds = render_court(width, height)
    for i, path in enumerate(snapshot.paths):
        cmds.extend(render_path(path, snapshot.positions, width, height, config, small=small, tag=f"path:{i}"))
    if current_path is not None:
        cmds.extend(render_path(current_path, snapshot.positions, width, height, config,
                                small=small, preview=True, tag="path:current"))
    cmds.extend(render_tokens(snapshot, roster, width, height, config, small=small))
    if active_shape is not None:
        cmds.extend(render_controls(active_shape, snapshot, width, height, config))
    if ghost is not None:
        player, pos = ghost
        cmds.extend(_token(player, to_pixels(pos, width, height), config.token_hit_radius_px,
                           False, f"ghost:{player.id}"))
    return cmds


def render_static(
    snapshot: Snapshot,
    roster: List[Player],
    width: float,
    height: float,
    config: Optional[EngineConfig] = None,
    small: bool = True,
) -> List[DrawCommand]:
    """Read-only view for exporters: no selection overlays, no in-progress path."""
    return render_board(snapshot, roster, width, height, config, small=small)
