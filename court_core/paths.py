# court_core/paths.py
"""
Path model: how stored path geometry turns into absolute points and
renderable outlines.

Anchored paths store offsets from their anchor player's position, so a
path follows its player without its stored points ever being rewritten.
An anchor that is missing from the position map makes the path a no-op
for rendering and hit testing; the path itself is kept.
"""
from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple

from .geometry import Vec2, centroid, distance, midpoint, unit
from .models import CLOSED_TYPES, EngineConfig, Path, PathType, Point

# ("M", x, y) | ("L", x, y) | ("Q", cx, cy, x, y)
Segment = Tuple


def to_pixels(p: Point, width: float, height: float) -> Vec2:
    return (p.x / 100.0) * width, (p.y / 100.0) * height


def to_percent(x: float, y: float, width: float, height: float) -> Point:
    return Point(x=(x / width) * 100.0, y=(y / height) * 100.0)


def anchor_of(path: Path, positions: Dict[str, Point]) -> Optional[Point]:
    if path.anchor_id is None:
        return Point(x=0.0, y=0.0)
    return positions.get(path.anchor_id)


def resolve_points(path: Path, positions: Dict[str, Point]) -> Optional[List[Point]]:
    """Absolute percent points, or None when the anchor cannot be resolved."""
    anchor = anchor_of(path, positions)
    if anchor is None:
        return None
    return [p.shifted(anchor.x, anchor.y) for p in path.points]


def resolve_pixels(
    path: Path, positions: Dict[str, Point], width: float, height: float
) -> Optional[List[Vec2]]:
    pts = resolve_points(path, positions)
    if pts is None:
        return None
    return [to_pixels(p, width, height) for p in pts]


def stored_point(absolute: Point, path: Path, positions: Dict[str, Point]) -> Optional[Point]:
    """Inverse of resolve: the value to store for an absolute percent point."""
    anchor = anchor_of(path, positions)
    if anchor is None:
        return None
    return absolute.shifted(-anchor.x, -anchor.y)


def translate(path: Path, dx: float, dy: float):
    path.points = [p.shifted(dx, dy) for p in path.points]


def distinct_points(points: Sequence[Point]) -> List[Point]:
    out: List[Point] = []
    for p in points:
        if not any(q.x == p.x and q.y == p.y for q in out):
            out.append(p)
    return out


def drop_repeats(points: Sequence[Point]) -> List[Point]:
    """Collapse consecutive duplicates (double clicks commit the same vertex twice)."""
    out: List[Point] = []
    for p in points:
        if out and out[-1].x == p.x and out[-1].y == p.y:
            continue
        out.append(p)
    return out


def is_degenerate(path: Path) -> bool:
    if path.type == PathType.POLYGON:
        return len(distinct_points(path.points)) < 3
    return len(distinct_points(path.points)) < 2


# -----------------------
# Curves
# -----------------------
def smooth_segments(pts: Sequence[Vec2]) -> List[Segment]:
    """
    Quadratic smoothing through consecutive midpoints. The first and last
    points are hit exactly; two points give a straight segment.
    """
    if len(pts) < 2:
        return []
    segs: List[Segment] = [("M", pts[0][0], pts[0][1])]
    if len(pts) == 2:
        segs.append(("L", pts[1][0], pts[1][1]))
        return segs
    for i in range(1, len(pts) - 2):
        mx, my = midpoint(pts[i], pts[i + 1])
        segs.append(("Q", pts[i][0], pts[i][1], mx, my))
    ctrl, last = pts[-2], pts[-1]
    segs.append(("Q", ctrl[0], ctrl[1], last[0], last[1]))
    return segs


def straight_segments(pts: Sequence[Vec2], closed: bool = False) -> List[Segment]:
    if not pts:
        return []
    segs: List[Segment] = [("M", pts[0][0], pts[0][1])]
    for p in pts[1:]:
        segs.append(("L", p[0], p[1]))
    if closed and len(pts) > 2:
        segs.append(("Z",))
    return segs


def arrow_tail(pts: Sequence[Vec2], min_tail: float) -> Optional[Vec2]:
    """
    Nearest earlier sample far enough from the tip to give a stable heading.
    Falls back to the first point; None when every sample sits on the tip.
    """
    tip = pts[-1]
    for p in reversed(pts[:-1]):
        if distance(p, tip) > min_tail:
            return p
    if distance(pts[0], tip) > 0.0:
        return pts[0]
    return None


def arrow_geometry(
    pts: Sequence[Vec2], config: EngineConfig
) -> Tuple[List[Vec2], Optional[List[Vec2]]]:
    """(shaft points, head triangle) for an arrow; head is None when degenerate."""
    if len(pts) < 2:
        return list(pts), None
    tail = arrow_tail(pts, config.arrow_min_tail_px)
    if tail is None:
        return list(pts), None
    tip = pts[-1]
    ux, uy = unit(tail, tip)
    px, py = -uy, ux
    half = config.arrow_head_width_px / 2.0
    bx = tip[0] - ux * config.arrow_head_length_px
    by = tip[1] - uy * config.arrow_head_length_px
    head = [tip, (bx + px * half, by + py * half), (bx - px * half, by - py * half)]
    shaft = list(pts[:-1]) + [(tip[0] - ux * config.arrow_shorten_px, tip[1] - uy * config.arrow_shorten_px)]
    return shaft, head


# -----------------------
# Closed outlines
# -----------------------
def triangle_factor(path: Path, config: EngineConfig) -> float:
    if path.width_factor is not None:
        return path.width_factor
    for m in path.modifiers:
        if m in config.triangle_modifier_factors:
            return config.triangle_modifier_factors[m]
    return config.triangle_width_ratio


def triangle_outline(pts: Sequence[Vec2], factor: float) -> List[Vec2]:
    """Wedge from its apex at the origin, widening to a base across the tip."""
    origin, tip = pts[0], pts[-1]
    half = distance(origin, tip) * factor / 2.0
    ux, uy = unit(origin, tip)
    px, py = -uy, ux
    return [
        (origin[0], origin[1]),
        (tip[0] + px * half, tip[1] + py * half),
        (tip[0] - px * half, tip[1] - py * half),
    ]


def rect_outline(pts: Sequence[Vec2]) -> List[Vec2]:
    (x1, y1), (x2, y2) = pts[0], pts[-1]
    return [(x1, y1), (x2, y1), (x2, y2), (x1, y2)]


def outline(path: Path, pts: Sequence[Vec2], config: EngineConfig) -> List[Vec2]:
    if not pts:
        return []
    if path.type == PathType.POLYGON:
        return list(pts)
    if path.type == PathType.TRIANGLE:
        return triangle_outline(pts, triangle_factor(path, config))
    if path.type == PathType.RECT:
        return rect_outline(pts)
    raise ValueError(f"Path type {path.type} has no closed outline")


# -----------------------
# Selection affordances
# -----------------------
def reference_point(path: Path, pts: Sequence[Vec2], config: EngineConfig) -> Vec2:
    if path.type == PathType.LINE:
        return midpoint(pts[0], pts[-1])
    if path.type in (PathType.DRAW, PathType.ARROW):
        return pts[len(pts) // 2]
    if path.type in CLOSED_TYPES:
        return centroid(outline(path, pts, config))
    raise ValueError(f"Unknown path type: {path.type}")


def control_positions(ref: Vec2, config: EngineConfig) -> Dict[str, Vec2]:
    off = config.control_offset_px
    return {
        "delete": (ref[0] + off, ref[1]),
        "move": (ref[0] - off, ref[1]),
    }
