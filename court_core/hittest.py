# court_core/hittest.py
"""
Pointer -> target resolution. First match wins:

1. delete / move controls of the active shape
2. vertices of polygon, line and triangle paths (path order, then point order)
3. shape bodies, topmost (most recently drawn) first
4. proximity bridge around the active shape's reference point

No match returns None; callers treat that as empty space.
"""
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Sequence

from .geometry import Vec2, distance, distance_to_segment, point_in_polygon
from .models import VERTEX_TYPES, EngineConfig, HitTarget, HitType, Path, PathType, Point
from .paths import control_positions, outline, reference_point, resolve_pixels, to_pixels


def _near_polyline(p: Vec2, pts: Sequence[Vec2], tolerance: float) -> bool:
    if len(pts) == 1:
        return distance(p, pts[0]) <= tolerance
    best = min(distance_to_segment(p, pts[i], pts[i + 1]) for i in range(len(pts) - 1))
    return best <= tolerance


def _hit_stroke(path: Path, p: Vec2, pts: List[Vec2], config: EngineConfig) -> bool:
    return _near_polyline(p, pts, config.body_hit_tolerance_px)


def _hit_filled(path: Path, p: Vec2, pts: List[Vec2], config: EngineConfig) -> bool:
    return point_in_polygon(p, outline(path, pts, config))


def _hit_rect(path: Path, p: Vec2, pts: List[Vec2], config: EngineConfig) -> bool:
    (x1, y1), (x2, y2) = pts[0], pts[-1]
    return min(x1, x2) <= p[0] <= max(x1, x2) and min(y1, y2) <= p[1] <= max(y1, y2)


BODY_TESTS: Dict[PathType, Callable[[Path, Vec2, List[Vec2], EngineConfig], bool]] = {
    PathType.DRAW: _hit_stroke,
    PathType.ARROW: _hit_stroke,
    PathType.LINE: _hit_stroke,
    PathType.POLYGON: _hit_filled,
    PathType.TRIANGLE: _hit_filled,
    PathType.RECT: _hit_rect,
}


def _controls_hit(p: Vec2, path: Path, pts: List[Vec2], index: int, config: EngineConfig) -> Optional[HitTarget]:
    ctrls = control_positions(reference_point(path, pts, config), config)
    if distance(p, ctrls["delete"]) <= config.control_hit_radius_px:
        return HitTarget(type=HitType.DELETE, index=index)
    if distance(p, ctrls["move"]) <= config.control_hit_radius_px:
        return HitTarget(type=HitType.MOVE_SHAPE, index=index)
    return None


def hit_test(
    point: Point,
    paths: List[Path],
    positions: Dict[str, Point],
    width: float,
    height: float,
    config: EngineConfig,
    active_index: Optional[int] = None,
) -> Optional[HitTarget]:
    p = to_pixels(point, width, height)
    resolved = [resolve_pixels(path, positions, width, height) for path in paths]

    active_pts = None
    if active_index is not None and 0 <= active_index < len(paths):
        active_pts = resolved[active_index]
        if active_pts:
            hit = _controls_hit(p, paths[active_index], active_pts, active_index, config)
            if hit is not None:
                return hit

    for i, path in enumerate(paths):
        pts = resolved[i]
        if not pts or path.type not in VERTEX_TYPES:
            continue
        for j, v in enumerate(pts):
            if distance(p, v) <= config.vertex_hit_radius_px:
                return HitTarget(type=HitType.VERTEX, index=i, vertex_index=j)

    for i in range(len(paths) - 1, -1, -1):
        path, pts = paths[i], resolved[i]
        if not pts:
            continue
        test = BODY_TESTS.get(path.type)
        if test is None:
            raise ValueError(f"Unknown path type: {path.type}")
        if test(path, p, pts, config):
            return HitTarget(type=HitType.SHAPE, index=i)

    if active_pts:
        ref = reference_point(paths[active_index], active_pts, config)
        if distance(p, ref) <= config.proximity_radius_px:
            return HitTarget(type=HitType.UI_PROXIMITY, index=active_index)
    return None
