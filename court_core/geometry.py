# court_core/geometry.py
"""
Geometry kernel. Pure functions over absolute (already scaled) coordinates.
Points are any (x, y) pair; nothing here knows about paths or players.
"""
from __future__ import annotations
from typing import Sequence, Tuple
import numpy as np

Vec2 = Tuple[float, float]


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def point_in_polygon(point: Sequence[float], vertices: Sequence[Sequence[float]]) -> bool:
    """Ray-casting parity test. Vertices in drawing order; convexity not required."""
    if len(vertices) < 3:
        return False
    x, y = float(point[0]), float(point[1])
    inside = False
    n = len(vertices)
    for i in range(n):
        x1, y1 = vertices[i]
        x2, y2 = vertices[(i + 1) % n]
        if (y1 > y) != (y2 > y):
            x_at_y = x1 + (y - y1) * (x2 - x1) / (y2 - y1)
            if x < x_at_y:
                inside = not inside
    return inside


def distance_to_segment(p: Sequence[float], v: Sequence[float], w: Sequence[float]) -> float:
    pv = np.asarray(p, dtype=float)
    a = np.asarray(v, dtype=float)
    b = np.asarray(w, dtype=float)
    ab = b - a
    l2 = float(np.dot(ab, ab))
    if l2 == 0.0:
        return float(np.linalg.norm(pv - a))
    t = float(np.dot(pv - a, ab)) / l2
    t = max(0.0, min(1.0, t))
    proj = a + t * ab
    return float(np.linalg.norm(pv - proj))


def centroid(points: Sequence[Sequence[float]]) -> Vec2:
    """Arithmetic mean of the points (not an area centroid)."""
    if len(points) == 0:
        raise ValueError("centroid of an empty point list")
    arr = np.asarray(points, dtype=float)
    cx, cy = arr.mean(axis=0)
    return float(cx), float(cy)


def midpoint(a: Sequence[float], b: Sequence[float]) -> Vec2:
    return (a[0] + b[0]) / 2.0, (a[1] + b[1]) / 2.0


def unit(a: Sequence[float], b: Sequence[float]) -> Vec2:
    """Unit vector from a to b; (0, 0) when the points coincide."""
    d = distance(a, b)
    if d == 0.0:
        return 0.0, 0.0
    return (b[0] - a[0]) / d, (b[1] - a[1]) / d
