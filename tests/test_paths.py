# FILE: tests/test_paths.py
import pytest

from court_core.models import EngineConfig, Path, PathType, Point
from court_core.paths import (
    arrow_geometry, is_degenerate, reference_point, resolve_points, smooth_segments,
    stored_point, triangle_factor, triangle_outline,
)


def _pts(*xy):
    return [Point(x=x, y=y) for x, y in xy]


def test_anchor_round_trip_moves_path_with_player():
    path = Path(points=_pts((0, 0), (5, 5), (10, -3)), type=PathType.ARROW, anchor_id="p1")
    stored = [p.model_copy() for p in path.points]
    positions = {"p1": Point(x=50, y=50)}
    before = resolve_points(path, positions)
    positions["p1"] = Point(x=53, y=48)
    after = resolve_points(path, positions)
    for a, b in zip(before, after):
        assert b.x - a.x == pytest.approx(3)
        assert b.y - a.y == pytest.approx(-2)
    assert path.points == stored


def test_missing_anchor_resolves_to_none():
    path = Path(points=_pts((0, 0), (5, 5)), anchor_id="gone")
    assert resolve_points(path, {"p1": Point(x=1, y=1)}) is None
    assert stored_point(Point(x=3, y=3), path, {}) is None


def test_stored_point_is_inverse_of_resolve():
    path = Path(points=[], anchor_id="p1")
    positions = {"p1": Point(x=20, y=30)}
    s = stored_point(Point(x=25, y=28), path, positions)
    assert s == Point(x=5, y=-2)
    path.points = [s]
    assert resolve_points(path, positions) == [Point(x=25, y=28)]


def test_smooth_segments_hit_endpoints():
    assert smooth_segments([(0, 0), (10, 0)]) == [("M", 0, 0), ("L", 10, 0)]
    segs = smooth_segments([(0, 0), (10, 0), (20, 10), (30, 10)])
    assert segs[0] == ("M", 0, 0)
    assert segs[1] == ("Q", 10, 0, 15.0, 5.0)
    assert segs[-1] == ("Q", 20, 10, 30, 10)
    assert smooth_segments([(1, 1)]) == []


def test_arrow_geometry_straight():
    cfg = EngineConfig()
    shaft, head = arrow_geometry([(0, 0), (100, 0)], cfg)
    assert shaft[-1] == (90.0, 0.0)
    assert head[0] == (100, 0)
    assert head[1][0] == pytest.approx(86.0)
    assert sorted(abs(p[1]) for p in head[1:]) == [pytest.approx(6.0), pytest.approx(6.0)]


def test_arrow_heading_skips_jittery_last_sample():
    cfg = EngineConfig()
    _, head = arrow_geometry([(0, 0), (50, 0), (100, 0), (100, 1)], cfg)
    tip, b1, b2 = head
    assert tip == (100, 1)
    # heading comes from (50, 0), not the 1px jitter: base sits behind the tip
    assert (b1[0] + b2[0]) / 2 < 100 - 13


def test_arrow_without_heading_has_no_head():
    _, head = arrow_geometry([(5, 5), (5, 5)], EngineConfig())
    assert head is None


def test_triangle_outline_and_sizing_policies():
    out = triangle_outline([(0, 0), (100, 0)], 0.5)
    assert out[0] == (0, 0)
    assert all(p[0] == 100 for p in out[1:])
    assert sorted(round(p[1], 6) for p in out[1:]) == [-25.0, 25.0]
    cfg = EngineConfig()
    assert triangle_factor(Path(type=PathType.TRIANGLE), cfg) == 0.5
    assert triangle_factor(Path(type=PathType.TRIANGLE, modifiers=["shift"]), cfg) == 0.25
    assert triangle_factor(Path(type=PathType.TRIANGLE, modifiers=["shift"], width_factor=0.8), cfg) == 0.8


def test_degenerate_shapes():
    assert is_degenerate(Path(type=PathType.LINE, points=_pts((1, 1), (1, 1))))
    assert not is_degenerate(Path(type=PathType.LINE, points=_pts((1, 1), (2, 1))))
    assert is_degenerate(Path(type=PathType.POLYGON, points=_pts((1, 1), (2, 1), (1, 1))))


def test_reference_points():
    cfg = EngineConfig()
    assert reference_point(Path(type=PathType.LINE), [(0, 0), (10, 20)], cfg) == (5.0, 10.0)
    assert reference_point(Path(type=PathType.DRAW), [(0, 0), (1, 1), (2, 2)], cfg) == (1, 1)
    assert reference_point(Path(type=PathType.RECT), [(0, 0), (10, 10)], cfg) == (5.0, 5.0)
