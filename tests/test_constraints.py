# FILE: tests/test_constraints.py
from court_core import controller
from court_core.constraints import bounds_for_phase, clamp_position, drag_bounds, overlap_violations
from court_core.engine_test_helpers import quick_roster, quick_session
from court_core.formation import default_snapshot
from court_core.models import Bounds, EngineConfig, Point


def test_drag_bounds_for_corner_and_middle_zone():
    snap = default_snapshot(1, quick_roster())
    # p1 in zone 1: left of it is zone 6 (p2, x=50), in front zone 2 (p6, y=18)
    assert drag_bounds("p1", snap, 1) == Bounds(min_x=52, max_x=100, min_y=20, max_y=100)
    # p2 in zone 6: between zone 5 (x=20) and zone 1 (x=80), behind zone 3
    assert drag_bounds("p2", snap, 1) == Bounds(min_x=22, max_x=78, min_y=20, max_y=100)


def test_unknown_player_fails_open():
    snap = default_snapshot(1, quick_roster())
    assert drag_bounds("p12", snap, 1) == Bounds()


def test_clamp_only_in_rule_phases():
    snap = default_snapshot(1, quick_roster())
    cfg = EngineConfig()
    assert clamp_position("p2", Point(x=90, y=10), snap, 1, "primary", cfg) == Point(x=78, y=20)
    assert clamp_position("p2", Point(x=90, y=10), snap, 1, "transition", cfg) == Point(x=90, y=10)
    assert clamp_position("p2", Point(x=90, y=10), snap, 1, "primary", cfg, enforce_rules=False) == Point(x=90, y=10)
    # still kept on the court when unconstrained
    assert clamp_position("p2", Point(x=150, y=-5), snap, 1, "defense", cfg) == Point(x=100, y=0)
    assert bounds_for_phase("p2", snap, 1, "defense", cfg) == Bounds()


def test_legal_drags_never_break_overlap_rule():
    cfg = EngineConfig()
    s = quick_session()
    for pid, target in [
        ("p2", Point(x=0, y=100)),
        ("p1", Point(x=0, y=0)),
        ("p5", Point(x=100, y=100)),
        ("p4", Point(x=100, y=100)),
        ("p6", Point(x=0, y=100)),
        ("p3", Point(x=100, y=0)),
    ]:
        controller.begin_drag(s, pid)
        controller.drag_player(s, target, cfg)
        controller.reset_interaction(s)
        assert overlap_violations(s.snapshot, 1, cfg.constraint_padding) == []
    pos = s.snapshot.positions
    # zone 6 (p2) is the left neighbour of zone 1 (p1)
    assert pos["p2"].x + cfg.constraint_padding <= pos["p1"].x
    assert pos["p3"].x + cfg.constraint_padding <= pos["p2"].x


def test_overlap_violations_reports_crossing():
    snap = default_snapshot(1, quick_roster())
    snap.positions["p1"] = Point(x=40, y=75)
    assert (1, 6, "left") in overlap_violations(snap, 1)
    assert (6, 1, "right") in overlap_violations(snap, 1)


def test_drag_bounds_stay_on_court_with_neighbour_at_sideline():
    snap = default_snapshot(1, quick_roster())
    snap.positions["p2"] = Point(x=100, y=75)
    snap.positions["p6"] = Point(x=80, y=99.5)
    bounds = drag_bounds("p1", snap, 1)
    assert bounds.min_x == 100
    assert bounds.min_y == 100
    assert 0 <= bounds.max_x <= 100 and 0 <= bounds.max_y <= 100


def test_rules_toggled_back_on_keep_drag_inside_court():
    cfg = EngineConfig()
    s = quick_session()
    s.enforce_rules = False
    controller.begin_drag(s, "p2")
    controller.drag_player(s, Point(x=100, y=75), cfg)
    controller.reset_interaction(s)
    s.enforce_rules = True
    controller.begin_drag(s, "p1")
    controller.drag_player(s, Point(x=90, y=75), cfg)
    pos = s.snapshot.positions["p1"]
    assert 0 <= pos.x <= 100 and 0 <= pos.y <= 100
    assert pos.x == 100
