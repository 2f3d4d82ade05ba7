# FILE: tests/test_controller.py
import pytest

from court_core import controller
from court_core.controller import InteractionState, ToolMode
from court_core.engine_test_helpers import quick_roster, quick_session
from court_core.models import EngineConfig, Path, PathType, Point, Snapshot

CFG = EngineConfig()


def _pts(*xy):
    return [Point(x=x, y=y) for x, y in xy]


def _click(s, roster, x, y, **kw):
    changed = controller.pointer_down(s, roster, Point(x=x, y=y), CFG, **kw)
    settled = controller.pointer_up(s, roster, Point(x=x, y=y), CFG)
    return changed or settled


# -----------------------
# Players
# -----------------------
def test_tap_to_swap_with_selected_bench_player():
    roster = quick_roster()
    s = quick_session(roster)
    s.selected_bench_id = "p9"
    assert controller.pointer_down(s, roster, Point(x=50, y=75), CFG) is True
    assert s.snapshot.active_players == ["p1", "p9", "p3", "p4", "p5", "p6"]
    assert "p2" not in s.snapshot.positions
    assert s.snapshot.positions["p9"] == Point(x=50, y=75)
    assert s.selected_bench_id is None
    assert s.history.can_undo
    assert s.state == InteractionState.IDLE


def test_bench_drag_drop_swaps_with_nearest_court_player():
    roster = quick_roster()
    s = quick_session(roster)
    controller.pointer_down(s, roster, Point(x=0, y=0), CFG, bench_id="p8")
    assert s.state == InteractionState.DRAGGING_BENCH
    controller.pointer_move(s, Point(x=52, y=77), CFG)
    assert s.pointer == Point(x=52, y=77)
    assert controller.pointer_up(s, roster, Point(x=52, y=77), CFG) is True
    assert s.snapshot.active_players[1] == "p8"
    assert s.state == InteractionState.IDLE


def test_bench_drop_far_away_or_on_self_changes_nothing():
    roster = quick_roster()
    s = quick_session(roster)
    before = s.snapshot.model_dump()
    controller.pointer_down(s, roster, Point(x=0, y=0), CFG, bench_id="p8")
    assert controller.pointer_up(s, roster, Point(x=50, y=45), CFG) is False
    controller.pointer_down(s, roster, Point(x=0, y=0), CFG, bench_id="p1")
    assert controller.pointer_up(s, roster, Point(x=80, y=75), CFG) is False
    assert s.snapshot.model_dump() == before


def test_bench_tap_toggles_selection():
    roster = quick_roster()
    s = quick_session(roster)
    controller.pointer_down(s, roster, Point(x=0, y=0), CFG, bench_id="p9")
    controller.pointer_up(s, roster, Point(x=0, y=0), CFG)
    assert s.selected_bench_id == "p9"
    controller.pointer_down(s, roster, Point(x=0, y=0), CFG, bench_id="p9")
    controller.pointer_up(s, roster, Point(x=0, y=0), CFG)
    assert s.selected_bench_id is None


def test_player_drag_is_clamped_in_serve_receive():
    roster = quick_roster()
    s = quick_session(roster)
    controller.pointer_down(s, roster, Point(x=80, y=75), CFG)
    assert s.state == InteractionState.DRAGGING_PLAYER and s.dragged_id == "p1"
    controller.pointer_move(s, Point(x=10, y=10), CFG)
    assert s.snapshot.positions["p1"] == Point(x=52, y=20)
    assert controller.pointer_up(s, roster, Point(x=10, y=10), CFG) is True
    assert s.state == InteractionState.IDLE


def test_player_drag_is_free_in_transition():
    roster = quick_roster()
    s = quick_session(roster, phase="transition")
    controller.pointer_down(s, roster, Point(x=80, y=75), CFG)
    controller.pointer_move(s, Point(x=10, y=10), CFG)
    assert s.snapshot.positions["p1"] == Point(x=10, y=10)


def test_ensure_formation_repairs_after_roster_edit():
    roster = quick_roster()
    s = quick_session(roster)
    shrunk = [p for p in roster if p.id not in ("p2", "p3")]
    assert controller.ensure_formation(s, shrunk) is True
    assert s.snapshot.active_players == ["p1", "p4", "p5", "p6", "p7", "p8"]


# -----------------------
# Drawing
# -----------------------
def test_freehand_commits_only_with_more_than_one_point():
    roster = quick_roster()
    s = quick_session(roster, tool="draw")
    controller.pointer_down(s, roster, Point(x=30, y=40), CFG)
    controller.pointer_move(s, Point(x=35, y=45), CFG)
    controller.pointer_move(s, Point(x=500, y=45), CFG)  # flick far off court: dropped
    controller.pointer_move(s, Point(x=40, y=50), CFG)
    assert controller.pointer_up(s, roster, Point(x=40, y=50), CFG) is True
    assert s.snapshot.paths[0].points == _pts((30, 40), (35, 45), (40, 50))

    # a tap on empty court leaves a single sample: discarded
    assert _click(s, roster, 70, 40) is False
    assert len(s.snapshot.paths) == 1


def test_line_holds_two_points_and_needs_distinct_ends():
    roster = quick_roster()
    s = quick_session(roster, tool="line")
    controller.pointer_down(s, roster, Point(x=30, y=40), CFG)
    controller.pointer_move(s, Point(x=45, y=40), CFG)
    controller.pointer_move(s, Point(x=60, y=40), CFG)
    assert controller.pointer_up(s, roster, Point(x=60, y=40), CFG) is True
    assert s.snapshot.paths[0].points == _pts((30, 40), (60, 40))
    assert _click(s, roster, 35, 45) is False
    assert len(s.snapshot.paths) == 1


def test_path_started_on_token_is_anchored():
    roster = quick_roster()
    s = quick_session(roster, tool="arrow")
    controller.pointer_down(s, roster, Point(x=80, y=75), CFG)
    controller.pointer_move(s, Point(x=85, y=70), CFG)
    controller.pointer_up(s, roster, Point(x=85, y=70), CFG)
    path = s.snapshot.paths[0]
    assert path.anchor_id == "p1"
    assert path.points == _pts((0, 0), (5, -5))


def test_triangle_modifier_sets_width_factor():
    roster = quick_roster()
    s = quick_session(roster, tool="triangle")
    controller.pointer_down(s, roster, Point(x=30, y=40), CFG, modifiers=("shift",))
    controller.pointer_move(s, Point(x=40, y=30), CFG)
    controller.pointer_up(s, roster, Point(x=40, y=30), CFG)
    assert s.snapshot.paths[0].type == PathType.TRIANGLE
    assert s.snapshot.paths[0].width_factor == 0.25


def test_polygon_closes_near_start_with_three_vertices():
    roster = quick_roster()
    s = quick_session(roster, tool="polygon")
    for x, y in [(10, 10), (20, 10), (20, 20)]:
        _click(s, roster, x, y)
    assert s.state == InteractionState.DRAWING_PATH
    assert _click(s, roster, 10.5, 10.5) is True
    poly = s.snapshot.paths[0]
    assert poly.type == PathType.POLYGON
    assert poly.points == _pts((10, 10), (20, 10), (20, 20))
    assert s.state == InteractionState.IDLE


def test_polygon_does_not_close_with_two_vertices():
    roster = quick_roster()
    s = quick_session(roster, tool="polygon")
    for x, y in [(10, 10), (20, 10)]:
        _click(s, roster, x, y)
    assert _click(s, roster, 10.5, 10.5) is False
    assert s.snapshot.paths == []
    assert s.state == InteractionState.DRAWING_PATH


def test_polygon_double_click_finalizes():
    roster = quick_roster()
    s = quick_session(roster, tool="polygon")
    for x, y in [(10, 10), (20, 10), (20, 20)]:
        _click(s, roster, x, y)
    assert _click(s, roster, 20, 20, double=True) is True
    assert len(s.snapshot.paths[0].points) == 3


def test_tool_switch_finalizes_or_discards_polygon():
    roster = quick_roster()
    s = quick_session(roster, tool="polygon")
    for x, y in [(10, 10), (20, 10)]:
        _click(s, roster, x, y)
    assert controller.set_tool(s, ToolMode.MOVE) is False
    assert s.snapshot.paths == [] and s.current_path is None

    controller.set_tool(s, ToolMode.POLYGON)
    for x, y in [(10, 10), (20, 10), (20, 20)]:
        _click(s, roster, x, y)
    assert controller.set_tool(s, ToolMode.DRAW) is True
    assert len(s.snapshot.paths) == 1
    assert s.tool == ToolMode.DRAW and s.state == InteractionState.IDLE


def test_unknown_tool_rejected():
    s = quick_session()
    with pytest.raises(ValueError):
        controller.set_tool(s, "lasso")


# -----------------------
# Editing
# -----------------------
def test_vertex_drag_moves_one_point():
    roster = quick_roster()
    s = quick_session(roster)
    s.snapshot.paths.append(Path(points=_pts((10, 50), (40, 50)), type=PathType.LINE))
    controller.pointer_down(s, roster, Point(x=10, y=50), CFG)
    assert s.state == InteractionState.DRAGGING_VERTEX
    controller.pointer_move(s, Point(x=15, y=45), CFG)
    assert controller.pointer_up(s, roster, Point(x=15, y=45), CFG) is True
    assert s.snapshot.paths[0].points == _pts((15, 45), (40, 50))


def test_move_press_on_token_drags_player_over_anchored_vertex():
    roster = quick_roster()
    s = quick_session(roster, tool="line")
    controller.pointer_down(s, roster, Point(x=80, y=75), CFG)
    controller.pointer_move(s, Point(x=60, y=60), CFG)
    controller.pointer_up(s, roster, Point(x=60, y=60), CFG)
    assert s.snapshot.paths[0].anchor_id == "p1"
    stored = list(s.snapshot.paths[0].points)

    controller.set_tool(s, ToolMode.MOVE)
    controller.pointer_down(s, roster, Point(x=80, y=75), CFG)
    assert s.state == InteractionState.DRAGGING_PLAYER
    assert s.dragged_id == "p1"
    controller.pointer_move(s, Point(x=85, y=80), CFG)
    controller.pointer_up(s, roster, Point(x=85, y=80), CFG)
    assert s.snapshot.positions["p1"] == Point(x=85, y=80)
    assert s.snapshot.paths[0].points == stored


def test_shape_drag_translates_every_point():
    roster = quick_roster()
    s = quick_session(roster)
    s.snapshot.paths.append(Path(points=_pts((10, 40), (30, 60)), type=PathType.RECT))
    s.active_shape = 0
    # move control sits 24 px left of the rect's centre (120, 300) on a 600 px canvas
    controller.pointer_down(s, roster, Point(x=16, y=50), CFG)
    assert s.state == InteractionState.DRAGGING_SHAPE
    controller.pointer_move(s, Point(x=21, y=55), CFG)
    controller.pointer_up(s, roster, Point(x=21, y=55), CFG)
    pts = s.snapshot.paths[0].points
    assert pts[0].x == pytest.approx(15) and pts[0].y == pytest.approx(45)
    assert pts[1].x == pytest.approx(35) and pts[1].y == pytest.approx(65)


def test_delete_control_removes_path_and_undo_restores():
    roster = quick_roster()
    s = quick_session(roster)
    s.snapshot.paths.append(Path(points=_pts((10, 40), (30, 60)), type=PathType.RECT))
    s.active_shape = 0
    assert controller.pointer_down(s, roster, Point(x=24, y=50), CFG) is True
    assert s.snapshot.paths == []
    assert s.state == InteractionState.IDLE
    assert controller.undo(s)
    assert len(s.snapshot.paths) == 1


def test_hover_selects_and_empty_click_deselects():
    roster = quick_roster()
    s = quick_session(roster)
    s.snapshot.paths.append(Path(points=_pts((10, 40), (30, 60)), type=PathType.RECT))
    controller.pointer_move(s, Point(x=20, y=50), CFG)
    assert s.active_shape == 0
    s.selected_bench_id = "p9"
    _click(s, roster, 60, 50)
    assert s.active_shape is None
    assert s.selected_bench_id is None


def test_clear_paths_is_undoable():
    roster = quick_roster()
    s = quick_session(roster)
    assert controller.clear_paths(s) is False
    s.snapshot.paths.append(Path(points=_pts((10, 40), (30, 60)), type=PathType.LINE))
    assert controller.clear_paths(s) is True
    assert s.snapshot.paths == []
    controller.undo(s)
    assert len(s.snapshot.paths) == 1


def test_load_snapshot_clears_history_and_repairs():
    roster = quick_roster()
    s = quick_session(roster)
    controller.save_to_history(s)
    s.selected_bench_id = "p9"
    key = s.key.model_copy(update={"phase": "defense"})
    controller.load_snapshot(s, key, Snapshot(), roster)
    assert not s.history.can_undo
    assert s.selected_bench_id is None
    assert len(s.snapshot.active_players) == 6
    assert s.key.phase == "defense"
