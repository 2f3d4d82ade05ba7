# court_core/constraints.py
from __future__ import annotations
import logging
from typing import List, Optional, Tuple

from .constants import RULE_PHASES, ZONE_NEIGHBORS
from .formation import player_in_zone, zone_for
from .models import Bounds, EngineConfig, Point, Snapshot

logger = logging.getLogger(__name__)


def is_rule_governed(phase: str, enforce_rules: bool = True) -> bool:
    return enforce_rules and phase in RULE_PHASES


def _neighbor_position(zone: int, snapshot: Snapshot, rotation: int) -> Optional[Point]:
    pid = player_in_zone(zone, snapshot.active_players, rotation)
    if not pid:
        return None
    return snapshot.positions.get(pid)


def drag_bounds(player_id: str, snapshot: Snapshot, rotation: int, padding: float = 2.0) -> Bounds:
    """
    Rectangle a legal drag of player_id may not leave under the overlap rule.
    Unknown players (not in the active six) get the full court.
    Every edge stays inside the court, so neighbours at the sideline cannot
    push a legal drag off it.
    """
    if player_id not in snapshot.active_players:
        logger.debug("No drag constraint for %s: not on court", player_id)
        return Bounds()
    index = snapshot.active_players.index(player_id)
    if index >= 6:
        return Bounds()
    zone = zone_for(index, rotation)
    neighbors = ZONE_NEIGHBORS.get(zone)
    if not neighbors:
        return Bounds()

    limits = Bounds()
    for z in neighbors.get("left", []):
        pos = _neighbor_position(z, snapshot, rotation)
        if pos is not None:
            limits.min_x = min(100.0, max(limits.min_x, pos.x + padding))
    for z in neighbors.get("right", []):
        pos = _neighbor_position(z, snapshot, rotation)
        if pos is not None:
            limits.max_x = max(0.0, min(limits.max_x, pos.x - padding))
    for z in neighbors.get("front", []):
        pos = _neighbor_position(z, snapshot, rotation)
        if pos is not None:
            limits.min_y = min(100.0, max(limits.min_y, pos.y + padding))
    for z in neighbors.get("back", []):
        pos = _neighbor_position(z, snapshot, rotation)
        if pos is not None:
            limits.max_y = max(0.0, min(limits.max_y, pos.y - padding))
    return limits


def bounds_for_phase(
    player_id: str,
    snapshot: Snapshot,
    rotation: int,
    phase: str,
    config: EngineConfig,
    enforce_rules: bool = True,
) -> Bounds:
    if not is_rule_governed(phase, enforce_rules):
        return Bounds()
    return drag_bounds(player_id, snapshot, rotation, config.constraint_padding)


def clamp_position(
    player_id: str,
    proposed: Point,
    snapshot: Snapshot,
    rotation: int,
    phase: str,
    config: EngineConfig,
    enforce_rules: bool = True,
) -> Point:
    bounds = bounds_for_phase(player_id, snapshot, rotation, phase, config, enforce_rules)
    return bounds.clamp(proposed)


def overlap_violations(snapshot: Snapshot, rotation: int, padding: float = 2.0) -> List[Tuple[int, int, str]]:
    """
    (zone, neighbour_zone, direction) for every adjacency the formation breaks.
    Zones whose occupant has no position are skipped.
    """
    out: List[Tuple[int, int, str]] = []
    for zone, dirs in ZONE_NEIGHBORS.items():
        me = _neighbor_position(zone, snapshot, rotation)
        if me is None:
            continue
        for direction, zones in dirs.items():
            for other in zones:
                pos = _neighbor_position(other, snapshot, rotation)
                if pos is None:
                    continue
                if direction == "left" and me.x < pos.x + padding:
                    out.append((zone, other, direction))
                elif direction == "right" and me.x > pos.x - padding:
                    out.append((zone, other, direction))
                elif direction == "front" and me.y < pos.y + padding:
                    out.append((zone, other, direction))
                elif direction == "back" and me.y > pos.y - padding:
                    out.append((zone, other, direction))
    return out
