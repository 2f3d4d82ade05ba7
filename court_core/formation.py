# court_core/formation.py
from __future__ import annotations
import logging
from typing import Dict, List, Optional

from .constants import COURT_ZONES, ZONE_SEQUENCE
from .models import Player, Point, Snapshot

logger = logging.getLogger(__name__)

COURT_SIZE = 6


def _check_rotation(rotation: int):
    if rotation < 1 or rotation > 6:
        raise ValueError(f"rotation must be in 1..6, got {rotation}")


def zone_for(index: int, rotation: int) -> int:
    """Zone (1..6) of the player at rotation-order index 0..5."""
    _check_rotation(rotation)
    if index < 0 or index >= COURT_SIZE:
        raise ValueError(f"rotation index must be in 0..5, got {index}")
    return ZONE_SEQUENCE[(index + rotation - 1) % COURT_SIZE]


def index_in_zone(zone: int, rotation: int) -> Optional[int]:
    for i in range(COURT_SIZE):
        if zone_for(i, rotation) == zone:
            return i
    return None


def player_in_zone(zone: int, active_players: List[str], rotation: int) -> Optional[str]:
    idx = index_in_zone(zone, rotation)
    if idx is None or idx >= len(active_players):
        return None
    return active_players[idx]


def default_positions(rotation: int, roster: List[Player]) -> Dict[str, Point]:
    """First six roster entries at their canonical zone coordinates."""
    positions: Dict[str, Point] = {}
    for index, player in enumerate(roster[:COURT_SIZE]):
        x, y = COURT_ZONES[zone_for(index, rotation)]
        positions[player.id] = Point(x=x, y=y)
    return positions


def default_snapshot(rotation: int, roster: List[Player]) -> Snapshot:
    positions = default_positions(rotation, roster)
    return Snapshot(positions=positions, paths=[], active_players=list(positions.keys()))


def resolvable_ids(snapshot: Snapshot, roster: List[Player]) -> List[str]:
    known = {p.id for p in roster}
    out: List[str] = []
    for pid in snapshot.active_players:
        if pid in known and pid in snapshot.positions and pid not in out:
            out.append(pid)
    return out


def needs_repair(snapshot: Snapshot, roster: List[Player]) -> bool:
    return len(resolvable_ids(snapshot, roster)) < COURT_SIZE


def repair_formation(snapshot: Snapshot, rotation: int, roster: List[Player]) -> bool:
    """
    Regenerate the default formation in place when fewer than six active ids
    resolve to real players. Paths are kept; their anchors resolve lazily.
    Returns True when the snapshot was rewritten.
    """
    if not needs_repair(snapshot, roster):
        return False
    fresh = default_snapshot(rotation, roster)
    # short roster already fully on court: nothing better to generate
    if set(fresh.active_players) == set(resolvable_ids(snapshot, roster)):
        return False
    logger.info(
        "Repairing formation for rotation %s: %d resolvable players",
        rotation, len(resolvable_ids(snapshot, roster)),
    )
    snapshot.positions = fresh.positions
    snapshot.active_players = fresh.active_players
    return True


def rotation_square(roster: List[Player], rotation: int) -> Dict[int, Optional[Player]]:
    """Zone -> starter occupying it in the given rotation."""
    zones: Dict[int, Optional[Player]] = {z: None for z in COURT_ZONES}
    for index, player in enumerate(roster[:COURT_SIZE]):
        zones[zone_for(index, rotation)] = player
    return zones
