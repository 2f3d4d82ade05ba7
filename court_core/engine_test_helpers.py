"""
Internal helpers for tests (not imported by the engine).
"""
from __future__ import annotations
from typing import List, Optional

from .controller import BoardSession, ToolMode, new_session
from .models import EngineConfig, Player, RotationKey

ROLES_BY_SLOT = ["S", "OH1", "M1", "OPP", "OH2", "M2", "L", "DS", "SS", "OH", "S", "M"]


def quick_player(pid: str, role: str = "DS", number: str = "", name: str = "") -> Player:
    return Player(id=pid, role=role, number=number, name=name or pid.upper())


def quick_roster(n: int = 12) -> List[Player]:
    return [
        quick_player(f"p{i}", ROLES_BY_SLOT[(i - 1) % len(ROLES_BY_SLOT)], str(i))
        for i in range(1, n + 1)
    ]


def quick_session(
    roster: Optional[List[Player]] = None,
    rotation: int = 1,
    phase: str = "primary",
    tool: str = "move",
    config: Optional[EngineConfig] = None,
) -> BoardSession:
    roster = roster if roster is not None else quick_roster()
    session = new_session(roster, RotationKey(rotation=rotation, phase=phase), config=config)
    session.tool = ToolMode(tool)
    return session
