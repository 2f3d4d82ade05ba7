# FILE: court_core/constants.py
from __future__ import annotations
from typing import Dict, List, Tuple

# --- Zones (rotation topology) ---
# Serve order walks the court 1 -> 6 -> 5 -> 4 -> 3 -> 2
ZONE_SEQUENCE: List[int] = [1, 6, 5, 4, 3, 2]

# Canonical zone coordinates, percent of court (net at y=0)
COURT_ZONES: Dict[int, Tuple[float, float]] = {
    1: (80.0, 75.0),
    2: (80.0, 18.0),
    3: (50.0, 18.0),
    4: (20.0, 18.0),
    5: (20.0, 75.0),
    6: (50.0, 75.0),
}

# Directional neighbours per zone. left/right constrain x, front/back constrain y.
ZONE_NEIGHBORS: Dict[int, Dict[str, List[int]]] = {
    1: {"left": [6], "front": [2]},
    2: {"left": [3], "back": [1]},
    3: {"left": [4], "right": [2], "back": [6]},
    4: {"right": [3], "back": [5]},
    5: {"right": [6], "front": [4]},
    6: {"left": [5], "right": [1], "front": [3]},
}

# Rotation-square layout: front row then back row, as seen from behind the court
FRONT_ROW: List[int] = [4, 3, 2]
BACK_ROW: List[int] = [5, 6, 1]

ATTACK_LINE_Y = 100.0 / 3.0

# --- Phases / modes ---
PHASES: List[str] = ["primary", "secondary", "transition", "defense"]
PHASE_LABELS: Dict[str, str] = {
    "primary": "Serve Receive 1",
    "secondary": "Serve Receive 2",
    "transition": "Transition",
    "defense": "Base Defense",
}
# Serve-receive phases enforce the overlap rule
RULE_PHASES = {"primary", "secondary"}

GAME_MODES: List[str] = ["receive", "serve"]

# --- Roles ---
ROLES: List[str] = ["S", "OH1", "OH2", "OH", "M1", "M2", "M", "OPP", "L", "DS", "SS"]

# fill, text
ROLE_COLORS: Dict[str, Tuple[str, str]] = {
    "S": ("#FACC15", "#422006"),
    "L": ("#FFFFFF", "#0F172A"),
    "M": ("#4F46E5", "#FFFFFF"),
    "OH": ("#059669", "#FFFFFF"),
    "OPP": ("#E11D48", "#FFFFFF"),
}
DEFAULT_ROLE_COLOR: Tuple[str, str] = ("#64748B", "#FFFFFF")

DEFAULT_ROSTER: List[Dict[str, str]] = [
    {"id": "p1", "role": "S", "name": "Setter", "number": "1"},
    {"id": "p2", "role": "OH1", "name": "Outside 1", "number": "2"},
    {"id": "p3", "role": "M1", "name": "Middle 1", "number": "3"},
    {"id": "p4", "role": "OPP", "name": "Opposite", "number": "4"},
    {"id": "p5", "role": "OH2", "name": "Outside 2", "number": "5"},
    {"id": "p6", "role": "M2", "name": "Middle 2", "number": "6"},
    {"id": "p7", "role": "L", "name": "Libero", "number": "9"},
    {"id": "p8", "role": "DS", "name": "Def. Spec", "number": "10"},
    {"id": "p9", "role": "SS", "name": "Serve Sub", "number": "11"},
    {"id": "p10", "role": "OH", "name": "Sub OH", "number": "12"},
    {"id": "p11", "role": "S", "name": "Sub Setter", "number": "13"},
    {"id": "p12", "role": "M", "name": "Sub Middle", "number": "14"},
]

MAX_NUMBER_LEN = 4


def role_colors(role: str) -> Tuple[str, str]:
    role = (role or "").strip().upper()
    if role in ("S", "L"):
        return ROLE_COLORS[role]
    if role.startswith("M"):
        return ROLE_COLORS["M"]
    if role.startswith("OH"):
        return ROLE_COLORS["OH"]
    if role in ("OPP", "DS", "SS"):
        return ROLE_COLORS["OPP"]
    return DEFAULT_ROLE_COLOR


def phase_label(phase: str) -> str:
    if phase not in PHASE_LABELS:
        raise ValueError(f"Unknown phase: {phase}")
    return PHASE_LABELS[phase]
