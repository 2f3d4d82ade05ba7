# court_core/io.py
from __future__ import annotations
import hashlib
import io
import json
import logging
from typing import Dict, Iterable, List

import pandas as pd

from .constants import DEFAULT_ROSTER, MAX_NUMBER_LEN, ROLES
from .models import Player, Snapshot

logger = logging.getLogger(__name__)

CSV_HEADERS = ["id", "role", "number", "name"]
HEADER_ALIASES = {
    "id": {"player_id", "pid"},
    "role": {"position", "pos"},
    "number": {"no", "#", "jersey", "num"},
    "name": {"player", "player_name"},
}


def default_roster() -> List[Player]:
    return [Player(**p) for p in DEFAULT_ROSTER]


def _header_map(cols: Iterable[str]) -> Dict[str, str]:
    out = {}
    for c in cols:
        lc = str(c).strip().lower()
        mapped = c
        for k, aliases in HEADER_ALIASES.items():
            if lc == k or lc in aliases:
                mapped = k
                break
        out[c] = mapped
    return out


def _player_id(name: str, id_counts: Dict[str, int]) -> str:
    # deterministic short id from the name; suffix counter on collisions
    base = "p" + hashlib.md5(name.lower().encode()).hexdigest()[:8]
    n = id_counts.get(base, 0)
    id_counts[base] = n + 1
    return base if n == 0 else f"{base}-{n}"


def parse_roster_csv(file) -> List[Player]:
    """
    Parse a roster CSV (bytes or file-like). Headers are case-insensitive
    with a few aliases; rows without a name are skipped.
    """
    if isinstance(file, (bytes, bytearray)):
        df = pd.read_csv(io.BytesIO(file), dtype=str)
    else:
        df = pd.read_csv(file, dtype=str)
    df = df.rename(columns=_header_map(df.columns))
    if "name" not in df.columns:
        raise ValueError("Roster CSV needs a name column")
    for k in CSV_HEADERS:
        if k not in df.columns:
            df[k] = ""
    df = df[CSV_HEADERS].fillna("")

    id_counts: Dict[str, int] = {}
    seen = set()
    players: List[Player] = []
    for _, r in df.iterrows():
        name = str(r["name"]).strip()
        if not name:
            logger.warning("Skipping roster row without a name")
            continue
        pid = str(r["id"]).strip() or _player_id(name, id_counts)
        if pid in seen:
            logger.warning("Skipping duplicate roster id %s", pid)
            continue
        seen.add(pid)
        role = str(r["role"]).strip().upper() or "DS"
        if role not in ROLES:
            logger.warning("Unknown role %s for %s, using DS", role, name)
            role = "DS"
        players.append(Player(
            id=pid,
            role=role,
            number=str(r["number"]).strip()[:MAX_NUMBER_LEN],
            name=name,
        ))
    return players


def roster_frame(players: List[Player]) -> pd.DataFrame:
    return pd.DataFrame([p.model_dump() for p in players], columns=CSV_HEADERS)


def save_roster_csv_bytes(players: List[Player]) -> bytes:
    buf = io.StringIO()
    roster_frame(players).to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8")


def build_template_csv() -> bytes:
    return save_roster_csv_bytes(default_roster())


# -----------------------
# Snapshot table (JSON)
# -----------------------
def dump_snapshot_table(table: Dict[str, Snapshot]) -> str:
    return json.dumps({k: s.model_dump(mode="json") for k, s in table.items()}, indent=2)


def parse_snapshot_table(text: str) -> Dict[str, Snapshot]:
    obj = json.loads(text) if text.strip() else {}
    if not isinstance(obj, dict):
        raise ValueError("Snapshot table must be a JSON object keyed by rotation key")
    return {k: Snapshot.model_validate(v) for k, v in obj.items()}


def load_snapshot_table(path: str) -> Dict[str, Snapshot]:
    with open(path, "r", encoding="utf-8") as f:
        return parse_snapshot_table(f.read())


def save_snapshot_table(path: str, table: Dict[str, Snapshot]):
    with open(path, "w", encoding="utf-8") as f:
        f.write(dump_snapshot_table(table))
