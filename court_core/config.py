# court_core/config.py
from __future__ import annotations
import logging
import os
import textwrap
from typing import Optional

import yaml
from pydantic import ValidationError

from .models import EngineConfig

logger = logging.getLogger(__name__)

# ===== Engine defaults (percent units unless suffixed _px) =====
DEFAULT_CONFIG = {
    "history_limit": 20,
    "constraint_padding": 2.0,       # overlap margin between neighbours
    "bench_swap_radius": 15.0,       # drop distance for a bench swap
    "token_hit_radius_px": 22.0,
    "small_token_radius_px": 10.0,
    "vertex_hit_radius_px": 10.0,
    "body_hit_tolerance_px": 14.0,   # larger than the vertex radius
    "control_offset_px": 24.0,
    "control_hit_radius_px": 12.0,
    "proximity_radius_px": 56.0,
    "arrow_head_length_px": 14.0,
    "arrow_head_width_px": 12.0,
    "arrow_shorten_px": 10.0,
    "arrow_min_tail_px": 6.0,
    "polygon_close_tolerance": 3.0,
    "triangle_width_ratio": 0.5,
    "triangle_modifier_factors": {"shift": 0.25, "alt": 1.0},
    "draw_bounds": (-20.0, 120.0),
    "fill_opacity": 0.25,
    "stroke_width_px": 3.0,
    "small_stroke_width_px": 2.0,
    "debounce_seconds": 0.4,
    "default_canvas": (600.0, 600.0),
}

# ===== Board config file (written by ensure_assets_exist) =====
DEFAULT_BOARD_YAML = textwrap.dedent("""\
# Court board tuning. Percent values are court percent (0..100).
history_limit: 20
constraint_padding: 2.0
bench_swap_radius: 15.0

# Hit testing (pixels)
token_hit_radius_px: 22.0
small_token_radius_px: 10.0
vertex_hit_radius_px: 10.0
body_hit_tolerance_px: 14.0
control_offset_px: 24.0
control_hit_radius_px: 12.0
proximity_radius_px: 56.0

# Arrows (pixels)
arrow_head_length_px: 14.0
arrow_head_width_px: 12.0
arrow_shorten_px: 10.0
arrow_min_tail_px: 6.0

# Shapes
polygon_close_tolerance: 3.0
triangle_width_ratio: 0.5
triangle_modifier_factors:
  shift: 0.25
  alt: 1.0
draw_bounds: [-20.0, 120.0]
fill_opacity: 0.25

# Drawing (pixels)
stroke_width_px: 3.0
small_stroke_width_px: 2.0
default_canvas: [600.0, 600.0]

# Persistence
debounce_seconds: 0.4
""")

DEFAULT_SAMPLE_ROSTER_CSV = textwrap.dedent("""\
id,role,number,name
p1,S,1,Setter
p2,OH1,2,Outside 1
p3,M1,3,Middle 1
p4,OPP,4,Opposite
p5,OH2,5,Outside 2
p6,M2,6,Middle 2
p7,L,9,Libero
p8,DS,10,Def. Spec
""")


def ensure_assets_exist(base_dir: str = "assets"):
    os.makedirs(base_dir, exist_ok=True)
    board_path = os.path.join(base_dir, "board.yaml")
    if not os.path.exists(board_path):
        with open(board_path, "w", encoding="utf-8") as f:
            f.write(DEFAULT_BOARD_YAML)
    roster_path = os.path.join(base_dir, "sample_roster.csv")
    if not os.path.exists(roster_path):
        with open(roster_path, "w", encoding="utf-8") as f:
            f.write(DEFAULT_SAMPLE_ROSTER_CSV)


def config_from_mapping(overrides: Optional[dict]) -> EngineConfig:
    """Merge overrides over DEFAULT_CONFIG and validate."""
    overrides = overrides or {}
    unknown = sorted(k for k in overrides if k not in DEFAULT_CONFIG)
    if unknown:
        raise ValueError(f"Unknown config keys: {unknown}")
    merged = dict(DEFAULT_CONFIG)
    merged.update(overrides)
    try:
        return EngineConfig(**merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid board config: {exc}") from exc


def load_config_text(text: str) -> EngineConfig:
    obj = yaml.safe_load(text) or {}
    if not isinstance(obj, dict):
        raise ValueError("Board config must be a mapping of key: value")
    return config_from_mapping(obj)


def load_config(path: Optional[str] = None) -> EngineConfig:
    if path is None:
        return config_from_mapping({})
    with open(path, "r", encoding="utf-8") as f:
        cfg = load_config_text(f.read())
    logger.debug("Loaded board config from %s", path)
    return cfg
