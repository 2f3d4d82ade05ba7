# court_core/models.py
from __future__ import annotations
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import GAME_MODES, PHASES, MAX_NUMBER_LEN, ROLES

Phase = Literal["primary", "secondary", "transition", "defense"]
GameMode = Literal["receive", "serve"]


class Player(BaseModel):
    id: str
    role: str = "DS"
    number: str = ""
    name: str = ""

    @field_validator("number")
    @classmethod
    def _short_number(cls, v):
        v = str(v).strip()
        if len(v) > MAX_NUMBER_LEN:
            raise ValueError(f"number must be at most {MAX_NUMBER_LEN} characters")
        return v

    @field_validator("role")
    @classmethod
    def _known_role(cls, v):
        v = str(v).strip().upper()
        if v not in ROLES:
            raise ValueError(f"Unknown role: {v}")
        return v


class Point(BaseModel):
    """Percent court coordinates, or an offset when the owning path is anchored."""
    x: float
    y: float

    def shifted(self, dx: float, dy: float) -> "Point":
        return Point(x=self.x + dx, y=self.y + dy)

    def as_tuple(self) -> Tuple[float, float]:
        return self.x, self.y


# A player's position is a point in [0, 100] percent space
Position = Point


class PathType(str, Enum):
    DRAW = "draw"
    ARROW = "arrow"
    LINE = "line"
    POLYGON = "polygon"
    TRIANGLE = "triangle"
    RECT = "rect"


# Variants whose stored points are individually editable
VERTEX_TYPES = (PathType.POLYGON, PathType.LINE, PathType.TRIANGLE)
CLOSED_TYPES = (PathType.POLYGON, PathType.TRIANGLE, PathType.RECT)


class Path(BaseModel):
    points: List[Point] = Field(default_factory=list)
    color: str = "#000000"
    type: PathType = PathType.DRAW
    anchor_id: Optional[str] = None
    width_factor: Optional[float] = None
    modifiers: List[str] = Field(default_factory=list)


class Snapshot(BaseModel):
    positions: Dict[str, Point] = Field(default_factory=dict)
    paths: List[Path] = Field(default_factory=list)
    active_players: List[str] = Field(default_factory=list)

    def clone(self) -> "Snapshot":
        return self.model_copy(deep=True)


class RotationKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    rotation: int = 1
    phase: Phase = "primary"
    mode: GameMode = "receive"

    @field_validator("rotation")
    @classmethod
    def _rotation_range(cls, v):
        if v < 1 or v > 6:
            raise ValueError("rotation must be in 1..6")
        return v

    @property
    def storage_key(self) -> str:
        return f"{self.rotation}_{self.phase}_{self.mode}"

    @classmethod
    def from_storage_key(cls, key: str) -> "RotationKey":
        parts = key.split("_")
        if len(parts) != 3 or parts[1] not in PHASES or parts[2] not in GAME_MODES:
            raise ValueError(f"Malformed rotation key: {key!r}")
        return cls(rotation=int(parts[0]), phase=parts[1], mode=parts[2])


class Bounds(BaseModel):
    min_x: float = 0.0
    max_x: float = 100.0
    min_y: float = 0.0
    max_y: float = 100.0

    def clamp(self, p: Point) -> Point:
        # min wins over max when neighbours have already crossed
        x = max(self.min_x, min(self.max_x, p.x))
        y = max(self.min_y, min(self.max_y, p.y))
        return Point(x=x, y=y)


class HitType(str, Enum):
    DELETE = "delete"
    MOVE_SHAPE = "move-shape"
    VERTEX = "vertex"
    SHAPE = "shape"
    UI_PROXIMITY = "ui-proximity"


class HitTarget(BaseModel):
    type: HitType
    index: int
    vertex_index: Optional[int] = None


class EngineConfig(BaseModel):
    history_limit: int = 20
    constraint_padding: float = 2.0
    bench_swap_radius: float = 15.0
    token_hit_radius_px: float = 22.0
    small_token_radius_px: float = 10.0
    vertex_hit_radius_px: float = 10.0
    body_hit_tolerance_px: float = 14.0
    control_offset_px: float = 24.0
    control_hit_radius_px: float = 12.0
    proximity_radius_px: float = 56.0
    arrow_head_length_px: float = 14.0
    arrow_head_width_px: float = 12.0
    arrow_shorten_px: float = 10.0
    arrow_min_tail_px: float = 6.0
    polygon_close_tolerance: float = 3.0
    triangle_width_ratio: float = 0.5
    triangle_modifier_factors: Dict[str, float] = Field(
        default_factory=lambda: {"shift": 0.25, "alt": 1.0}
    )
    draw_bounds: Tuple[float, float] = (-20.0, 120.0)
    fill_opacity: float = 0.25
    stroke_width_px: float = 3.0
    small_stroke_width_px: float = 2.0
    debounce_seconds: float = 0.4
    default_canvas: Tuple[float, float] = (600.0, 600.0)

    @field_validator("history_limit")
    @classmethod
    def _positive_limit(cls, v):
        if v < 1:
            raise ValueError("history_limit must be at least 1")
        return v

    @field_validator("draw_bounds")
    @classmethod
    def _ordered_bounds(cls, v):
        if v[0] >= v[1]:
            raise ValueError("draw_bounds must be (low, high) with low < high")
        return v

    @field_validator("fill_opacity")
    @classmethod
    def _opacity(cls, v):
        if not 0.0 <= v <= 1.0:
            raise ValueError("fill_opacity must be within [0, 1]")
        return v
