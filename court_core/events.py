# court_core/events.py
"""
Unified pointer input. Mouse and touch both normalise to PointerEvent in
client pixels; a Viewport maps them into percent court space.

Listeners are explicit Subscription objects so a board can stop receiving
events when it is torn down.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .models import Point


POINTER_KINDS = ("down", "move", "up")

MOUSE_KINDS = {"mousedown": "down", "mousemove": "move", "mouseup": "up"}
TOUCH_KINDS = {"touchstart": "down", "touchmove": "move", "touchend": "up", "touchcancel": "up"}


@dataclass(frozen=True)
class PointerEvent:
    kind: str                       # down | move | up
    x: float                        # client pixels
    y: float
    source: str = "mouse"           # mouse | touch
    bench_id: Optional[str] = None  # press started on a bench token
    double: bool = False
    modifiers: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.kind not in POINTER_KINDS:
            raise ValueError(f"Unknown pointer event kind: {self.kind}")


def from_mouse(
    event_type: str,
    x: float,
    y: float,
    detail: int = 1,
    shift: bool = False,
    alt: bool = False,
    bench_id: Optional[str] = None,
) -> PointerEvent:
    if event_type not in MOUSE_KINDS:
        raise ValueError(f"Unknown mouse event: {event_type}")
    mods = tuple(m for m, on in (("shift", shift), ("alt", alt)) if on)
    kind = MOUSE_KINDS[event_type]
    return PointerEvent(kind, x, y, "mouse", bench_id, kind == "down" and detail >= 2, mods)


def from_touch(
    event_type: str,
    touches: Sequence[Tuple[float, float]],
    bench_id: Optional[str] = None,
) -> PointerEvent:
    """First touch point wins; touchend carries the lifted (changed) touch."""
    if event_type not in TOUCH_KINDS:
        raise ValueError(f"Unknown touch event: {event_type}")
    if not touches:
        raise ValueError(f"{event_type} without touch points")
    x, y = touches[0]
    return PointerEvent(TOUCH_KINDS[event_type], x, y, "touch", bench_id)


@dataclass
class Viewport:
    """Court element rectangle in client pixels."""
    left: float = 0.0
    top: float = 0.0
    width: float = 600.0
    height: float = 600.0

    def to_court(self, x: float, y: float) -> Point:
        return Point(x=(x - self.left) / self.width * 100.0, y=(y - self.top) / self.height * 100.0)


Handler = Callable[[PointerEvent], None]


class Subscription:
    def __init__(self, source: "EventSource", handler: Handler):
        self._source = source
        self.handler = handler

    @property
    def active(self) -> bool:
        return self.handler in self._source._handlers

    def cancel(self):
        if self.active:
            self._source._handlers.remove(self.handler)


class EventSource:
    """Document-level pointer stream: moves and releases outside the court still arrive."""

    def __init__(self):
        self._handlers: List[Handler] = []

    @property
    def listener_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: Handler) -> Subscription:
        self._handlers.append(handler)
        return Subscription(self, handler)

    def emit(self, event: PointerEvent):
        for handler in list(self._handlers):
            handler(event)
