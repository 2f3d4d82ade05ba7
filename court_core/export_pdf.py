# court_core/export_pdf.py
"""
Game-plan export: every rotation x phase diagram, one page per rotation.

Read-only consumer of the render contract. Snapshots are copied, healed if
short, rendered to draw commands and replayed onto a reportlab canvas.
"""
from __future__ import annotations
import io
import logging
from typing import List, Optional, Tuple

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

from .constants import BACK_ROW, FRONT_ROW, PHASES, phase_label
from .formation import default_snapshot, repair_formation, rotation_square
from .models import EngineConfig, Player, RotationKey, Snapshot
from .render import DrawCommand, render_static
from .store import SnapshotStore

logger = logging.getLogger(__name__)

DIAGRAM_SIZE = 170.0


def game_plan(
    store: SnapshotStore,
    roster: List[Player],
    mode: str = "receive",
    live_key: Optional[RotationKey] = None,
    live_snapshot: Optional[Snapshot] = None,
) -> List[Tuple[RotationKey, Snapshot]]:
    """
    (key, snapshot) for rotations 1..6 x all phases. The live key uses the
    unsaved editing state; missing slots get the default formation.
    """
    plan: List[Tuple[RotationKey, Snapshot]] = []
    for rotation in range(1, 7):
        for phase in PHASES:
            key = RotationKey(rotation=rotation, phase=phase, mode=mode)
            if live_key is not None and live_snapshot is not None and key == live_key:
                snap = live_snapshot.clone()
            else:
                snap = store.load(key)
            if snap is None:
                snap = default_snapshot(rotation, roster)
            elif repair_formation(snap, rotation, roster):
                logger.info("Healed %s for export", key.storage_key)
            plan.append((key, snap))
    return plan


def _cell(player: Optional[Player]) -> str:
    if player is None:
        return ""
    return f"#{player.number} {player.role}".strip() if player.number else player.role


def rotation_square_frame(roster: List[Player], rotation: int) -> pd.DataFrame:
    """2x3 grid as seen from behind the court: front row 4-3-2, back row 5-6-1."""
    square = rotation_square(roster, rotation)
    data = [[_cell(square[z]) for z in FRONT_ROW], [_cell(square[z]) for z in BACK_ROW]]
    return pd.DataFrame(data, index=["Front", "Back"], columns=["Left", "Middle", "Right"])


# -----------------------
# Command replay
# -----------------------
def _quad_to_cubic(p0, ctrl, p1):
    c1 = (p0[0] + 2.0 / 3.0 * (ctrl[0] - p0[0]), p0[1] + 2.0 / 3.0 * (ctrl[1] - p0[1]))
    c2 = (p1[0] + 2.0 / 3.0 * (ctrl[0] - p1[0]), p1[1] + 2.0 / 3.0 * (ctrl[1] - p1[1]))
    return c1, c2


class _Replay:
    """Maps command pixels (origin top-left) into a PDF box (origin bottom-left)."""

    def __init__(self, c: canvas.Canvas, x: float, y: float, size: float, scale: float):
        self.c, self.x, self.y, self.size, self.scale = c, x, y, size, scale

    def pt(self, p):
        return self.x + p[0] * self.scale, self.y + self.size - p[1] * self.scale

    def _style(self, cmd: DrawCommand):
        if cmd.stroke:
            self.c.setStrokeColor(colors.HexColor(cmd.stroke))
        self.c.setLineWidth(max(cmd.width * self.scale, 0.3))
        if cmd.fill:
            self.c.setFillColor(colors.HexColor(cmd.fill))
            self.c.setFillAlpha(cmd.fill_opacity)

    def draw(self, cmd: DrawCommand):
        self.c.saveState()
        self._style(cmd)
        stroke = 1 if cmd.stroke and cmd.width > 0 else 0
        fill = 1 if cmd.fill else 0
        if cmd.op == "path":
            self._path(cmd)
        elif cmd.op in ("polygon", "rect"):
            pts = cmd.points if cmd.op == "polygon" else [
                cmd.points[0], (cmd.points[1][0], cmd.points[0][1]), cmd.points[1], (cmd.points[0][0], cmd.points[1][1]),
            ]
            p = self.c.beginPath()
            p.moveTo(*self.pt(pts[0]))
            for q in pts[1:]:
                p.lineTo(*self.pt(q))
            p.close()
            self.c.drawPath(p, stroke=stroke, fill=fill)
        elif cmd.op == "circle":
            cx, cy = self.pt(cmd.center)
            self.c.circle(cx, cy, cmd.radius * self.scale, stroke=stroke, fill=fill)
        elif cmd.op == "text":
            cx, cy = self.pt(cmd.center)
            size = max(cmd.size * self.scale, 3.0)
            self.c.setFont("Helvetica-Bold", size)
            self.c.drawCentredString(cx, cy - size / 3.0, cmd.text)
        else:
            raise ValueError(f"Unknown draw op: {cmd.op}")
        self.c.restoreState()

    def _path(self, cmd: DrawCommand):
        p = self.c.beginPath()
        cur = (0.0, 0.0)
        for seg in cmd.segments:
            if seg[0] == "M":
                cur = (seg[1], seg[2])
                p.moveTo(*self.pt(cur))
            elif seg[0] == "L":
                cur = (seg[1], seg[2])
                p.lineTo(*self.pt(cur))
            elif seg[0] == "Q":
                end = (seg[3], seg[4])
                c1, c2 = _quad_to_cubic(cur, (seg[1], seg[2]), end)
                p.curveTo(*self.pt(c1), *self.pt(c2), *self.pt(end))
                cur = end
            elif seg[0] == "Z":
                p.close()
        self.c.drawPath(p, stroke=1, fill=0)


def render_pdf(
    plan: List[Tuple[RotationKey, Snapshot]],
    roster: List[Player],
    config: Optional[EngineConfig] = None,
    title: str = "Game Plan",
) -> bytes:
    config = config or EngineConfig()
    buf = io.BytesIO()
    page_size = landscape(letter)
    c = canvas.Canvas(buf, pagesize=page_size)
    canvas_px = config.default_canvas[0]
    scale = DIAGRAM_SIZE / canvas_px

    rotations = sorted({k.rotation for k, _ in plan})
    for rotation in rotations:
        c.setFont("Helvetica-Bold", 16)
        c.drawString(40, page_size[1] - 40, f"{title} - Rotation {rotation}")

        entries = [(k, s) for k, s in plan if k.rotation == rotation]
        x = 40.0
        top = page_size[1] - 70
        for key, snap in entries:
            c.setFont("Helvetica", 10)
            c.drawString(x, top - 12, phase_label(key.phase))
            replay = _Replay(c, x, top - 20 - DIAGRAM_SIZE, DIAGRAM_SIZE, scale)
            for cmd in render_static(snap, roster, canvas_px, canvas_px, config):
                replay.draw(cmd)
            x += DIAGRAM_SIZE + 10

        grid = rotation_square_frame(roster, rotation)
        data = [[""] + list(grid.columns)] + [[idx] + list(grid.loc[idx].values) for idx in grid.index]
        t = Table(data)
        t.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        _, table_h = t.wrapOn(c, page_size[0] - 80, 200)
        t.drawOn(c, 40, top - 60 - DIAGRAM_SIZE - table_h)
        c.showPage()
    c.save()
    return buf.getvalue()
