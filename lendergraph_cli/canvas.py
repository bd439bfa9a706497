"""Drawing contexts the renderer paints frames onto."""

from __future__ import annotations

import colorsys
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .models import Color


def rgba(color: Color, alpha: float = 1.0) -> str:
    """CSS ``rgba()`` paint string for an RGB triple."""
    r, g, b = color
    alpha = max(0.0, min(1.0, alpha))
    return f"rgba({r}, {g}, {b}, {alpha:.3f})"


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> Color:
    """Convert CSS-style HSL (degrees, percent, percent) to an RGB triple."""
    r, g, b = colorsys.hls_to_rgb((hue % 360) / 360.0, lightness / 100.0, saturation / 100.0)
    return (round(r * 255), round(g * 255), round(b * 255))


def blend(a: Color, b: Color, t: float) -> Color:
    t = max(0.0, min(1.0, t))
    return tuple(round(x + (y - x) * t) for x, y in zip(a, b))  # type: ignore[return-value]


class DrawContext(ABC):
    """Minimal 2D drawing surface."""

    @abstractmethod
    def clear(self, width: float, height: float) -> None:
        ...

    @abstractmethod
    def fill_rect(self, x: float, y: float, width: float, height: float, fill: str) -> None:
        ...

    @abstractmethod
    def circle(
        self,
        x: float,
        y: float,
        radius: float,
        fill: Optional[str] = None,
        stroke: Optional[str] = None,
        line_width: float = 1.0,
    ) -> None:
        ...

    @abstractmethod
    def line(self, x1: float, y1: float, x2: float, y2: float, stroke: str, line_width: float = 1.0) -> None:
        ...

    @abstractmethod
    def text(self, x: float, y: float, content: str, size: float, fill: str) -> None:
        ...


class RecordingCanvas(DrawContext):
    """Records draw operations as plain dicts; ``clear`` starts a new frame."""

    def __init__(self) -> None:
        self.ops: List[Dict[str, Any]] = []
        self.frames_cleared = 0

    def clear(self, width: float, height: float) -> None:
        self.ops = [{"op": "clear", "width": width, "height": height}]
        self.frames_cleared += 1

    def fill_rect(self, x: float, y: float, width: float, height: float, fill: str) -> None:
        self.ops.append({"op": "rect", "x": x, "y": y, "width": width, "height": height, "fill": fill})

    def circle(
        self,
        x: float,
        y: float,
        radius: float,
        fill: Optional[str] = None,
        stroke: Optional[str] = None,
        line_width: float = 1.0,
    ) -> None:
        self.ops.append({
            "op": "circle",
            "x": x,
            "y": y,
            "radius": radius,
            "fill": fill,
            "stroke": stroke,
            "line_width": line_width,
        })

    def line(self, x1: float, y1: float, x2: float, y2: float, stroke: str, line_width: float = 1.0) -> None:
        self.ops.append({
            "op": "line",
            "x1": x1,
            "y1": y1,
            "x2": x2,
            "y2": y2,
            "stroke": stroke,
            "line_width": line_width,
        })

    def text(self, x: float, y: float, content: str, size: float, fill: str) -> None:
        self.ops.append({"op": "text", "x": x, "y": y, "content": content, "size": size, "fill": fill})

    def snapshot(self) -> List[Dict[str, Any]]:
        """Copy of the operations drawn since the last ``clear``."""
        return [dict(op) for op in self.ops]

    def count(self, op: str) -> int:
        return sum(1 for item in self.ops if item["op"] == op)
