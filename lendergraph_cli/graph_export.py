"""Graph export helpers for SVG snapshots and simple standalone HTML animations."""

from __future__ import annotations

import html
import json
from pathlib import Path
from typing import Any, Dict, List

from .canvas import RecordingCanvas
from .renderer import RendererSession
from .scheduler import ManualFrameScheduler


def frame_to_svg(ops: List[Dict[str, Any]], width: float, height: float) -> str:
    """Serialize one recorded frame to an SVG document."""
    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width:.0f}" height="{height:.0f}" '
        f'viewBox="0 0 {width:.0f} {height:.0f}">'
    ]
    for op in ops:
        kind = op["op"]
        if kind == "rect":
            lines.append(
                f'  <rect x="{op["x"]:.1f}" y="{op["y"]:.1f}" width="{op["width"]:.1f}" '
                f'height="{op["height"]:.1f}" fill="{_esc(op["fill"])}" />'
            )
        elif kind == "circle":
            fill = _esc(op["fill"]) if op.get("fill") else "none"
            stroke = (
                f' stroke="{_esc(op["stroke"])}" stroke-width="{op["line_width"]:.1f}"'
                if op.get("stroke") else ""
            )
            lines.append(
                f'  <circle cx="{op["x"]:.1f}" cy="{op["y"]:.1f}" r="{max(op["radius"], 0):.2f}" '
                f'fill="{fill}"{stroke} />'
            )
        elif kind == "line":
            lines.append(
                f'  <line x1="{op["x1"]:.1f}" y1="{op["y1"]:.1f}" x2="{op["x2"]:.1f}" y2="{op["y2"]:.1f}" '
                f'stroke="{_esc(op["stroke"])}" stroke-width="{op["line_width"]:.2f}" />'
            )
        elif kind == "text":
            lines.append(
                f'  <text x="{op["x"]:.1f}" y="{op["y"]:.1f}" font-size="{op["size"]:.0f}" '
                f'font-family="sans-serif" text-anchor="middle" dominant-baseline="middle" '
                f'fill="{_esc(op["fill"])}">{html.escape(op["content"])}</text>'
            )
    lines.append("</svg>")
    return "\n".join(lines)


def render_frames(
    session: RendererSession,
    scheduler: ManualFrameScheduler,
    canvas: RecordingCanvas,
    count: int,
    fps: float = 30.0,
) -> List[str]:
    """Drive ``session`` for ``count`` frames and return each frame as SVG."""
    frames: List[str] = []
    interval = 1000.0 / fps if fps > 0 else 0.0
    for i in range(count):
        before = session.frames_drawn
        scheduler.tick(i * interval)
        if session.frames_drawn > before:
            frames.append(frame_to_svg(canvas.snapshot(), session.width, session.height))
    return frames


def export_svg(svg: str, output_file: Path) -> None:
    output_file.write_text(svg, encoding="utf-8")


def export_html(frames: List[str], output_file: Path, fps: float = 30.0, title: str = "Lender Match Graph") -> None:
    """Export frames as a standalone HTML page that plays them in a loop."""
    output_file.write_text(_basic_html_export(frames, fps, title), encoding="utf-8")


def _basic_html_export(frames: List[str], fps: float, title: str) -> str:
    interval = int(1000 / fps) if fps > 0 else 33
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>{html.escape(title)}</title>
  <style>
    body {{ font-family: ui-sans-serif, system-ui, sans-serif; margin: 20px; background: #fafaff; }}
    #stage {{ border: 1px solid #ddd; border-radius: 8px; display: inline-block; }}
    #counter {{ color: #888; font-size: 12px; margin-top: 6px; }}
  </style>
</head>
<body>
  <h1>{html.escape(title)}</h1>
  <div id="stage"></div>
  <div id="counter"></div>
  <script>
    const frames = {json.dumps(frames)};
    const stage = document.getElementById('stage');
    const counter = document.getElementById('counter');
    let index = 0;
    function show() {{
      if (!frames.length) {{ counter.textContent = 'No frames rendered.'; return; }}
      stage.innerHTML = frames[index];
      counter.textContent = `frame ${{index + 1}} / ${{frames.length}}`;
      index = (index + 1) % frames.length;
    }}
    show();
    setInterval(show, {interval});
  </script>
</body>
</html>
"""


def _esc(text: str) -> str:
    return html.escape(str(text), quote=True)
