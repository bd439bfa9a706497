"""Animated radial lender graph as an owned renderer session.

The session owns all mutable animation state (node map, particle list, frame
handle) and exposes explicit entry points for the host:

- :meth:`RendererSession.update` when the scored roster or filters change,
- :meth:`RendererSession.attach` / :meth:`RendererSession.on_window_resize`
  for sizing,
- :meth:`RendererSession.on_pointer_move`, :meth:`RendererSession.on_click`,
  :meth:`RendererSession.on_pointer_leave` for interaction,
- :meth:`RendererSession.advance_frame` for one frame of drawing, normally
  driven by the scheduler loop,
- :meth:`RendererSession.teardown` to stop everything.

Scores are never computed authoritatively here; the roster handed to
``update`` is treated as an immutable, already-scored snapshot.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .canvas import DrawContext, rgba
from .config_manager import load_graph_config
from .graph_layout import PERFECT_MATCH_COLOR, ease, layout_nodes
from .models import GraphNode, LenderProfile, Overlay, Particle
from .scheduler import FrameScheduler

logger = logging.getLogger(__name__)

LenderClickHandler = Callable[[Optional[LenderProfile]], None]

BACKGROUND_COLOR = (240, 240, 255)
RING_COLOR = (200, 200, 230)
CENTER_COLOR = (100, 100, 255)
WHITE = (255, 255, 255)

RING_COUNT = 6
HIGH_SCORE = 0.75
GLYPH_MIN_RADIUS = 15.0
GLYPH_MIN_SCORE = 0.5
MAX_PARTICLES = 400

_UNSET: Any = object()


@dataclass
class GraphSettings:
    ease_factor: float = 0.08
    hit_tolerance: float = 4.0
    legend_height: float = 60.0
    card_width: float = 300.0
    card_height: float = 300.0
    card_offset: float = 12.0

    @classmethod
    def from_config(cls) -> "GraphSettings":
        cfg = load_graph_config()
        return cls(
            ease_factor=float(cfg["ease_factor"]),
            hit_tolerance=float(cfg["hit_tolerance"]),
            legend_height=float(cfg["legend_height"]),
        )


@dataclass
class Viewport:
    """Measured size of the element hosting the canvas."""

    width: float = 0.0
    height: float = 0.0


class RendererSession:
    """Frame-driven renderer for one embedded lender graph."""

    def __init__(
        self,
        scheduler: FrameScheduler,
        canvas: Optional[DrawContext] = None,
        on_lender_click: Optional[LenderClickHandler] = None,
        rng: Optional[random.Random] = None,
        settings: Optional[GraphSettings] = None,
    ) -> None:
        self.scheduler = scheduler
        self.canvas = canvas
        self.on_lender_click = on_lender_click
        self.rng = rng or random.Random()
        self.settings = settings or GraphSettings()

        self.lenders: List[LenderProfile] = []
        self.form_data: Any = None
        self.filters_applied = False
        self.all_filters_selected = False

        self.nodes: Dict[int, GraphNode] = {}
        self.particles: List[Particle] = []
        self.width = 0.0
        self.height = 0.0
        self.container: Any = None

        self.selected_lender_id: Optional[int] = None
        self.hovered_lender_id: Optional[int] = None
        self.cursor = "default"
        self.hover_card: Optional[Overlay] = None
        self.detail_card: Optional[Overlay] = None
        self.info_tooltip: Optional[Overlay] = None

        self.frames_drawn = 0
        self._by_id: Dict[int, LenderProfile] = {}
        self._frame_handle: Optional[int] = None
        self._measure_handle: Optional[int] = None
        self._torn_down = False

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def update(
        self,
        lenders: Optional[Sequence[LenderProfile]] = None,
        form_data: Any = _UNSET,
        filters_applied: Optional[bool] = None,
        all_filters_selected: Optional[bool] = None,
    ) -> None:
        """Apply new host inputs, relayout, and restart the frame loop."""
        if self._torn_down:
            return
        if lenders is not None:
            self.lenders = list(lenders)
            self._by_id = {lender.lender_id: lender for lender in self.lenders}
        if form_data is not _UNSET:
            self.form_data = form_data
        if filters_applied is not None:
            self.filters_applied = bool(filters_applied)
        if all_filters_selected is not None:
            self.all_filters_selected = bool(all_filters_selected)

        if self.selected_lender_id is not None and self.selected_lender_id not in self._by_id:
            self._set_selection(None)
        if self.hovered_lender_id is not None and self.hovered_lender_id not in self._by_id:
            self.hovered_lender_id = None
            self.hover_card = None
            self.cursor = "default"

        self._relayout()
        self._restart_loop()

    def attach(self, container: Any) -> bool:
        """Bind the hosting element and measure it."""
        self.container = container
        return self.measure()

    def measure(self) -> bool:
        """Derive canvas size from the container.

        A missing or zero-sized container is re-measured on the next frame. A
        laid-out container with no room below the legend gets a zero-height
        canvas and nothing is drawn. Returns True once a drawable size was
        recorded.
        """
        if self._torn_down:
            return False
        width = float(getattr(self.container, "width", 0) or 0)
        container_height = float(getattr(self.container, "height", 0) or 0)
        if width <= 0 or container_height <= 0:
            if self._measure_handle is None:
                logger.debug("Container not laid out yet; retrying measurement next frame")
                self._measure_handle = self.scheduler.request(self._retry_measure)
            return False
        height = max(0.0, container_height - self.settings.legend_height)
        self.resize(width, height)
        return height > 0

    def _retry_measure(self, _timestamp: float) -> None:
        self._measure_handle = None
        self.measure()

    def on_window_resize(self) -> bool:
        return self.measure()

    def resize(self, width: float, height: float) -> None:
        if self._torn_down:
            return
        if (width, height) == (self.width, self.height):
            return
        self.width, self.height = float(width), float(height)
        self._relayout()
        self._restart_loop()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def center(self) -> Tuple[float, float]:
        return self.width / 2, self.height / 2

    @property
    def selected_lender(self) -> Optional[LenderProfile]:
        if self.selected_lender_id is None:
            return None
        return self._by_id.get(self.selected_lender_id)

    @property
    def active_lender_count(self) -> int:
        return sum(1 for node in self.nodes.values() if node.is_active_for_graph_display)

    @property
    def is_running(self) -> bool:
        return self._frame_handle is not None

    def _relayout(self) -> None:
        self.nodes = layout_nodes(
            self.lenders,
            self.form_data,
            self.filters_applied,
            self.width,
            self.height,
            existing=self.nodes,
            rng=self.rng,
        )

    # ------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------

    def _restart_loop(self) -> None:
        if self._frame_handle is not None:
            self.scheduler.cancel(self._frame_handle)
            self._frame_handle = None
        if self._torn_down or self.canvas is None or self.width <= 0 or self.height <= 0:
            return
        self._frame_handle = self.scheduler.request(self._on_frame)

    def _on_frame(self, timestamp: float) -> None:
        self._frame_handle = None
        self.advance_frame(timestamp)
        if not self._torn_down and self._frame_handle is None:
            self._frame_handle = self.scheduler.request(self._on_frame)

    def advance_frame(self, timestamp: float) -> bool:
        """Draw one frame at ``timestamp`` (milliseconds); False if nothing was drawn."""
        ctx = self.canvas
        if self._torn_down or ctx is None or self.width <= 0 or self.height <= 0:
            return False

        ctx.clear(self.width, self.height)
        self._draw_backdrop(ctx)
        self._draw_particles(ctx)
        if self.filters_applied:
            self._draw_connections(ctx)
        self._draw_nodes(ctx, timestamp)
        self.frames_drawn += 1
        return True

    def _draw_backdrop(self, ctx: DrawContext) -> None:
        cx, cy = self.center
        ctx.fill_rect(0, 0, self.width, self.height, rgba(BACKGROUND_COLOR, 0.2))
        step = min(self.width, self.height) * 0.1
        for i in range(1, RING_COUNT + 1):
            ctx.circle(cx, cy, i * step, stroke=rgba(RING_COLOR, 0.2), line_width=1)
        ctx.circle(cx, cy, 40, fill=rgba(CENTER_COLOR, 0.15))
        ctx.circle(cx, cy, 20, fill=rgba(CENTER_COLOR, 0.8))

    def _draw_particles(self, ctx: DrawContext) -> None:
        alive: List[Particle] = []
        for particle in self.particles:
            particle.life += 1
            if particle.expired:
                continue
            particle.y -= particle.speed * 0.5
            ctx.circle(particle.x, particle.y, particle.size, fill=rgba(particle.color, particle.alpha))
            alive.append(particle)
        self.particles = alive

    def _draw_connections(self, ctx: DrawContext) -> None:
        cx, cy = self.center
        for lender in self.lenders:
            node = self.nodes.get(lender.lender_id)
            if node is None or not node.is_active_for_graph_display:
                continue
            score = node.score_from_context
            color = PERFECT_MATCH_COLOR if score >= 1.0 else node.color
            width = 1 + score * 3
            mx, my = (cx + node.x) / 2, (cy + node.y) / 2
            # two segments stand in for a center-to-node gradient
            ctx.line(cx, cy, mx, my, rgba(color, 0.3), width)
            ctx.line(mx, my, node.x, node.y, rgba(color, 0.7), width)

            if score >= HIGH_SCORE and self.rng.random() < 0.05 * score:
                t = self.rng.random()
                self._add_particles(cx + (node.x - cx) * t, cy + (node.y - cy) * t, node.color, 1)

    def _draw_nodes(self, ctx: DrawContext, timestamp: float) -> None:
        for lender in self.lenders:
            node = self.nodes.get(lender.lender_id)
            if node is None:
                continue
            active = node.is_active_for_graph_display
            score = node.score_from_context
            selected = self.selected_lender_id == lender.lender_id
            hovered = self.hovered_lender_id == lender.lender_id

            remaining = ease(node, self.settings.ease_factor)
            if active and remaining > 0.5 and self.rng.random() < 0.1:
                self._add_particles(node.x, node.y, node.color, 1)

            radius = node.radius * pulse_factor(timestamp, lender.lender_id, score, active)
            node.render_radius = radius

            if active or hovered or selected:
                glow_opacity = 0.1 + score * 0.3 if active else 0.1
                ctx.circle(node.x, node.y, radius * 1.5, fill=rgba(node.color, glow_opacity))
            ctx.circle(node.x, node.y, radius, fill=rgba(node.color, 0.9))

            if selected:
                ctx.circle(node.x, node.y, radius, stroke=rgba(WHITE, 1.0), line_width=3)
                if self.rng.random() < 0.2:
                    self._add_particles(node.x, node.y, node.color, 2)
            elif hovered:
                ctx.circle(node.x, node.y, radius, stroke=rgba(WHITE, 0.7), line_width=2)

            if radius > GLYPH_MIN_RADIUS and score >= GLYPH_MIN_SCORE and lender.initial:
                ctx.text(node.x, node.y, lender.initial, math.floor(radius * 0.8), rgba(WHITE, 1.0))

    def _add_particles(self, x: float, y: float, color: Tuple[int, int, int], count: int) -> None:
        for _ in range(count):
            if len(self.particles) >= MAX_PARTICLES:
                return
            self.particles.append(Particle(
                x=x,
                y=y,
                size=self.rng.random() * 3 + 1,
                color=color,
                speed=self.rng.random() * 2 + 0.5,
                max_life=self.rng.random() * 30 + 20,
            ))

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def hit_test(self, x: float, y: float) -> Optional[LenderProfile]:
        """Lender under the pointer; on overlap the smallest (topmost) node wins."""
        best: Optional[Tuple[float, float, LenderProfile]] = None
        for lender in self.lenders:
            node = self.nodes.get(lender.lender_id)
            if node is None:
                continue
            distance = math.hypot(x - node.x, y - node.y)
            radius = node.hit_radius
            if distance > radius + self.settings.hit_tolerance:
                continue
            candidate = (radius, distance, lender)
            if best is None or candidate[:2] < best[:2]:
                best = candidate
        return best[2] if best else None

    def _card_position(self, x: float, y: float) -> Tuple[float, float]:
        s = self.settings
        left = min(max(0.0, x + s.card_offset), max(0.0, self.width - s.card_width))
        top = min(max(0.0, y + s.card_offset), max(0.0, self.height - s.card_height))
        return left, top

    def on_pointer_move(self, x: float, y: float) -> Optional[LenderProfile]:
        if self._torn_down:
            return None
        lender = self.hit_test(x, y)
        new_id = lender.lender_id if lender else None
        if lender is not None:
            self.cursor = "pointer"
            self.hover_card = Overlay("hover", *self._card_position(x, y), lender_id=new_id)
        else:
            self.cursor = "default"
            self.hover_card = None
        if new_id != self.hovered_lender_id:
            self.hovered_lender_id = new_id
            self._restart_loop()
        return lender

    def on_pointer_leave(self) -> None:
        """Clear hover; an open selection and its detail card are kept."""
        if self._torn_down:
            return
        self.cursor = "default"
        self.hover_card = None
        if self.hovered_lender_id is not None:
            self.hovered_lender_id = None
            self._restart_loop()

    def on_click(self, x: float, y: float) -> Optional[LenderProfile]:
        """Handle a click; returns the lender now selected, if any."""
        if self._torn_down:
            return None
        lender = self.hit_test(x, y)
        card_x, card_y = self._card_position(x, y)

        if lender is not None and lender.match_score > 0:
            if self.all_filters_selected:
                self.info_tooltip = None
                if self.selected_lender_id == lender.lender_id:
                    self._set_selection(None)
                else:
                    self._set_selection(lender, card_x, card_y)
                return self.selected_lender
            self.info_tooltip = Overlay("incomplete_filters", card_x, card_y, lender_id=lender.lender_id)
            self._set_selection(None)
            return None

        self.info_tooltip = None
        self._set_selection(None)
        return None

    def deselect(self) -> None:
        """Close the detail card explicitly."""
        if not self._torn_down:
            self._set_selection(None)

    def dismiss_tooltip(self) -> None:
        self.info_tooltip = None

    def _set_selection(self, lender: Optional[LenderProfile], x: float = 0.0, y: float = 0.0) -> None:
        new_id = lender.lender_id if lender else None
        if lender is not None:
            self.detail_card = Overlay("detail", x, y, lender_id=new_id)
        else:
            self.detail_card = None
        if new_id == self.selected_lender_id:
            return
        self.selected_lender_id = new_id
        if self.on_lender_click is not None:
            self.on_lender_click(lender)
        self._restart_loop()

    def teardown(self) -> None:
        """Cancel pending frames; later events become no-ops."""
        if self._frame_handle is not None:
            self.scheduler.cancel(self._frame_handle)
            self._frame_handle = None
        if self._measure_handle is not None:
            self.scheduler.cancel(self._measure_handle)
            self._measure_handle = None
        self._torn_down = True
        logger.debug("Renderer session torn down after %d frames", self.frames_drawn)


def pulse_factor(timestamp: float, lender_id: int, score: float, active: bool) -> float:
    """Radius multiplier; amplitude and frequency grow with score on active nodes."""
    if active:
        amplitude = 0.05 + 0.10 * score
        frequency = 0.002 * (1 + score)
    else:
        amplitude = 0.03
        frequency = 0.001
    return 1 + math.sin(timestamp * frequency + lender_id * 0.1) * amplitude
