"""Radial layout for the lender match graph.

Nodes are spread on a golden-angle spiral around the canvas center. Their
distance from the center follows the authoritative ``match_score``; whether a
node is foregrounded is decided by :func:`display_score`, a local overlap
computation over the raw filter object the graph was handed.
"""

from __future__ import annotations

import math
import random
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .canvas import blend, hsl_to_rgb
from .models import FILTER_KEYS, NATIONWIDE, Color, FilterCriteria, GraphNode, LenderProfile

GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))

INACTIVE_COLOR: Color = hsl_to_rgb(220, 10, 70)
ACTIVE_LOW_COLOR: Color = hsl_to_rgb(215, 70, 62)
ACTIVE_HIGH_COLOR: Color = hsl_to_rgb(255, 72, 56)
PERFECT_MATCH_COLOR: Color = hsl_to_rgb(0, 85, 55)

ACTIVE_BASE_RADIUS = 12.0
ACTIVE_RADIUS_BONUS = 8.0
INACTIVE_RADIUS = 8.0

SPAWN_OFFSET = 50.0
MAX_DISTANCE_RATIO = 0.45


def _form_value(form_data: Any, key: str) -> Any:
    if form_data is None:
        return None
    if isinstance(form_data, FilterCriteria):
        return getattr(form_data, key, None)
    if isinstance(form_data, Mapping):
        return form_data.get(key)
    return None


def _is_selected(value: Any) -> bool:
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) > 0
    return value is not None and value != ""


def _value_matches(candidate: str, value: Any) -> bool:
    if isinstance(value, (list, tuple, set, frozenset)):
        return candidate in value
    return candidate == value


def _lender_values(lender: LenderProfile, key: str) -> Sequence[str]:
    values = getattr(lender, key, None)
    if isinstance(values, (list, tuple, set, frozenset)):
        return list(values)
    return []


def count_selected_filters(form_data: Any) -> int:
    """Number of filter categories selected in a raw filter object."""
    return sum(1 for key in FILTER_KEYS if _is_selected(_form_value(form_data, key)))


def display_score(lender: LenderProfile, form_data: Any) -> float:
    """Overlap score of ``lender`` against the literal filter widget state.

    Mirrors the authoritative scorer but runs on its own so the graph reacts to
    exactly the filter object it was given. Scalar filter values match by
    equality; list values by membership.
    """
    selected = count_selected_filters(form_data)
    if selected == 0:
        return 0.0

    matched = 0
    for key in FILTER_KEYS:
        value = _form_value(form_data, key)
        if not _is_selected(value):
            continue
        if key == "debt_ranges" and getattr(lender, "debt_ranges", None) is None:
            continue
        own = _lender_values(lender, key)
        if key == "locations" and NATIONWIDE in own:
            matched += 1
        elif any(_value_matches(item, value) for item in own):
            matched += 1
    return matched / selected


def is_active_for_display(lender: LenderProfile, form_data: Any, filters_applied: bool) -> bool:
    """Whether a node is foregrounded under the current filter view.

    A lender with no authoritative score is never foregrounded, even when the
    local overlap is positive.
    """
    if not filters_applied or lender.match_score <= 0:
        return False
    return display_score(lender, form_data) > 0


def golden_angle(index: int) -> float:
    return index * GOLDEN_ANGLE


def max_distance(width: float, height: float) -> float:
    return min(width, height) * MAX_DISTANCE_RATIO


def target_distance(score: float, active: bool, max_dist: float) -> float:
    """Distance from the center for a node with authoritative ``score``.

    Active nodes move inward as the score grows; inactive nodes stay in a
    narrow peripheral band regardless of any residual score.
    """
    score = max(0.0, min(1.0, score))
    if active:
        return max_dist * (0.2 + 0.6 * (1 - score))
    return max_dist * (0.88 + 0.08 * (1 - score))


def node_radius(score: float, active: bool) -> float:
    if not active:
        return INACTIVE_RADIUS
    return ACTIVE_BASE_RADIUS + max(0.0, min(1.0, score)) * ACTIVE_RADIUS_BONUS


def node_color(score: float, active: bool) -> Color:
    if not active:
        return INACTIVE_COLOR
    if score >= 1.0:
        return PERFECT_MATCH_COLOR
    return blend(ACTIVE_LOW_COLOR, ACTIVE_HIGH_COLOR, score)


def target_position(index: int, score: float, active: bool, width: float, height: float) -> Tuple[float, float]:
    angle = golden_angle(index)
    distance = target_distance(score, active, max_distance(width, height))
    return width / 2 + math.cos(angle) * distance, height / 2 + math.sin(angle) * distance


def layout_nodes(
    lenders: Sequence[LenderProfile],
    form_data: Any,
    filters_applied: bool,
    width: float,
    height: float,
    existing: Optional[Dict[int, GraphNode]] = None,
    rng: Optional[random.Random] = None,
) -> Dict[int, GraphNode]:
    """Compute the next node map by keyed upsert.

    Nodes already on screen keep their current position and only get a new
    target, so the animation eases instead of snapping. New nodes spawn near
    the center; lenders missing from ``lenders`` are dropped.
    """
    if not width or not height or not lenders:
        return {}
    existing = existing or {}
    rng = rng or random.Random()
    cx, cy = width / 2, height / 2

    nodes: Dict[int, GraphNode] = {}
    for index, lender in enumerate(lenders):
        local = display_score(lender, form_data)
        active = is_active_for_display(lender, form_data, bool(filters_applied))
        score = max(0.0, min(1.0, lender.match_score))
        tx, ty = target_position(index, score, active, width, height)
        radius = node_radius(score, active)
        color = node_color(score, active)

        node = existing.get(lender.lender_id)
        if node is None:
            node = GraphNode(
                lender_id=lender.lender_id,
                x=cx + rng.uniform(-SPAWN_OFFSET, SPAWN_OFFSET),
                y=cy + rng.uniform(-SPAWN_OFFSET, SPAWN_OFFSET),
                target_x=tx,
                target_y=ty,
                radius=radius,
                color=color,
            )
        else:
            node.target_x, node.target_y = tx, ty
            node.radius = radius
            node.color = color
        node.is_active_for_graph_display = active
        node.score_from_context = score
        node.display_score = local
        nodes[lender.lender_id] = node
    return nodes


def ease(node: GraphNode, factor: float) -> float:
    """Move ``node`` toward its target; returns the distance still to travel."""
    node.x += (node.target_x - node.x) * factor
    node.y += (node.target_y - node.y) * factor
    return math.hypot(node.target_x - node.x, node.target_y - node.y)
