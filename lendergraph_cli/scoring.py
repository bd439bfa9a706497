"""Authoritative lender match scoring.

A lender's ``match_score`` is the share of selected filter categories it
matches:

- ``locations`` matches on ``"nationwide"`` or any overlap with the selection.
- ``debt_ranges`` matches on overlap; lenders without debt ranges never match.
- ``asset_types`` / ``deal_types`` / ``capital_types`` match on overlap.

Categories with an empty selection do not count toward the denominator. With
no selected categories at all every lender scores ``0.0``: without criteria
there is no basis for ranking. ``requested_amount`` is carried on the filters
but does not contribute to the score yet.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, List, Mapping, Sequence, Set, Union

from .models import NATIONWIDE, FilterCriteria, LenderProfile, coerce_lenders

logger = logging.getLogger(__name__)

LenderLike = Union[LenderProfile, Mapping[str, Any]]
FiltersLike = Union[FilterCriteria, Mapping[str, Any], None]


def _as_filters(filters: FiltersLike) -> FilterCriteria:
    if isinstance(filters, FilterCriteria):
        return filters
    return FilterCriteria.from_dict(filters)


def _as_lender(lender: LenderLike) -> LenderProfile:
    if isinstance(lender, LenderProfile):
        return lender
    return LenderProfile.from_dict(lender if isinstance(lender, Mapping) else {})


def _value_set(values: Any) -> Set[str]:
    if not isinstance(values, (list, tuple, set, frozenset)):
        return set()
    return {str(v) for v in values if v is not None}


def selected_categories(filters: FiltersLike) -> List[str]:
    """Filter categories with a non-empty selection, in canonical order."""
    return _as_filters(filters).selected_categories()


def category_matches(lender: LenderProfile, category: str, selected: Iterable[str]) -> bool:
    """Binary match of one lender against one selected category."""
    wanted = _value_set(list(selected))
    if category == "debt_ranges" and lender.debt_ranges is None:
        return False
    own = _value_set(getattr(lender, category, None))
    if category == "locations" and NATIONWIDE in own:
        return True
    return bool(own & wanted)


def compute_match_score(lender: LenderLike, filters: FiltersLike) -> float:
    """Share of selected categories matched by ``lender``, in [0, 1]."""
    criteria = _as_filters(filters)
    profile = _as_lender(lender)
    categories = criteria.selected_categories()
    if not categories:
        return 0.0
    matched = sum(
        1 for category in categories
        if category_matches(profile, category, criteria.values(category))
    )
    return matched / len(categories)


def score_lenders(roster: Sequence[LenderLike], filters: FiltersLike) -> List[LenderProfile]:
    """Return copies of ``roster`` with ``match_score`` populated.

    Roster order is preserved and the input records are left untouched, so
    calling this again with the same roster and filters yields the same scores.
    Malformed records are coerced rather than dropped.
    """
    criteria = _as_filters(filters)
    scored = [
        replace(profile, match_score=compute_match_score(profile, criteria))
        for profile in coerce_lenders(list(roster))
    ]
    logger.debug(
        "Scored %d lenders against %s",
        len(scored),
        criteria.selected_categories() or "no categories",
    )
    return scored


def rank_lenders(scored: Iterable[LenderProfile]) -> List[LenderProfile]:
    """Sort by ``match_score`` descending, ties by ``lender_id`` ascending."""
    return sorted(scored, key=lambda lender: (-lender.match_score, lender.lender_id))


def match_lenders(roster: Sequence[LenderLike], filters: FiltersLike) -> List[LenderProfile]:
    """Score and rank a roster in one step."""
    return rank_lenders(score_lenders(roster, filters))


def count_matching(scored: Iterable[LenderProfile]) -> int:
    """Number of lenders with a positive match score."""
    return sum(1 for lender in scored if lender.match_score > 0)
