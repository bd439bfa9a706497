"""Lender detail card content shown when a graph node is selected."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from .models import NATIONWIDE, FilterCriteria, LenderProfile

INCOMPLETE_FILTERS_TITLE = "Incomplete Filters"
INCOMPLETE_FILTERS_MESSAGE = "Please fill out all filters to see detailed lender information."

_CATEGORY_LABELS = [
    ("asset_types", "Asset Types"),
    ("deal_types", "Deal Types"),
    ("capital_types", "Capital Types"),
    ("debt_ranges", "Debt Range"),
    ("locations", "Locations"),
]


@dataclass
class CardRow:
    label: str
    value: str
    status: Optional[bool] = None

    @property
    def badge(self) -> str:
        if self.status is None:
            return ""
        return "Match" if self.status else "Mismatch"


def format_currency(amount: float) -> str:
    """Compact USD formatting: ``$500K``, ``$5M``, ``$1.5B``."""
    amount = float(amount or 0)
    sign = "-" if amount < 0 else ""
    value = abs(amount)
    for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
        if value >= threshold:
            scaled = round(value / threshold, 1)
            text = f"{scaled:.1f}".rstrip("0").rstrip(".")
            return f"{sign}${text}{suffix}"
    return f"{sign}${value:.0f}"


def format_criteria(values: Sequence[str]) -> str:
    return ", ".join(item.replace("_", " ") for item in values)


def criteria_matches(lender_values: Sequence[str], selected: Sequence[str], category: str) -> Optional[bool]:
    """Match / mismatch for one category, or None when nothing is selected."""
    if not selected:
        return None
    if category == "locations" and NATIONWIDE in lender_values:
        return True
    return any(item in lender_values for item in selected)


def match_percentage(lender: LenderProfile) -> int:
    return round((lender.match_score or 0) * 100)


def build_card_rows(lender: LenderProfile, filters: Optional[FilterCriteria]) -> List[CardRow]:
    filters = filters or FilterCriteria()
    rows: List[CardRow] = []
    for category, label in _CATEGORY_LABELS:
        own: Any = getattr(lender, category, None) or []
        rows.append(CardRow(label, format_criteria(own) or "-", criteria_matches(own, filters.values(category), category)))
    rows.insert(4, CardRow(
        "Deal Size",
        f"{format_currency(lender.min_deal_size)} - {format_currency(lender.max_deal_size)}",
    ))
    return rows
