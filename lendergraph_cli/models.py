"""Core data models shared by scoring, layout, rendering and storage layers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

FILTER_KEYS = ("asset_types", "deal_types", "capital_types", "debt_ranges", "locations")

NATIONWIDE = "nationwide"

ASSET_TYPE_OPTIONS = [
    "Multifamily", "Office", "Retail", "Industrial", "Hospitality",
    "Land", "Mixed-Use", "Self-Storage", "Data Center",
    "Medical Office", "Senior Housing", "Student Housing", "Other",
]
DEAL_TYPE_OPTIONS = [
    "Acquisition", "Refinance", "Construction", "Bridge", "Development", "Value-Add", "Other",
]
CAPITAL_TYPE_OPTIONS = [
    "Senior Debt", "Mezzanine", "Preferred Equity", "Common Equity", "JV Equity", "Other",
]
DEBT_RANGE_OPTIONS = ["$0 - $5M", "$5M - $25M", "$25M - $100M", "$100M+"]
LOCATION_OPTIONS = [
    NATIONWIDE, "Northeast", "Southeast", "Midwest", "Southwest", "West Coast", "Other",
]

FILTER_OPTIONS: Dict[str, List[str]] = {
    "asset_types": ASSET_TYPE_OPTIONS,
    "deal_types": DEAL_TYPE_OPTIONS,
    "capital_types": CAPITAL_TYPE_OPTIONS,
    "debt_ranges": DEBT_RANGE_OPTIONS,
    "locations": LOCATION_OPTIONS,
}


def _str_list(value: Any) -> List[str]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(v) for v in value if v is not None]
    return []


def _safe_int(value: Any) -> int:
    try:
        return int(str(value).strip().replace(",", ""))
    except (ValueError, TypeError):
        return 0


def _safe_float(value: Any) -> float:
    try:
        return float(str(value).strip().replace(",", "").replace("$", ""))
    except (ValueError, TypeError):
        return 0.0


@dataclass
class LenderProfile:
    lender_id: int
    name: str
    asset_types: List[str] = field(default_factory=list)
    deal_types: List[str] = field(default_factory=list)
    capital_types: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    debt_ranges: Optional[List[str]] = None
    min_deal_size: float = 0.0
    max_deal_size: float = 0.0
    match_score: float = 0.0
    description: str = ""
    contact_email: str = ""
    contact_phone: str = ""
    preference_scope: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LenderProfile":
        """Build a profile from a loosely-shaped record.

        Missing or non-list category fields become empty lists; a missing
        ``debt_ranges`` stays ``None`` so it never matches that category.
        """
        debt_ranges = data.get("debt_ranges")
        user = data.get("user") if isinstance(data.get("user"), Mapping) else {}
        scope = data.get("preference_scope")
        return cls(
            lender_id=_safe_int(data.get("lender_id")),
            name=str(data.get("name") or ""),
            asset_types=_str_list(data.get("asset_types")),
            deal_types=_str_list(data.get("deal_types")),
            capital_types=_str_list(data.get("capital_types")),
            locations=_str_list(data.get("locations")),
            debt_ranges=_str_list(debt_ranges) if debt_ranges is not None else None,
            min_deal_size=_safe_float(data.get("min_deal_size")),
            max_deal_size=_safe_float(data.get("max_deal_size")),
            match_score=_safe_float(data.get("match_score")),
            description=str(data.get("description") or ""),
            contact_email=str(data.get("contact_email") or user.get("email") or ""),
            contact_phone=str(data.get("contact_phone") or user.get("phone") or ""),
            preference_scope={
                str(k): _safe_float(v) for k, v in scope.items()
            } if isinstance(scope, Mapping) else {},
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "lender_id": self.lender_id,
            "name": self.name,
            "asset_types": list(self.asset_types),
            "deal_types": list(self.deal_types),
            "capital_types": list(self.capital_types),
            "locations": list(self.locations),
            "min_deal_size": self.min_deal_size,
            "max_deal_size": self.max_deal_size,
            "match_score": self.match_score,
        }
        if self.debt_ranges is not None:
            payload["debt_ranges"] = list(self.debt_ranges)
        if self.description:
            payload["description"] = self.description
        if self.contact_email or self.contact_phone:
            payload["user"] = {"email": self.contact_email, "phone": self.contact_phone}
        if self.preference_scope:
            payload["preference_scope"] = dict(self.preference_scope)
        return payload

    @property
    def initial(self) -> str:
        return self.name[:1].upper()


def _record_id(record: Any) -> Optional[int]:
    """Explicit integer id of a raw record or profile, or None when absent."""
    if isinstance(record, LenderProfile):
        return record.lender_id
    if not isinstance(record, Mapping):
        return None
    value = record.get("lender_id")
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip().replace(",", ""))
    except ValueError:
        return None


def coerce_lenders(records: Sequence[Any]) -> List[LenderProfile]:
    """Turn loosely-shaped roster entries into profiles, one per entry.

    Non-object entries become empty profiles. Entries without a usable id get
    ``max_id + position + 1`` so every lender keeps its own graph node.
    """
    ids = [_record_id(record) for record in records]
    highest = max((i for i in ids if i is not None), default=0)

    lenders: List[LenderProfile] = []
    for position, (record, lender_id) in enumerate(zip(records, ids)):
        if isinstance(record, LenderProfile):
            lenders.append(record)
            continue
        profile = LenderProfile.from_dict(record if isinstance(record, Mapping) else {})
        if lender_id is None:
            profile.lender_id = highest + position + 1
            logger.warning(
                "Roster entry %d has no usable lender_id; using %d",
                position,
                profile.lender_id,
            )
        lenders.append(profile)
    return lenders


@dataclass
class FilterCriteria:
    asset_types: List[str] = field(default_factory=list)
    deal_types: List[str] = field(default_factory=list)
    capital_types: List[str] = field(default_factory=list)
    debt_ranges: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    requested_amount: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FilterCriteria":
        data = data or {}
        amount = data.get("requested_amount")
        return cls(
            **{key: _str_list(data.get(key)) for key in FILTER_KEYS},
            requested_amount=_safe_float(amount) if amount not in (None, "") else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {key: list(getattr(self, key)) for key in FILTER_KEYS}
        if self.requested_amount is not None:
            payload["requested_amount"] = self.requested_amount
        return payload

    def values(self, category: str) -> List[str]:
        return _str_list(getattr(self, category, None))

    def selected_categories(self) -> List[str]:
        return [key for key in FILTER_KEYS if self.values(key)]

    def any_selected(self) -> bool:
        return bool(self.selected_categories())

    def all_selected(self) -> bool:
        return len(self.selected_categories()) == len(FILTER_KEYS)

    def merged(self, **partial: Any) -> "FilterCriteria":
        """Return a copy with the given fields replaced; unknown keys are ignored."""
        updates = {}
        for key, value in partial.items():
            if key in FILTER_KEYS:
                updates[key] = _str_list(value)
            elif key == "requested_amount":
                updates[key] = None if value is None else _safe_float(value)
        return replace(self, **updates)


@dataclass
class GraphNode:
    lender_id: int
    x: float
    y: float
    target_x: float
    target_y: float
    radius: float
    color: Color
    is_active_for_graph_display: bool = False
    score_from_context: float = 0.0
    display_score: float = 0.0
    render_radius: float = 0.0

    @property
    def hit_radius(self) -> float:
        return self.render_radius or self.radius


@dataclass
class Particle:
    x: float
    y: float
    size: float
    color: Color
    speed: float
    life: int = 0
    max_life: float = 30.0

    @property
    def expired(self) -> bool:
        return self.life >= self.max_life

    @property
    def alpha(self) -> float:
        ratio = self.life / self.max_life if self.max_life else 1.0
        return ratio * 2 if ratio < 0.5 else max(0.0, 2 - ratio * 2)


@dataclass
class Overlay:
    """Transient card or tooltip anchored inside the canvas."""

    kind: str
    x: float
    y: float
    lender_id: Optional[int] = None
