"""Local state for saved lenders and the current filter selection.

State lives in two JSON files under the LenderGraph home directory. It is
single-user and best-effort: unreadable files are treated as empty.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from . import config
from .models import FilterCriteria, LenderProfile

logger = logging.getLogger(__name__)

DEFAULT_FILTERS = FilterCriteria(asset_types=["Multifamily"], deal_types=["Refinance"])


class LenderStore:
    """Manage saved lenders and persisted filter state."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self.base_dir = Path(base_dir) if base_dir else config.BASE_DIR
        self.state_file = self.base_dir / config.STATE_FILE.name
        self.saved_file = self.base_dir / config.SAVED_LENDERS_FILE.name
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _read(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", path, exc)
            return default

    def _write(self, path: Path, payload: Any) -> None:
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # ------------------------------------------------------------------
    # Saved lenders
    # ------------------------------------------------------------------

    def list_saved(self) -> List[LenderProfile]:
        payload = self._read(self.saved_file, [])
        if not isinstance(payload, list):
            return []
        return [LenderProfile.from_dict(item) for item in payload if isinstance(item, dict)]

    def is_saved(self, lender_id: int) -> bool:
        return any(lender.lender_id == lender_id for lender in self.list_saved())

    def save_lender(self, lender: LenderProfile) -> bool:
        """Add ``lender`` to the saved list; returns False if already saved."""
        saved = self.list_saved()
        if any(item.lender_id == lender.lender_id for item in saved):
            return False
        saved.append(lender)
        self._write(self.saved_file, [item.to_dict() for item in saved])
        return True

    def remove_saved_lender(self, lender_id: int) -> bool:
        saved = self.list_saved()
        remaining = [item for item in saved if item.lender_id != lender_id]
        if len(remaining) == len(saved):
            return False
        self._write(self.saved_file, [item.to_dict() for item in remaining])
        return True

    # ------------------------------------------------------------------
    # Filter state
    # ------------------------------------------------------------------

    def get_filters(self) -> FilterCriteria:
        payload = self._read(self.state_file, {})
        if not isinstance(payload, dict) or "filters" not in payload:
            return FilterCriteria.from_dict(DEFAULT_FILTERS.to_dict())
        return FilterCriteria.from_dict(payload.get("filters"))

    def set_filters(self, **partial: Any) -> FilterCriteria:
        """Merge ``partial`` into the stored filters and persist the result."""
        filters = self.get_filters().merged(**partial)
        self._store_filters(filters)
        return filters

    def reset_filters(self) -> FilterCriteria:
        filters = FilterCriteria()
        self._store_filters(filters)
        return filters

    def _store_filters(self, filters: FilterCriteria) -> None:
        payload = self._read(self.state_file, {})
        if not isinstance(payload, dict):
            payload = {}
        payload["filters"] = filters.to_dict()
        self._write(self.state_file, payload)
