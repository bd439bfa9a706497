"""Lender roster loading.

The roster is a JSON list of lender records (or an object with a ``lenders``
list). A sample roster ships with the package and is used when no path is
given on the command line or in ``[roster] path`` of the config file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence

from . import config
from .config_manager import load_roster_config
from .models import LenderProfile, coerce_lenders

logger = logging.getLogger(__name__)


class RosterLoadError(Exception):
    """Raised when a roster file cannot be read or is not a lender list."""


def resolve_roster_path(path: Optional[Path] = None) -> Path:
    if path is not None:
        return Path(path).expanduser()
    configured = load_roster_config().get("path", "")
    if configured:
        return Path(configured).expanduser()
    return config.DEFAULT_ROSTER_FILE


def parse_roster(payload: Any) -> List[LenderProfile]:
    """Coerce decoded JSON into lender profiles.

    Every entry becomes a profile: missing or malformed fields get empty
    defaults, non-object entries become empty profiles, and entries without a
    usable id get a fallback id.
    """
    if isinstance(payload, dict):
        payload = payload.get("lenders", [])
    if not isinstance(payload, list):
        raise RosterLoadError("Roster must be a JSON list of lender records")
    return coerce_lenders(payload)


def load_roster(path: Optional[Path] = None) -> List[LenderProfile]:
    """Load a lender roster from ``path`` (or the configured/bundled roster).

    Raises:
        RosterLoadError: If the file is missing or is not valid roster JSON.
    """
    roster_path = resolve_roster_path(path)
    if not roster_path.exists():
        raise RosterLoadError(f"Roster file not found: {roster_path}")
    try:
        payload = json.loads(roster_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RosterLoadError(f"Could not read roster {roster_path}: {exc}") from exc

    lenders = parse_roster(payload)
    logger.info("Loaded %d lenders from %s", len(lenders), roster_path)
    return lenders


def get_lender_by_id(lenders: Sequence[LenderProfile], lender_id: int) -> Optional[LenderProfile]:
    for lender in lenders:
        if lender.lender_id == lender_id:
            return lender
    return None
