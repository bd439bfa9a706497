"""Configuration paths and defaults for local LenderGraph state."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("LENDERGRAPH_HOME", str(Path.home() / ".lendergraph"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"
STATE_FILE = BASE_DIR / "state.json"
SAVED_LENDERS_FILE = BASE_DIR / "saved_lenders.json"
DEFAULT_ROSTER_FILE = Path(__file__).parent / "data" / "lenders.json"

# Graph defaults; overridden by the [graph] section of config.toml
DEFAULT_GRAPH_CONFIG = {
    "width": 900,
    "height": 640,
    "fps": 30,
    "frames": 90,
    "ease_factor": 0.08,
    "hit_tolerance": 4.0,
    "legend_height": 60,
    "seed": 7,
}

DEFAULT_ROSTER_CONFIG = {
    "path": "",
}


def ensure_base_dirs() -> None:
    """Create base directory for local state if needed."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
