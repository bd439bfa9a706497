"""Configuration manager for LenderGraph CLI using TOML files."""

from __future__ import annotations

import logging
from typing import Any, Dict, Tuple

import toml

from . import config

logger = logging.getLogger(__name__)


# Section name -> defaults; keys outside these tables are rejected by set_config_value
SECTION_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "graph": config.DEFAULT_GRAPH_CONFIG,
    "roster": config.DEFAULT_ROSTER_CONFIG,
}


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections).

    Returns an empty dict when the file is missing or cannot be parsed.
    """
    if not config.CONFIG_FILE.exists():
        return {}
    try:
        with open(config.CONFIG_FILE, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config.CONFIG_FILE, exc)
        return {}


def _save_full_config(data: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    config.ensure_base_dirs()
    try:
        with open(config.CONFIG_FILE, "w", encoding="utf-8") as f:
            toml.dump(data, f)
        return True
    except OSError as exc:
        logger.warning("Failed to write config %s: %s", config.CONFIG_FILE, exc)
        return False


def _load_section(section: str) -> Dict[str, Any]:
    defaults = SECTION_DEFAULTS[section]
    merged = dict(defaults)
    stored = load_full_config().get(section, {})
    if not isinstance(stored, dict):
        return merged
    for key, value in stored.items():
        if key not in defaults:
            continue
        try:
            merged[key] = _coerce(value, defaults[key])
        except ValueError:
            logger.warning("Ignoring invalid %s.%s=%r in config", section, key, value)
    return merged


def load_graph_config() -> Dict[str, Any]:
    """Load ``[graph]`` settings merged over the built-in defaults.

    Returns:
        Dict with canvas size, export fps/frames, easing, hit tolerance,
        legend height and random seed.
    """
    return _load_section("graph")


def load_roster_config() -> Dict[str, Any]:
    """Load ``[roster]`` settings (currently just the roster ``path``)."""
    return _load_section("roster")


def _coerce(value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("1", "true", "yes", "y")
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return str(value)


def split_key(key: str) -> Tuple[str, str]:
    """Split a dotted ``section.name`` key and validate it.

    Raises:
        ValueError: If the section or name is unknown.
    """
    section, _, name = key.partition(".")
    if section not in SECTION_DEFAULTS or name not in SECTION_DEFAULTS[section]:
        known = ", ".join(
            f"{s}.{n}" for s, values in SECTION_DEFAULTS.items() for n in values
        )
        raise ValueError(f"Unknown config key '{key}'. Known keys: {known}")
    return section, name


def set_config_value(key: str, value: str) -> Any:
    """Persist a single ``section.name`` value to config TOML.

    Preserves the other sections in the file.

    Args:
        key: Dotted key such as ``graph.width``.
        value: Raw string value, coerced to the default's type.

    Returns:
        The coerced value that was stored.

    Raises:
        ValueError: For unknown keys or values that cannot be coerced.
    """
    section, name = split_key(key)
    coerced = _coerce(value, SECTION_DEFAULTS[section][name])
    data = load_full_config()
    data.setdefault(section, {})[name] = coerced
    if not _save_full_config(data):
        raise ValueError(f"Could not write {config.CONFIG_FILE}")
    return coerced


def clear_section(section: str) -> bool:
    """Remove a section from config, resetting it to defaults."""
    data = load_full_config()
    data.pop(section, None)
    return _save_full_config(data)
