"""Persistent JSON config and logging level resolution.

Supplies a default flags file, extra always-ignored names, and a log level.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "dirtree"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

LOG_LEVEL_ENV = "DIRTREE_LOG_LEVEL"
DEBUG_ENV = "DIRTREE_DEBUG"
DEFAULT_LOG_LEVEL = logging.WARNING


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def load_default_flags_file(config: dict[str, object] | None = None) -> Path | None:
    """Return the configured flags file when it names an existing file."""
    data = load_config() if config is None else config
    value = data.get("flags_file")
    if not isinstance(value, str) or not value.strip():
        return None
    path = Path(value).expanduser()
    return path if path.is_file() else None


def load_extra_ignore_names(config: dict[str, object] | None = None) -> tuple[str, ...]:
    """Return configured extra ignore names, keeping only non-empty strings."""
    data = load_config() if config is None else config
    value = data.get("extra_ignore_names")
    if not isinstance(value, list):
        return ()
    return tuple(name for name in value if isinstance(name, str) and name)


def _level_from_name(name: object) -> int | None:
    if not isinstance(name, str):
        return None
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else None


def resolve_log_level(
    environ: dict[str, str] | None = None,
    config: dict[str, object] | None = None,
) -> int:
    """Pick the log level from the environment, then config, then default.

    ``DIRTREE_DEBUG=true`` forces DEBUG. ``DIRTREE_LOG_LEVEL`` takes a level
    name. The config ``log_level`` key is consulted last.
    """
    env = os.environ if environ is None else environ
    if env.get(DEBUG_ENV, "").strip().lower() == "true":
        return logging.DEBUG
    level = _level_from_name(env.get(LOG_LEVEL_ENV))
    if level is not None:
        return level
    data = load_config() if config is None else config
    level = _level_from_name(data.get("log_level"))
    if level is not None:
        return level
    return DEFAULT_LOG_LEVEL


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "load_config",
    "load_default_flags_file",
    "load_extra_ignore_names",
    "resolve_log_level",
]
