"""Filesystem locations used by ccsummary."""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_CLAUDE_DIR = "~/.claude"
DEFAULT_OUTPUT_DIR = "~/ccsummary"


def resolve_path(path: str) -> str:
    """Expand a leading ``~`` to the user's home directory."""
    if path.startswith("~"):
        return str(Path.home()) + path[1:]
    return path


def _xdg_config_home() -> Path:
    val = os.environ.get("XDG_CONFIG_HOME", "")
    if val and Path(val).is_absolute():
        return Path(val)
    return Path.home() / ".config"


CONFIG_DIR = _xdg_config_home() / "ccsummary"
