"""Persisted user defaults for the CLI and browser."""

from __future__ import annotations

import json

from ccsummary.paths import CONFIG_DIR, DEFAULT_CLAUDE_DIR, DEFAULT_OUTPUT_DIR

CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_CONFIG = {
    "claude_dir": DEFAULT_CLAUDE_DIR,
    "output_dir": DEFAULT_OUTPUT_DIR,
    "include_completed_todos": True,
}


def _normalize_config(data: object) -> dict:
    config = dict(DEFAULT_CONFIG)
    if not isinstance(data, dict):
        return config

    for key in ("claude_dir", "output_dir"):
        value = data.get(key)
        if isinstance(value, str) and value:
            config[key] = value

    value = data.get("include_completed_todos")
    if isinstance(value, bool):
        config["include_completed_todos"] = value

    return config


def load_config() -> dict:
    """Load config, returning defaults for missing/corrupt data."""
    if not CONFIG_FILE.is_file():
        return dict(DEFAULT_CONFIG)
    try:
        with open(CONFIG_FILE) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError):
        return dict(DEFAULT_CONFIG)
    return _normalize_config(data)


def save_config(config: dict) -> None:
    """Save config to disk, keeping only known validated keys."""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    data = _normalize_config(config)
    try:
        with open(CONFIG_FILE, "w") as f:
            json.dump(data, f, indent=2)
    except OSError:
        pass
