from __future__ import annotations

import time
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def utc_local_time(monkeypatch: pytest.MonkeyPatch):
    """Pin the local timezone so date filtering and formatting are stable."""
    monkeypatch.setenv("TZ", "UTC")
    if hasattr(time, "tzset"):
        time.tzset()
    yield
    monkeypatch.undo()
    if hasattr(time, "tzset"):
        time.tzset()


@pytest.fixture(autouse=True)
def tmp_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep tests independent of any real user config file."""
    from ccsummary import config

    config_file = tmp_path / "config" / "ccsummary" / "config.json"
    monkeypatch.setattr(config, "CONFIG_FILE", config_file)
    return config_file


@pytest.fixture()
def claude_root(tmp_path: Path) -> Path:
    """An empty Claude data directory with a projects/ subdirectory."""
    root = tmp_path / ".claude"
    (root / "projects").mkdir(parents=True)
    return root
