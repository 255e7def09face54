"""Per-session task list loading from ``<root>/todos``."""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path

from ccsummary.models import TodoItem
from ccsummary.paths import resolve_path

logger = logging.getLogger(__name__)

# {sessionId}-agent-{agentId}.json
TODO_FILE_RE = re.compile(r"^(?P<session>.+?)-agent-(?P<agent>.+)\.json$")


def _read_todo_file(path: Path, include_completed: bool) -> list[TodoItem]:
    """Parse one task list file; unreadable or non-array files give []."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        logger.warning("Skipping unreadable todo file %s: %s", path, exc)
        return []

    if not isinstance(data, list):
        logger.warning("Skipping todo file %s: expected a JSON array", path)
        return []

    items = [TodoItem.from_dict(d) for d in data if isinstance(d, dict)]
    if not include_completed:
        items = [t for t in items if t.status != "completed"]
    return items


def load_todos_for_session(
    todos_dir: str,
    session_id: str,
    include_completed: bool = True,
) -> list[TodoItem]:
    """Load todos from every file whose name contains *session_id*."""
    # An empty id would match every file name.
    if not session_id:
        return []
    resolved = Path(resolve_path(todos_dir))
    try:
        names = sorted(os.listdir(resolved))
    except OSError:
        return []

    todos: list[TodoItem] = []
    for name in names:
        if session_id not in name:
            continue
        todos.extend(_read_todo_file(resolved / name, include_completed))
    return todos


def load_all_todos(
    root_dir: str,
    include_completed: bool = True,
) -> dict[str, list[TodoItem]]:
    """Map session id to the concatenated todos of all its agent files."""
    todos_dir = Path(resolve_path(root_dir)) / "todos"
    try:
        names = sorted(os.listdir(todos_dir))
    except OSError:
        return {}

    by_session: dict[str, list[TodoItem]] = {}
    for name in names:
        m = TODO_FILE_RE.match(name)
        if not m:
            continue
        items = _read_todo_file(todos_dir / name, include_completed)
        by_session.setdefault(m.group("session"), []).extend(items)
    return by_session
