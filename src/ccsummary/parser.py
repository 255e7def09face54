"""Claude Code session log decoding."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path

from ccsummary.models import Message, Role, Session

logger = logging.getLogger(__name__)

SESSION_SUFFIX = ".jsonl"

# Fixed-width timestamps are compared as strings, so anything else is rejected.
_ISO_TIMESTAMP = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})?$"
)
_ROLES = {r.value: r for r in Role}


def is_iso_timestamp(value) -> bool:
    return isinstance(value, str) and bool(_ISO_TIMESTAMP.match(value))


def _parse_timestamp(ts: str) -> datetime | None:
    try:
        return datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return None


def local_date(ts) -> str | None:
    """Return the local calendar date (``YYYY-MM-DD``) of an ISO timestamp."""
    if not isinstance(ts, str):
        return None
    parsed = _parse_timestamp(ts)
    if parsed is None:
        return None
    return parsed.astimezone().strftime("%Y-%m-%d")


def _message_from_entry(entry) -> Message | None:
    """Build a Message from one decoded JSONL record, or None if it isn't one."""
    if not isinstance(entry, dict):
        return None
    msg = entry.get("message")
    if not isinstance(msg, dict):
        return None
    role = _ROLES.get(msg.get("role"))
    if role is None:
        return None
    ts = entry.get("timestamp")
    if not is_iso_timestamp(ts):
        return None

    return Message(
        role=role,
        content=msg.get("content", ""),
        timestamp=ts,
        id=entry.get("uuid") or "",
        session_id=entry.get("sessionId") or "",
        working_directory=entry.get("cwd") or "",
        parent_id=entry.get("parentUuid"),
    )


def parse_session_lines(lines, target_date: str | None = None) -> list[Message]:
    """Decode JSONL lines into messages, skipping anything malformed."""
    messages: list[Message] = []
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            continue

        if target_date and isinstance(entry, dict) and entry.get("timestamp"):
            if local_date(entry["timestamp"]) != target_date:
                continue

        message = _message_from_entry(entry)
        if message is not None:
            messages.append(message)
    return messages


def parse_session_file(path: str | Path, target_date: str | None = None) -> Session | None:
    """Decode one session file; returns None when no message survives."""
    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("Failed to read session file %s: %s", path, exc)
        return None

    messages = parse_session_lines(text.split("\n"), target_date)
    if not messages:
        logger.debug("No messages retained from %s", path)
        return None
    return Session.from_messages(messages)
