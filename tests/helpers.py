from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

from ccsummary.models import Message, Project, Role, Session, TodoItem


def write_jsonl(path: Path, entries: list) -> None:
    """Write entries one per line; str entries are written verbatim."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        for entry in entries:
            line = entry if isinstance(entry, str) else json.dumps(entry)
            f.write(line + "\n")


def write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f)


def make_entry(**overrides) -> dict:
    """A JSONL record shaped like a Claude Code transcript line."""
    data = {
        "type": "user",
        "timestamp": "2025-01-15T12:00:00.000Z",
        "uuid": "u-1",
        "sessionId": "session-1",
        "cwd": "/home/alice/work/proj",
        "parentUuid": None,
        "message": {"role": "user", "content": "hello there"},
    }
    data.update(overrides)
    return data


def conversation(session_id: str = "session-1", day: str = "2025-01-15") -> list[dict]:
    """Three alternating user/assistant records on *day*."""
    return [
        make_entry(
            uuid="u-1", sessionId=session_id, timestamp=f"{day}T10:00:00.000Z",
            message={"role": "user", "content": "Please add a parser for the logs"},
        ),
        make_entry(
            type="assistant", uuid="u-2", parentUuid="u-1", sessionId=session_id,
            timestamp=f"{day}T10:01:00.000Z",
            message={"role": "assistant", "content": [{"type": "text", "text": "Sure."}]},
        ),
        make_entry(
            uuid="u-3", parentUuid="u-2", sessionId=session_id,
            timestamp=f"{day}T10:05:00.000Z",
            message={"role": "user", "content": "Now write tests for it please"},
        ),
    ]


def make_message(**overrides) -> Message:
    data = {
        "role": Role.USER,
        "content": "hello there",
        "timestamp": "2025-01-15T12:00:00.000Z",
        "id": "u-1",
        "session_id": "session-1",
        "working_directory": "/repo",
        "parent_id": None,
    }
    data.update(overrides)
    return Message(**data)


def make_session(messages: list[Message] | None = None, **overrides) -> Session:
    if messages is None:
        session_id = overrides.get("id", "session-1")
        messages = [
            make_message(id="m1", session_id=session_id, timestamp="2025-01-15T10:00:00Z"),
            make_message(
                id="m2", session_id=session_id, role=Role.ASSISTANT,
                content="ok", timestamp="2025-01-15T10:30:00Z",
            ),
        ]
    session = Session.from_messages(messages)
    if overrides:
        session = replace(session, **overrides)
    return session


def make_project(sessions: list[Session] | None = None, **overrides) -> Project:
    data = {
        "name": "proj",
        "path": "-home-alice-work-proj",
        "sessions": tuple(sessions) if sessions is not None else (make_session(),),
    }
    data.update(overrides)
    return Project(**data)


def make_todo(**overrides) -> TodoItem:
    data = {"id": "t1", "content": "do the thing", "status": "pending", "priority": "medium"}
    data.update(overrides)
    return TodoItem(**data)
