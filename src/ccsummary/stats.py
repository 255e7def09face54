"""Derived statistics over analysis results and task lists."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ccsummary.models import Message, Project, Role, Session, TodoItem
from ccsummary.parser import local_date

_UUID4_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_ENV_RE = re.compile(r"process\.env\.(\w+)")


def _to_datetime(ts: str) -> datetime:
    return datetime.fromisoformat(ts.replace("Z", "+00:00")).astimezone()


def content_text(content) -> str:
    """Return message content as text, JSON-encoding structured content."""
    if isinstance(content, str):
        return content
    return json.dumps(content, ensure_ascii=False)


def format_timestamp(ts: str, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format an ISO timestamp in local time; unparseable input is returned as-is."""
    try:
        return _to_datetime(ts).strftime(fmt)
    except ValueError:
        return ts


def format_date(value: str | date) -> str:
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    return local_date(value) or value


@dataclass
class ProjectStats:
    total_sessions: int
    total_messages: int
    user_messages: int
    assistant_messages: int
    average_messages_per_session: int
    last_activity: str


def project_stats(project: Project) -> ProjectStats:
    messages = [m for s in project.sessions for m in s.messages]
    return ProjectStats(
        total_sessions=project.total_sessions,
        total_messages=project.total_messages,
        user_messages=sum(1 for m in messages if m.role is Role.USER),
        assistant_messages=sum(1 for m in messages if m.role is Role.ASSISTANT),
        average_messages_per_session=round(project.total_messages / project.total_sessions),
        last_activity=format_timestamp(project.last_activity),
    )


def session_duration_minutes(session: Session) -> int:
    delta = _to_datetime(session.end_time) - _to_datetime(session.start_time)
    return int(delta.total_seconds() // 60)


def filter_todos_by_status(todos: Iterable[TodoItem], status: str) -> list[TodoItem]:
    return [t for t in todos if t.status == status]


def todo_completion_rate(todos: list[TodoItem]) -> int:
    """Percentage of completed todos, rounded; 0 for an empty list."""
    if not todos:
        return 0
    completed = len(filter_todos_by_status(todos, "completed"))
    return round(completed / len(todos) * 100)


def group_todos_by_priority(todos: Iterable[TodoItem]) -> dict[str, list[TodoItem]]:
    groups: dict[str, list[TodoItem]] = {}
    for todo in todos:
        groups.setdefault(todo.priority, []).append(todo)
    return groups


def dedupe_todos(todos: Iterable[TodoItem]) -> list[TodoItem]:
    """Collapse items sharing an id; the last one wins, first-seen order is kept."""
    by_id: dict[str, TodoItem] = {}
    for todo in todos:
        by_id[todo.id] = todo
    return list(by_id.values())


def most_active_project(projects: Iterable[Project]) -> Project | None:
    best = None
    for project in projects:
        if best is None or project.total_messages > best.total_messages:
            best = project
    return best


def recent_activity(
    projects: Iterable[Project], days: int = 7, now: datetime | None = None
) -> list[Project]:
    """Projects whose last activity falls within the last *days* days."""
    cutoff = (now or datetime.now().astimezone()) - timedelta(days=days)
    return [p for p in projects if _to_datetime(p.last_activity) > cutoff]


def working_directories(projects: Iterable[Project]) -> list[str]:
    cwds = {s.working_directory for p in projects for s in p.sessions if s.working_directory}
    return sorted(cwds)


def is_valid_session_id(value: str) -> bool:
    return bool(_UUID4_RE.match(value))


def sanitize_content(text: str) -> str:
    """Mask ``process.env.NAME`` references."""
    return _ENV_RE.sub("process.env.***", text)


def activity_timeline(
    projects: Iterable[Project], days: int = 30, now: datetime | None = None
) -> dict[str, int]:
    """Count messages per local calendar day within the last *days* days."""
    cutoff = (now or datetime.now().astimezone()) - timedelta(days=days)
    timeline: dict[str, int] = {}
    for project in projects:
        for session in project.sessions:
            for message in session.messages:
                when = _to_datetime(message.timestamp)
                if when > cutoff:
                    key = when.strftime("%Y-%m-%d")
                    timeline[key] = timeline.get(key, 0) + 1
    return dict(sorted(timeline.items()))


def extract_key_activities(messages: Iterable[Message], limit: int = 5) -> list[str]:
    """Pick the first distinct, reasonably sized user prompts."""
    activities: list[str] = []
    for message in messages:
        if message.role is not Role.USER or not isinstance(message.content, str):
            continue
        text = message.content
        if 10 < len(text) < 200:
            summary = text[:100]
            if summary not in activities:
                activities.append(summary)
                if len(activities) >= limit:
                    break
    return activities
