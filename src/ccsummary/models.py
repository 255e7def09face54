"""Data models for ccsummary."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from enum import Enum


class Role(Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    role: Role
    content: object  # str or structured content blocks, carried through as-is
    timestamp: str  # ISO-8601
    id: str
    session_id: str
    working_directory: str
    parent_id: str | None = None


@dataclass(frozen=True)
class Session:
    id: str
    messages: tuple[Message, ...]
    start_time: str
    end_time: str
    working_directory: str

    @classmethod
    def from_messages(cls, messages: list[Message]) -> Session:
        """Build a session from a non-empty list of messages in file order."""
        first, last = messages[0], messages[-1]
        return cls(
            id=first.session_id,
            messages=tuple(messages),
            start_time=first.timestamp,
            end_time=last.timestamp,
            working_directory=first.working_directory,
        )

    @property
    def message_count(self) -> int:
        return len(self.messages)


@dataclass(frozen=True)
class Project:
    name: str
    path: str  # encoded directory name, the stable key
    sessions: tuple[Session, ...]

    @property
    def last_activity(self) -> str:
        # ISO-8601 timestamps of the same shape sort lexicographically.
        return max(s.end_time for s in self.sessions)

    @property
    def total_sessions(self) -> int:
        return len(self.sessions)

    @property
    def total_messages(self) -> int:
        return sum(s.message_count for s in self.sessions)


@dataclass(frozen=True)
class AnalysisPeriod:
    start: str
    end: str


@dataclass(frozen=True)
class AnalysisResult:
    projects: tuple[Project, ...]
    analysis_period: AnalysisPeriod

    @property
    def total_sessions(self) -> int:
        return sum(p.total_sessions for p in self.projects)

    @property
    def total_messages(self) -> int:
        return sum(p.total_messages for p in self.projects)

    def get_project(self, path: str) -> Project | None:
        """Look up a project by its encoded directory name."""
        for project in self.projects:
            if project.path == path:
                return project
        return None


@dataclass
class TodoItem:
    id: str
    content: str
    status: str = "pending"
    priority: str = "medium"
    extra: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> TodoItem:
        known = {"id", "content", "status", "priority"}
        return cls(
            id=str(data.get("id", "")),
            content=str(data.get("content", "")),
            status=str(data.get("status", "pending")),
            priority=str(data.get("priority", "medium")),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "content": self.content,
            "status": self.status,
            "priority": self.priority,
        }


def decode_project_name(encoded: str) -> str:
    """Decode a project directory name like ``-home-alice-work-proj`` to ``proj``.

    Every dash is treated as a path separator, so path components that
    themselves contain dashes are split apart.
    """
    if encoded.startswith("-"):
        encoded = encoded[1:]
    decoded = encoded.replace("-", "/")
    return posixpath.basename(decoded)


def project_to_dict(project: Project) -> dict:
    return {
        "name": project.name,
        "path": project.path,
        "sessions": project.total_sessions,
        "messages": project.total_messages,
        "last_activity": project.last_activity,
    }
