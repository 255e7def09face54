"""Markdown report generation for an analysis result."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from ccsummary.exceptions import ReportWriteError
from ccsummary.models import AnalysisResult, Project, Role, TodoItem
from ccsummary.paths import resolve_path
from ccsummary.stats import (
    content_text,
    dedupe_todos,
    extract_key_activities,
    filter_todos_by_status,
    format_timestamp,
)
from ccsummary.todos import load_todos_for_session

logger = logging.getLogger(__name__)

PRIORITY_MARKS = {"high": "🔴", "medium": "🟡", "low": "🟢"}
REPORT_FILES = ("summary.md", "prompts.md", "todo.md")


@dataclass
class ProjectSummary:
    name: str
    path: str
    sessions_count: int
    messages_count: int
    last_activity: str
    key_activities: list[str] = field(default_factory=list)
    completed_todos: list[TodoItem] = field(default_factory=list)
    pending_todos: list[TodoItem] = field(default_factory=list)


@dataclass
class ReportPaths:
    summary_path: Path
    prompts_path: Path
    todo_path: Path


@dataclass
class GeneratedReports:
    all: ReportPaths
    projects: dict[str, ReportPaths] = field(default_factory=dict)


def _priority(todo: TodoItem) -> str:
    return PRIORITY_MARKS.get(todo.priority, "🟢")


def _footer(now: datetime) -> list[str]:
    return [f"*Generated at {now.strftime('%Y-%m-%d %H:%M:%S')}*", ""]


def _long_date(day: date) -> str:
    return day.strftime("%Y-%m-%d (%A)")


def collect_project_todos(project: Project, todos_dir: str) -> list[TodoItem]:
    """Load todos for every session in a project, de-duplicated by id."""
    todos: list[TodoItem] = []
    for session in project.sessions:
        todos.extend(load_todos_for_session(todos_dir, session.id))
    return dedupe_todos(todos)


def build_project_summary(project: Project, todos: list[TodoItem]) -> ProjectSummary:
    messages = [m for s in project.sessions for m in s.messages]
    return ProjectSummary(
        name=project.name,
        path=project.path,
        sessions_count=project.total_sessions,
        messages_count=project.total_messages,
        last_activity=project.last_activity,
        key_activities=extract_key_activities(messages),
        completed_todos=filter_todos_by_status(todos, "completed"),
        pending_todos=[t for t in todos if t.status in ("pending", "in_progress")],
    )


def _summary_details(summary: ProjectSummary, heading: str) -> list[str]:
    lines: list[str] = []
    if summary.key_activities:
        lines.append(f"{heading} Key activities")
        lines.append("")
        lines.extend(f"- {a}" for a in summary.key_activities)
        lines.append("")
    if summary.completed_todos:
        lines.append(f"{heading} ✅ Completed tasks")
        lines.append("")
        lines.extend(f"- {t.content}" for t in summary.completed_todos)
        lines.append("")
    if summary.pending_todos:
        lines.append(f"{heading} ⏳ Open tasks")
        lines.append("")
        for t in summary.pending_todos:
            status = "🔄" if t.status == "in_progress" else "📋"
            lines.append(f"- {_priority(t)} {status} {t.content}")
        lines.append("")
    return lines


def format_summary_markdown(
    summaries: list[ProjectSummary], day: date, now: datetime
) -> str:
    """Render the cross-project daily summary."""
    total_sessions = sum(s.sessions_count for s in summaries)
    total_messages = sum(s.messages_count for s in summaries)
    lines: list[str] = [
        f"# Claude Code Daily Report - {day.isoformat()}",
        "",
        "## 📊 Overview",
        "",
        f"- **Date:** {_long_date(day)}",
        f"- **Projects:** {len(summaries)}",
        f"- **Sessions:** {total_sessions}",
        f"- **Messages:** {total_messages}",
        "",
    ]

    if summaries:
        lines.append("## 🚀 Activity by project")
        lines.append("")
        for index, s in enumerate(summaries, 1):
            lines.append(f"### {index}. {s.name}")
            lines.append("")
            lines.append(f"- Path: `{s.path}`")
            lines.append(f"- Sessions: {s.sessions_count}")
            lines.append(f"- Messages: {s.messages_count}")
            lines.append(f"- Last activity: {format_timestamp(s.last_activity, '%Y-%m-%d %H:%M')}")
            lines.append("")
            lines.extend(_summary_details(s, "####"))
            lines.append("---")
            lines.append("")

    completed = sum(len(s.completed_todos) for s in summaries)
    pending = sum(len(s.pending_todos) for s in summaries)
    rate = round(completed / (completed + pending) * 100) if completed + pending else 0
    busiest = max(summaries, key=lambda s: s.messages_count, default=None)

    lines.append("## 📈 Statistics")
    lines.append("")
    lines.append(f"- Completed tasks: {completed}")
    lines.append(f"- Open tasks: {pending}")
    lines.append(f"- Completion rate: {rate}%")
    if busiest is not None:
        lines.append(f"- Most active project: {busiest.name} ({busiest.messages_count} messages)")
    else:
        lines.append("- Most active project: none")
    lines.append("")
    lines.extend(_footer(now))
    return "\n".join(lines)


def _prompt_blocks(project: Project, heading: str, with_period: bool) -> list[str]:
    lines: list[str] = []
    for session in project.sessions:
        prompts = [m for m in session.messages if m.role is Role.USER]
        if not prompts:
            continue
        lines.append(f"{heading} Session {session.id[:8]}...")
        lines.append("")
        if with_period:
            start = format_timestamp(session.start_time, "%Y-%m-%d %H:%M")
            end = format_timestamp(session.end_time, "%H:%M")
            lines.append(f"**Period:** {start} - {end}")
            lines.append("")
        for index, message in enumerate(prompts, 1):
            ts = format_timestamp(message.timestamp, "%H:%M")
            lines.append(f"**{index}. [{ts}]**")
            lines.append("```")
            lines.append(content_text(message.content))
            lines.append("```")
            lines.append("")
    return lines


def format_prompts_markdown(projects: list[Project], day: date, now: datetime) -> str:
    """Render every user prompt of the day, grouped by project and session."""
    lines: list[str] = [
        f"# Claude Code Prompts - {day.isoformat()}",
        "",
        "User prompts sent to Claude Code on this day.",
        "",
    ]
    for index, project in enumerate(projects, 1):
        lines.append(f"## {index}. {project.name}")
        lines.append("")
        lines.extend(_prompt_blocks(project, "###", with_period=False))
        lines.append("---")
        lines.append("")
    lines.extend(_footer(now))
    return "\n".join(lines)


def _todo_sections(todos: list[tuple[str | None, TodoItem]]) -> list[str]:
    sections = (
        ("completed", "✅ Completed"),
        ("in_progress", "🔄 In progress"),
        ("pending", "📋 Pending"),
    )
    lines: list[str] = []
    for status, title in sections:
        matching = [(name, t) for name, t in todos if t.status == status]
        if not matching:
            continue
        lines.append(f"## {title}")
        lines.append("")
        for name, t in matching:
            prefix = f"**[{name}]** " if name else ""
            lines.append(f"- {_priority(t)} {prefix}{t.content}")
        lines.append("")
    return lines


def _todo_counts(todos: list[TodoItem]) -> list[str]:
    return [
        f"- **Completed:** {len(filter_todos_by_status(todos, 'completed'))}",
        f"- **In progress:** {len(filter_todos_by_status(todos, 'in_progress'))}",
        f"- **Pending:** {len(filter_todos_by_status(todos, 'pending'))}",
    ]


def format_todo_markdown(
    project_todos: list[tuple[str, TodoItem]], day: date, now: datetime
) -> str:
    """Render todos across projects; entries are (project name, todo) pairs."""
    todos = [t for _, t in project_todos]
    completed = len(filter_todos_by_status(todos, "completed"))
    rate = round(completed / len(todos) * 100) if todos else 0
    lines: list[str] = [
        f"# Claude Code Todos - {day.isoformat()}",
        "",
        "## 📊 Summary",
        "",
        *_todo_counts(todos),
        f"- **Completion rate:** {rate}%",
        "",
    ]
    lines.extend(_todo_sections(project_todos))
    lines.extend(_footer(now))
    return "\n".join(lines)


def format_project_summary_markdown(summary: ProjectSummary, day: date, now: datetime) -> str:
    lines: list[str] = [
        f"# {summary.name} - {day.isoformat()}",
        "",
        "## 📊 Overview",
        "",
        f"- **Project:** {summary.name}",
        f"- **Path:** `{summary.path}`",
        f"- **Sessions:** {summary.sessions_count}",
        f"- **Messages:** {summary.messages_count}",
        f"- **Last activity:** {format_timestamp(summary.last_activity, '%Y-%m-%d %H:%M')}",
        "",
    ]
    lines.extend(_summary_details(summary, "##"))
    lines.extend(_footer(now))
    return "\n".join(lines)


def format_project_prompts_markdown(project: Project, now: datetime) -> str:
    lines: list[str] = [f"# {project.name} - Prompts", ""]
    lines.extend(_prompt_blocks(project, "##", with_period=True))
    lines.extend(_footer(now))
    return "\n".join(lines)


def format_project_todo_markdown(name: str, todos: list[TodoItem], now: datetime) -> str:
    lines: list[str] = [
        f"# {name} - Todos",
        "",
        "## 📊 Summary",
        "",
        *_todo_counts(todos),
        "",
    ]
    lines.extend(_todo_sections([(None, t) for t in todos]))
    lines.extend(_footer(now))
    return "\n".join(lines)


def _write_reports(directory: Path, contents: tuple[str, str, str]) -> ReportPaths:
    paths = [directory / name for name in REPORT_FILES]
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for path, content in zip(paths, contents):
            path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ReportWriteError(f"Failed to write reports to {directory}: {exc}") from exc
    logger.debug("Wrote reports to %s", directory)
    return ReportPaths(*paths)


def generate_report(
    result: AnalysisResult,
    output_dir: str,
    day: date,
    todos_dir: str,
    project_filter: str | None = None,
    now: datetime | None = None,
) -> GeneratedReports:
    """Write the all-projects report plus one report per project.

    Layout: ``<output>/all/<YYYYMMDD>/`` and ``<output>/<project.path>/<YYYYMMDD>/``,
    each with summary.md, prompts.md and todo.md.
    """
    now = now or datetime.now()
    out = Path(resolve_path(output_dir))
    stamp = day.strftime("%Y%m%d")

    projects = [
        p for p in result.projects
        if not project_filter or project_filter in p.name
    ]
    todos = {p.path: collect_project_todos(p, todos_dir) for p in projects}
    summaries = [build_project_summary(p, todos[p.path]) for p in projects]

    project_todos: dict[str, tuple[str, TodoItem]] = {}
    for p in projects:
        for t in todos[p.path]:
            project_todos[f"{p.path}:{t.id}"] = (p.name, t)

    reports = GeneratedReports(
        all=_write_reports(out / "all" / stamp, (
            format_summary_markdown(summaries, day, now),
            format_prompts_markdown(projects, day, now),
            format_todo_markdown(list(project_todos.values()), day, now),
        ))
    )

    for project, summary in zip(projects, summaries):
        reports.projects[project.path] = _write_reports(out / project.path / stamp, (
            format_project_summary_markdown(summary, day, now),
            format_project_prompts_markdown(project, now),
            format_project_todo_markdown(project.name, todos[project.path], now),
        ))

    return reports
