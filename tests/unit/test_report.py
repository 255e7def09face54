from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

import pytest

from ccsummary import report
from ccsummary.analyzer import analyze
from ccsummary.exceptions import ReportWriteError
from ccsummary.models import Role
from tests.helpers import conversation, make_message, make_project, make_session, make_todo, write_json, write_jsonl

DAY = date(2025, 1, 15)
NOW = datetime(2025, 1, 15, 23, 0, 0)


def test_build_project_summary_splits_todos() -> None:
    todos = [
        make_todo(id="1", status="completed"),
        make_todo(id="2", status="in_progress"),
        make_todo(id="3", status="pending"),
        make_todo(id="4", status="blocked"),
    ]
    session = make_session([make_message(content="Add a summary command to the CLI")])

    summary = report.build_project_summary(make_project([session]), todos)

    assert [t.id for t in summary.completed_todos] == ["1"]
    assert [t.id for t in summary.pending_todos] == ["2", "3"]
    assert summary.key_activities == ["Add a summary command to the CLI"]
    assert summary.sessions_count == 1


def test_format_summary_markdown() -> None:
    summary = report.ProjectSummary(
        name="proj",
        path="-home-alice-proj",
        sessions_count=2,
        messages_count=10,
        last_activity="2025-01-15T18:30:00Z",
        key_activities=["Fix the flaky test"],
        completed_todos=[make_todo(id="1", content="Done thing", status="completed")],
        pending_todos=[make_todo(id="2", content="Open thing", status="in_progress", priority="high")],
    )

    md = report.format_summary_markdown([summary], DAY, NOW)

    assert md.startswith("# Claude Code Daily Report - 2025-01-15")
    assert "- **Date:** 2025-01-15 (Wednesday)" in md
    assert "- **Sessions:** 2" in md
    assert "### 1. proj" in md
    assert "- Last activity: 2025-01-15 18:30" in md
    assert "- Fix the flaky test" in md
    assert "- Done thing" in md
    assert "- 🔴 🔄 Open thing" in md
    assert "- Completion rate: 50%" in md
    assert "- Most active project: proj (10 messages)" in md
    assert "*Generated at 2025-01-15 23:00:00*" in md


def test_format_summary_markdown_empty() -> None:
    md = report.format_summary_markdown([], DAY, NOW)
    assert "- **Projects:** 0" in md
    assert "Activity by project" not in md
    assert "- Most active project: none" in md


def test_format_prompts_markdown_only_user_messages() -> None:
    session = make_session([
        make_message(content="first prompt", timestamp="2025-01-15T09:15:00Z"),
        make_message(role=Role.ASSISTANT, content="assistant text"),
        make_message(content=[{"type": "tool_result", "content": "out"}], timestamp="2025-01-15T09:20:00Z"),
    ], id="0123456789abcdef")

    md = report.format_prompts_markdown([make_project([session])], DAY, NOW)

    assert "## 1. proj" in md
    assert "### Session 01234567..." in md
    assert "**1. [09:15]**" in md
    assert "first prompt" in md
    assert '"tool_result"' in md
    assert "assistant text" not in md


def test_format_todo_markdown_sections() -> None:
    entries = [
        ("api", make_todo(id="1", content="ship", status="completed", priority="low")),
        ("web", make_todo(id="2", content="style", status="pending", priority="medium")),
    ]

    md = report.format_todo_markdown(entries, DAY, NOW)

    assert "- **Completed:** 1" in md
    assert "- **Pending:** 1" in md
    assert "- **Completion rate:** 50%" in md
    assert "## ✅ Completed" in md
    assert "- 🟢 **[api]** ship" in md
    assert "- 🟡 **[web]** style" in md
    assert "In progress\n" not in md


def test_format_project_prompts_includes_period() -> None:
    md = report.format_project_prompts_markdown(make_project(), NOW)
    assert "**Period:** 2025-01-15 10:00 - 10:30" in md


def _claude_tree(root: Path) -> None:
    write_jsonl(root / "projects" / "-home-alice-api" / "s.jsonl", conversation("sess-api"))
    write_jsonl(root / "projects" / "-home-alice-web" / "s.jsonl", conversation("sess-web"))
    write_json(root / "todos" / "sess-api-agent-1.json", [
        {"id": "1", "content": "old wording", "status": "pending", "priority": "high"},
    ])
    write_json(root / "todos" / "sess-api-agent-2.json", [
        {"id": "1", "content": "new wording", "status": "completed", "priority": "high"},
    ])


def test_generate_report_writes_layout(tmp_path: Path) -> None:
    root = tmp_path / ".claude"
    _claude_tree(root)
    result = analyze(str(root), target_date="2025-01-15")

    reports = report.generate_report(
        result, str(tmp_path / "out"), DAY, str(root / "todos"), now=NOW
    )

    all_dir = tmp_path / "out" / "all" / "20250115"
    assert reports.all.summary_path == all_dir / "summary.md"
    for name in report.REPORT_FILES:
        assert (all_dir / name).is_file()
        assert (tmp_path / "out" / "-home-alice-api" / "20250115" / name).is_file()
    assert set(reports.projects) == {"-home-alice-api", "-home-alice-web"}

    todo_md = (all_dir / "todo.md").read_text()
    assert "new wording" in todo_md
    assert "old wording" not in todo_md


def test_generate_report_project_filter(tmp_path: Path) -> None:
    root = tmp_path / ".claude"
    _claude_tree(root)
    result = analyze(str(root))

    reports = report.generate_report(
        result, str(tmp_path / "out"), DAY, str(root / "todos"), project_filter="web", now=NOW
    )

    assert list(reports.projects) == ["-home-alice-web"]
    assert not (tmp_path / "out" / "-home-alice-api").exists()


def test_collect_project_todos_ignores_session_without_id(tmp_path: Path) -> None:
    root = tmp_path / ".claude"
    entries = conversation()
    for entry in entries:
        del entry["sessionId"]
    write_jsonl(root / "projects" / "-home-alice-api" / "s.jsonl", entries)
    write_json(root / "todos" / "other-session-agent-1.json", [
        {"id": "x", "content": "unrelated", "status": "pending", "priority": "low"},
    ])
    project = analyze(str(root)).projects[0]

    assert project.sessions[0].id == ""
    assert report.collect_project_todos(project, str(root / "todos")) == []


def test_generate_report_keeps_todos_of_projects_sharing_a_name(tmp_path: Path) -> None:
    root = tmp_path / ".claude"
    write_jsonl(root / "projects" / "-a-proj" / "s.jsonl", conversation("sess-a"))
    write_jsonl(root / "projects" / "-b-proj" / "s.jsonl", conversation("sess-b"))
    write_json(root / "todos" / "sess-a-agent-1.json", [
        {"id": "1", "content": "from A", "status": "pending", "priority": "low"},
    ])
    write_json(root / "todos" / "sess-b-agent-1.json", [
        {"id": "1", "content": "from B", "status": "pending", "priority": "low"},
    ])
    result = analyze(str(root), target_date="2025-01-15")
    assert [p.name for p in result.projects] == ["proj", "proj"]

    report.generate_report(result, str(tmp_path / "out"), DAY, str(root / "todos"), now=NOW)

    todo_md = (tmp_path / "out" / "all" / "20250115" / "todo.md").read_text()
    assert "- 🟢 **[proj]** from A" in todo_md
    assert "- 🟢 **[proj]** from B" in todo_md
    assert "- **Pending:** 2" in todo_md


def test_generate_report_write_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "out"
    blocker.write_text("a file, not a directory")
    result = analyze(str(_empty_root(tmp_path)))

    with pytest.raises(ReportWriteError):
        report.generate_report(result, str(blocker), DAY, str(tmp_path / "todos"), now=NOW)


def _empty_root(tmp_path: Path) -> Path:
    root = tmp_path / ".claude"
    (root / "projects").mkdir(parents=True)
    return root
