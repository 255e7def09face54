"""Summarize Claude Code usage from local session logs."""

from ccsummary.analyzer import analyze, analyze_project
from ccsummary.exceptions import CcsummaryError, ProjectsDirectoryError, ReportWriteError
from ccsummary.models import (
    AnalysisPeriod,
    AnalysisResult,
    Message,
    Project,
    Role,
    Session,
    TodoItem,
    decode_project_name,
)
from ccsummary.parser import parse_session_file
from ccsummary.paths import resolve_path
from ccsummary.stats import (
    activity_timeline,
    dedupe_todos,
    extract_key_activities,
    filter_todos_by_status,
    format_date,
    format_timestamp,
    group_todos_by_priority,
    is_valid_session_id,
    most_active_project,
    project_stats,
    recent_activity,
    sanitize_content,
    session_duration_minutes,
    todo_completion_rate,
    working_directories,
)
from ccsummary.todos import load_all_todos, load_todos_for_session

__all__ = [
    "AnalysisPeriod",
    "AnalysisResult",
    "CcsummaryError",
    "Message",
    "Project",
    "ProjectsDirectoryError",
    "ReportWriteError",
    "Role",
    "Session",
    "TodoItem",
    "activity_timeline",
    "analyze",
    "analyze_project",
    "decode_project_name",
    "dedupe_todos",
    "extract_key_activities",
    "filter_todos_by_status",
    "format_date",
    "format_timestamp",
    "group_todos_by_priority",
    "is_valid_session_id",
    "load_all_todos",
    "load_todos_for_session",
    "most_active_project",
    "parse_session_file",
    "project_stats",
    "recent_activity",
    "resolve_path",
    "sanitize_content",
    "session_duration_minutes",
    "todo_completion_rate",
    "working_directories",
]
