"""Project discovery and aggregation over a Claude data directory."""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, ThreadPoolExecutor
from datetime import date, timedelta
from functools import partial
from pathlib import Path

from ccsummary.exceptions import ProjectsDirectoryError
from ccsummary.models import AnalysisPeriod, AnalysisResult, Project, decode_project_name
from ccsummary.parser import SESSION_SUFFIX, parse_session_file
from ccsummary.paths import resolve_path

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_DAYS = 7


def _list_session_files(project_dir: Path) -> list[Path]:
    return [
        project_dir / name
        for name in sorted(os.listdir(project_dir))
        if name.endswith(SESSION_SUFFIX)
    ]


def analyze_project(
    project_dir: str | Path,
    encoded_name: str,
    target_date: str | None = None,
    executor: Executor | None = None,
) -> Project | None:
    """Aggregate every session file in one project directory.

    Returns None when the directory can't be listed or yields no session.
    Sessions keep the (sorted) directory listing order regardless of which
    file finishes decoding first.
    """
    project_dir = Path(project_dir)
    try:
        files = _list_session_files(project_dir)
    except OSError as exc:
        logger.warning("Failed to analyze project %s: %s", encoded_name, exc)
        return None

    if not files:
        return None

    decode = partial(parse_session_file, target_date=target_date)
    if executor is not None:
        results = list(executor.map(decode, files))
    else:
        results = [decode(f) for f in files]

    sessions = tuple(s for s in results if s is not None)
    if not sessions:
        return None

    return Project(
        name=decode_project_name(encoded_name),
        path=encoded_name,
        sessions=sessions,
    )


def default_period(target_date: str | None, today: date | None = None) -> AnalysisPeriod:
    if target_date:
        return AnalysisPeriod(start=target_date, end=target_date)
    today = today or date.today()
    start = today - timedelta(days=DEFAULT_PERIOD_DAYS)
    return AnalysisPeriod(start=start.isoformat(), end=today.isoformat())


def analyze(
    root_dir: str,
    target_date: str | None = None,
    project_filter: str | None = None,
    max_workers: int | None = None,
) -> AnalysisResult:
    """Analyze every project under ``<root_dir>/projects``.

    Raises ProjectsDirectoryError if the projects directory can't be listed.
    An existing but empty directory gives a result with no projects.
    """
    projects_dir = Path(resolve_path(root_dir)) / "projects"
    try:
        entries = sorted(os.scandir(projects_dir), key=lambda e: e.name)
    except OSError as exc:
        raise ProjectsDirectoryError(
            f"Cannot read projects directory {projects_dir}: {exc.strerror or exc}"
        ) from exc

    project_dirs = []
    for entry in entries:
        try:
            if entry.is_dir():
                project_dirs.append(entry.name)
        except OSError:
            continue

    # Separate pools so project workers never block waiting on their own pool.
    with ThreadPoolExecutor(max_workers=max_workers) as file_pool, \
            ThreadPoolExecutor(max_workers=max_workers) as project_pool:
        results = list(project_pool.map(
            lambda name: analyze_project(
                projects_dir / name, name, target_date, executor=file_pool
            ),
            project_dirs,
        ))

    projects = [p for p in results if p is not None]
    if project_filter:
        projects = [p for p in projects if project_filter in p.name]

    logger.debug(
        "Analyzed %d project directories, kept %d", len(project_dirs), len(projects)
    )
    return AnalysisResult(
        projects=tuple(projects),
        analysis_period=default_period(target_date),
    )
