"""Textual TUI for browsing Claude Code usage."""

from __future__ import annotations

from functools import partial
from pathlib import Path

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Header, RichLog, Static, Tree

from ccsummary.analyzer import analyze
from ccsummary.exceptions import CcsummaryError
from ccsummary.models import AnalysisResult, Project, Role, Session, TodoItem
from ccsummary.paths import resolve_path
from ccsummary.stats import (
    activity_timeline,
    content_text,
    dedupe_todos,
    extract_key_activities,
    format_timestamp,
    most_active_project,
    project_stats,
    session_duration_minutes,
    todo_completion_rate,
    working_directories,
)
from ccsummary.todos import load_todos_for_session

ALL_PROJECTS = "all"

_PRIORITY_STYLE = {"high": "red", "medium": "yellow", "low": "green"}
_STATUS_MARK = {"completed": "✔", "in_progress": "…", "pending": "○"}


class ProjectTree(Tree):
    """Left pane: projects and their sessions."""

    BORDER_TITLE = "Projects"


class DetailView(RichLog):
    """Right pane: statistics for the selected node."""

    BORDER_TITLE = "Details"


class CcsummaryApp(App):
    """Main application."""

    TITLE = "ccsummary"
    CSS = """
    Screen {
        layout: vertical;
    }

    #main {
        height: 1fr;
    }

    #project-tree {
        width: 1fr;
        min-width: 30;
        border: solid $accent;
    }

    #detail-view {
        width: 2fr;
        border: solid $accent;
    }

    #status-bar {
        height: 1;
        dock: bottom;
        background: $surface;
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("c", "toggle_completed", "Completed"),
        Binding("r", "refresh", "Refresh"),
    ]

    def __init__(
        self,
        claude_dir: str = "~/.claude",
        target_date: str | None = None,
        project_filter: str | None = None,
        include_completed: bool = True,
    ) -> None:
        super().__init__()
        self.claude_dir = claude_dir
        self.target_date = target_date
        self.project_filter = project_filter
        self.include_completed = include_completed
        self.result: AnalysisResult | None = None
        self._selected: object = ALL_PROJECTS
        self._status_base: str = "Loading..."
        # session id -> all of its todos, completed included
        self._todos: dict[str, list[TodoItem]] = {}

    @property
    def todos_dir(self) -> str:
        return str(Path(resolve_path(self.claude_dir)) / "todos")

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main"):
            yield ProjectTree("Projects", id="project-tree")
            yield DetailView(id="detail-view", wrap=True, markup=True)
        yield Static("Loading...", id="status-bar")

    def on_mount(self) -> None:
        tree = self.query_one("#project-tree", ProjectTree)
        tree.root.expand()
        tree.show_root = False
        self.run_worker(self._analyze, thread=True, exclusive=True)

    def action_refresh(self) -> None:
        self._set_status("Analyzing...")
        self.run_worker(self._analyze, thread=True, exclusive=True)

    def _analyze(self) -> None:
        """Background threaded worker: run the analysis."""
        try:
            result = analyze(
                self.claude_dir,
                target_date=self.target_date,
                project_filter=self.project_filter,
            )
        except CcsummaryError as exc:
            self.call_from_thread(self._show_error, str(exc))
            return
        self.call_from_thread(self.set_result, result)

    def _show_error(self, message: str) -> None:
        view = self.query_one("#detail-view", DetailView)
        view.clear()
        view.write(f"[bold red]Error:[/bold red] {escape(message)}")
        self._set_status("Analysis failed · q:Quit r:Retry")

    def set_result(self, result: AnalysisResult) -> None:
        previous = self._selected
        self.result = result
        self._todos.clear()
        self._populate_tree()
        self._selected = ALL_PROJECTS
        if isinstance(previous, Project):
            self._selected = result.get_project(previous.path) or ALL_PROJECTS
        self._render_selected()

    def _populate_tree(self) -> None:
        tree = self.query_one("#project-tree", ProjectTree)
        tree.clear()
        result = self.result
        if result is None:
            return

        all_node = tree.root.add_leaf(f"All projects ({len(result.projects)})")
        all_node.data = ALL_PROJECTS

        for index, project in enumerate(result.projects):
            label = f"{escape(project.name)} [{project.total_sessions}:{project.total_messages}]"
            node = tree.root.add(label, expand=index < 5)
            node.data = project
            for session in project.sessions:
                start = format_timestamp(session.start_time, "%m-%d %H:%M")
                leaf = node.add_leaf(f"{start}  ({session.message_count}) {session.id[:8]}")
                leaf.data = session

        period = result.analysis_period
        self._set_status(
            f"{len(result.projects)} projects · {result.total_sessions} sessions · "
            f"{result.total_messages} messages · {period.start}..{period.end} · "
            f"q:Quit c:Completed r:Refresh"
        )

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        if event.node.data is None:
            return
        self._selected = event.node.data
        self._render_selected()

    def action_toggle_completed(self) -> None:
        self.include_completed = not self.include_completed
        self._render_selected()
        self._refresh_status()

    def _render_selected(self) -> None:
        view = self.query_one("#detail-view", DetailView)
        view.clear()
        if self.result is None:
            return
        if isinstance(self._selected, Project):
            self._render_project(view, self._selected)
        elif isinstance(self._selected, Session):
            self._render_session(view, self._selected)
        else:
            self._render_overview(view, self.result)

    def _render_overview(self, view: DetailView, result: AnalysisResult) -> None:
        period = result.analysis_period
        view.write(f"[bold cyan]All projects[/bold cyan]  [dim]{period.start} .. {period.end}[/dim]")
        if not result.projects:
            view.write("\n[dim]No activity in this period.[/dim]")
            return

        view.write(f"\nProjects: {len(result.projects)}")
        view.write(f"Sessions: {result.total_sessions}")
        view.write(f"Messages: {result.total_messages}")

        busiest = most_active_project(result.projects)
        if busiest is not None:
            view.write(f"Most active: [green]{escape(busiest.name)}[/green] ({busiest.total_messages} messages)")

        view.write("\n[bold]Projects[/bold]")
        for project in sorted(result.projects, key=lambda p: p.last_activity, reverse=True):
            last = format_timestamp(project.last_activity, "%Y-%m-%d %H:%M")
            view.write(
                f"  {escape(project.name):<30} {project.total_sessions:>4} sessions "
                f"{project.total_messages:>6} messages  [dim]{last}[/dim]"
            )

        timeline = activity_timeline(result.projects)
        if timeline:
            view.write("\n[bold]Messages per day[/bold]")
            peak = max(timeline.values())
            for day, count in timeline.items():
                bar = "█" * max(1, round(count / peak * 30))
                view.write(f"  {day} {bar} {count}")

        cwds = working_directories(result.projects)
        if cwds:
            view.write("\n[bold]Working directories[/bold]")
            for cwd in cwds:
                view.write(f"  [dim]{escape(cwd)}[/dim]")

    def _session_todos(self, sessions) -> list[TodoItem] | None:
        """Cached todos for *sessions*, or None while a worker loads them."""
        missing = [s.id for s in sessions if s.id not in self._todos]
        if missing:
            self.run_worker(partial(self._load_todos, missing), thread=True, group="todos")
            return None
        return dedupe_todos(t for s in sessions for t in self._todos[s.id])

    def _load_todos(self, session_ids: list[str]) -> None:
        """Background threaded worker: read todo files for sessions."""
        loaded = {sid: load_todos_for_session(self.todos_dir, sid) for sid in session_ids}
        self.call_from_thread(self._todos_loaded, loaded)

    def _todos_loaded(self, loaded: dict[str, list[TodoItem]]) -> None:
        self._todos.update(loaded)
        self._render_selected()

    def _render_todos(self, view: DetailView, todos: list[TodoItem] | None) -> None:
        if todos is None:
            view.write("\n[bold]Todos[/bold]  [dim]Loading...[/dim]")
            return
        shown = todos if self.include_completed else [t for t in todos if t.status != "completed"]
        label = "" if self.include_completed else " (open only)"
        view.write(f"\n[bold]Todos{label}[/bold]  [dim]{todo_completion_rate(todos)}% complete[/dim]")
        if not shown:
            view.write("  [dim]None[/dim]")
            return
        for todo in shown:
            style = _PRIORITY_STYLE.get(todo.priority, "white")
            mark = _STATUS_MARK.get(todo.status, "?")
            view.write(f"  [{style}]{mark}[/{style}] {escape(todo.content)}")

    def _render_project(self, view: DetailView, project: Project) -> None:
        stats = project_stats(project)
        view.write(f"[bold cyan]{escape(project.name)}[/bold cyan]  [dim]{escape(project.path)}[/dim]")
        view.write(f"\nSessions: {stats.total_sessions}")
        view.write(f"Messages: {stats.total_messages} "
                   f"([cyan]{stats.user_messages} user[/cyan], "
                   f"[green]{stats.assistant_messages} assistant[/green])")
        view.write(f"Average per session: {stats.average_messages_per_session}")
        view.write(f"Last activity: {stats.last_activity}")

        messages = [m for s in project.sessions for m in s.messages]
        activities = extract_key_activities(messages)
        if activities:
            view.write("\n[bold]Key activities[/bold]")
            for activity in activities:
                view.write(f"  - {escape(activity)}")

        self._render_todos(view, self._session_todos(project.sessions))

    def _render_session(self, view: DetailView, session: Session) -> None:
        start = format_timestamp(session.start_time, "%Y-%m-%d %H:%M")
        end = format_timestamp(session.end_time, "%H:%M")
        view.write(f"[bold cyan]Session {escape(session.id)}[/bold cyan]")
        view.write(f"\n{start} - {end} ({session_duration_minutes(session)} min)")
        view.write(f"Directory: {escape(session.working_directory)}")
        view.write(f"Messages: {session.message_count}")

        prompts = [m for m in session.messages if m.role is Role.USER]
        if prompts:
            view.write("\n[bold]Prompts[/bold]")
            for message in prompts:
                ts = format_timestamp(message.timestamp, "%H:%M")
                text = content_text(message.content)[:500]
                view.write(f"\n[bold cyan]{ts}[/bold cyan]  {escape(text)}")

        self._render_todos(view, self._session_todos([session]))

    def _set_status(self, text: str) -> None:
        self._status_base = text
        self._refresh_status()

    def _refresh_status(self) -> None:
        suffix = "" if self.include_completed else " · Open todos only"
        self.query_one("#status-bar", Static).update(self._status_base + suffix)
