"""CLI entry point for ccsummary.

All ccsummary.* imports are lazy (inside functions) so that
``ccsummary --help`` and argument parsing stay fast.

Workflow:
    ccsummary generate -d 2025-01-15   # write markdown reports for a day
    ccsummary list                      # list projects with activity
    ccsummary todos <session-id>        # print a session's task list as JSON
    ccsummary config --output-dir DIR   # persist defaults
    ccsummary                           # launch the interactive browser
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date


def _json_out(obj) -> None:
    """Print JSON to stdout."""
    json.dump(obj, sys.stdout, indent=2, ensure_ascii=False)
    print()


def _iso_date(value: str) -> str:
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD")


def _settings(args: argparse.Namespace) -> dict:
    """Merge persisted config with command-line overrides."""
    from ccsummary.config import load_config

    settings = load_config()
    for key in ("claude_dir", "output_dir"):
        value = getattr(args, key, None)
        if value:
            settings[key] = value
    if getattr(args, "pending_only", False):
        settings["include_completed_todos"] = False
    return settings


def _fail(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)


def cmd_generate(args: argparse.Namespace) -> None:
    """Analyze one day and write markdown reports."""
    from rich.console import Console

    from ccsummary.analyzer import analyze
    from ccsummary.exceptions import CcsummaryError
    from ccsummary.paths import resolve_path
    from ccsummary.report import generate_report
    from ccsummary.stats import most_active_project

    settings = _settings(args)
    console = Console()
    todos_dir = resolve_path(settings["claude_dir"]) + "/todos"

    try:
        with console.status("Analyzing Claude Code usage..."):
            result = analyze(settings["claude_dir"], target_date=args.date)
            reports = generate_report(
                result,
                settings["output_dir"],
                date.fromisoformat(args.date),
                todos_dir,
                project_filter=args.project,
            )
    except CcsummaryError as exc:
        _fail(str(exc))

    console.print(f"[green]Report generated:[/green] {reports.all.summary_path}")
    console.print("\n[blue]Summary[/blue]")
    console.print(f"[yellow]Date:[/yellow] {args.date}")
    console.print(f"[yellow]Projects:[/yellow] {len(result.projects)}")
    console.print(f"[yellow]Total sessions:[/yellow] {result.total_sessions}")
    console.print(f"[yellow]Total messages:[/yellow] {result.total_messages}")
    busiest = most_active_project(result.projects)
    if busiest is not None:
        console.print(f"[yellow]Most active:[/yellow] {busiest.name} ({busiest.total_messages} messages)")


def cmd_list(args: argparse.Namespace) -> None:
    """List projects found under the Claude directory."""
    from ccsummary.analyzer import analyze
    from ccsummary.exceptions import CcsummaryError
    from ccsummary.models import project_to_dict

    settings = _settings(args)
    try:
        result = analyze(settings["claude_dir"])
    except CcsummaryError as exc:
        _fail(str(exc))

    if args.json:
        _json_out([project_to_dict(p) for p in result.projects])
        return

    from rich.console import Console

    from ccsummary.stats import format_timestamp

    console = Console()
    if not result.projects:
        console.print("[dim]No projects found.[/dim]")
        return

    console.print("[blue]Available projects[/blue]\n")
    for index, project in enumerate(result.projects, 1):
        console.print(f"{index}. [green]{project.name}[/green]")
        console.print(f"   Path: [dim]{project.path}[/dim]")
        console.print(f"   Sessions: {project.total_sessions}")
        console.print(f"   Last activity: {format_timestamp(project.last_activity, '%Y-%m-%d %H:%M')}")
        console.print()


def cmd_todos(args: argparse.Namespace) -> None:
    """Print the task list for one session as JSON."""
    from ccsummary.paths import resolve_path
    from ccsummary.todos import load_todos_for_session

    settings = _settings(args)
    todos = load_todos_for_session(
        resolve_path(settings["claude_dir"]) + "/todos",
        args.session_id,
        include_completed=settings["include_completed_todos"],
    )
    _json_out([t.to_dict() for t in todos])


def cmd_config(args: argparse.Namespace) -> None:
    """Show or update persisted defaults."""
    from ccsummary.config import load_config, save_config

    config = load_config()
    changed = False
    for key in ("claude_dir", "output_dir"):
        value = getattr(args, key, None)
        if value:
            config[key] = value
            changed = True
    if args.include_completed is not None:
        config["include_completed_todos"] = args.include_completed
        changed = True

    if changed:
        save_config(config)
    _json_out(config)


def cmd_browse(args: argparse.Namespace) -> None:
    """Launch the interactive browser."""
    from ccsummary.app import CcsummaryApp

    settings = _settings(args)
    app = CcsummaryApp(
        claude_dir=settings["claude_dir"],
        target_date=getattr(args, "date", None),
        project_filter=getattr(args, "project", None),
        include_completed=settings["include_completed_todos"],
    )
    app.run()


def _add_claude_dir(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--claude-dir",
        metavar="PATH",
        help="Path to the .claude directory (default: from config, ~/.claude)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ccsummary",
        description=(
            "Summarize Claude Code usage from local session logs.\n\n"
            "With no subcommand, launches the interactive browser."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )

    sub = parser.add_subparsers(dest="command")

    # generate
    p_generate = sub.add_parser(
        "generate",
        help="Generate markdown reports for one day",
        description=(
            "Analyze a single day of sessions and write summary.md, prompts.md "
            "and todo.md for all projects and for each project."
        ),
    )
    p_generate.add_argument(
        "-d", "--date",
        type=_iso_date,
        default=date.today().isoformat(),
        help="Target date, YYYY-MM-DD (default: today)",
    )
    p_generate.add_argument(
        "-o", "--output",
        dest="output_dir",
        metavar="PATH",
        help="Output directory (default: from config, ~/ccsummary)",
    )
    p_generate.add_argument(
        "-p", "--project",
        metavar="NAME",
        help="Only report projects whose name contains NAME",
    )
    _add_claude_dir(p_generate)

    # list
    p_list = sub.add_parser(
        "list",
        help="List available projects",
        description="List every project with at least one session.",
    )
    p_list.add_argument("--json", action="store_true", help="Print JSON instead of text")
    _add_claude_dir(p_list)

    # todos
    p_todos = sub.add_parser(
        "todos",
        help="Print a session's task list as JSON",
    )
    p_todos.add_argument("session_id", help="The session ID to load todos for")
    p_todos.add_argument(
        "--pending-only",
        action="store_true",
        help="Exclude completed items",
    )
    _add_claude_dir(p_todos)

    # config
    p_config = sub.add_parser(
        "config",
        help="Show or update persisted defaults",
    )
    p_config.add_argument("--claude-dir", metavar="PATH")
    p_config.add_argument("--output-dir", metavar="PATH")
    p_config.add_argument(
        "--include-completed",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Whether todo listings include completed items",
    )

    # browse
    p_browse = sub.add_parser(
        "browse",
        help="Launch the interactive browser (default)",
    )
    p_browse.add_argument("-d", "--date", type=_iso_date, help="Only show this day, YYYY-MM-DD")
    p_browse.add_argument("-p", "--project", metavar="NAME", help="Filter projects by name")
    _add_claude_dir(p_browse)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None or args.command == "browse":
        cmd_browse(args)
    elif args.command == "generate":
        cmd_generate(args)
    elif args.command == "list":
        cmd_list(args)
    elif args.command == "todos":
        cmd_todos(args)
    elif args.command == "config":
        cmd_config(args)


if __name__ == "__main__":
    main()
