"""Command-line entry point: ``precast init``, ``precast add`` and ``precast list``.

Examples::

    precast init my-app --framework next --database postgres --orm prisma -y
    precast add ./my-app --ui-library shadcn --plugins stripe
    precast list database
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from precast import __version__
from precast.config import Settings
from precast.errors import ConfigurationError, ProjectCreationError, SetupError
from precast.orchestrator import ProjectOrchestrator, ProjectResult
from precast.setup.registry import feature_errors
from precast.stack import (
    DEFAULT_SELECTIONS,
    NONE,
    Axis,
    ConfigRecommender,
    ConfigUpdate,
    ConfigValidator,
    ProjectConfig,
    StackCatalog,
    normalize,
)
from precast.utils import (
    CommandError,
    console,
    format_duration,
    print_error,
    print_summary_table,
    print_warning,
    set_verbose,
)

DEFAULT_NAME = "my-precast-app"
PACKAGE_MANAGERS = ("npm", "yarn", "pnpm", "bun")


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _split(value: str | None) -> list[str] | None:
    """Comma-separated flag value to a list; ``None`` when the flag is absent."""
    if value is None:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def _add_feature_flags(parser: argparse.ArgumentParser) -> None:
    """Flags shared by ``init`` and ``add``."""
    parser.add_argument("--auth", dest="auth_provider", help="Authentication provider")
    parser.add_argument("--ui-library", help="UI component library (shadcn, daisyui, mui, chakra)")
    parser.add_argument("--api-client", help="API client (tanstack-query, swr, axios, trpc)")
    parser.add_argument("--ai", help="Comma-separated AI assistants to write context files for")
    parser.add_argument("--mcp", help="Comma-separated MCP servers (Claude only)")
    parser.add_argument("--powerups", help="Comma-separated power-ups")
    parser.add_argument("--plugins", help="Comma-separated business plugins")
    parser.add_argument("--color-palette", help="Colour palette id")
    parser.add_argument("--docker", action="store_true", default=None, help="Generate Docker files")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="precast",
        description="create-precast-app -- scaffold full-stack web projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  precast init my-app --framework react --backend express -y\n"
            "  precast add ./my-app --auth better-auth\n"
            "  precast list framework\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Echo collected errors with tracebacks")
    parser.add_argument("--verbose", action="store_true", help="Print diagnostic output")
    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init", help="Create a new project")
    init.add_argument("name", nargs="?", help=f"Project name (default: {DEFAULT_NAME})")
    init.add_argument("--framework", help="Frontend framework")
    init.add_argument("--backend", help="Backend framework")
    init.add_argument("--database", help="Database")
    init.add_argument("--orm", help="ORM / ODM")
    init.add_argument("--styling", help="Styling solution")
    init.add_argument("--runtime", help="JavaScript runtime")
    init.add_argument("--no-typescript", dest="typescript", action="store_false", help="Use JavaScript")
    init.add_argument("--no-git", dest="git", action="store_false", help="Skip git initialisation")
    init.add_argument("--deployment", dest="deployment_method", help="Deployment target")
    init.add_argument("--package-manager", choices=PACKAGE_MANAGERS, default="npm")
    init.add_argument("--install", action="store_true", help="Install dependencies afterwards")
    init.add_argument("-y", "--yes", action="store_true", help="Accept defaults for every prompt")
    _add_feature_flags(init)

    add = sub.add_parser("add", help="Add features to an existing project")
    add.add_argument("path", nargs="?", default=".", help="Project directory (default: .)")
    _add_feature_flags(add)

    list_ = sub.add_parser("list", help="List the options of a stack axis")
    list_.add_argument("axis", nargs="?", help="framework, backend, database, orm, styling, runtime or powerups")
    return parser


def _feature_values(args: argparse.Namespace) -> dict[str, Any]:
    """Feature flags given on the command line, keyed by config field."""
    values: dict[str, Any] = {}
    for field in ("auth_provider", "ui_library", "api_client", "color_palette"):
        if getattr(args, field) is not None:
            values[field] = getattr(args, field)
    ai = _split(args.ai)
    if ai is not None:
        values["ai_context"] = ai
        values["ai_assistant"] = "claude" if "claude" in ai else (ai[0] if ai else None)
    for flag, field in (("mcp", "mcp_servers"), ("powerups", "powerups"), ("plugins", "plugins")):
        items = _split(getattr(args, flag))
        if items is not None:
            values[field] = items
    if args.docker is not None:
        values["docker"] = args.docker
    return values


# ---------------------------------------------------------------------------
# Interactive prompts
# ---------------------------------------------------------------------------


def _interactive(args: argparse.Namespace) -> bool:
    return not args.yes and sys.stdin.isatty()


def prompt_axis(recommender: ConfigRecommender, axis: Axis, answers: dict[str, Any]) -> str:
    """Ask for *axis*, offering only options compatible with *answers*."""
    options = recommender.prompt_choices(axis, answers)
    ids = [option.id for option in options]
    if axis is not Axis.FRAMEWORK and NONE not in ids:
        ids.append(NONE)
    default = ids[0] if ids else DEFAULT_SELECTIONS[axis.value]
    return Prompt.ask(f"[bold]{axis.value.capitalize()}[/bold]", choices=ids, default=default)


def collect_config(args: argparse.Namespace, recommender: ConfigRecommender | None = None) -> ProjectConfig:
    """Build the :class:`ProjectConfig` for ``init`` from flags and prompts.

    With ``--yes`` (or without a terminal) unanswered axes take
    :data:`DEFAULT_SELECTIONS`; otherwise each unanswered axis is prompted
    in order so later choices are filtered by earlier ones.
    """
    interactive = _interactive(args)
    recommender = recommender or ConfigRecommender()
    name = args.name
    if not name:
        name = Prompt.ask("[bold]Project name[/bold]", default=DEFAULT_NAME) if interactive else DEFAULT_NAME

    answers: dict[str, Any] = {}
    for axis in Axis:
        value = getattr(args, axis.value)
        if value is None:
            value = prompt_axis(recommender, axis, answers) if interactive else DEFAULT_SELECTIONS[axis.value]
        answers[axis.value] = value

    features = _feature_values(args)
    if interactive and "docker" not in features and answers["database"] != NONE:
        features["docker"] = Confirm.ask("[bold]Generate Docker files?[/bold]", default=False)

    return ProjectConfig(
        name=name,
        typescript=args.typescript,
        git=args.git,
        package_manager=args.package_manager,
        deployment_method=args.deployment_method,
        auto_install=args.install,
        **answers,
        **features,
    )


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def print_result(result: ProjectResult, title: str) -> None:
    """Print the closing panel and any collected problems."""
    if result.success:
        border_style = "bold green"
        status_text = "[bold green]DONE[/bold green]"
    else:
        border_style = "bold yellow"
        status_text = "[bold yellow]DONE WITH WARNINGS[/bold yellow]"

    lines = [
        status_text,
        "",
        f"Project  : {result.project_path}",
        f"Duration : {format_duration(result.duration)}",
        f"Steps    : {', '.join(result.steps_run) or 'none'}",
    ]
    console.print()
    console.print(Panel("\n".join(lines), title=f"[bold]{title}[/bold]", border_style=border_style))

    if result.errors:
        print_summary_table({e.task: e.error for e in result.errors}, title="Failed steps")
    for warning in result.warnings:
        print_warning(f"{warning.task}: {warning.error}")
    if result.next_steps:
        console.print("[bold]Next steps:[/bold]")
        for step in result.next_steps:
            console.print(f"  - {step}")


def print_options(catalog: StackCatalog, axis: str | None) -> None:
    names = [a.value for a in catalog.axes()] + ["powerups"] if axis is None else [axis]
    for name in names:
        table = Table(title=name, show_header=True, header_style="bold cyan")
        table.add_column("Id", style="bold", no_wrap=True)
        table.add_column("Name")
        table.add_column("Description", style="dim")
        options = catalog.list_powerups() if name == "powerups" else catalog.list_options(name)
        for option in options:
            table.add_row(option.id, option.name, option.description)
        console.print(table)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def run_init(args: argparse.Namespace, settings: Settings) -> int:
    validator = ConfigValidator()
    config = normalize(collect_config(args, ConfigRecommender(validator)))
    result = validator.validate(config)
    for warning in result.warnings:
        print_warning(f"Warning: {warning}")
    errors = result.errors + feature_errors(config.model_dump())
    if errors:
        for error in errors:
            print_error(f"Error: {error}")
        return 1

    orchestrator = ProjectOrchestrator(settings, validator=validator)
    try:
        outcome = asyncio.run(orchestrator.create_project(config))
    except (ProjectCreationError, SetupError, CommandError) as exc:
        print_error(f"Error: {exc}")
        return 1
    print_result(outcome, f"Created {config.name}")
    return 0


def run_add(args: argparse.Namespace, settings: Settings) -> int:
    values = _feature_values(args)
    if not values:
        print_error("Error: nothing to add; pass at least one feature flag")
        return 1
    errors = feature_errors(values)
    if errors:
        for error in errors:
            print_error(f"Error: {error}")
        return 1
    update = ConfigUpdate(**values)

    orchestrator = ProjectOrchestrator(settings)
    try:
        outcome = asyncio.run(orchestrator.add_features(Path(args.path), update))
    except ConfigurationError as exc:
        for error in exc.errors:
            print_error(f"Error: {error}")
        return 1
    except (ProjectCreationError, SetupError, CommandError) as exc:
        print_error(f"Error: {exc}")
        return 1
    print_result(outcome, "Features added")
    return 0


def run_list(args: argparse.Namespace) -> int:
    catalog = StackCatalog()
    valid = [a.value for a in catalog.axes()] + ["powerups"]
    if args.axis is not None and args.axis not in valid:
        print_error(f"Error: unknown axis {args.axis!r} (choose from {', '.join(valid)})")
        return 1
    print_options(catalog, args.axis)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Console script ``precast``."""
    args = build_parser().parse_args(argv)
    settings = Settings.from_env(
        **({"debug": True} if args.debug else {}),
        **({"verbose": True} if args.verbose else {}),
    )
    set_verbose(settings.verbose or settings.debug)

    if args.command == "init":
        code = run_init(args, settings)
    elif args.command == "add":
        code = run_add(args, settings)
    else:
        code = run_list(args)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
