"""Shared utility functions for the Precast CLI.

Provides async command execution, JSON and file-system helpers, package.json
editing, and Rich-based console reporting.  Generators and the orchestrator go
through these helpers so tests can substitute the process runner and inspect
written files directly.
"""

from __future__ import annotations

import asyncio
import json
import os
import re
import shutil
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()
err_console = Console(stderr=True)

_verbose = False


def set_verbose(enabled: bool) -> None:
    """Toggle output of :func:`debug_log` messages."""
    global _verbose
    _verbose = enabled


# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


class CommandError(Exception):
    """Raised when a child process exits non-zero or times out."""

    def __init__(self, cmd: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr
        detail = f": {stderr.strip()[:300]}" if stderr.strip() else ""
        super().__init__(f"`{' '.join(self.cmd)}` exited with code {returncode}{detail}")


async def run_command(
    cmd: Sequence[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously without a shell.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  A timeout is reported as
        return code ``-1``.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    pipe = asyncio.subprocess.PIPE if capture else None
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=pipe,
            stderr=pipe,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    except FileNotFoundError:
        return (127, "", f"Command not found: {cmd[0]}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


class ProcessRunner:
    """Runs git and package-manager commands for the orchestrator.

    Unlike :func:`run_command`, a non-zero exit raises :class:`CommandError`,
    so callers decide whether the failure is fatal or soft by where they
    catch it.
    """

    def __init__(self, timeout: int = 120) -> None:
        self.timeout = timeout

    async def run(
        self,
        cmd: Sequence[str],
        cwd: str | Path | None = None,
        timeout: int | None = None,
    ) -> str:
        debug_log(f"$ {' '.join(cmd)}")
        returncode, stdout, stderr = await run_command(
            cmd, cwd=cwd, timeout=timeout or self.timeout
        )
        if returncode != 0:
            raise CommandError(cmd, returncode, stderr or stdout)
        return stdout


# ---------------------------------------------------------------------------
# Package managers
# ---------------------------------------------------------------------------

_INSTALL_COMMANDS: dict[str, list[str]] = {
    "npm": ["npm", "install"],
    "yarn": ["yarn", "install"],
    "pnpm": ["pnpm", "install"],
    "bun": ["bun", "install"],
}

_ADD_COMMANDS: dict[str, list[str]] = {
    "npm": ["npm", "install"],
    "yarn": ["yarn", "add"],
    "pnpm": ["pnpm", "add"],
    "bun": ["bun", "add"],
}


def install_command(package_manager: str) -> list[str]:
    """Return the argv that installs every dependency in ``package.json``."""
    return list(_INSTALL_COMMANDS.get(package_manager, _INSTALL_COMMANDS["npm"]))


def add_command(package_manager: str, packages: Iterable[str], dev: bool = False) -> list[str]:
    """Return the argv that adds *packages* with *package_manager*."""
    cmd = list(_ADD_COMMANDS.get(package_manager, _ADD_COMMANDS["npm"]))
    if dev:
        cmd.append("--save-dev" if cmd[0] == "npm" else "-D")
    cmd.extend(packages)
    return cmd


# ---------------------------------------------------------------------------
# String / name helpers
# ---------------------------------------------------------------------------


def db_name(project_name: str) -> str:
    """Database-safe identifier for a project (``my-app`` -> ``my_app``)."""
    return re.sub(r"[^a-z0-9_]", "_", project_name.lower().replace("-", "_"))


def title_case(identifier: str) -> str:
    """``react-router`` -> ``React Router``."""
    return " ".join(part.capitalize() for part in re.split(r"[-_\s]+", identifier) if part)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file whose root is an object.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the root is not an object.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object at the root")
    return data


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


async def write_file(path: str | Path, content: str) -> Path:
    """Write *content* to *path*, creating parent directories."""
    file_path = Path(path)
    await asyncio.to_thread(_write_text, file_path, content)
    return file_path


async def append_lines(path: str | Path, lines: Iterable[str]) -> Path:
    """Append *lines* to a text file, creating it when missing."""
    file_path = Path(path)
    existing = file_path.read_text(encoding="utf-8") if file_path.exists() else ""
    if existing and not existing.endswith("\n"):
        existing += "\n"
    return await write_file(file_path, existing + "\n".join(lines) + "\n")


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> Path:
    """Save data as pretty-printed JSON with a trailing newline."""
    content = json.dumps(data, indent=2, ensure_ascii=False, default=str) + "\n"
    return await write_file(path, content)


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


async def remove_tree(path: str | Path) -> None:
    """Delete a directory tree; a missing path is not an error."""
    await asyncio.to_thread(shutil.rmtree, Path(path), True)


# ---------------------------------------------------------------------------
# package.json editing
# ---------------------------------------------------------------------------


async def update_package_json(
    package_dir: str | Path,
    dependencies: dict[str, str] | None = None,
    dev_dependencies: dict[str, str] | None = None,
    scripts: dict[str, str] | None = None,
) -> Path:
    """Merge dependencies and scripts into ``<package_dir>/package.json``.

    Existing keys are kept; new ones are added and each section is re-sorted
    so repeated setup steps produce stable output.

    Raises:
        FileNotFoundError: If there is no ``package.json`` to update.
    """
    path = Path(package_dir) / "package.json"
    data = load_json(path)
    for key, extra in (
        ("dependencies", dependencies),
        ("devDependencies", dev_dependencies),
        ("scripts", scripts),
    ):
        if not extra:
            continue
        merged = {**data.get(key, {}), **extra}
        data[key] = merged if key == "scripts" else dict(sorted(merged.items()))
    return await save_json(data, path)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step_header(title: str, color: str = "bright_cyan") -> None:
    """Print a full-width rule announcing a creation stage."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message to stderr."""
    err_console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def debug_log(message: str) -> None:
    """Print a dim diagnostic line when verbose output is enabled."""
    if _verbose:
        console.print(f"[dim]{message}[/dim]")
