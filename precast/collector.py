"""Collects soft failures from setup steps for a summary at the end of a run."""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from precast.utils import err_console

Kind = Literal["error", "warning"]


class CollectedError(BaseModel):
    """One recorded failure, keyed by the step that produced it."""

    task: str
    error: str
    kind: Kind = "error"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def _describe(error: object) -> str:
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return str(error)


class ErrorCollector:
    """Explicit, per-run error collector passed to the orchestrator.

    Args:
        debug: Echo every entry to stderr as it is recorded and append it to
            *log_path*.
        log_path: Append-only log file used in debug mode.
    """

    def __init__(self, debug: bool = False, log_path: Path | None = None) -> None:
        self.debug = debug
        self.log_path = log_path
        self._entries: list[CollectedError] = []

    def add_error(self, task: str, error: object, kind: Kind = "error") -> None:
        entry = CollectedError(task=task, error=_describe(error), kind=kind)
        self._entries.append(entry)
        if self.debug:
            self._echo(entry, error)

    def add_warning(self, task: str, warning: object) -> None:
        self.add_error(task, warning, kind="warning")

    @property
    def errors(self) -> list[CollectedError]:
        return list(self._entries)

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._entries if e.kind == "error")

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._entries if e.kind == "warning")

    def clear(self) -> None:
        self._entries.clear()

    # ------------------------------------------------------------------

    def _echo(self, entry: CollectedError, error: object) -> None:
        if isinstance(error, BaseException):
            details = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        else:
            details = entry.error
        stamp = entry.timestamp.isoformat()
        err_console.print(f"[dim][{entry.kind.upper()} COLLECTED - {stamp}] {entry.task}:[/dim]")
        err_console.print(details.rstrip(), markup=False, highlight=False)

        if self.log_path is None:
            return
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with self.log_path.open("a", encoding="utf-8") as handle:
                handle.write(f"[{stamp}] TASK: {entry.task}\nERROR: {details.rstrip()}\n{'=' * 80}\n")
        except OSError as exc:
            err_console.print(f"[yellow]Could not write debug log {self.log_path}: {exc}[/yellow]")
