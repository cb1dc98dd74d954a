from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

import click

from proxy_printer.progress import ProgressEvent, Stage, format_progress


@dataclass
class ProgressPrinter:
    """Console observer for a ProgressReporter.

    On a terminal the bar of the running stage is redrawn in place and a
    stage ends with a newline at 100%. Elsewhere only finished stages are
    printed. Error events always get their own line, red on a terminal.
    """

    stream: TextIO = field(default_factory=lambda: sys.stdout)
    enabled: bool | None = None
    keep_history: bool = False
    history: list[str] = field(default_factory=list, init=False)
    _open_stage: Stage | None = field(default=None, init=False)
    _width: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.enabled is None:
            isatty = getattr(self.stream, "isatty", None)
            self.enabled = bool(isatty and isatty())

    def __call__(self, event: ProgressEvent) -> None:
        label = format_progress(event)
        if event.is_error:
            self.error(label)
        elif event.percent is not None:
            self.update(label, stage=event.stage, final=event.percent >= 100)

    def update(self, label: str, *, stage: Stage | None = None, final: bool = False) -> None:
        if self.keep_history:
            self.history.append(label)

        if not self.enabled:
            if final:
                self._write(label, newline=True)
            return

        if self._open_stage is not None and stage is not self._open_stage:
            self._end_line()
        self._write("\r" + label.ljust(self._width))
        self._width = len(label)
        self._open_stage = stage
        if final:
            self._end_line()

    def error(self, label: str) -> None:
        if self.keep_history:
            self.history.append(label)
        self._end_line()
        self._write(click.style(label, fg="red") if self.enabled else label, newline=True)

    def _end_line(self) -> None:
        if self._width:
            self._write("", newline=True)
        self._width = 0
        self._open_stage = None

    def _write(self, text: str, *, newline: bool = False) -> None:
        click.echo(text, file=self.stream, nl=newline, color=self.enabled)


def resolve_output_path(path_value: str | Path | None) -> Path | None:
    if path_value is None:
        return None
    return Path(path_value).expanduser().resolve()


def write_json_summary(payload: Any, out_path: str | Path) -> Path:
    """Write the run summary as indented JSON, creating parent folders."""
    resolved = resolve_output_path(out_path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    resolved.write_text(
        json.dumps(payload, indent=2, ensure_ascii=False, default=str) + "\n",
        encoding="utf-8",
    )
    return resolved


def exit_with_message(message: str, *, code: int = 0) -> None:
    """Print ``message`` (to stderr and red when ``code`` is non-zero) and exit."""
    if code:
        click.secho(message, fg="red", err=True)
    else:
        click.echo(message)
    raise SystemExit(code)
