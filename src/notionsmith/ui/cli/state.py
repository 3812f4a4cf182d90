"""Per-invocation CLI state: verbosity, consoles and collected diagnostics."""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
import sys
from typing import Any

import click
from rich.console import Console
from rich.text import Text
import typer

from notionsmith.core.exceptions import exception_messages


__all__ = [
    "CLIState",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "render_message",
    "set_cli_state",
]

_LEVEL_STYLES = {"warning": "yellow", "error": "red"}


@dataclass(slots=True)
class CLIState:
    """Diagnostics settings and counters for one command invocation."""

    verbosity: int = 0
    show_tracebacks: bool = False
    events: dict[str, list[dict[str, Any]]] = field(default_factory=dict, init=False)
    emitted: Counter[str] = field(default_factory=Counter, init=False)
    _console: Console | None = field(default=None, init=False, repr=False)
    _err_console: Console | None = field(default=None, init=False, repr=False)

    @property
    def console(self) -> Console:
        """Console bound to the current ``sys.stdout``."""
        if self._console is None or self._console.file is not sys.stdout:
            self._console = Console(file=sys.stdout)
        return self._console

    @property
    def err_console(self) -> Console:
        """Console bound to the current ``sys.stderr``."""
        if self._err_console is None or self._err_console.file is not sys.stderr:
            self._err_console = Console(file=sys.stderr, highlight=False)
        return self._err_console

    def record_event(self, name: str, payload: Mapping[str, Any] | None = None) -> None:
        self.events.setdefault(name, []).append(dict(payload or {}))

    def consume_events(self, name: str) -> list[dict[str, Any]]:
        """Return and forget the payloads recorded under ``name``."""
        return self.events.pop(name, [])

    def summary(self) -> str | None:
        """Describe how many warnings and errors were printed, if any."""
        parts = [
            f"{count} {level}{'s' if count > 1 else ''}"
            for level in ("error", "warning")
            if (count := self.emitted[level])
        ]
        return ", ".join(parts) or None


_STATE_VAR: ContextVar[CLIState | None] = ContextVar("notionsmith_cli_state", default=None)


def get_cli_state(
    ctx: typer.Context | click.Context | None = None,
    *,
    create: bool = True,
) -> CLIState:
    """Return the state attached to the click context chain.

    Outside a click context the last state seen by this thread of execution
    is reused, or a new one is created when ``create`` is set.
    """
    ctx = ctx or click.get_current_context(silent=True)
    if ctx is not None:
        state = ctx.find_object(CLIState)
        if state is None and create:
            state = ctx.ensure_object(CLIState)
        if state is not None:
            _STATE_VAR.set(state)
            return state

    state = _STATE_VAR.get()
    if state is None:
        if not create:
            raise RuntimeError("CLI state is not initialised for this context.")
        state = CLIState()
        _STATE_VAR.set(state)
    return state


def set_cli_state(
    *,
    ctx: typer.Context | click.Context | None = None,
    verbosity: int | None = None,
    debug: bool | None = None,
) -> CLIState:
    """Apply command-line diagnostics flags to the current state."""
    state = get_cli_state(ctx)
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug
    return state


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
    state: CLIState | None = None,
) -> None:
    """Print a diagnostic to stderr.

    Info messages only appear with ``-v``. Warnings and errors always print;
    ``-v`` adds the exception type and message, ``-vv`` the cause chain.
    """
    state = state or get_cli_state()

    if level == "info":
        if state.verbosity >= 1:
            state.err_console.log(message)
        return

    state.emitted[level] += 1
    style = _LEVEL_STYLES.get(level, "red")
    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))

    if exception is not None and state.verbosity >= 1:
        details = [f"type: {type(exception).__name__}"]
        messages = exception_messages(exception)
        if messages and messages[0] not in message:
            details.insert(0, messages[0])
        if state.verbosity >= 2 and len(messages) > 1:
            details.append("caused by:")
            details.extend(f"  {entry}" for entry in messages[1:])
        text.append("\n" + "\n".join(details), style=style)

    state.err_console.print(text)


def emit_warning(
    message: str, *, exception: BaseException | None = None, state: CLIState | None = None
) -> None:
    render_message("warning", message, exception=exception, state=state)


def emit_error(
    message: str, *, exception: BaseException | None = None, state: CLIState | None = None
) -> None:
    render_message("error", message, exception=exception, state=state)


def debug_enabled() -> bool:
    """Return whether full tracebacks were requested."""
    try:
        return get_cli_state(create=False).show_tracebacks
    except RuntimeError:
        return False
