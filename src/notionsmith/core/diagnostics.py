"""Diagnostic abstractions shared across the rendering and fetching pipeline."""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any, Protocol, runtime_checkable


logger = logging.getLogger(__name__)


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class RecordingEmitter:
    """Emitter that keeps every diagnostic in memory for later inspection."""

    def __init__(self, *, debug_enabled: bool = False) -> None:
        self.debug_enabled = debug_enabled
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))

    def events_named(self, name: str) -> list[dict[str, Any]]:
        """Return the payloads recorded for a given event name."""
        return [payload for event, payload in self.events if event == name]


class LoggingEmitter:
    """Emitter writing to a :mod:`logging` logger.

    Events with a known summary are logged at INFO, other events at DEBUG.
    ``exc_info`` is only attached when ``debug_enabled`` is set, so tracebacks
    stay out of regular logs.
    """

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def _log(self, level: int, message: str, exc: BaseException | None) -> None:
        exc_info = exc if exc is not None and self.debug_enabled else None
        self._logger.log(level, message, exc_info=exc_info)

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self._log(logging.WARNING, message, exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self._log(logging.ERROR, message, exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message is None:
            self._logger.debug("diagnostic event %s: %s", name, dict(payload))
        else:
            self._logger.info(message)


def _unsupported_block(data: Mapping[str, Any]) -> str:
    suffix = f" ({data['id']})" if data.get("id") else ""
    return f"Skipping unsupported block type '{data.get('type') or '<unknown>'}'{suffix}"


def _unresolved_mention(data: Mapping[str, Any]) -> str:
    return f"Unresolved page mention: {data.get('page_id') or '<unknown>'}"


def _block_fetch(data: Mapping[str, Any]) -> str:
    count = data.get("children")
    details = f" ({count} children)" if count is not None else ""
    return f"Fetched: {data.get('id') or '<unknown>'}{details}"


def _entry_rendered(data: Mapping[str, Any]) -> str:
    return f"Rendered entry '{data.get('slug') or '<unknown>'}'"


_EVENT_FORMATTERS: dict[str, Callable[[Mapping[str, Any]], str]] = {
    "unsupported_block": _unsupported_block,
    "unresolved_mention": _unresolved_mention,
    "block_fetch": _block_fetch,
    "entry_rendered": _entry_rendered,
}


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a one-line summary for known events, ``None`` for the others."""
    formatter = _EVENT_FORMATTERS.get(name)
    return formatter(payload) if formatter is not None else None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "RecordingEmitter",
    "format_event_message",
]
