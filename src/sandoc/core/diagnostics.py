"""Diagnostic abstractions shared across the compilation pipeline."""

from __future__ import annotations

from collections.abc import Mapping
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


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module.

    Events are informational only and are logged at debug level so that a
    plain compile stays silent unless the caller raises the verbosity.
    """

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.warning(message, exc_info=exc)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.error(message, exc_info=exc)
        else:
            self._logger.error(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message:
            self._logger.debug(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


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
        """Return the payloads recorded for ``name`` in emission order."""
        return [payload for event_name, payload in self.events if event_name == name]


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "preview_block":
        key = data.get("entry_key") or "<unknown>"
        tag = data.get("tag_name") or "<unknown>"
        sources = data.get("sources")
        suffix = f" ({sources} sources)" if sources is not None else ""
        return f"Preview block {key} registered as <{tag}>{suffix}"

    if name == "stylesheet_missing":
        filename = data.get("filename") or "<unknown>"
        resolved = data.get("path")
        location = f" at {resolved}" if resolved else ""
        return f"Stylesheet '{filename}' could not be read{location}; using empty content"

    return None


__all__ = [
    "DiagnosticEmitter",
    "LoggingEmitter",
    "NullEmitter",
    "RecordingEmitter",
    "format_event_message",
]
