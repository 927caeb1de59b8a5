"""CLI-specific diagnostic emitter."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from sandoc.core.diagnostics import LoggingEmitter

from .state import CLIState, emit_error, emit_warning, get_cli_state


logger = logging.getLogger(__name__)


class CliEmitter:
    """Print warnings and errors with rich, record events for the end-of-run summary.

    Events are also logged at debug level, so ``-vv`` traces them as they happen.
    """

    def __init__(self, state: CLIState | None = None, *, debug_enabled: bool | None = None) -> None:
        self._state = state or get_cli_state()
        if debug_enabled is None:
            debug_enabled = self._state.show_tracebacks
        self.debug_enabled = bool(debug_enabled)
        self._trace = LoggingEmitter(logger_obj=logger, debug_enabled=self.debug_enabled)

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self._state.record_event(name, payload)
        self._trace.event(name, payload)


__all__ = ["CliEmitter"]
