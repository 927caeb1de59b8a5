"""Per-invocation CLI state: verbosity, consoles, logging and recorded events."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
import logging
import sys
from typing import TYPE_CHECKING, Any

import click

from sandoc.core.exceptions import exception_hint, exception_messages


if TYPE_CHECKING:
    from rich.console import Console

__all__ = [
    "CLIState",
    "configure_logging",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "render_message",
    "set_cli_state",
]

PACKAGE_LOGGER = "sandoc"


@dataclass(slots=True)
class CLIState:
    """State shared by the command and the diagnostic emitter of one CLI run."""

    verbosity: int = 0
    show_tracebacks: bool = False
    events: defaultdict[str, list[dict[str, Any]]] = field(
        default_factory=lambda: defaultdict(list), init=False
    )
    _console: Console | None = field(default=None, init=False, repr=False)
    _err_console: Console | None = field(default=None, init=False, repr=False)

    @property
    def log_level(self) -> int:
        """Logging level matching the number of ``-v`` flags."""
        if self.verbosity >= 2:
            return logging.DEBUG
        if self.verbosity == 1:
            return logging.INFO
        return logging.WARNING

    @property
    def console(self) -> Console:
        from rich.console import Console

        # Rebuilt whenever the stream is swapped, e.g. by the click test runner.
        if self._console is None or self._console.file is not sys.stdout:
            self._console = Console(file=sys.stdout)
        return self._console

    @property
    def err_console(self) -> Console:
        from rich.console import Console

        if self._err_console is None or self._err_console.file is not sys.stderr:
            self._err_console = Console(file=sys.stderr, highlight=False)
        return self._err_console

    def record_event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events[name].append(dict(payload))

    def consume_events(self, name: str) -> list[dict[str, Any]]:
        """Return the payloads recorded under ``name`` and forget them."""
        return self.events.pop(name, [])


_STATE_VAR: ContextVar[CLIState | None] = ContextVar("sandoc_cli_state", default=None)


def get_cli_state(ctx: click.Context | None = None) -> CLIState:
    """Return the state bound to ``ctx`` or the active click context, creating it if needed."""
    if ctx is None:
        ctx = click.get_current_context(silent=True)

    if ctx is not None:
        state = ctx.find_object(CLIState)
        if state is None:
            state = CLIState()
            ctx.obj = state
    else:
        state = _STATE_VAR.get() or CLIState()

    _STATE_VAR.set(state)
    return state


def set_cli_state(
    *,
    ctx: click.Context | None = None,
    verbosity: int | None = None,
    debug: bool | None = None,
) -> CLIState:
    """Update the current state from command line flags and return it."""
    state = get_cli_state(ctx)
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug
    return state


def configure_logging(state: CLIState) -> logging.Logger:
    """Send ``sandoc`` log records to stderr at the level implied by ``state``."""
    from rich.logging import RichHandler

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)

    handler = RichHandler(
        console=state.err_console,
        show_path=False,
        rich_tracebacks=state.show_tracebacks,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(state.log_level)
    return package_logger


def render_message(
    level: str,
    message: str,
    *,
    exception: BaseException | None = None,
) -> None:
    """Print a warning or error to stderr, adding the exception chain when available."""
    from rich.text import Text

    state = get_cli_state()
    style = "red" if level == "error" else "yellow"
    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))

    details: list[str] = []
    if exception is not None:
        hint = exception_hint(exception)
        if hint and hint not in message:
            details.append(hint)
        if state.verbosity >= 1:
            details.append(f"type: {type(exception).__name__}")
        if state.verbosity >= 2:
            causes = exception_messages(exception)[1:]
            if causes:
                details.append("caused by:")
                details.extend(f"  {cause}" for cause in causes)

    if details:
        text.append("\n" + "\n".join(details), style=style)
    state.err_console.print(text)


def emit_warning(message: str, *, exception: BaseException | None = None) -> None:
    render_message("warning", message, exception=exception)


def emit_error(message: str, *, exception: BaseException | None = None) -> None:
    render_message("error", message, exception=exception)


def debug_enabled() -> bool:
    """Return whether full tracebacks were requested for the current run."""
    state = _STATE_VAR.get()
    return bool(state and state.show_tracebacks)
