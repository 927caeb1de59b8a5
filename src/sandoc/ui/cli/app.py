"""Typer application wiring for the sandoc CLI."""

from __future__ import annotations

import typer

from sandoc.ui.cli.commands.compile import compile_document

from .state import debug_enabled, emit_error, get_cli_state


app = typer.Typer(
    help="Compile Markdown documents into HTML or San components with live previews.",
    context_settings={"help_option_names": ["--help", "-h"]},
)


app.command()(compile_document)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - last-resort reporting
        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
