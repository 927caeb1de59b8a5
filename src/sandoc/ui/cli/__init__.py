"""Public CLI exports for sandoc."""

from __future__ import annotations

from sandoc.adapters.markdown import DEFAULT_MARKDOWN_EXTENSIONS

from .app import app, main
from .commands import compile_document
from .state import debug_enabled, emit_error, emit_warning, get_cli_state


__all__ = [
    "DEFAULT_MARKDOWN_EXTENSIONS",
    "app",
    "compile_document",
    "debug_enabled",
    "emit_error",
    "emit_warning",
    "get_cli_state",
    "main",
]
