"""CLI command implementations exposed via `sandoc.ui.cli`."""

from __future__ import annotations

from .compile import compile_document


__all__ = ["compile_document"]
