"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
RENDERING_PANEL = "Rendering"
OUTPUT_PANEL = "Output"
DIAGNOSTICS_PANEL = "Diagnostics"


class ExportChoice(str, Enum):
    """Output flavours accepted on the command line."""

    html = "html"
    component = "component"


InputPathArgument = Annotated[
    Path,
    typer.Argument(
        metavar="INPUT",
        help="Markdown (.md) document to compile.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="YAML file providing export_type, alias and template defaults.",
        exists=True,
        dir_okay=False,
        readable=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

ExportOption = Annotated[
    ExportChoice | None,
    typer.Option(
        "--export",
        "-e",
        help="Emit static HTML or a San component module with preview artifacts.",
        case_sensitive=False,
        rich_help_panel=RENDERING_PANEL,
    ),
]

AliasOption = Annotated[
    list[str] | None,
    typer.Option(
        "--alias",
        "-a",
        metavar="FIND=REPLACEMENT",
        help="Rewrite stylesheet import paths; repeat to chain several rules in order.",
        rich_help_panel=RENDERING_PANEL,
    ),
]

TemplateOption = Annotated[
    Path | None,
    typer.Option(
        "--template",
        "-t",
        help="Preview entry template file using <%= field =%> placeholders.",
        exists=True,
        dir_okay=False,
        readable=True,
        rich_help_panel=RENDERING_PANEL,
    ),
]

MarkdownExtensionsOption = Annotated[
    list[str] | None,
    typer.Option(
        "--markdown-extensions",
        "-x",
        help="Additional Markdown extensions to enable (comma or space separated).",
        rich_help_panel=RENDERING_PANEL,
    ),
]

DisableMarkdownExtensionsOption = Annotated[
    list[str] | None,
    typer.Option(
        "--disable-markdown-extensions",
        "-d",
        help="Markdown extensions to disable (comma or space separated).",
        rich_help_panel=RENDERING_PANEL,
    ),
]

OutputPathOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Directory receiving the generated files. HTML goes to stdout when omitted.",
        file_okay=False,
        dir_okay=True,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
