"""Implementation of the primary ``sandoc`` CLI command."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
import typer

from sandoc.adapters.markdown import resolve_markdown_extensions
from sandoc.core.compiler import ComponentResult, HtmlResult, compile_markdown
from sandoc.core.config import (
    AliasRule,
    CompileOptions,
    alias_entries,
    load_config,
    read_template_file,
)
from sandoc.core.diagnostics import format_event_message
from sandoc.core.exceptions import SandocError

from .._options import (
    AliasOption,
    ConfigOption,
    DebugOption,
    DisableMarkdownExtensionsOption,
    ExportOption,
    InputPathArgument,
    MarkdownExtensionsOption,
    OutputPathOption,
    TemplateOption,
    VerboseOption,
)
from ..diagnostics import CliEmitter
from ..state import CLIState, configure_logging, emit_error, emit_warning, set_cli_state


def parse_alias_option(value: str) -> AliasRule:
    """Parse a ``FIND=REPLACEMENT`` command line alias."""
    find, sep, replacement = value.partition("=")
    if not sep or not find:
        raise typer.BadParameter(
            f"Alias '{value}' must use the FIND=REPLACEMENT form.", param_hint="--alias"
        )
    return AliasRule(find=find, replacement=replacement)


def _build_options(
    input_path: Path,
    *,
    config: Path | None,
    export: str | None,
    alias: list[str] | None,
    template: Path | None,
) -> CompileOptions:
    overrides: dict[str, Any] = load_config(config) if config is not None else {}
    if export is not None:
        overrides["export_type"] = export
    if alias:
        configured = alias_entries(overrides.get("alias"))
        overrides["alias"] = [*configured, *(parse_alias_option(entry) for entry in alias)]
    if template is not None:
        overrides["template"] = read_template_file(template)
    overrides["filepath"] = str(input_path)
    return CompileOptions.coerce(overrides)


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_result(
    result: HtmlResult | ComponentResult,
    input_path: Path,
    output: Path,
) -> list[Path]:
    """Persist a compile result into ``output`` and return the written files."""
    if isinstance(result, HtmlResult):
        return [_write(output / f"{input_path.stem}.html", result.html)]

    written = [_write(output / f"{input_path.name}.js", result.entry_component)]
    for key, content in result.preview_blocks.items():
        written.append(_write(output / f"{input_path.name}.{key}", content))
    return written


def report_events(state: CLIState) -> int:
    """Warn about unreadable stylesheets and return the number of preview blocks."""
    for payload in state.consume_events("stylesheet_missing"):
        emit_warning(format_event_message("stylesheet_missing", payload) or "Missing stylesheet")
    return len(state.consume_events("preview_block"))


def compile_document(
    input_path: InputPathArgument,
    config: ConfigOption = None,
    export: ExportOption = None,
    alias: AliasOption = None,
    template: TemplateOption = None,
    markdown_extensions: MarkdownExtensionsOption = None,
    disable_markdown_extensions: DisableMarkdownExtensionsOption = None,
    output: OutputPathOption = None,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Compile a Markdown document into HTML or a San component with live previews."""
    state = set_cli_state(
        ctx=click.get_current_context(silent=True), verbosity=verbose, debug=debug
    )
    configure_logging(state)

    try:
        options = _build_options(
            input_path,
            config=config,
            export=export.value if export is not None else None,
            alias=alias,
            template=template,
        )
    except SandocError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    if options.export_type == "component" and output is None:
        emit_error("Component export writes several files; pass --output DIRECTORY.")
        raise typer.Exit(code=1)

    extensions = resolve_markdown_extensions(markdown_extensions, disable_markdown_extensions)
    source = input_path.read_text(encoding="utf-8")
    try:
        result = compile_markdown(
            source, options, emitter=CliEmitter(state=state), extensions=extensions
        )
    except SandocError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    previews = report_events(state)

    if output is None:
        if isinstance(result, HtmlResult):
            typer.echo(result.html)
        return

    written = write_result(result, input_path, output)
    for path in written:
        state.console.print(f"[green]wrote[/] {path}")
    if isinstance(result, ComponentResult):
        noun = "block" if previews == 1 else "blocks"
        state.console.print(f"{previews} preview {noun}")
