"""Compile Markdown documents into HTML or San component modules."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import json
import logging
from typing import Any

from sandoc.adapters.markdown import render_markdown

from .config import CompileOptions
from .diagnostics import DiagnosticEmitter
from .fences import FenceDescriptor, parse_fence_info
from .identifiers import derive_identity
from .session import CompileSession, ComponentRegistration
from .stylesheets import collect_sources
from .templates import render_template


logger = logging.getLogger(__name__)

PREVIEW_LANG = "san"
PREVIEW_EXPORT = "preview"


@dataclass(slots=True)
class HtmlResult:
    """Result of an ``html`` export."""

    html: str


@dataclass(slots=True)
class ComponentResult:
    """Result of a ``component`` export."""

    entry_component: str
    preview_blocks: dict[str, str] = field(default_factory=dict)


CompileResult = HtmlResult | ComponentResult


def escape_code(code: str) -> str:
    """Escape ``<`` and backticks so code can sit inside HTML and template literals."""
    return code.replace("<", "&lt;").replace("`", "&#96;")


def _json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))


class PreviewBlockRenderer:
    """Code block hook turning ``san export=preview`` fences into preview artifacts."""

    def __init__(self, session: CompileSession) -> None:
        self.session = session

    def is_preview(self, descriptor: FenceDescriptor) -> bool:
        return (
            self.session.exports_component
            and descriptor.lang == PREVIEW_LANG
            and descriptor.export == PREVIEW_EXPORT
        )

    def __call__(self, code: str, info: str) -> str:
        escaped = escape_code(code)
        descriptor = parse_fence_info(info)
        if not self.is_preview(descriptor):
            return self.render_plain(escaped)
        return self.render_preview(code, escaped, descriptor)

    # Plain blocks are always highlighted as San, whatever their fence language.
    @staticmethod
    def render_plain(escaped: str) -> str:
        return f'<pre><code class="language-{PREVIEW_LANG}">{escaped}</code></pre>'

    def render_preview(self, code: str, escaped: str, descriptor: FenceDescriptor) -> str:
        session = self.session
        sources = collect_sources(
            escaped, session.filepath, session.alias, emitter=session.emitter
        )
        identity = derive_identity(session.counter, code, session.filepath)
        data = {
            "id": identity.id,
            "code": escaped,
            "filepath": session.filepath,
            "componentRequest": identity.component_request,
            "caption": descriptor.caption,
            "sourceList": _json([source.to_dict() for source in sources]),
            "metadata": _json(descriptor.to_metadata()),
        }
        entry_text = render_template(session.template, data, emitter=session.emitter)
        session.register(identity, entry_text, code)
        session.emitter.event(
            "preview_block",
            {
                "entry_key": identity.entry_key,
                "tag_name": identity.tag_name,
                "sources": len(sources),
            },
        )
        session.advance()
        return f"<{identity.tag_name}></{identity.tag_name}>"


def _template_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def build_entry_component(html: str, registrations: Sequence[ComponentRegistration]) -> str:
    """Return the San module wrapping ``html`` and registering every preview entry."""
    lines = ["import {Component} from 'san';"]
    lines.extend(f"{registration.import_statement};" for registration in registrations)
    lines.append("export default class ComponentDoc extends Component {")
    lines.append(
        f'    static template = `<section class="markdown">{_template_literal(html)}</section>`;'
    )
    lines.append("    static components = {")
    if registrations:
        entries = ",\n        ".join(registration.usage_entry for registration in registrations)
        lines.append(f"        {entries}")
    lines.append("    };")
    lines.append("};")
    return "\n".join(lines) + "\n"


def compile_markdown(
    raw: str,
    options: CompileOptions | Mapping[str, Any] | None = None,
    *,
    emitter: DiagnosticEmitter | None = None,
    extensions: Sequence[str] | None = None,
    **overrides: Any,
) -> CompileResult:
    """Compile ``raw`` Markdown into HTML or a San component module.

    Options may be given as :class:`CompileOptions`, a mapping, or keyword
    overrides; ``filepath`` is mandatory and validated before parsing starts.
    Every call owns its session, so concurrent compiles do not interfere.
    """
    resolved = CompileOptions.coerce(options, **overrides)
    session = CompileSession.from_options(resolved, emitter=emitter)
    logger.debug("Compiling %s (export=%s)", session.filepath, session.export_type)

    html = render_markdown(raw, PreviewBlockRenderer(session), extensions=extensions)
    if not session.exports_component:
        return HtmlResult(html=html)

    logger.info(
        "Compiled %s with %d preview block(s)", session.filepath, len(session.registrations)
    )

    return ComponentResult(
        entry_component=build_entry_component(html, session.registrations),
        preview_blocks=dict(session.preview_blocks),
    )


__all__ = [
    "PREVIEW_EXPORT",
    "PREVIEW_LANG",
    "CompileResult",
    "ComponentResult",
    "HtmlResult",
    "PreviewBlockRenderer",
    "build_entry_component",
    "compile_markdown",
    "escape_code",
]
