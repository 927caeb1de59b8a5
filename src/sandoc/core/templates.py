"""Preview entry templates and ``<%= field =%>`` placeholder substitution."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
import re
from typing import Any

from .diagnostics import DiagnosticEmitter
from .exceptions import TemplateError


_PLACEHOLDER_RE = re.compile(r"<%=\s*([A-Za-z_][A-Za-z0-9_]*)\s*=%>")

DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "theme" / "default.template"


@dataclass(frozen=True, slots=True)
class LiteralTemplate:
    """Template provided as literal text."""

    text: str

    def resolve(self, data: Mapping[str, Any]) -> str:
        del data
        return self.text


@dataclass(frozen=True, slots=True)
class GeneratorTemplate:
    """Template produced on demand from the template data record."""

    factory: Callable[[Mapping[str, Any]], str]

    def resolve(self, data: Mapping[str, Any]) -> str:
        text = self.factory(data)
        if not isinstance(text, str):
            raise TemplateError(
                f"Template generator returned {type(text).__name__}; expected template text."
            )
        return text


Template = LiteralTemplate | GeneratorTemplate


def _load_default_template() -> LiteralTemplate:
    try:
        return LiteralTemplate(DEFAULT_TEMPLATE_PATH.read_text(encoding="utf-8"))
    except OSError as exc:  # pragma: no cover - packaging issue
        raise TemplateError(
            f"Built-in preview template is missing: {DEFAULT_TEMPLATE_PATH}"
        ) from exc


DEFAULT_TEMPLATE: LiteralTemplate = _load_default_template()


def coerce_template(value: Template | str | Callable[..., str] | None) -> Template:
    """Return a tagged template from literal text, a callable, or ``None``."""
    if value is None:
        return DEFAULT_TEMPLATE
    if isinstance(value, LiteralTemplate | GeneratorTemplate):
        return value
    if isinstance(value, str):
        return LiteralTemplate(value)
    if callable(value):
        return GeneratorTemplate(value)
    raise TemplateError(
        f"Unsupported template value of type {type(value).__name__}; "
        "expected template text or a callable."
    )


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def render_template(
    template: Template,
    data: Mapping[str, Any],
    *,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Resolve ``template`` and replace every ``<%= field =%>`` placeholder from ``data``."""
    text = template.resolve(data)

    def _replacement(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in data:
            if emitter:
                emitter.warning(f"Unknown template placeholder '{name}'; leaving it as-is.")
            return match.group(0)
        return _stringify(data[name])

    return _PLACEHOLDER_RE.sub(_replacement, text)


__all__ = [
    "DEFAULT_TEMPLATE",
    "DEFAULT_TEMPLATE_PATH",
    "GeneratorTemplate",
    "LiteralTemplate",
    "Template",
    "coerce_template",
    "render_template",
]
