"""Primary public API for sandoc."""

from __future__ import annotations

from sandoc.core.compiler import (
    CompileResult,
    ComponentResult,
    HtmlResult,
    PreviewBlockRenderer,
    compile_markdown,
)
from sandoc.core.config import AliasRule, CompileOptions, load_config
from sandoc.core.exceptions import (
    ConfigurationError,
    MarkdownConversionError,
    SandocError,
    TemplateError,
)
from sandoc.core.fences import FenceDescriptor, parse_fence_info
from sandoc.core.templates import GeneratorTemplate, LiteralTemplate
from sandoc.version import get_version


compile = compile_markdown  # noqa: A001

__version__ = get_version()

__all__ = [
    "AliasRule",
    "CompileOptions",
    "CompileResult",
    "ComponentResult",
    "ConfigurationError",
    "FenceDescriptor",
    "GeneratorTemplate",
    "HtmlResult",
    "LiteralTemplate",
    "MarkdownConversionError",
    "PreviewBlockRenderer",
    "SandocError",
    "TemplateError",
    "__version__",
    "compile",
    "compile_markdown",
    "load_config",
    "parse_fence_info",
]
