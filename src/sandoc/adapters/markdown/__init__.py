"""Markdown conversion utilities with a pluggable fenced code block renderer."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import re
from typing import Any, Protocol

from markdown import Markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
from markdown.util import ETX, STX
from pymdownx._bypassnorm import EOT, SOH

from sandoc.core.exceptions import MarkdownConversionError, SandocError


__all__ = [
    "DEFAULT_MARKDOWN_EXTENSIONS",
    "CodeBlockExtension",
    "CodeBlockRenderer",
    "MarkdownConversionError",
    "deduplicate_markdown_extensions",
    "normalize_markdown_extensions",
    "render_markdown",
    "resolve_markdown_extensions",
]


DEFAULT_MARKDOWN_EXTENSIONS = [
    "abbr",
    "attr_list",
    "def_list",
    "footnotes",
    "md_in_html",
    "tables",
    "pymdownx.betterem",
    "pymdownx.caret",
    "pymdownx.mark",
    "pymdownx.tilde",
    "pymdownx.tasklist",
]

# Extensions that consume fences themselves and would bypass the renderer hook.
CONFLICTING_MARKDOWN_EXTENSIONS = frozenset(
    {
        "fenced_code",
        "markdown.extensions.fenced_code",
        "extra",
        "markdown.extensions.extra",
        "pymdownx.superfences",
    }
)


class CodeBlockRenderer(Protocol):
    """Callable turning a fenced block into HTML."""

    def __call__(self, code: str, info: str) -> str: ...


_CUSTOM_TAG_RE = re.compile(r"^<([a-z][a-z0-9]*-[a-z0-9-]*)[\s/>]")
_QUOTE_MARKER_RE = re.compile(r" {0,3}>[ ]?")
_LIST_ITEM_RE = re.compile(r"^ {0,3}(?:[*+-]|\d+\.)[ \t]+\S")
_FENCE_OPEN_RE = re.compile(r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_FENCE_CLOSE_RE = re.compile(r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})[ \t]*$")


class _CodeBlockPreprocessor(Preprocessor):
    """Hand every fenced code block to the configured renderer.

    Runs ahead of whitespace normalisation so the renderer sees the block
    exactly as written, tabs included. Fences nested in blockquotes or list
    items are recognised; the stashed output keeps the container prefix so
    it lands back inside the same container.
    """

    def __init__(self, md: Markdown, renderer: CodeBlockRenderer) -> None:
        super().__init__(md)
        self.renderer = renderer
        self.tab_length = md.tab_length

    def run(self, lines: list[str]) -> list[str]:
        result: list[str] = []
        index = 0
        depth = 0
        in_list = False
        after_blank = True

        while index < len(lines):
            prefix, quote_depth, rest = self._split_quote(lines[index].rstrip("\r"))
            if quote_depth != depth:
                depth = quote_depth
                in_list = False
            opening = self._match_opening(rest, in_list)
            if opening is None:
                in_list, after_blank = self._track_list(rest, in_list, after_blank)
                result.append(lines[index])
                index += 1
                continue

            indent_text = opening.group("indent")
            indent = self._columns(indent_text)
            nested = indent > 3
            body, index = self._collect(lines, index + 1, opening.group("fence"), depth, indent)

            html = self.renderer("\n".join(body), opening.group("info").strip())
            self._register_custom_tag(html)
            placeholder = self._bypass_normalization(self.md.htmlStash.store(html))
            blank = prefix.rstrip()
            lead = prefix + (indent_text if nested else "")
            result.extend([blank, lead + placeholder, blank])
            after_blank = True

        return result

    def _match_opening(self, text: str, in_list: bool) -> re.Match[str] | None:
        opening = _FENCE_OPEN_RE.match(text)
        if opening is None:
            return None
        if opening.group("fence")[0] == "`" and "`" in opening.group("info"):
            return None
        # Deeper indentation is an indented code block unless it continues a list item.
        if self._columns(opening.group("indent")) > 3 and not in_list:
            return None
        return opening

    def _collect(
        self, lines: list[str], start: int, fence: str, depth: int, indent: int
    ) -> tuple[list[str], int]:
        body: list[str] = []
        index = start
        closed = False

        while index < len(lines):
            line = lines[index].rstrip("\r")
            if depth:
                _, line_depth, line = self._split_quote(line, limit=depth)
                if line_depth < depth:
                    break
            closing = _FENCE_CLOSE_RE.match(line)
            if (
                closing is not None
                and closing.group("fence")[0] == fence[0]
                and len(closing.group("fence")) >= len(fence)
                and self._columns(closing.group("indent")) < indent + 4
            ):
                closed = True
                index += 1
                break
            if indent > 3 and line.strip() and self._leading_columns(line) < indent:
                break
            body.append(self._dedent(line, indent))
            index += 1

        # Unterminated fences run to the end of their container.
        while not closed and body and not body[-1].strip():
            body.pop()
        return body, index

    @staticmethod
    def _split_quote(line: str, limit: int | None = None) -> tuple[str, int, str]:
        position = 0
        depth = 0
        while limit is None or depth < limit:
            marker = _QUOTE_MARKER_RE.match(line, position)
            if marker is None:
                break
            position = marker.end()
            depth += 1
        return line[:position], depth, line[position:]

    @staticmethod
    def _track_list(text: str, in_list: bool, after_blank: bool) -> tuple[bool, bool]:
        if not text.strip():
            return in_list, True
        if _LIST_ITEM_RE.match(text):
            return True, False
        if after_blank and not text[0].isspace():
            return False, False
        return in_list, False

    def _columns(self, whitespace: str) -> int:
        width = 0
        for char in whitespace:
            width += self.tab_length - width % self.tab_length if char == "\t" else 1
        return width

    def _leading_columns(self, line: str) -> int:
        return self._columns(line[: len(line) - len(line.lstrip(" \t"))])

    def _dedent(self, line: str, indent: int) -> str:
        width = 0
        position = 0
        while position < len(line) and line[position] in " \t":
            step = self.tab_length - width % self.tab_length if line[position] == "\t" else 1
            if width + step > indent:
                break
            width += step
            position += 1
        return line[position:]

    @staticmethod
    def _bypass_normalization(placeholder: str) -> str:
        return placeholder.replace(STX, SOH).replace(ETX, EOT)

    def _register_custom_tag(self, html: str) -> None:
        match = _CUSTOM_TAG_RE.match(html)
        if match is None:
            return
        tag = match.group(1)
        elements = self.md.block_level_elements
        if tag in elements:
            return
        adder = getattr(elements, "add", None) or elements.append
        adder(tag)


class CodeBlockExtension(Extension):
    """Register the fenced code block renderer hook."""

    def __init__(self, renderer: CodeBlockRenderer, **kwargs: Any) -> None:
        self.renderer = renderer
        super().__init__(**kwargs)

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        renderer = self.renderer
        if not callable(renderer):
            raise MarkdownConversionError("CodeBlockExtension requires a callable renderer.")
        # Stashed placeholders use SOH/EOT until whitespace normalisation has run.
        md.registerExtensions(["pymdownx._bypassnorm"], {})
        md.preprocessors.register(
            _CodeBlockPreprocessor(md, renderer), "sandoc_code_blocks", priority=31
        )


def resolve_markdown_extensions(
    requested: Iterable[str] | None,
    disabled: Iterable[str] | None,
) -> list[str]:
    """Return the active Markdown extension list after applying overrides."""
    enabled = normalize_markdown_extensions(requested)
    disabled_normalized = {
        extension.lower() for extension in normalize_markdown_extensions(disabled)
    }
    disabled_normalized.update(CONFLICTING_MARKDOWN_EXTENSIONS)

    combined = deduplicate_markdown_extensions(list(DEFAULT_MARKDOWN_EXTENSIONS) + enabled)
    return [extension for extension in combined if extension.lower() not in disabled_normalized]


def deduplicate_markdown_extensions(values: Iterable[str]) -> list[str]:
    """Remove duplicate extensions while preserving order and case."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        key = value.lower()
        if key in seen:
            continue
        seen.add(key)
        result.append(value)
    return result


def normalize_markdown_extensions(
    values: Iterable[str] | str | None,
) -> list[str]:
    """Normalise extension names from CLI-friendly strings into a flat list."""
    if values is None:
        return []

    if isinstance(values, str):
        candidates: Iterable[str] = [values]
    else:
        candidates = values

    normalized: list[str] = []
    for value in candidates:
        if not isinstance(value, str):
            continue
        chunks = re.split(r"[,\s\x00]+", value)
        normalized.extend(chunk for chunk in chunks if chunk)
    return normalized


def render_markdown(
    source: str,
    renderer: CodeBlockRenderer,
    extensions: Sequence[str] | None = None,
) -> str:
    """Convert Markdown source into HTML, routing fenced blocks through ``renderer``.

    A new ``Markdown`` instance is built for every call so that concurrent
    conversions never share parser state.
    """
    if extensions is None:
        active_extensions = list(DEFAULT_MARKDOWN_EXTENSIONS)
    else:
        active_extensions = [
            extension
            for extension in extensions
            if extension.lower() not in CONFLICTING_MARKDOWN_EXTENSIONS
        ]

    try:
        processor = Markdown(
            extensions=[*active_extensions, CodeBlockExtension(renderer=renderer)]
        )
        return processor.convert(source)
    except SandocError:
        raise
    except Exception as exc:  # pragma: no cover - library-controlled
        raise MarkdownConversionError(f"Failed to convert Markdown source: {exc}") from exc
