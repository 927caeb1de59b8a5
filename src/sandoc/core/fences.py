"""Parse fence info strings into structured descriptors."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import shlex
from typing import Any


_RESERVED_KEYS = ("lang", "export", "caption")


@dataclass(frozen=True, slots=True)
class FenceDescriptor:
    """Metadata extracted from the info string of a fenced code block."""

    lang: str | None = None
    export: str | None = None
    caption: str | None = None
    attributes: Mapping[str, str | bool] = field(default_factory=dict)

    def to_metadata(self) -> dict[str, Any]:
        """Return a JSON-ready mapping, omitting absent fields."""
        metadata: dict[str, Any] = {}
        for key in _RESERVED_KEYS:
            value = getattr(self, key)
            if value is not None:
                metadata[key] = value
        for key, value in self.attributes.items():
            metadata.setdefault(key, value)
        return metadata


def _tokenize(info: str) -> list[str]:
    try:
        return shlex.split(info)
    except ValueError:
        # Unbalanced quotes: keep the fence usable with a plain split.
        return info.split()


def parse_fence_info(info: str | None) -> FenceDescriptor:
    """Return the descriptor encoded in ``info``.

    The first token names the language; later tokens are ``key=value`` pairs
    (values may be quoted) or bare flags. A ``{...}`` wrapper around the whole
    info string is accepted.
    """
    text = (info or "").strip()
    if text.startswith("{") and text.endswith("}"):
        text = text[1:-1].strip()
    if not text:
        return FenceDescriptor()

    tokens = _tokenize(text)
    lang: str | None = None
    if tokens and "=" not in tokens[0]:
        lang = tokens.pop(0).lstrip(".") or None

    values: dict[str, str | bool] = {}
    for token in tokens:
        key, sep, value = token.partition("=")
        key = key.strip()
        if not key:
            continue
        values[key] = value if sep else True

    if lang is None and isinstance(values.get("lang"), str):
        lang = values["lang"]  # type: ignore[assignment]

    export = values.get("export")
    caption = values.get("caption")
    attributes = {key: value for key, value in values.items() if key not in _RESERVED_KEYS}
    return FenceDescriptor(
        lang=lang,
        export=export if isinstance(export, str) else None,
        caption=caption if isinstance(caption, str) else None,
        attributes=attributes,
    )


__all__ = ["FenceDescriptor", "parse_fence_info"]
