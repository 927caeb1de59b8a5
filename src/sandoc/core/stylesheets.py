"""Discover stylesheet imports in preview blocks and inline their sources.

The scan is lexical: any quoted literal ending in ``.css``, ``.less`` or
``.scss`` is treated as an import, whether or not it sits in an ``import``
statement.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from pathlib import Path
import re
from typing import Any

from .config import AliasRule
from .diagnostics import DiagnosticEmitter


PRIMARY_FILENAME = "index.ts"
PRIMARY_TYPE = "ts"
STYLESHEET_TYPE = "css"

_STYLESHEET_RE = re.compile(r"""['"][^'"]+\.(?:css|less|scss)['"]""")


@dataclass(frozen=True, slots=True)
class SourceEntry:
    """One file shown in the source tabs of a preview block."""

    filename: str
    type: str
    code: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def find_stylesheet_imports(code: str) -> list[str]:
    """Return the quoted stylesheet paths in ``code``, quotes stripped, in order."""
    return [match.group(0)[1:-1] for match in _STYLESHEET_RE.finditer(code)]


def apply_alias(path: str, rules: Iterable[AliasRule]) -> str:
    """Apply ``rules`` to ``path`` in order, each seeing the previous result."""
    resolved = path
    for rule in rules:
        resolved = rule.apply(resolved)
    return resolved


def document_directory(filepath: str) -> Path:
    """Return the directory that relative imports of ``filepath`` resolve against."""
    return Path(filepath).parent


def read_stylesheet(
    filename: str,
    filepath: str,
    rules: Iterable[AliasRule],
    *,
    emitter: DiagnosticEmitter | None = None,
) -> str:
    """Return the contents of an imported stylesheet, or ``""`` when unreadable."""
    target = document_directory(filepath) / apply_alias(filename, rules)
    try:
        return target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        if emitter:
            emitter.event("stylesheet_missing", {"filename": filename, "path": str(target)})
        return ""


def collect_sources(
    code: str,
    filepath: str,
    rules: Iterable[AliasRule] = (),
    *,
    emitter: DiagnosticEmitter | None = None,
) -> list[SourceEntry]:
    """Build the source list of a preview block: its own code, then its stylesheets."""
    rules = list(rules)
    sources = [SourceEntry(filename=PRIMARY_FILENAME, type=PRIMARY_TYPE, code=code)]
    for filename in find_stylesheet_imports(code):
        sources.append(
            SourceEntry(
                filename=filename,
                type=STYLESHEET_TYPE,
                code=read_stylesheet(filename, filepath, rules, emitter=emitter),
            )
        )
    return sources


__all__ = [
    "PRIMARY_FILENAME",
    "PRIMARY_TYPE",
    "STYLESHEET_TYPE",
    "SourceEntry",
    "apply_alias",
    "collect_sources",
    "document_directory",
    "find_stylesheet_imports",
    "read_stylesheet",
]
