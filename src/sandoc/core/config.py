"""Configuration models used by the Markdown compiler.

CompileOptions

`filepath` (`str`)
: Absolute or logical path of the source document. Used verbatim as the
  prefix of every generated artifact request path and as the base directory
  for resolving relative stylesheet imports. Required and never blank.

`export_type` (`"html" | "component"`)
: Output flavour. `html` returns the rendered document only; `component`
  returns a San component module plus the preview artifact map. Also
  accepted under the `exportType` name.

`alias` (`list[AliasRule]`)
: Ordered find/replace rules applied to stylesheet import paths before they
  are resolved on disk.

`template` (`str | Callable | None`)
: Override for the preview entry template, either literal text containing
  `<%= field =%>` placeholders or a callable producing that text from the
  template data record. Falls back to the built-in template.

AliasRule

`find` (`str | re.Pattern`)
: Plain substring or compiled regular expression; every occurrence is
  replaced.

`replacement` (`str`)
: Replacement text.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from .exceptions import ConfigurationError, TemplateError
from .templates import Template, coerce_template


ExportType = Literal["html", "component"]


class AliasRule(BaseModel):
    """Find/replace pair applied to stylesheet import paths."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    find: str | re.Pattern[str]
    replacement: str = ""

    def apply(self, path: str) -> str:
        """Replace every occurrence of ``find`` inside ``path``."""
        if isinstance(self.find, re.Pattern):
            return self.find.sub(lambda _match: self.replacement, path)
        if not self.find:
            return path
        return path.replace(self.find, self.replacement)


def alias_entries(value: Any) -> list[Any]:
    """Flatten the accepted alias forms into a list of rules or rule mappings.

    ``value`` may be ``None``, a ``{find: replacement}`` mapping, or a sequence
    mixing :class:`AliasRule` instances, mappings and ``(find, replacement)``
    pairs.
    """
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [{"find": find, "replacement": repl} for find, repl in value.items()]
    if isinstance(value, str | AliasRule) or not isinstance(value, Iterable):
        return [value]
    entries: list[Any] = []
    for entry in value:
        if isinstance(entry, tuple) and len(entry) == 2:
            entries.append({"find": entry[0], "replacement": entry[1]})
        else:
            entries.append(entry)
    return entries


class CompileOptions(BaseModel):
    """Options accepted by :func:`sandoc.compile_markdown`."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    filepath: str
    export_type: ExportType = Field(default="html", alias="exportType")
    alias: list[AliasRule] = Field(default_factory=list)
    template: Any = None

    @field_validator("filepath")
    @classmethod
    def _require_filepath(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("filepath must be a non-empty path")
        return value

    @field_validator("alias", mode="before")
    @classmethod
    def _coerce_alias(cls, value: Any) -> Any:
        return alias_entries(value)

    @field_validator("template")
    @classmethod
    def _coerce_template(cls, value: Any) -> Template | None:
        if value is None:
            return None
        try:
            return coerce_template(value)
        except TemplateError as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def coerce(
        cls,
        options: CompileOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> CompileOptions:
        """Build validated options from a model, a mapping, or keyword overrides."""
        if isinstance(options, CompileOptions):
            if not overrides:
                return options
            payload: dict[str, Any] = {
                "filepath": options.filepath,
                "export_type": options.export_type,
                "alias": list(options.alias),
                "template": options.template,
            }
        else:
            payload = dict(options or {})
        payload.update(overrides)
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'options'}: {error['msg']}"
                for error in exc.errors()
            )
            raise ConfigurationError(f"Invalid compile options: {details}") from exc


def load_config(path: Path | str) -> dict[str, Any]:
    """Load compile option overrides from a YAML configuration file.

    A ``template`` entry names a template file relative to the configuration
    file; its contents replace the path in the returned mapping.
    """
    config_path = Path(path)
    try:
        payload = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Unable to read configuration file '{config_path}'") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in configuration file '{config_path}'") from exc

    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigurationError(
            f"Configuration file '{config_path}' must contain a mapping at its root."
        )

    overrides = dict(payload)
    if "exportType" in overrides:
        overrides.setdefault("export_type", overrides.pop("exportType"))
    template_ref = overrides.get("template")
    if isinstance(template_ref, str):
        overrides["template"] = read_template_file(config_path.parent / template_ref)
    return overrides


def read_template_file(path: Path | str) -> str:
    """Return the text of a template file, raising :class:`TemplateError` on failure."""
    template_path = Path(path)
    try:
        return template_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateError(f"Unable to read template file '{template_path}'") from exc


__all__ = [
    "AliasRule",
    "CompileOptions",
    "ExportType",
    "alias_entries",
    "load_config",
    "read_template_file",
]
