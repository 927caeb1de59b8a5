"""Per-compile state accumulated while rendering preview blocks."""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import AliasRule, CompileOptions, ExportType
from .diagnostics import DiagnosticEmitter, LoggingEmitter
from .identifiers import BlockIdentity
from .templates import Template, coerce_template


@dataclass(frozen=True, slots=True)
class ComponentRegistration:
    """Import line and components-map entry for one preview entry artifact."""

    import_statement: str
    usage_entry: str

    @classmethod
    def for_identity(cls, identity: BlockIdentity) -> ComponentRegistration:
        return cls(
            import_statement=f"import {identity.entry_var} from '{identity.entry_request}'",
            usage_entry=f"'{identity.tag_name}': {identity.entry_var}",
        )


@dataclass(slots=True)
class CompileSession:
    """Mutable context owned by a single compile call."""

    filepath: str
    export_type: ExportType = "html"
    alias: list[AliasRule] = field(default_factory=list)
    template: Template = field(default_factory=lambda: coerce_template(None))
    emitter: DiagnosticEmitter = field(default_factory=LoggingEmitter)
    counter: int = 1
    registrations: list[ComponentRegistration] = field(default_factory=list)
    preview_blocks: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_options(
        cls,
        options: CompileOptions,
        *,
        emitter: DiagnosticEmitter | None = None,
    ) -> CompileSession:
        """Start a fresh session from validated options."""
        return cls(
            filepath=options.filepath,
            export_type=options.export_type,
            alias=list(options.alias),
            template=coerce_template(options.template),
            emitter=emitter or LoggingEmitter(),
        )

    @property
    def exports_component(self) -> bool:
        return self.export_type == "component"

    def register(self, identity: BlockIdentity, entry_text: str, component_text: str) -> None:
        """Record both artifacts of a preview block and its component registration."""
        self.registrations.append(ComponentRegistration.for_identity(identity))
        self.preview_blocks[identity.entry_key] = entry_text
        self.preview_blocks[identity.component_key] = component_text

    def advance(self) -> int:
        """Move to the next preview block, returning the new counter."""
        self.counter += 1
        return self.counter


__all__ = ["CompileSession", "ComponentRegistration"]
