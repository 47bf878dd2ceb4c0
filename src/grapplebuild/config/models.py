"""
Core configuration and data models for grapplebuild.

Defines the build configuration and the values that flow through the
Source Assembly Engine, using Pydantic for validation.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field


class BuildKind(str, Enum):
    """Asset kinds that produce their own assembly."""

    SCRIPTS = "scripts"
    SYSTEMS = "systems"
    SCENES = "scenes"


class ArtifactKind(str, Enum):
    """Output kinds understood by the compile gateway."""

    LIBRARY = "library"


class Severity(str, Enum):
    """Diagnostic severity reported by the compiler."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# ============================================================================
# Engine Settings
# ============================================================================

DEFAULT_IMPORTS: tuple[str, ...] = (
    "using System;",
    "using System.Diagnostics;",
    "using DefaultEcs;",
    "using Microsoft.Xna.Framework;",
)

SCENE_IMPORTS: tuple[str, ...] = DEFAULT_IMPORTS + (
    "using System.IO;",
    "using System.Text.Json;",
)

# Zero-member type emitted into every unit so the loader can reach the
# assembly through typeof(Example).Assembly even when all fragments are empty.
DEFAULT_MARKER = "public static class Example{}"


class DirectiveGrammar(BaseModel):
    """Describes which header lines count as directives."""

    model_config = ConfigDict(frozen=True)

    keywords: tuple[str, ...] = Field(
        default=("using",), min_length=1, description="Keyword tokens that open a directive line"
    )
    skip_comments: bool = Field(
        default=True, description="Treat '//' comment lines inside the header as blank"
    )


class AssemblySettings(BaseModel):
    """Immutable settings handed to a builder at construction.

    Replaces process-wide default import/reference tables: each builder gets
    its own copy, and the documented defaults come from the ``for_*``
    constructors below.
    """

    model_config = ConfigDict(frozen=True)

    root_namespace: str = Field(description="Namespace that encloses every fragment")
    assembly_name: str = Field(description="Name given to the compiled assembly")
    imports: tuple[str, ...] = Field(default=DEFAULT_IMPORTS, description="Initial directives")
    references: tuple[Path, ...] = Field(
        default=(), description="Assemblies passed to the compiler as references"
    )
    marker_declaration: str = Field(default=DEFAULT_MARKER)
    grammar: DirectiveGrammar = Field(default_factory=DirectiveGrammar)

    @classmethod
    def for_scripts(cls, **overrides) -> "AssemblySettings":
        return cls(**{"root_namespace": "ScriptData", "assembly_name": "GrappleFightScripts", **overrides})

    @classmethod
    def for_systems(cls, **overrides) -> "AssemblySettings":
        return cls(**{"root_namespace": "SystemData", "assembly_name": "GrappleFightSystems", **overrides})

    @classmethod
    def for_scenes(cls, **overrides) -> "AssemblySettings":
        return cls(
            **{
                "root_namespace": "SceneData",
                "assembly_name": "GrappleFightScenes",
                "imports": SCENE_IMPORTS,
                **overrides,
            }
        )


class EmbedSettings(BaseModel):
    """Shape of the generated container for an embedded payload."""

    model_config = ConfigDict(frozen=True)

    constant_name: str = Field(default="Base64WorldContents")
    accessor_name: str = Field(default="World")
    accessor_type: str = Field(default="JsonDocument")
    decode_expression: str = Field(
        default="JsonDocument.Parse(Convert.FromBase64String({constant}))",
        description="Expression run at load time; {constant} is replaced by the constant name",
    )
    interface_name: str = Field(default="IWorldDataInterface")
    emit_interface: bool = Field(default=True)


# ============================================================================
# Engine Values
# ============================================================================


class Fragment(BaseModel):
    """One unit of caller-submitted source text before merging."""

    model_config = ConfigDict(frozen=True)

    raw_text: str
    namespace: str | None = Field(default=None, description="Sub-namespace hint, None for root")
    source_name: str | None = Field(default=None, description="Where the text came from")


class NamespaceUnit(BaseModel):
    """Ordered fragment bodies that share one namespace."""

    name: str
    bodies: list[str] = Field(default_factory=list)


class CompilationUnit(BaseModel):
    """Structured form of the text handed to the compiler."""

    model_config = ConfigDict(frozen=True)

    directives: tuple[str, ...] = ()
    root_namespace: str
    marker_declaration: str = DEFAULT_MARKER
    namespace_units: tuple[NamespaceUnit, ...] = ()
    epilogue: tuple[str, ...] = Field(
        default=(), description="Root-scope declarations emitted after all namespace units"
    )


class EmbeddedBlob(BaseModel):
    """A named binary payload destined to become a base64 literal."""

    model_config = ConfigDict(frozen=True)

    owner_name: str
    base64_payload: str

    @computed_field
    @property
    def container_name(self) -> str:
        """Identifier of the generated static container for this owner."""
        stem = self.owner_name.split(".", 1)[0] or "scene"
        cleaned = "".join(ch if ch.isalnum() or ch == "_" else "_" for ch in stem)
        return f"_{cleaned}"


class Diagnostic(BaseModel):
    """A message produced by the compile gateway."""

    severity: Severity
    message: str
    code: str | None = None
    location: str | None = None

    def __str__(self) -> str:
        prefix = f"{self.location}: " if self.location else ""
        code = f" {self.code}" if self.code else ""
        return f"{prefix}{self.severity.value}{code}: {self.message}"


class CompileResult(BaseModel):
    """Outcome of one compile gateway call."""

    artifact: bytes | None = None
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def succeeded(self) -> bool:
        return self.artifact is not None and not self.errors


# ============================================================================
# Build Configuration
# ============================================================================


class CompilerConfig(BaseModel):
    """How the external C# compiler is invoked."""

    command: list[str] = Field(default_factory=lambda: ["csc"], description="Compiler argv prefix")
    extra_args: list[str] = Field(default_factory=list, description="Appended to every invocation")
    timeout: int = Field(default=120, gt=0, description="Compiler timeout in seconds")


class KindConfig(BaseModel):
    """Inputs and outputs of one asset kind."""

    enabled: bool = True
    directory: Path
    output: Path
    namespace: str | None = Field(default=None, description="Root namespace override")
    imports: list[str] | None = Field(default=None, description="Replaces the default imports")
    patterns: list[str] = Field(default_factory=lambda: ["*.cs"])


class BuildConfig(BaseModel):
    """Root configuration model for grapplebuild."""

    scripts: KindConfig = Field(
        default_factory=lambda: KindConfig(
            directory=Path("Scripts"), output=Path("GrappleFightScripts.dll")
        )
    )
    systems: KindConfig = Field(
        default_factory=lambda: KindConfig(
            enabled=False, directory=Path("Systems"), output=Path("GrappleFightSystems.dll")
        )
    )
    scenes: KindConfig = Field(
        default_factory=lambda: KindConfig(
            directory=Path("Scenes"),
            output=Path("GrappleFightScenes.dll"),
            patterns=["*.yaml", "*.yml"],
        )
    )
    references: list[Path] = Field(default_factory=list, description="Shared assembly references")
    recursive: bool = Field(default=False, description="Recurse into sub-directories")
    exclude_patterns: list[str] = Field(
        default_factory=lambda: ["bin", "obj", ".git", "*.meta"],
        description="Patterns to exclude from discovery",
    )
    strict: bool = Field(default=False, description="Exit non-zero when any build fails")
    compiler: CompilerConfig = Field(default_factory=CompilerConfig)
    embed: EmbedSettings = Field(default_factory=EmbedSettings)

    def kind(self, kind: BuildKind) -> KindConfig:
        return getattr(self, kind.value)

    def settings_for(self, kind: BuildKind) -> AssemblySettings:
        """Build the immutable engine settings for one asset kind."""
        kind_cfg = self.kind(kind)
        overrides: dict = {"references": tuple(self.references)}
        if kind_cfg.namespace:
            overrides["root_namespace"] = kind_cfg.namespace
        if kind_cfg.imports is not None:
            overrides["imports"] = tuple(kind_cfg.imports)
        if kind_cfg.output.stem:
            overrides["assembly_name"] = kind_cfg.output.stem

        if kind == BuildKind.SCRIPTS:
            return AssemblySettings.for_scripts(**overrides)
        if kind == BuildKind.SYSTEMS:
            return AssemblySettings.for_systems(**overrides)
        return AssemblySettings.for_scenes(**overrides)
