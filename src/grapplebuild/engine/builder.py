"""
Build drivers for the Source Assembly Engine.

A builder owns one Import Registry and one Namespace Body Store for a single
build invocation. Fragments are added strictly in order; every call to
``compilation_unit`` snapshots the current state into a fresh, read-only
CompilationUnit, and only the Unit Assembler turns that into text.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from grapplebuild.config.models import (
    AssemblySettings,
    CompilationUnit,
    CompileResult,
    EmbeddedBlob,
    EmbedSettings,
    Fragment,
)
from grapplebuild.engine.assembler import UnitAssembler
from grapplebuild.engine.embedder import BinaryEmbedder
from grapplebuild.engine.header import HeaderExtractor
from grapplebuild.engine.registry import ImportRegistry
from grapplebuild.engine.store import NamespaceBodyStore
from grapplebuild.gateway.compiler import CompileGateway
from grapplebuild.scenes.serializers import (
    BinaryWorldSerializer,
    TextWorldSerializer,
    WorldSerializer,
)

logger = logging.getLogger(__name__)


class AssemblyBuilder(ABC):
    """Merges fragments into one compilation unit and compiles it."""

    def __init__(self, settings: AssemblySettings | None = None):
        self.settings = settings or self.default_settings()
        self.imports = ImportRegistry(self.settings.imports)
        self.store = NamespaceBodyStore(self.settings.root_namespace)
        self.extractor = HeaderExtractor(self.settings.grammar)
        self.assembler = UnitAssembler()
        self._epilogue: list[str] = []
        self.fragment_count = 0

    @classmethod
    @abstractmethod
    def default_settings(cls) -> AssemblySettings:
        """Documented default settings for this kind of assembly."""

    @property
    def namespace(self) -> str:
        return self.settings.root_namespace

    def add(self, fragment: Fragment | str, namespace: str | None = None) -> None:
        """Hoist a fragment's directives and file its body under its namespace.

        Args:
            fragment: A Fragment, or raw text
            namespace: Sub-namespace hint used when ``fragment`` is raw text
        """
        if isinstance(fragment, str):
            fragment = Fragment(raw_text=fragment, namespace=namespace)

        extraction = self.extractor.extract(fragment.raw_text, fragment.source_name)
        self.imports.merge(extraction.directives)
        body = extraction.body_of(fragment.raw_text)
        self.store.add_script(fragment.namespace, body)
        self.fragment_count += 1

    def add_all(self, fragments) -> None:
        for fragment in fragments:
            self.add(fragment)

    def add_epilogue(self, declaration: str) -> None:
        """Register a root-scope declaration emitted after every namespace unit."""
        if declaration not in self._epilogue:
            self._epilogue.append(declaration)

    def compilation_unit(self) -> CompilationUnit:
        """Snapshot the current registry and store into a new CompilationUnit."""
        return CompilationUnit(
            directives=tuple(self.imports.directives),
            root_namespace=self.settings.root_namespace,
            marker_declaration=self.settings.marker_declaration,
            namespace_units=tuple(self.store.units()),
            epilogue=tuple(self._epilogue),
        )

    def generate_finalized_source(self) -> str:
        """Assemble the directives and namespace bodies into one source file."""
        return self.assembler.assemble(self.compilation_unit())

    def compile_into_assembly(
        self,
        output_path: Path,
        gateway: CompileGateway,
        assembly_name: str | None = None,
    ) -> CompileResult:
        """Compile the assembled source and write the artifact to ``output_path``.

        The artifact is written only when the compile succeeds. Diagnostics
        are returned exactly as the gateway reported them.
        """
        assembly_name = assembly_name or self.settings.assembly_name
        source = self.generate_finalized_source()

        logger.info(
            f"Compiling {assembly_name}: {self.fragment_count} fragments, "
            f"{len(self.imports)} directives, {len(self.store)} namespace units"
        )
        result = gateway.compile(
            [source],
            references=list(self.settings.references),
            assembly_name=assembly_name,
        )

        if not result.succeeded:
            logger.warning(f"compile_into_assembly() failed for {assembly_name}; returning diagnostics")
            return result

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(result.artifact)
        logger.info(f"Wrote {output_path}")
        return result


class ScriptAssemblyBuilder(AssemblyBuilder):
    """Builds the assembly holding game scripts."""

    def __init__(self, settings: AssemblySettings | None = None, scripts=()):
        super().__init__(settings)
        self.add_all(scripts)

    @classmethod
    def default_settings(cls) -> AssemblySettings:
        return AssemblySettings.for_scripts()


class SystemAssemblyBuilder(AssemblyBuilder):
    """Builds the assembly holding ECS systems."""

    def __init__(self, settings: AssemblySettings | None = None, systems=()):
        super().__init__(settings)
        self.add_all(systems)

    @classmethod
    def default_settings(cls) -> AssemblySettings:
        return AssemblySettings.for_systems()


class SceneAssemblyBuilder(AssemblyBuilder):
    """
    Builds the assembly that carries serialized worlds.

    Each scene file is read as a text world, re-serialized with the binary
    serializer and embedded as a base64 constant inside its own static
    container; all containers live in the root namespace.
    """

    def __init__(
        self,
        settings: AssemblySettings | None = None,
        embed_settings: EmbedSettings | None = None,
        text_serializer: TextWorldSerializer | None = None,
        binary_serializer: WorldSerializer | None = None,
    ):
        super().__init__(settings)
        self.embedder = BinaryEmbedder(embed_settings)
        self.text_serializer = text_serializer or TextWorldSerializer()
        self.binary_serializer = binary_serializer or BinaryWorldSerializer()
        self.blobs: list[EmbeddedBlob] = []

        if self.embedder.settings.emit_interface:
            self.add_epilogue(self.embedder.render_interface())

    @classmethod
    def default_settings(cls) -> AssemblySettings:
        return AssemblySettings.for_scenes()

    def add_scene(self, name: str, contents: str | bytes) -> EmbeddedBlob:
        """Parse, serialize and embed one scene file.

        Raises:
            SerializationError: If the scene file cannot be parsed
        """
        world = self.text_serializer.deserialize(contents)
        payload = self.binary_serializer.serialize(world)
        blob = self.embed_payload(name, payload)
        logger.info(f"Embedded scene '{name}' ({world.entity_count()} entities, {len(payload)} bytes)")
        return blob

    def embed_payload(self, owner_name: str, payload: bytes) -> EmbeddedBlob:
        """Embed an already-serialized payload under ``owner_name``."""
        blob = self.embedder.embed(owner_name, payload)
        if any(b.container_name == blob.container_name for b in self.blobs):
            logger.warning(
                f"Scene '{owner_name}' maps to container {blob.container_name} which already exists"
            )
        self.blobs.append(blob)
        self.store.add_script(None, self.embedder.render(blob))
        self.fragment_count += 1
        return blob

    def add_scenes(self, scenes) -> None:
        for name, contents in scenes:
            self.add_scene(name, contents)
