"""
Source Assembly Engine.

Extracts header directives from script fragments, merges them into
namespace-scoped units, embeds serialized worlds, and assembles the single
compilation unit handed to the compile gateway.
"""

from grapplebuild.engine.assembler import UnitAssembler
from grapplebuild.engine.builder import (
    AssemblyBuilder,
    SceneAssemblyBuilder,
    ScriptAssemblyBuilder,
    SystemAssemblyBuilder,
)
from grapplebuild.engine.embedder import BinaryEmbedder, decode_blob
from grapplebuild.engine.header import HeaderExtraction, HeaderExtractor, HeaderSpan, SpanError
from grapplebuild.engine.registry import ImportRegistry
from grapplebuild.engine.store import NamespaceBodyStore

__all__ = [
    "AssemblyBuilder",
    "BinaryEmbedder",
    "HeaderExtraction",
    "HeaderExtractor",
    "HeaderSpan",
    "ImportRegistry",
    "NamespaceBodyStore",
    "SceneAssemblyBuilder",
    "ScriptAssemblyBuilder",
    "SpanError",
    "SystemAssemblyBuilder",
    "UnitAssembler",
    "decode_blob",
]
