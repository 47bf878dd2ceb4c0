"""
Binary Embedder for the Source Assembly Engine.

Turns a serialized payload into source: a static container type holding the
base64 text as a string constant, plus an accessor that decodes the constant
and runs it through the loader-side deserializer the first time it is read.
Decoding happens when the compiled assembly is used, never at build time.
"""

import base64
import logging

from grapplebuild.config.models import EmbeddedBlob, EmbedSettings

logger = logging.getLogger(__name__)


def decode_blob(blob: EmbeddedBlob) -> bytes:
    """Recover the raw payload bytes from an embedded blob."""
    return base64.b64decode(blob.base64_payload, validate=True)


class BinaryEmbedder:
    """Encodes payloads and renders their generated containers."""

    def __init__(self, settings: EmbedSettings | None = None):
        self.settings = settings or EmbedSettings()

    def embed(self, owner_name: str, payload: bytes) -> EmbeddedBlob:
        """Base64-encode ``payload`` (standard alphabet, no wrapping).

        An empty payload still produces a blob, with an empty constant, so
        every generated container has the same members.
        """
        encoded = base64.b64encode(payload).decode("ascii")
        if not payload:
            logger.warning(f"Embedding empty payload for '{owner_name}'")
        logger.debug(f"Embedded {len(payload)} bytes for '{owner_name}' ({len(encoded)} chars)")
        return EmbeddedBlob(owner_name=owner_name, base64_payload=encoded)

    def render(self, blob: EmbeddedBlob) -> str:
        """Render the static container declaring the constant and its accessor."""
        s = self.settings
        decode = s.decode_expression.format(constant=s.constant_name)
        lazy_field = f"_{s.accessor_name[:1].lower()}{s.accessor_name[1:]}"

        return (
            f"public static class {blob.container_name}\n"
            "{\n"
            f"    public const string {s.constant_name} = \"{blob.base64_payload}\";\n"
            f"    private static readonly Lazy<{s.accessor_type}> {lazy_field} =\n"
            f"        new Lazy<{s.accessor_type}>(() => {decode});\n"
            f"    public static {s.accessor_type} {s.accessor_name} => {lazy_field}.Value;\n"
            "}\n"
        )

    def render_interface(self) -> str:
        """Shared interface describing the members every container carries."""
        s = self.settings
        return (
            f"public interface {s.interface_name}\n"
            "{\n"
            f"    public static string {s.constant_name};\n"
            f"    public static {s.accessor_type} {s.accessor_name};\n"
            "}\n"
        )
