"""
Compile Gateway: subprocess bridge to the external C# compiler.

The engine hands over assembled source text and a reference list, and gets
back either the artifact bytes or the compiler's diagnostics. Nothing here
retries or reinterprets a failed compile; diagnostics are passed through in
the order the compiler printed them.

Usage:
    gateway = CscCompileGateway(CompilerConfig(command=["csc"]))
    result = gateway.compile([source], references=[], assembly_name="GrappleFightScripts")
"""

import logging
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

from grapplebuild.config.models import (
    ArtifactKind,
    CompileResult,
    CompilerConfig,
    Diagnostic,
    Severity,
)

logger = logging.getLogger(__name__)

# MSBuild-style diagnostic line, e.g.
#   /tmp/x/unit0.cs(12,5): error CS1002: ; expected
#   error CS0006: Metadata file 'Engine.dll' could not be found
_DIAGNOSTIC_LINE = re.compile(
    r"^(?:(?P<location>.+?\(\d+,\d+(?:,\d+,\d+)?\))\s*:\s*)?"
    r"(?P<severity>error|warning|info)\s+(?P<code>[A-Za-z]+\d+)\s*:\s*(?P<message>.*?)\s*$"
)

_TARGETS = {
    ArtifactKind.LIBRARY: "library",
}


class CompileGatewayError(Exception):
    """Raised when the compiler toolchain itself cannot be run."""

    pass


class CompileGateway(Protocol):
    """Boundary to whatever turns assembled source into an artifact."""

    def compile(
        self,
        sources: list[str],
        references: list[Path],
        assembly_name: str,
        kind: ArtifactKind = ArtifactKind.LIBRARY,
    ) -> CompileResult: ...


def parse_diagnostics(output: str, strip_prefix: str | None = None) -> list[Diagnostic]:
    """Parse compiler output into diagnostics, keeping their order.

    Args:
        output: Combined compiler stdout/stderr
        strip_prefix: Directory prefix removed from locations (temp build dir)
    """
    diagnostics: list[Diagnostic] = []
    for line in output.splitlines():
        match = _DIAGNOSTIC_LINE.match(line.strip())
        if not match:
            continue
        location = match.group("location")
        if location and strip_prefix and location.startswith(strip_prefix):
            location = location[len(strip_prefix):].lstrip("/\\")
        diagnostics.append(
            Diagnostic(
                severity=Severity(match.group("severity")),
                code=match.group("code"),
                message=match.group("message"),
                location=location,
            )
        )
    return diagnostics


class CscCompileGateway:
    """
    Runs a csc-compatible compiler in a subprocess.

    This gateway:
    1. Writes each unit to its own .cs file in a temp directory
    2. Invokes the compiler with -target/-out/-r switches
    3. Parses diagnostics from the compiler output
    4. Reads the artifact bytes on success
    """

    def __init__(self, config: CompilerConfig | None = None):
        self.config = config or CompilerConfig()

    def build_command(
        self,
        source_files: list[Path],
        references: list[Path],
        output_file: Path,
        kind: ArtifactKind = ArtifactKind.LIBRARY,
    ) -> list[str]:
        return [
            *self.config.command,
            "-nologo",
            f"-target:{_TARGETS[kind]}",
            f"-out:{output_file}",
            *[f"-r:{reference}" for reference in references],
            *self.config.extra_args,
            *[str(f) for f in source_files],
        ]

    def compile(
        self,
        sources: list[str],
        references: list[Path],
        assembly_name: str,
        kind: ArtifactKind = ArtifactKind.LIBRARY,
    ) -> CompileResult:
        """Compile ``sources`` into a single artifact.

        Raises:
            CompileGatewayError: If the compiler is missing or times out
        """
        with tempfile.TemporaryDirectory(prefix="grapplebuild-") as tmpdir:
            tmpdir = Path(tmpdir)

            source_files = []
            for index, text in enumerate(sources):
                path = tmpdir / f"{assembly_name}.{index}.cs"
                path.write_text(text, encoding="utf-8")
                source_files.append(path)

            output_file = tmpdir / f"{assembly_name}.dll"
            cmd = self.build_command(source_files, references, output_file, kind)
            logger.debug(f"Running compiler: {' '.join(cmd)}")

            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.config.timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired:
                raise CompileGatewayError(
                    f"Compiler timed out after {self.config.timeout} seconds"
                )
            except FileNotFoundError:
                raise CompileGatewayError(
                    f"Compiler executable '{self.config.command[0]}' not found. "
                    "Install the .NET SDK or set compiler.command in the configuration."
                )

            output = "\n".join(part for part in (result.stdout, result.stderr) if part)
            diagnostics = parse_diagnostics(output, strip_prefix=str(tmpdir))

            has_errors = any(d.severity == Severity.ERROR for d in diagnostics)
            failed = result.returncode != 0 or has_errors or not output_file.exists()
            if failed and not has_errors:
                diagnostics.append(
                    Diagnostic(
                        severity=Severity.ERROR,
                        message=(
                            f"Compiler exited with code {result.returncode}: "
                            f"{output.strip()[:500] or 'no output'}"
                        ),
                    )
                )

            if failed:
                logger.info(f"Compilation of {assembly_name} failed with {len(diagnostics)} diagnostics")
                return CompileResult(artifact=None, diagnostics=diagnostics)

            artifact = output_file.read_bytes()
            logger.info(f"Compiled {assembly_name} ({len(artifact)} bytes)")
            return CompileResult(artifact=artifact, diagnostics=diagnostics)
