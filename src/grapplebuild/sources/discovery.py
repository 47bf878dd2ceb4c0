"""
Directory enumeration for fragment and scene files.

Reads files from disk and turns them into Fragments (or scene name/contents
pairs). With recursion enabled, a file's directory relative to the input
root becomes its dotted namespace hint: ``Combat/Moves/Throw.cs`` is filed
under ``Combat.Moves``.
"""

import fnmatch
import logging
from pathlib import Path

from grapplebuild.config.models import Fragment

logger = logging.getLogger(__name__)


class MissingInputDirectory(FileNotFoundError):
    """Raised when an input directory does not exist."""

    pass


class UnreadableInputFile(Exception):
    """Raised when an input file cannot be read as UTF-8 text."""

    pass


def read_source(path: Path) -> str:
    """Read one input file, dropping a leading BOM.

    Raises:
        UnreadableInputFile: If the file cannot be read or is not UTF-8
    """
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise UnreadableInputFile(f"{path} is not valid UTF-8 (byte {e.start}): re-save it as UTF-8")
    except OSError as e:
        raise UnreadableInputFile(f"Cannot read {path}: {e}")


def _is_excluded(path: Path, root: Path, exclude: list[str]) -> bool:
    parts = path.relative_to(root).parts
    return any(fnmatch.fnmatch(part, pattern) for part in parts for pattern in exclude)


def find_files(
    directory: Path,
    patterns: list[str],
    recursive: bool = False,
    exclude: list[str] | None = None,
) -> list[Path]:
    """List matching files under ``directory`` in sorted path order.

    Raises:
        MissingInputDirectory: If ``directory`` does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise MissingInputDirectory(f"Input directory not found: {directory}")

    exclude = exclude or []
    candidates = directory.rglob("*") if recursive else directory.glob("*")
    files = [
        p
        for p in candidates
        if p.is_file()
        and any(fnmatch.fnmatch(p.name, pattern) for pattern in patterns)
        and not _is_excluded(p, directory, exclude)
    ]
    return sorted(files)


def namespace_hint(path: Path, root: Path) -> str | None:
    """Dotted namespace for a file below ``root``; None for files directly in it."""
    parent = path.relative_to(root).parent
    if parent == Path("."):
        return None
    return ".".join(parent.parts)


def collect_fragments(
    directory: Path,
    patterns: list[str] | None = None,
    recursive: bool = False,
    exclude: list[str] | None = None,
) -> list[Fragment]:
    """Read every matching source file into a Fragment."""
    directory = Path(directory)
    files = find_files(directory, patterns or ["*.cs"], recursive, exclude)

    fragments = []
    for path in files:
        fragments.append(
            Fragment(
                raw_text=read_source(path),
                namespace=namespace_hint(path, directory) if recursive else None,
                source_name=str(path.relative_to(directory)),
            )
        )
    logger.info(f"Collected {len(fragments)} fragments from {directory}")
    return fragments


def collect_scenes(
    directory: Path,
    patterns: list[str] | None = None,
    recursive: bool = False,
    exclude: list[str] | None = None,
) -> list[tuple[str, str]]:
    """Read every matching scene file as a ``(file name, contents)`` pair."""
    directory = Path(directory)
    files = find_files(directory, patterns or ["*.yaml", "*.yml"], recursive, exclude)
    scenes = [(path.name, read_source(path)) for path in files]
    logger.info(f"Collected {len(scenes)} scenes from {directory}")
    return scenes
