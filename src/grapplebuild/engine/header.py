"""
Header Extractor for the Source Assembly Engine.

Finds the directive lines (``using System;`` and friends) at the top of a
fragment and reports where the header ends, so the remaining body can be
sliced off and wrapped into the target namespace. Only the contiguous
header is scanned: a keyword appearing later in the body (inside a string
literal, a ``using`` statement, ...) is never treated as a directive.
"""

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache

from grapplebuild.config.models import DirectiveGrammar

logger = logging.getLogger(__name__)

_BOM = "\ufeff"

# One physical line: content plus its terminator (any of \r\n, \r, \n, or end of text).
_LINE = re.compile(r"([^\r\n]*)(\r\n|\r|\n|\Z)")

_IDENT = r"(?:@?[A-Za-z_][A-Za-z0-9_]*)"
_QUALIFIED = rf"(?:global::)?{_IDENT}(?:\s*\.\s*{_IDENT})*(?:\s*<[^;<>]*(?:<[^;<>]*>[^;<>]*)*>)?"


class SpanError(ValueError):
    """Raised when a header span does not fit the text it is applied to."""

    pass


@lru_cache(maxsize=16)
def _directive_pattern(keywords: tuple[str, ...]) -> re.Pattern:
    """Compile the single-line directive pattern for a keyword set."""
    alternatives = "|".join(re.escape(k) for k in keywords)
    return re.compile(
        rf"^[ \t]*(?P<directive>(?:{alternatives})\s+(?:static\s+)?(?:{_IDENT}\s*=\s*)?"
        rf"{_QUALIFIED}\s*;)[ \t]*(?://.*)?$"
    )


def normalize_directive(line: str) -> str:
    """Strip line-ending variance and surrounding whitespace from a directive."""
    return line.strip(" \t\r\n" + _BOM)


@dataclass(frozen=True)
class HeaderSpan:
    """Half-open ``[start, end)`` region of a fragment occupied by its header."""

    start: int
    end: int

    def __post_init__(self):
        if not 0 <= self.start <= self.end:
            raise SpanError(f"Invalid header span [{self.start}, {self.end})")

    def check(self, length: int) -> None:
        """Validate the span against a text of ``length`` characters."""
        if self.end > length:
            raise SpanError(
                f"Header span [{self.start}, {self.end}) exceeds text length {length}"
            )

    def header_of(self, text: str) -> str:
        self.check(len(text))
        return text[self.start:self.end]

    def body_of(self, text: str) -> str:
        self.check(len(text))
        return text[self.end:]


@dataclass(frozen=True)
class HeaderExtraction:
    """Directives found in a fragment header and the span they cover."""

    directives: tuple[str, ...] = field(default_factory=tuple)
    span: HeaderSpan = field(default_factory=lambda: HeaderSpan(0, 0))

    @property
    def consumed_length(self) -> int:
        return self.span.end

    def body_of(self, text: str) -> str:
        return self.span.body_of(text)


class HeaderExtractor:
    """Scans the contiguous header of a fragment for directive lines."""

    def __init__(self, grammar: DirectiveGrammar | None = None):
        self.grammar = grammar or DirectiveGrammar()
        self._pattern = _directive_pattern(tuple(self.grammar.keywords))

    def extract(self, text: str, source_name: str | None = None) -> HeaderExtraction:
        """Extract header directives from ``text``.

        The consumed length ends right after the last directive's own text
        (its ``;`` or trailing comment); the line terminator that follows is
        left to the body.

        Args:
            text: Raw fragment text
            source_name: Used in log messages only

        Returns:
            HeaderExtraction with normalized directives in source order
        """
        directives: list[str] = []
        end = 0

        for content_start, content in self._iter_lines(text):
            stripped = content.strip(" \t" + _BOM)
            if not stripped:
                continue
            if self.grammar.skip_comments and stripped.startswith("//"):
                continue

            match = self._pattern.match(content.lstrip(_BOM))
            if not match:
                break

            directives.append(normalize_directive(match.group("directive")))
            end = content_start + len(content.rstrip(" \t"))

        if not directives:
            self._report_ambiguity(text, source_name)
            return HeaderExtraction()

        span = HeaderSpan(0, end)
        span.check(len(text))
        logger.debug(
            f"Extracted {len(directives)} directives from {source_name or 'fragment'} "
            f"(header ends at {end})"
        )
        return HeaderExtraction(directives=tuple(directives), span=span)

    def _iter_lines(self, text: str):
        """Yield ``(offset, content)`` for each physical line of ``text``."""
        pos = 0
        length = len(text)
        while pos < length:
            match = _LINE.match(text, pos)
            yield pos, match.group(1)
            if match.end() == pos:
                break
            pos = match.end()

    def _report_ambiguity(self, text: str, source_name: str | None) -> None:
        """Warn when a directive exists past the header but none was found in it."""
        for offset, content in self._iter_lines(text):
            if self._pattern.match(content.lstrip(_BOM)):
                logger.warning(
                    f"{source_name or 'fragment'}: directive '{content.strip()}' at offset "
                    f"{offset} is outside the header; treating the whole text as body"
                )
                return
