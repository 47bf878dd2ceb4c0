"""
Import Registry for the Source Assembly Engine.

Ordered, duplicate-free set of header directives collected from every
fragment of one build. Grows monotonically: a directive, once registered,
is never dropped.
"""

import logging
from collections.abc import Iterable, Iterator

from grapplebuild.engine.header import normalize_directive

logger = logging.getLogger(__name__)


class ImportRegistry:
    """
    First-seen ordered set of normalized directives.

    Usage:
        registry = ImportRegistry(["using System;"])
        registry.merge(["using System;\\r", "using DefaultEcs;"])
        registry.directives  # ['using System;', 'using DefaultEcs;']
    """

    def __init__(self, initial: Iterable[str] = ()):
        self._directives: list[str] = []
        self._seen: set[str] = set()
        self.merge(initial)

    def merge(self, new_directives: Iterable[str]) -> list[str]:
        """Append each directive not already present.

        Args:
            new_directives: Directives in source order (normalized here)

        Returns:
            The full merged directive list, in first-seen order
        """
        added = 0
        for raw in new_directives:
            directive = normalize_directive(raw)
            if not directive or directive in self._seen:
                continue
            self._seen.add(directive)
            self._directives.append(directive)
            added += 1

        if added:
            logger.debug(f"Registered {added} new directives ({len(self._directives)} total)")
        return list(self._directives)

    @property
    def directives(self) -> list[str]:
        return list(self._directives)

    def __contains__(self, directive: object) -> bool:
        return isinstance(directive, str) and normalize_directive(directive) in self._seen

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._directives))

    def __len__(self) -> int:
        return len(self._directives)
