"""
Namespace Body Store for the Source Assembly Engine.

Maps namespace names to the fragment bodies submitted for them. Bodies for
the root namespace are emitted inline; every other name becomes its own
unit, wrapped in a nested ``namespace <name> { ... }`` block by the
assembler. Names are compared exactly and never validated here: an illegal
or differently cased name surfaces later as a compiler diagnostic.
"""

import logging

from grapplebuild.config.models import NamespaceUnit

logger = logging.getLogger(__name__)


class NamespaceBodyStore:
    """Ordered namespace -> bodies mapping for one build."""

    def __init__(self, root_namespace: str):
        self.root_namespace = root_namespace
        # dicts keep insertion order, which is the first-encountered order of names
        self._units: dict[str, NamespaceUnit] = {}

    def add_script(self, namespace_name: str | None, body: str) -> NamespaceUnit:
        """Append a fragment body to the unit for ``namespace_name``.

        ``None`` and the root namespace name both route to the root unit.
        """
        name = self.root_namespace if namespace_name in (None, "") else namespace_name

        unit = self._units.get(name)
        if unit is None:
            unit = NamespaceUnit(name=name)
            self._units[name] = unit
            logger.debug(f"Created namespace unit '{name}'")

        unit.bodies.append(body)
        return unit

    def is_root(self, name: str) -> bool:
        return name == self.root_namespace

    def units(self) -> list[NamespaceUnit]:
        """Copies of every unit in first-encountered order."""
        return [unit.model_copy(deep=True) for unit in self._units.values()]

    def names(self) -> list[str]:
        return list(self._units)

    def __len__(self) -> int:
        return len(self._units)
