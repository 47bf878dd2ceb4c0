"""
Unit tests for the import registry and the namespace body store.
"""

from grapplebuild.engine.registry import ImportRegistry
from grapplebuild.engine.store import NamespaceBodyStore


class TestImportRegistry:
    """Deduplication and ordering of directives."""

    def test_initial_directives_kept_in_order(self):
        registry = ImportRegistry(["using System;", "using DefaultEcs;"])
        assert registry.directives == ["using System;", "using DefaultEcs;"]

    def test_merge_skips_known_directives(self):
        registry = ImportRegistry(["using System;"])

        merged = registry.merge(["using DefaultEcs;", "using System;", "using System.IO;"])

        assert merged == ["using System;", "using DefaultEcs;", "using System.IO;"]
        assert len(registry) == 3

    def test_line_ending_variants_are_one_directive(self):
        registry = ImportRegistry()

        registry.merge(["using System;\r\n"])
        registry.merge(["using System;\n", "  using System;"])

        assert registry.directives == ["using System;"]
        assert "using System;\r" in registry

    def test_growth_is_monotonic(self):
        registry = ImportRegistry(["using A;"])
        before = registry.directives

        registry.merge([])
        registry.merge(["using B;"])

        assert registry.directives[: len(before)] == before

    def test_returned_lists_are_copies(self):
        registry = ImportRegistry(["using A;"])
        registry.directives.append("using Hacked;")
        assert list(registry) == ["using A;"]

    def test_blank_entries_ignored(self):
        registry = ImportRegistry(["", "\r\n"])
        assert len(registry) == 0


class TestNamespaceBodyStore:
    """Grouping of bodies by namespace."""

    def test_root_and_none_share_a_unit(self):
        store = NamespaceBodyStore("ScriptData")

        store.add_script(None, "class A {}")
        store.add_script("ScriptData", "class B {}")

        units = store.units()
        assert len(units) == 1
        assert units[0].name == "ScriptData"
        assert units[0].bodies == ["class A {}", "class B {}"]

    def test_units_in_first_encountered_order(self):
        store = NamespaceBodyStore("ScriptData")

        store.add_script("Combat", "class Punch {}")
        store.add_script(None, "class Root {}")
        store.add_script("Combat", "class Kick {}")
        store.add_script("UI.Menus", "class Pause {}")

        assert store.names() == ["Combat", "ScriptData", "UI.Menus"]
        assert store.units()[0].bodies == ["class Punch {}", "class Kick {}"]

    def test_names_are_matched_exactly(self):
        store = NamespaceBodyStore("ScriptData")

        store.add_script("Combat", "class A {}")
        store.add_script("combat", "class B {}")

        assert store.names() == ["Combat", "combat"]

    def test_units_snapshot_is_detached(self):
        store = NamespaceBodyStore("ScriptData")
        store.add_script(None, "class A {}")

        snapshot = store.units()
        store.add_script(None, "class B {}")

        assert snapshot[0].bodies == ["class A {}"]
