"""
Unit tests for compilation unit rendering.
"""

import pytest

from grapplebuild.config.models import CompilationUnit, NamespaceUnit
from grapplebuild.engine.assembler import UnitAssembler


@pytest.fixture
def assembler():
    return UnitAssembler()


def test_empty_unit_still_has_marker(assembler):
    unit = CompilationUnit(directives=("using System;",), root_namespace="ScriptData")

    source = assembler.assemble(unit)

    assert source == (
        "using System;\n"
        "\n"
        "namespace ScriptData\n"
        "{\n"
        "public static class Example{}\n"
        "}\n"
    )


def test_root_bodies_inline_and_sub_namespaces_wrapped(assembler):
    unit = CompilationUnit(
        directives=("using System;", "using DefaultEcs;"),
        root_namespace="ScriptData",
        namespace_units=(
            NamespaceUnit(name="ScriptData", bodies=["\nclass Root {}\n"]),
            NamespaceUnit(name="A.B", bodies=["\nclass Nested {}", "\nclass Other {}\n"]),
        ),
    )

    source = assembler.assemble(unit)

    assert source == (
        "using System;\n"
        "using DefaultEcs;\n"
        "\n"
        "namespace ScriptData\n"
        "{\n"
        "public static class Example{}\n"
        "\n"
        "class Root {}\n"
        "namespace A.B\n"
        "{\n"
        "\n"
        "class Nested {}\n"
        "\n"
        "class Other {}\n"
        "}\n"
        "}\n"
    )


def test_sub_namespace_opened_and_closed_once(assembler):
    unit = CompilationUnit(
        root_namespace="ScriptData",
        namespace_units=(
            NamespaceUnit(name="ScriptData", bodies=["class Before {}"]),
            NamespaceUnit(name="A.B", bodies=["class Inner {}"]),
            NamespaceUnit(name="ScriptData2", bodies=["class After {}"]),
        ),
    )

    source = assembler.assemble(unit)

    assert source.count("namespace A.B\n{\n") == 1
    block_start = source.index("namespace A.B")
    block_end = source.index("\n}\n", block_start)
    block = source[block_start:block_end]
    assert "class Inner {}" in block
    assert "class Before {}" not in block
    assert "class After {}" not in block
    assert source.count("class Inner {}") == 1


def test_epilogue_emitted_before_closing_brace(assembler):
    unit = CompilationUnit(
        root_namespace="SceneData",
        epilogue=("public interface IWorldDataInterface {}",),
    )

    source = assembler.assemble(unit)

    assert source.endswith("public interface IWorldDataInterface {}\n}\n")


def test_assemble_is_idempotent(assembler):
    unit = CompilationUnit(
        directives=("using System;",),
        root_namespace="ScriptData",
        namespace_units=(NamespaceUnit(name="X", bodies=["class A {}"]),),
    )

    assert assembler.assemble(unit) == assembler.assemble(unit)
