"""
Unit Assembler for the Source Assembly Engine.

The only place where a structured CompilationUnit is turned into source
text. Pure concatenation: no fragment content is inspected, so the same
unit always renders to the same bytes.
"""

from grapplebuild.config.models import CompilationUnit, NamespaceUnit


def _terminated(text: str) -> str:
    return text if text.endswith("\n") else text + "\n"


class UnitAssembler:
    """Renders a CompilationUnit as a single C# source file."""

    def assemble(self, unit: CompilationUnit) -> str:
        """Render ``unit``.

        Layout: directives (one per line) and a blank line, the root
        namespace opening, the marker declaration, every namespace unit in
        order, epilogue declarations, the root closing brace.
        """
        parts: list[str] = [self.render_header(unit.directives)]

        parts.append(f"namespace {unit.root_namespace}\n{{\n")
        parts.append(_terminated(unit.marker_declaration))

        for namespace_unit in unit.namespace_units:
            if namespace_unit.name == unit.root_namespace:
                parts.extend(_terminated(body) for body in namespace_unit.bodies)
            else:
                parts.append(self.render_nested(namespace_unit))

        parts.extend(_terminated(declaration) for declaration in unit.epilogue)
        parts.append("}\n")

        return "".join(parts)

    def render_header(self, directives) -> str:
        """Directive block followed by one blank line."""
        return "".join(f"{directive}\n" for directive in directives) + "\n"

    def render_nested(self, namespace_unit: NamespaceUnit) -> str:
        """Wrap every body of a sub-namespace unit in one nested block."""
        inner = "".join(_terminated(body) for body in namespace_unit.bodies)
        return f"namespace {namespace_unit.name}\n{{\n{inner}}}\n"
