"""Rendering of dependency graphs as Mermaid or Graphviz documents."""

import logging
from enum import Enum
from typing import Protocol, TextIO

from .errors import ConfigurationError
from .graph import DependencyGraph
from .models import Package, PackageKind, PackageState
from .options import Color, GraphOptions

logger = logging.getLogger(__name__)

GENERATED_BY = "Generated by depgraph"


class Notation(Enum):
    MERMAID = "mermaid"
    GRAPHVIZ = "graphviz"


class Renderer(Protocol):
    """Emit the lines of one graph notation."""

    def header(self, styles: set[str], options: GraphOptions) -> list[str]:
        ...

    def node(
        self, package: Package, style: str | None, is_root: bool, options: GraphOptions
    ) -> list[str]:
        ...

    def edge(self, package: Package, dependency: Package, options: GraphOptions) -> list[str]:
        ...

    def footer(self) -> list[str]:
        ...


def node_style(package: Package) -> str | None:
    """Name of the color a node is drawn with, ``None`` for the default one."""
    if package.state is PackageState.IGNORE:
        return "ignored"
    if package.state is PackageState.REMOVE:
        return "removed"
    if package.kind is PackageKind.PROJECT:
        return "project"
    if package.kind is PackageKind.UNKNOWN:
        return "unknown"
    return None


class MermaidRenderer:
    """Mermaid flowchart notation."""

    def header(self, styles: set[str], options: GraphOptions) -> list[str]:
        lines = [f"%% {GENERATED_BY}", "", f"graph {options.direction.abbreviation}", ""]
        for name, color in options.colors.items():
            if name == "default":
                lines.append(f"classDef default {self._color(color)},color:#000000")
            elif name in styles:
                lines.append(f"classDef {name} {self._color(color)}")
        if options.highlight_roots:
            lines.append("classDef root stroke-width:3px")
        lines.append("")
        return lines

    def node(
        self, package: Package, style: str | None, is_root: bool, options: GraphOptions
    ) -> list[str]:
        package_id = package.package_id(options.include_versions)
        lines = [f"{package_id}:::{style}" if style else package_id]
        if is_root and options.highlight_roots:
            lines.append(f"class {package_id} root")
        return lines

    def edge(self, package: Package, dependency: Package, options: GraphOptions) -> list[str]:
        source = package.package_id(options.include_versions)
        target = dependency.package_id(options.include_versions)
        return [f"{source} --> {target}"]

    def footer(self) -> list[str]:
        return []

    @staticmethod
    def _color(color: Color) -> str:
        return f"fill:{color.fill},stroke:{color.stroke}"


class GraphvizRenderer:
    """Graphviz DOT notation."""

    def header(self, styles: set[str], options: GraphOptions) -> list[str]:
        return [
            f"# {GENERATED_BY}",
            "",
            "digraph",
            "{",
            f"  rankdir={options.direction.abbreviation}",
            "  node [ fontname = \"Segoe UI, sans-serif\", shape = box, style = filled, "
            f"{self._color(options.colors.default)} ]",
            "",
        ]

    def node(
        self, package: Package, style: str | None, is_root: bool, options: GraphOptions
    ) -> list[str]:
        attributes = []
        if style:
            attributes.append(self._color(getattr(options.colors, style)))
        if is_root and options.highlight_roots:
            attributes.append("penwidth = 3")

        line = f"  {self._quote(package.package_id(options.include_versions))}"
        if attributes:
            line += f" [ {', '.join(attributes)} ]"
        return [line]

    def edge(self, package: Package, dependency: Package, options: GraphOptions) -> list[str]:
        source = self._quote(package.package_id(options.include_versions))
        target = self._quote(dependency.package_id(options.include_versions))
        return [f"  {source} -> {target}"]

    def footer(self) -> list[str]:
        return ["}"]

    @staticmethod
    def _quote(value: str) -> str:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    @classmethod
    def _color(cls, color: Color) -> str:
        return f"fillcolor = {cls._value(color.fill)}, color = {cls._value(color.stroke)}"

    @staticmethod
    def _value(value: str) -> str:
        return f'"{value}"' if value.startswith("#") else value


_RENDERERS: dict[Notation, type] = {
    Notation.MERMAID: MermaidRenderer,
    Notation.GRAPHVIZ: GraphvizRenderer,
}


class GraphWriter:
    """Write a dependency graph in one notation."""

    def __init__(self, notation: Notation = Notation.MERMAID):
        if notation not in _RENDERERS:
            raise ConfigurationError(f"Unsupported notation {notation!r}")
        self.notation = notation
        self._renderer: Renderer = _RENDERERS[notation]()

    @property
    def format_name(self) -> str:
        return "Mermaid" if self.notation is Notation.MERMAID else "Graphviz"

    def render(self, graph: DependencyGraph, options: GraphOptions | None = None) -> str:
        """Render ``graph`` into a complete document.

        Raises:
            ConfigurationError: The options cannot be applied to this graph
        """
        options = options or GraphOptions()
        options.validate()

        packages = [
            package
            for package in graph.packages
            if options.write_ignored_packages or package.state is not PackageState.IGNORE
        ]
        if options.include_versions:
            unversioned = sorted(package.name for package in packages if not package.version)
            if unversioned:
                raise ConfigurationError(
                    f"Cannot include versions, no version is known for {', '.join(unversioned)}"
                )

        def sort_key(package: Package) -> tuple[str, str]:
            package_id = package.package_id(options.include_versions)
            return package_id.casefold(), package_id

        packages.sort(key=sort_key)
        visible = {package.key for package in packages}
        styles = {node_style(package) for package in packages}

        lines = self._renderer.header(styles, options)
        for package in packages:
            lines += self._renderer.node(package, node_style(package), graph.is_root(package), options)
        lines.append("")
        for package in packages:
            for dependency in sorted(graph.dependencies_of(package), key=sort_key):
                if dependency.key in visible:
                    lines += self._renderer.edge(package, dependency, options)
        lines += self._renderer.footer()

        logger.debug(f"Rendered {len(packages)} packages as {self.format_name}")
        return "\n".join(lines) + "\n"

    def write(self, graph: DependencyGraph, options: GraphOptions | None, stream: TextIO) -> None:
        """Render ``graph`` and write it to ``stream`` in a single call."""
        stream.write(self.render(graph, options))
