"""Tests for Mermaid and Graphviz rendering."""

import io

import pytest

from depgraph.errors import ConfigurationError
from depgraph.graph import build_graph
from depgraph.models import PackageKind
from depgraph.options import Color, GraphColors, GraphDirection, GraphOptions
from depgraph.removal import simulate
from depgraph.writers import GraphWriter, Notation


@pytest.fixture
def graph(make_record):
    records = [
        make_record("App", "1.0.0", "Serilog", "Legacy", kind=PackageKind.PROJECT),
        make_record("Serilog", "3.1.1"),
        make_record("Legacy", "0.9.0", "Serilog", "Shim"),
        make_record("Shim", "0.1.0", kind=PackageKind.UNKNOWN),
    ]
    return build_graph(records, ["App"])


class TestMermaid:
    """Test the Mermaid flowchart notation."""

    def test_render(self, graph):
        document = GraphWriter(Notation.MERMAID).render(graph)

        assert document == (
            "%% Generated by depgraph\n"
            "\n"
            "graph LR\n"
            "\n"
            "classDef default fill:aquamarine,stroke:#009061,color:#000000\n"
            "classDef project fill:skyblue,stroke:#05587C\n"
            "classDef unknown fill:khaki,stroke:#8B7500\n"
            "\n"
            "App:::project\n"
            "Legacy\n"
            "Serilog\n"
            "Shim:::unknown\n"
            "\n"
            "App --> Legacy\n"
            "App --> Serilog\n"
            "Legacy --> Serilog\n"
            "Legacy --> Shim\n"
        )

    def test_removed_packages(self, graph):
        simulate(graph, ["Legacy"])

        document = GraphWriter(Notation.MERMAID).render(graph)

        assert "classDef removed fill:lightcoral,stroke:#A42A2A\n" in document
        assert "Legacy:::removed\n" in document
        assert "Shim:::removed\n" in document
        assert "Serilog\n" in document

    def test_top_to_bottom(self, graph):
        options = GraphOptions(direction=GraphDirection.TOP_TO_BOTTOM)
        assert "graph TB\n" in GraphWriter(Notation.MERMAID).render(graph, options)

    def test_highlight_roots(self, graph):
        document = GraphWriter(Notation.MERMAID).render(graph, GraphOptions(highlight_roots=True))
        assert "classDef root stroke-width:3px\n" in document
        assert "class App root\n" in document


class TestGraphviz:
    """Test the Graphviz DOT notation."""

    def test_render(self, graph):
        document = GraphWriter(Notation.GRAPHVIZ).render(graph, GraphOptions(include_versions=True))

        assert document == (
            "# Generated by depgraph\n"
            "\n"
            "digraph\n"
            "{\n"
            "  rankdir=LR\n"
            '  node [ fontname = "Segoe UI, sans-serif", shape = box, style = filled, '
            'fillcolor = aquamarine, color = "#009061" ]\n'
            "\n"
            '  "App/1.0.0" [ fillcolor = skyblue, color = "#05587C" ]\n'
            '  "Legacy/0.9.0"\n'
            '  "Serilog/3.1.1"\n'
            '  "Shim/0.1.0" [ fillcolor = khaki, color = "#8B7500" ]\n'
            "\n"
            '  "App/1.0.0" -> "Legacy/0.9.0"\n'
            '  "App/1.0.0" -> "Serilog/3.1.1"\n'
            '  "Legacy/0.9.0" -> "Serilog/3.1.1"\n'
            '  "Legacy/0.9.0" -> "Shim/0.1.0"\n'
            "}\n"
        )

    def test_removed_color(self, graph):
        simulate(graph, ["Legacy"])
        document = GraphWriter(Notation.GRAPHVIZ).render(graph)
        assert '  "Legacy" [ fillcolor = lightcoral, color = "#A42A2A" ]\n' in document

    def test_highlight_roots(self, graph):
        document = GraphWriter(Notation.GRAPHVIZ).render(graph, GraphOptions(highlight_roots=True))
        assert '  "App" [ fillcolor = skyblue, color = "#05587C", penwidth = 3 ]\n' in document


class TestOptions:
    """Test options shared by both notations."""

    @pytest.mark.parametrize("notation", list(Notation))
    def test_deterministic(self, graph, notation):
        writer = GraphWriter(notation)
        assert writer.render(graph) == writer.render(graph)

    @pytest.mark.parametrize("notation", list(Notation))
    def test_version_display(self, make_record, notation):
        graph = build_graph([make_record("Foo", "1.2.3")], ["Foo"])
        writer = GraphWriter(notation)

        with_versions = writer.render(graph, GraphOptions(include_versions=True))
        without_versions = writer.render(graph, GraphOptions(include_versions=False))

        assert "Foo/1.2.3" in with_versions
        assert "Foo/1.2.3" not in without_versions
        assert "Foo" in without_versions

    @pytest.mark.parametrize("notation", list(Notation))
    def test_ignored_packages_suppressed(self, make_record, notation):
        graph = build_graph(
            [make_record("App", "1", "Ignored", "Lib"), make_record("Ignored", "1", "Lib"), make_record("Lib")],
            ["App"],
            ignores=["Ignored"],
        )

        document = GraphWriter(notation).render(graph)

        assert "Ignored" not in document
        assert "Lib" in document

    def test_ignored_packages_written(self, make_record):
        graph = build_graph(
            [make_record("App", "1", "Ignored"), make_record("Ignored")],
            ["App"],
            ignores=["Ignored"],
        )

        document = GraphWriter(Notation.MERMAID).render(graph, GraphOptions(write_ignored_packages=True))

        assert "classDef ignored fill:lightgray,stroke:#7A7A7A\n" in document
        assert "Ignored:::ignored\n" in document
        assert "App --> Ignored\n" in document

    def test_write_to_stream(self, graph):
        stream = io.StringIO()
        writer = GraphWriter(Notation.GRAPHVIZ)
        writer.write(graph, None, stream)
        assert stream.getvalue() == writer.render(graph)

    def test_invalid_direction(self, graph):
        stream = io.StringIO()
        with pytest.raises(ConfigurationError):
            GraphWriter(Notation.MERMAID).write(graph, GraphOptions(direction="diagonal"), stream)
        assert stream.getvalue() == ""

    def test_invalid_color(self, graph):
        colors = GraphColors(removed=Color("light coral", "#A42A2A"))
        with pytest.raises(ConfigurationError, match="removed"):
            GraphWriter(Notation.GRAPHVIZ).render(graph, GraphOptions(colors=colors))

    def test_versions_required_when_included(self, make_record):
        graph = build_graph([make_record("Foo", None)], ["Foo"], require_versions=False)
        stream = io.StringIO()

        with pytest.raises(ConfigurationError, match="Foo"):
            GraphWriter(Notation.MERMAID).write(graph, GraphOptions(include_versions=True), stream)
        assert stream.getvalue() == ""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("LeftToRight", GraphDirection.LEFT_TO_RIGHT),
            ("lr", GraphDirection.LEFT_TO_RIGHT),
            ("TopToBottom", GraphDirection.TOP_TO_BOTTOM),
            ("TB", GraphDirection.TOP_TO_BOTTOM),
        ],
    )
    def test_parse_direction(self, value, expected):
        assert GraphDirection.parse(value) is expected

    def test_parse_invalid_direction(self):
        with pytest.raises(ConfigurationError):
            GraphDirection.parse("RightToLeft")
