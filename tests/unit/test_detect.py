"""Tests for source and notation detection."""

import json

import pytest

from depgraph.detect import NUGET_ASSETS, PIP_REPORT, identify, notation_for
from depgraph.errors import ConfigurationError
from depgraph.writers import Notation


class TestSourceDetection:
    """Test manifest detection from filenames and content."""

    def test_detect_assets_by_filename(self):
        """Should detect NuGet assets from the project.assets.json filename."""
        assert identify("", "project.assets.json") == NUGET_ASSETS
        assert identify("", "obj/Project.Assets.json") == NUGET_ASSETS

    def test_detect_pip_report_by_content(self, sample_pip_report):
        assert identify(json.dumps(sample_pip_report)) == PIP_REPORT
        assert identify(json.dumps(sample_pip_report), "report.json") == PIP_REPORT

    def test_detect_assets_by_content(self, sample_assets):
        assert identify(json.dumps(sample_assets), "lock.json") == NUGET_ASSETS

    def test_detect_unknown(self):
        """Should return unknown for unclear content."""
        assert identify("", "unknown.txt") == "unknown"
        assert identify("some random text") == "unknown"
        assert identify("[1, 2, 3]") == "unknown"
        assert identify('{"name": "test-project"}') == "unknown"

    def test_filename_takes_precedence(self, sample_pip_report):
        """Filename should take precedence over content when both present."""
        assert identify(json.dumps(sample_pip_report), "project.assets.json") == NUGET_ASSETS


class TestNotationDetection:
    """Test notation selection from the output path."""

    @pytest.mark.parametrize(
        "output, expected",
        [
            (None, Notation.MERMAID),
            ("-", Notation.MERMAID),
            ("graph.mmd", Notation.MERMAID),
            ("graph.MERMAID", Notation.MERMAID),
            ("graph.gv", Notation.GRAPHVIZ),
            ("graph.dot", Notation.GRAPHVIZ),
            ("graph", Notation.GRAPHVIZ),
        ],
    )
    def test_from_extension(self, output, expected):
        assert notation_for(output) is expected

    def test_explicit_format_wins(self):
        assert notation_for("graph.mmd", "graphviz") is Notation.GRAPHVIZ
        assert notation_for(None, Notation.GRAPHVIZ) is Notation.GRAPHVIZ
        assert notation_for("graph.gv", "Mermaid") is Notation.MERMAID

    def test_unknown_format(self):
        with pytest.raises(ConfigurationError):
            notation_for(None, "plantuml")
