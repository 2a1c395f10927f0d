"""Presentation options for graph rendering."""

import re
from dataclasses import dataclass, field
from enum import Enum

from .errors import ConfigurationError

_COLOR_PATTERN = re.compile(r"^(#[0-9A-Fa-f]{3,8}|[A-Za-z]+)$")


class GraphDirection(Enum):
    LEFT_TO_RIGHT = "LeftToRight"
    TOP_TO_BOTTOM = "TopToBottom"

    @classmethod
    def parse(cls, value: "str | GraphDirection") -> "GraphDirection":
        """Parse ``LeftToRight``, ``TopToBottom``, ``LR`` or ``TB``, ignoring case."""
        if isinstance(value, GraphDirection):
            return value
        aliases = {
            "lefttoright": cls.LEFT_TO_RIGHT,
            "lr": cls.LEFT_TO_RIGHT,
            "toptobottom": cls.TOP_TO_BOTTOM,
            "tb": cls.TOP_TO_BOTTOM,
        }
        try:
            return aliases[str(value).replace("_", "").replace("-", "").lower()]
        except KeyError:
            raise ConfigurationError(
                f"Unsupported graph direction {value!r}, "
                f"expected LeftToRight or TopToBottom"
            ) from None

    @property
    def abbreviation(self) -> str:
        return "LR" if self is GraphDirection.LEFT_TO_RIGHT else "TB"


@dataclass(frozen=True)
class Color:
    """Fill and stroke color of a node."""

    fill: str
    stroke: str


@dataclass(frozen=True)
class GraphColors:
    default: Color = Color("aquamarine", "#009061")
    project: Color = Color("skyblue", "#05587C")
    unknown: Color = Color("khaki", "#8B7500")
    ignored: Color = Color("lightgray", "#7A7A7A")
    removed: Color = Color("lightcoral", "#A42A2A")

    def items(self) -> list[tuple[str, Color]]:
        return [
            ("default", self.default),
            ("project", self.project),
            ("unknown", self.unknown),
            ("ignored", self.ignored),
            ("removed", self.removed),
        ]


@dataclass(frozen=True)
class GraphOptions:
    """How a graph should be presented."""

    direction: GraphDirection = GraphDirection.LEFT_TO_RIGHT
    include_versions: bool = False
    write_ignored_packages: bool = False
    highlight_roots: bool = False
    colors: GraphColors = field(default_factory=GraphColors)

    def validate(self) -> None:
        """Raise ``ConfigurationError`` if the options cannot be rendered."""
        if not isinstance(self.direction, GraphDirection):
            raise ConfigurationError(f"Unsupported graph direction {self.direction!r}")

        for name, color in self.colors.items():
            for value in (color.fill, color.stroke):
                if not isinstance(value, str) or not _COLOR_PATTERN.match(value):
                    raise ConfigurationError(
                        f"Invalid {name} color {value!r}, "
                        f"expected a color name or a #hex value"
                    )
