"""Core data models for depgraph."""

from dataclasses import dataclass
from enum import Enum


class PackageKind(Enum):
    """Where a resolved package comes from."""

    PACKAGE = "package"  # fetched from a registry
    PROJECT = "project"  # local project reference
    UNKNOWN = "unknown"


class PackageState(Enum):
    """Presentation state of a node, set by the removal simulator."""

    KEEP = "keep"
    REMOVE = "remove"
    IGNORE = "ignore"


@dataclass(frozen=True)
class Dependency:
    """A dependency as declared by a package."""

    name: str
    version_range: str | None = None


@dataclass(frozen=True)
class PackageRecord:
    """One entry of a resolved package list."""

    name: str | None
    version: str | None
    kind: PackageKind = PackageKind.PACKAGE
    dependencies: tuple[Dependency, ...] = ()


@dataclass(eq=False)
class Package:
    """A node of the dependency graph.

    Identity is the package name compared case-insensitively, so a
    ``Package`` can be used as a set member or a dict key regardless of
    how its name was spelled in the input.
    """

    name: str
    version: str | None = None
    kind: PackageKind = PackageKind.PACKAGE
    state: PackageState = PackageState.KEEP

    @property
    def key(self) -> str:
        return package_key(self.name)

    @property
    def is_project_reference(self) -> bool:
        return self.kind is PackageKind.PROJECT

    def package_id(self, include_versions: bool = False) -> str:
        """Return the display identifier, ``name/version`` or ``name``."""
        if include_versions and self.version:
            return f"{self.name}/{self.version}"
        return self.name

    def __eq__(self, other):
        if not isinstance(other, Package):
            return NotImplemented
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def __str__(self):
        return self.package_id(include_versions=True)


@dataclass
class ResolvedPackages:
    """Output of a source reader: the records and the names of the roots."""

    records: list[PackageRecord]
    roots: list[str]


def package_key(name: str) -> str:
    """Normalize a package name into a graph handle."""
    return name.casefold()
