"""Dependency graph construction."""

import logging
from collections.abc import Callable, Iterable, Iterator

from .errors import (
    DuplicatePackageError,
    MissingIdentityError,
    UnknownRootError,
    UnresolvedEdgeError,
)
from .models import Package, PackageRecord, PackageState, package_key

logger = logging.getLogger(__name__)


class DependencyGraph:
    """A resolved package graph with forward and reverse adjacency.

    Nodes are stored once, keyed by their case-folded name. Both adjacency
    maps hold those keys, never the nodes themselves, so changing the state
    of a node is visible through every map. The structure is fixed after
    construction; only node states change.
    """

    def __init__(
        self,
        packages: dict[str, Package],
        dependencies: dict[str, set[str]],
        roots: set[str],
    ):
        self._packages = packages
        self._dependencies = {key: set(deps) for key, deps in dependencies.items()}
        self._dependents: dict[str, set[str]] = {key: set() for key in packages}
        for key, deps in self._dependencies.items():
            for dependency in deps:
                self._dependents[dependency].add(key)
        self._roots = set(roots)

    def __len__(self) -> int:
        return len(self._packages)

    def __contains__(self, name: object) -> bool:
        if isinstance(name, Package):
            name = name.name
        return isinstance(name, str) and package_key(name) in self._packages

    def __iter__(self) -> Iterator[Package]:
        return iter(self.packages)

    @property
    def packages(self) -> list[Package]:
        """All nodes, sorted by key."""
        return [self._packages[key] for key in sorted(self._packages)]

    @property
    def roots(self) -> list[Package]:
        return [self._packages[key] for key in sorted(self._roots)]

    def get(self, name: str) -> Package | None:
        return self._packages.get(package_key(name))

    def is_root(self, package: Package) -> bool:
        return package.key in self._roots

    def dependencies_of(self, package: Package) -> list[Package]:
        """Direct dependencies of ``package``, sorted by key."""
        keys = self._dependencies.get(package.key, ())
        return [self._packages[key] for key in sorted(keys)]

    def dependents_of(self, package: Package) -> list[Package]:
        """Packages directly depending on ``package``, sorted by key."""
        keys = self._dependents.get(package.key, ())
        return [self._packages[key] for key in sorted(keys)]

    def has_dependents(self, package: Package) -> bool:
        return bool(self._dependents.get(package.key))

    def edges(self) -> Iterator[tuple[Package, Package]]:
        """Yield every (package, dependency) pair in a deterministic order."""
        for package in self.packages:
            for dependency in self.dependencies_of(package):
                yield package, dependency

    def remove(self, names: Iterable[str], *, ignored_dependents_keep: bool = False):
        """Simulate the removal of ``names``; see :func:`depgraph.removal.simulate`."""
        from .removal import simulate

        return simulate(self, names, ignored_dependents_keep=ignored_dependents_keep)


def build_graph(
    records: Iterable[PackageRecord],
    root_names: Iterable[str],
    *,
    ignores: Iterable[str] = (),
    include: Callable[[PackageRecord], bool] | None = None,
    require_versions: bool = True,
) -> DependencyGraph:
    """Build a dependency graph from a resolved package list.

    Args:
        records: The resolved packages and their declared dependencies
        root_names: Names of the packages directly required by the subject
        ignores: Names of packages to mark as ignored
        include: Optional predicate restricting the graph to some packages;
            dependencies on excluded packages are dropped
        require_versions: Whether every record must carry a version

    Returns:
        The constructed graph

    Raises:
        MissingIdentityError: A record has no name, or no version when required
        DuplicatePackageError: A name appears twice with different versions
        UnresolvedEdgeError: A dependency does not match any record
        UnknownRootError: A root name does not match any record
    """
    records_by_key: dict[str, PackageRecord] = {}
    for record in records:
        if not record.name:
            raise MissingIdentityError(None, "name")
        if require_versions and not record.version:
            raise MissingIdentityError(record.name, "version")

        key = package_key(record.name)
        existing = records_by_key.get(key)
        if existing is None:
            records_by_key[key] = record
        elif existing.version != record.version:
            raise DuplicatePackageError(record.name, (existing.version, record.version))
        else:
            logger.debug(f"Skipping duplicate record for {record.name}")

    excluded = set()
    if include is not None:
        excluded = {key for key, record in records_by_key.items() if not include(record)}

    packages: dict[str, Package] = {}
    for key, record in records_by_key.items():
        if key not in excluded:
            packages[key] = Package(record.name, record.version, record.kind)

    dependencies: dict[str, set[str]] = {}
    for key, package in packages.items():
        targets = set()
        for dependency in records_by_key[key].dependencies:
            dependency_key = package_key(dependency.name)
            if dependency_key in excluded:
                continue
            if dependency_key not in packages:
                raise UnresolvedEdgeError(package.name, dependency.name)
            targets.add(dependency_key)
        if targets:
            dependencies[key] = targets

    roots = set()
    for name in root_names:
        key = package_key(name)
        if key in excluded:
            logger.debug(f"Root {name} is excluded from the graph")
        elif key in packages:
            roots.add(key)
        else:
            raise UnknownRootError(name)

    for name in ignores:
        package = packages.get(package_key(name))
        if package is None:
            logger.warning(f"Ignored package {name} is not part of the graph")
        else:
            package.state = PackageState.IGNORE

    logger.debug(
        f"Built graph with {len(packages)} packages, {len(roots)} roots "
        f"and {sum(len(deps) for deps in dependencies.values())} edges"
    )
    return DependencyGraph(packages, dependencies, roots)
