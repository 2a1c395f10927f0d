"""Removal simulation over a dependency graph."""

import logging
from collections import deque
from collections.abc import Collection, Iterable
from typing import NamedTuple

from .graph import DependencyGraph
from .models import Package, PackageState, package_key

logger = logging.getLogger(__name__)


class RemovalResult(NamedTuple):
    """Outcome of a removal request."""

    removed: set[str]
    not_found: set[str]
    removed_roots: set[str]


def simulate(
    graph: DependencyGraph,
    requested_names: Iterable[str],
    *,
    ignored_dependents_keep: bool = False,
) -> RemovalResult:
    """Mark the packages that become unnecessary when removing ``requested_names``.

    A requested package that something depends on becomes a removal target.
    Each target and its whole dependency subtree are marked as removed, then
    every package of that subtree that is a root, or that is still needed by
    a kept package without being a target itself, is restored.

    Node states are changed in place; ignored packages are left untouched.

    Args:
        graph: The graph to mark
        requested_names: Package names to remove, compared case-insensitively
        ignored_dependents_keep: Whether an ignored package keeps its own
            dependencies alive during restoration

    Returns:
        The names of the removed packages, the requested names matching no
        package and the requested names matching a root
    """
    not_found: set[str] = set()
    removed_roots: set[str] = set()
    targets: list[Package] = []
    seen: set[str] = set()

    for name in requested_names:
        key = package_key(name)
        if key in seen:
            continue
        seen.add(key)

        package = graph.get(name)
        if package is not None and graph.has_dependents(package):
            targets.append(package)
        elif package is not None and graph.is_root(package):
            removed_roots.add(name)
        else:
            not_found.add(name)

    target_set = set(targets)
    for target in targets:
        cascade_remove(graph, target)
        cascade_restore(graph, target, target_set, ignored_dependents_keep=ignored_dependents_keep)

    removed = {package.name for package in graph.packages if package.state is PackageState.REMOVE}
    logger.debug(
        f"Removal of {len(targets)} packages: {len(removed)} removed, "
        f"{len(not_found)} not found, {len(removed_roots)} roots"
    )
    return RemovalResult(removed, not_found, removed_roots)


def subtree(graph: DependencyGraph, start: Package) -> list[Package]:
    """Return ``start`` and every package reachable from it, depth first."""
    stack = [start]
    visited = {start.key}
    order = []
    while stack:
        package = stack.pop()
        order.append(package)
        for dependency in reversed(graph.dependencies_of(package)):
            if dependency.key not in visited:
                visited.add(dependency.key)
                stack.append(dependency)
    return order


def cascade_remove(graph: DependencyGraph, target: Package) -> list[Package]:
    """Mark ``target`` and its dependency subtree as removed."""
    packages = subtree(graph, target)
    for package in packages:
        if package.state is not PackageState.IGNORE:
            package.state = PackageState.REMOVE
    return packages


def cascade_restore(
    graph: DependencyGraph,
    target: Package,
    targets: Collection[Package],
    *,
    ignored_dependents_keep: bool = False,
) -> None:
    """Restore the packages of ``target``'s subtree that are still required.

    Runs until no more package can be restored: restoring a package puts its
    dependencies back on the worklist, so the outcome does not depend on the
    order in which shared subtrees are visited.
    """
    packages = subtree(graph, target)
    members = {package.key for package in packages}
    pending = deque(packages)
    queued = set(members)

    while pending:
        package = pending.popleft()
        queued.discard(package.key)
        if package.state is not PackageState.REMOVE:
            continue
        if not _is_required(graph, package, targets, ignored_dependents_keep):
            continue

        package.state = PackageState.KEEP
        for dependency in graph.dependencies_of(package):
            if dependency.key in members and dependency.key not in queued:
                queued.add(dependency.key)
                pending.append(dependency)


def _is_required(
    graph: DependencyGraph,
    package: Package,
    targets: Collection[Package],
    ignored_dependents_keep: bool,
) -> bool:
    if graph.is_root(package):
        return True
    if package in targets:
        return False

    kept = {PackageState.KEEP}
    if ignored_dependents_keep:
        kept.add(PackageState.IGNORE)
    return any(dependent.state in kept for dependent in graph.dependents_of(package))
