"""Reading of NuGet ``project.assets.json`` lock files."""

import json
import logging
import re

from .errors import SourceError
from .models import Dependency, PackageKind, PackageRecord, ResolvedPackages, package_key

logger = logging.getLogger(__name__)

# Short folder names of the common framework families, see
# https://learn.microsoft.com/en-us/nuget/reference/target-frameworks
_FRAMEWORK_PATTERNS = [
    (re.compile(r"^netcoreapp(\d+)\.(\d+)$"), ".NETCoreApp,Version=v{0}.{1}"),
    (re.compile(r"^netstandard(\d+)\.(\d+)$"), ".NETStandard,Version=v{0}.{1}"),
    (re.compile(r"^net([5-9]|\d{2,})\.(\d+)$"), ".NETCoreApp,Version=v{0}.{1}"),
    (re.compile(r"^net(\d)(\d)(\d)?$"), ".NETFramework,Version=v{0}.{1}{2}"),
]

_KINDS = {"package": PackageKind.PACKAGE, "project": PackageKind.PROJECT}


def framework_names(short_name: str) -> set[str]:
    """Names a target framework may appear under in the lock file."""
    names = {short_name}
    for pattern, template in _FRAMEWORK_PATTERNS:
        match = pattern.match(short_name.lower())
        if match:
            groups = match.groups()
            if template.startswith(".NETFramework"):
                full = template.format(groups[0], groups[1], f".{groups[2]}" if groups[2] else "")
            else:
                full = template.format(*groups)
            names.add(full)
            break
    return names


def _select_framework(project: dict, framework: str | None, path: str) -> tuple[str, dict]:
    frameworks = project.get("frameworks") or {}
    if framework is None:
        candidates = list(frameworks.items())
        if len(candidates) > 1:
            aliases = ", ".join(info.get("targetAlias") or key for key, info in candidates)
            raise SourceError(
                f"Multiple target frameworks are available in assets at \"{path}\" "
                f"({aliases}), specify one of them"
            )
    else:
        candidates = [
            (key, info)
            for key, info in frameworks.items()
            if (info.get("targetAlias") or key) == framework
        ]

    if not candidates:
        raise SourceError(
            f"Target framework \"{framework or '*'}\" is not available in assets at \"{path}\" "
            f"(JSON path: project.frameworks.*.targetAlias)"
        )
    if len(candidates) > 1:
        raise SourceError(
            f"Multiple target frameworks are matching \"{framework}\" in assets at \"{path}\" "
            f"(JSON path: project.frameworks.*.targetAlias)"
        )
    return candidates[0]


def _select_target(targets: dict, names: set[str], runtime: str | None, path: str) -> dict:
    matches = []
    for key, libraries in targets.items():
        framework, _, rid = key.partition("/")
        if framework in names and (rid == (runtime or "")):
            matches.append(libraries)

    target_id = sorted(names, key=len)[-1] + (f"/{runtime}" if runtime else "")
    if not matches:
        raise SourceError(
            f"Target \"{target_id}\" is not available in assets at \"{path}\" (JSON path: targets)"
        )
    if len(matches) > 1:
        raise SourceError(
            f"Multiple targets are matching \"{target_id}\" in assets at \"{path}\" (JSON path: targets)"
        )
    return matches[0]


def _parse_library(key: str, library: dict) -> PackageRecord:
    name, _, version = key.partition("/")
    dependencies = tuple(
        Dependency(dependency, version_range)
        for dependency, version_range in (library.get("dependencies") or {}).items()
    )
    return PackageRecord(
        name=name or None,
        version=version or None,
        kind=_KINDS.get(library.get("type"), PackageKind.UNKNOWN),
        dependencies=dependencies,
    )


def _project_dependency_name(dependency: str) -> str:
    # Entries look like "Serilog >= 3.1.1"
    return dependency.split(" ", 1)[0]


def read_assets(
    content: str | dict,
    framework: str | None = None,
    runtime: str | None = None,
    path: str = "project.assets.json",
) -> ResolvedPackages:
    """Read the packages of one target of a NuGet assets file.

    Args:
        content: The assets file as JSON text or as an already decoded dict
        framework: The target framework alias, optional when there is only one
        runtime: The runtime identifier, if the target is runtime specific
        path: The location of the file, used in error messages

    Returns:
        The resolved packages; the roots are the direct dependencies of the project
    """
    if isinstance(content, str):
        try:
            content = json.loads(content)
        except ValueError as e:
            raise SourceError(f"The assets file \"{path}\" is not valid JSON: {e}") from e

    project = content.get("project") or {}
    framework_key, framework_info = _select_framework(project, framework, path)
    names = framework_names(framework_key)
    target = _select_target(content.get("targets") or {}, names, runtime, path)

    records = [_parse_library(key, library) for key, library in target.items()]
    known = {package_key(record.name) for record in records if record.name}

    groups = content.get("projectFileDependencyGroups") or {}
    candidates = []
    for name in sorted(names):
        candidates += [_project_dependency_name(entry) for entry in groups.get(name, [])]
    candidates += list((framework_info.get("dependencies") or {}).keys())

    roots = []
    seen = set()
    for name in candidates:
        key = package_key(name)
        if key not in known:
            logger.debug(f"Direct dependency {name} is not part of the target")
        elif key not in seen:
            seen.add(key)
            roots.append(name)

    logger.debug(f"Read {len(records)} packages for {framework_key} from {path}")
    return ResolvedPackages(records=records, roots=roots)
