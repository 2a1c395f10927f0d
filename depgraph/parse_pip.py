"""Reading of pip installation reports (``pip install --report``)."""

import json
import logging

from packaging.markers import UndefinedEnvironmentName
from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from .errors import SourceError
from .models import Dependency, PackageKind, PackageRecord, ResolvedPackages

logger = logging.getLogger(__name__)


class PipReportParser:
    """Parser for the JSON installation report written by pip."""

    def __init__(self, environment: dict[str, str] | None = None):
        self.environment = environment

    def _package_kind(self, item: dict) -> PackageKind:
        """Classify an install item from its download information."""
        download_info = item.get("download_info") or {}
        if "dir_info" in download_info:
            return PackageKind.PROJECT
        if "archive_info" in download_info or "vcs_info" in download_info:
            return PackageKind.PACKAGE
        return PackageKind.UNKNOWN

    def _applies(self, req: Requirement, extras: list[str], environment: dict) -> bool:
        """Whether the marker of ``req`` holds with none or any of ``extras``."""
        if req.marker is None:
            return True

        for extra in [""] + extras:
            try:
                if req.marker.evaluate({**environment, "extra": extra}):
                    return True
            except UndefinedEnvironmentName:
                continue
        return False

    def _dependency_extras(self, items: list[dict], environment: dict) -> dict[str, set[str]]:
        """Extras each selected package is installed with, keyed by canonical name.

        pip only lists ``requested_extras`` for the requested packages; extras a
        dependent asks for (``httpx[http2]``) come from the requirements and can
        enable further extras in turn.
        """
        extras: dict[str, set[str]] = {}
        requirements: dict[str, list[Requirement]] = {}
        for item in items:
            metadata = item.get("metadata") or {}
            name = metadata.get("name")
            if not name:
                continue
            key = canonicalize_name(name)
            extras.setdefault(key, set()).update(item.get("requested_extras") or [])
            for line in metadata.get("requires_dist") or []:
                try:
                    requirements.setdefault(key, []).append(Requirement(line))
                except InvalidRequirement:
                    continue

        changed = True
        while changed:
            changed = False
            for key, reqs in requirements.items():
                for req in reqs:
                    wanted = extras.get(canonicalize_name(req.name))
                    if wanted is None or req.extras <= wanted:
                        continue
                    if self._applies(req, sorted(extras[key]), environment):
                        wanted.update(req.extras)
                        changed = True
        return extras

    def parse(self, report: dict) -> ResolvedPackages:
        """Parse a decoded installation report."""
        items = report.get("install")
        if not isinstance(items, list):
            raise SourceError("The pip report has no install list (JSON path: install)")

        environment = self.environment if self.environment is not None else report.get("environment", {})

        names: dict[str, str] = {}
        for item in items:
            name = (item.get("metadata") or {}).get("name")
            if name:
                names[canonicalize_name(name)] = name
        installed_extras = self._dependency_extras(items, environment)

        records: list[PackageRecord] = []
        roots: list[str] = []
        for item in items:
            metadata = item.get("metadata") or {}
            name = metadata.get("name")
            extras = sorted(installed_extras.get(canonicalize_name(name), ())) if name else []

            dependencies = []
            for line in metadata.get("requires_dist") or []:
                try:
                    req = Requirement(line)
                except InvalidRequirement:
                    logger.warning(f"Skipping malformed requirement {line!r}")
                    continue
                if not self._applies(req, extras, environment):
                    continue
                dependency_name = names.get(canonicalize_name(req.name))
                if dependency_name is None:
                    logger.debug(f"{name} requires {req.name} which pip did not select")
                    continue
                if any(dependency.name == dependency_name for dependency in dependencies):
                    continue
                dependencies.append(Dependency(dependency_name, str(req.specifier) or None))

            records.append(
                PackageRecord(
                    name=name,
                    version=metadata.get("version"),
                    kind=self._package_kind(item),
                    dependencies=tuple(dependencies),
                )
            )
            if item.get("requested") and name:
                roots.append(name)

        return ResolvedPackages(records=records, roots=roots)


def read_pip_report(content: str | dict, *, environment: dict[str, str] | None = None) -> ResolvedPackages:
    """Read a pip installation report.

    Args:
        content: The report as JSON text or as an already decoded dict
        environment: Marker environment overriding the report's own

    Returns:
        The resolved packages; the roots are the requested ones
    """
    if isinstance(content, str):
        try:
            content = json.loads(content)
        except ValueError as e:
            raise SourceError(f"The pip report is not valid JSON: {e}") from e

    parser = PipReportParser(environment)
    return parser.parse(content)
