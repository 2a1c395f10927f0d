"""Resolution of package identities on a PyPI compatible index."""

import asyncio
import logging
from dataclasses import dataclass

import httpx
from packaging.version import InvalidVersion, Version

from .errors import CollaboratorError, PackageNotFoundError, SourceError

logger = logging.getLogger(__name__)

DEFAULT_INDEX_URL = "https://pypi.org/pypi"


@dataclass(frozen=True)
class PackageIdentityRequest:
    """A package name with an optional version, as typed by the user."""

    name: str
    version: Version | None = None

    def __str__(self):
        return self.name if self.version is None else f"{self.name}/{self.version}"


@dataclass(frozen=True)
class PackageIdentity:
    """A package name pinned to an existing version."""

    name: str
    version: str

    def __str__(self):
        return f"{self.name}/{self.version}"

    @property
    def requirement(self) -> str:
        return f"{self.name}=={self.version}"


def parse_package_id(package_id: str) -> PackageIdentityRequest:
    """Parse ``name`` or ``name/version`` (``name==version`` is accepted too)."""
    separator = "/" if "/" in package_id else "=="
    parts = package_id.split(separator)
    if len(parts) == 2:
        name, version = parts[0].strip(), parts[1].strip()
        try:
            return PackageIdentityRequest(name, Version(version))
        except InvalidVersion:
            raise SourceError(
                f"Version {version} for package {name} is not a valid version."
            ) from None

    return PackageIdentityRequest(package_id.strip())


class PackageResolver:
    """Resolver for package identities."""

    def __init__(
        self,
        index_url: str = DEFAULT_INDEX_URL,
        timeout: float = 30.0,
        max_concurrency: int = 16,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the resolver.

        Args:
            index_url: Base URL of the JSON API (``<index_url>/<name>/json``)
            timeout: Request timeout in seconds
            max_concurrency: Maximum concurrent requests
            transport: Optional httpx transport, mostly for tests
        """
        self.index_url = index_url.rstrip("/")
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self.transport = transport
        self._cache: dict[str, dict | None] = {}
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def resolve(self, package_id: str) -> PackageIdentity:
        """Resolve a package id to an existing package version.

        Args:
            package_id: A package name, optionally with a version such as ``rich/13.7.1``

        Returns:
            The package identity. Without a version, the latest release is
            used; the latest pre-release if the package only has pre-releases.

        Raises:
            PackageNotFoundError: The package (or version) is not on the index
        """
        request = parse_package_id(package_id)

        async with self._semaphore:
            if request.version is not None:
                logger.debug(f"Verifying if {request} exists in {self.index_url}")
                metadata = await self._fetch_package_metadata(request.name, str(request.version))
                logger.debug(f"  => {request} {'found' if metadata else 'not found'}")
                if not metadata:
                    raise PackageNotFoundError(str(request), [self.index_url])
                return PackageIdentity(metadata["info"]["name"], metadata["info"]["version"])

            logger.debug(f"Getting latest version of {request} in {self.index_url}")
            metadata = await self._fetch_package_metadata(request.name)
            if not metadata:
                raise PackageNotFoundError(str(request), [self.index_url])

            version = self.select_latest_version(metadata)
            logger.debug(f"  => {request}{' not found' if version is None else f'/{version}'}")
            if version is None:
                raise PackageNotFoundError(str(request), [self.index_url])
            return PackageIdentity(metadata["info"]["name"], str(version))

    async def resolve_all(self, package_ids: list[str]) -> list[PackageIdentity]:
        """Resolve multiple package ids concurrently.

        Cancelling the returned awaitable cancels all outstanding requests.
        """
        tasks = [self.resolve(package_id) for package_id in package_ids]
        return await asyncio.gather(*tasks)

    @staticmethod
    def select_latest_version(metadata: dict) -> Version | None:
        """Pick the latest release, falling back to the latest pre-release."""
        releases: list[Version] = []
        prereleases: list[Version] = []
        for version_str, files in (metadata.get("releases") or {}).items():
            if not files or all(file_info.get("yanked") for file_info in files):
                continue
            try:
                version = Version(version_str)
            except InvalidVersion:
                continue  # Skip invalid versions
            (prereleases if version.is_prerelease else releases).append(version)

        if releases:
            return max(releases)
        if prereleases:
            return max(prereleases)
        return None

    async def _fetch_package_metadata(self, package_name: str, version: str | None = None) -> dict | None:
        """Fetch package metadata from the index.

        Args:
            package_name: Name of the package
            version: Optional version, to fetch the metadata of that release only

        Returns:
            Package metadata dict or None if not found
        """
        path = package_name if version is None else f"{package_name}/{version}"
        if path in self._cache:
            return self._cache[path]

        url = f"{self.index_url}/{path}/json"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(url, follow_redirects=True)
                if response.status_code == 404:
                    self._cache[path] = None
                    return None
                response.raise_for_status()

                metadata = response.json()
                self._cache[path] = metadata
                return metadata

        except httpx.TimeoutException as e:
            raise CollaboratorError(f"Timeout fetching metadata for {package_name}") from e
        except httpx.HTTPStatusError as e:
            raise CollaboratorError(f"HTTP error fetching {package_name}: {e}") from e
        except httpx.HTTPError as e:
            raise CollaboratorError(f"Network error fetching {package_name}: {e}") from e
