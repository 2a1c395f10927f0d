"""Exceptions raised by depgraph."""


class DepGraphError(Exception):
    """Base class for all depgraph errors."""


class ConstructionError(DepGraphError):
    """The resolved package list is structurally inconsistent."""


class MissingIdentityError(ConstructionError):
    def __init__(self, name: str | None, field: str):
        self.name = name
        self.field = field
        if name:
            message = f'The package "{name}" must have a {field}'
        else:
            message = f"A package must have a {field}"
        super().__init__(message)


class UnresolvedEdgeError(ConstructionError):
    def __init__(self, package: str, dependency: str):
        self.package = package
        self.dependency = dependency
        super().__init__(
            f'The package "{package}" depends on "{dependency}" '
            f"which is not part of the resolved packages"
        )


class UnknownRootError(ConstructionError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f'The root "{name}" is not part of the resolved packages')


class DuplicatePackageError(ConstructionError):
    def __init__(self, name: str, versions: tuple[str | None, str | None]):
        self.name = name
        self.versions = versions
        super().__init__(
            f'The package "{name}" appears with two versions: '
            f"{versions[0]} and {versions[1]}"
        )


class ConfigurationError(DepGraphError):
    """Invalid combination of presentation options."""


class SourceError(DepGraphError):
    """A dependency source could not be read or understood."""


class CollaboratorError(DepGraphError):
    """An external tool or service failed."""


class RestoreError(CollaboratorError):
    def __init__(self, command: str, cwd: str, exit_code: int, output: str):
        self.command = command
        self.cwd = cwd
        self.exit_code = exit_code
        self.output = output
        super().__init__(
            f'Running "{command}" in "{cwd}" failed with exit code {exit_code}.\n{output}'
        )


class PackageNotFoundError(CollaboratorError):
    def __init__(self, package_id: str, sources: list[str]):
        self.package_id = package_id
        self.sources = sources
        if len(sources) == 1:
            message = f"Package {package_id} was not found in {sources[0]}"
        else:
            message = (
                f"Package {package_id} was not found. "
                f"The following sources were searched {', '.join(sources)}"
            )
        super().__init__(message)
