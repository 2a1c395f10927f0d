"""CLI application for depgraph."""

import asyncio
import logging
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from depgraph.detect import NUGET_ASSETS, PIP_REPORT, identify, notation_for
from depgraph.errors import ConfigurationError, DepGraphError, SourceError
from depgraph.graph import DependencyGraph, build_graph
from depgraph.mermaid import EditorMode, live_editor_url
from depgraph.models import ResolvedPackages
from depgraph.options import GraphDirection, GraphOptions
from depgraph.parse_assets import read_assets
from depgraph.parse_pip import read_pip_report
from depgraph.removal import RemovalResult
from depgraph.resolve_pypi import DEFAULT_INDEX_URL, PackageResolver
from depgraph.restore import restore
from depgraph.writers import GraphWriter, Notation

console = Console()
err_console = Console(stderr=True)

PROJECT_FILES = ("pyproject.toml", "setup.py", "setup.cfg")

EX_USAGE = 64
EX_SOFTWARE = 70


def get_version() -> str:
    try:
        return version("depgraph")
    except PackageNotFoundError:
        return "0.0.0"


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    if value:
        console.print(f"depgraph {get_version()}")
        raise typer.Exit()


def describe_source(sources: list[str]) -> str:
    if not sources:
        return str(Path.cwd())
    return ", ".join(sources)


def read_manifest(path: Path, framework: str | None, runtime: str | None) -> ResolvedPackages | None:
    """Read a resolved manifest file, ``None`` if the file is not one."""
    content = path.read_text()
    source = identify(content, path.name)
    if source == PIP_REPORT:
        return read_pip_report(content)
    if source == NUGET_ASSETS:
        return read_assets(content, framework, runtime, str(path))
    return None


def resolve_project(
    path: Path,
    framework: str | None,
    runtime: str | None,
    python: str | None,
    index_url: str | None,
) -> ResolvedPackages:
    """Read the resolved packages of a project directory or file."""
    if path.is_dir():
        assets = path / "obj" / "project.assets.json"
        if assets.is_file():
            return read_manifest(assets, framework, runtime)
        return read_pip_report(restore([str(path.resolve())], python=python, index_url=index_url))

    resolved = read_manifest(path, framework, runtime) if path.suffix.lower() == ".json" else None
    if resolved is not None:
        return resolved
    if path.name in PROJECT_FILES:
        return read_pip_report(restore([str(path.resolve().parent)], python=python, index_url=index_url))
    if path.suffix.lower() == ".txt":
        return read_pip_report(restore(["-r", str(path.resolve())], python=python, index_url=index_url))

    raise SourceError(f"Unsupported source {path}, expected a project, a requirements file or a resolved manifest")


def resolve_packages(
    package_ids: list[str],
    python: str | None,
    index_url: str | None,
    max_concurrency: int,
) -> ResolvedPackages:
    """Resolve package ids on the index, then their dependencies with pip."""
    resolver = PackageResolver(
        index_url=to_json_api(index_url) if index_url else DEFAULT_INDEX_URL,
        max_concurrency=max_concurrency,
    )
    identities = asyncio.run(resolver.resolve_all(package_ids))
    report = restore([identity.requirement for identity in identities], python=python, index_url=index_url)
    return read_pip_report(report)


def to_json_api(index_url: str) -> str:
    """Turn a simple index URL (``.../simple``) into its JSON API base URL."""
    index_url = index_url.rstrip("/")
    if index_url.endswith("/simple"):
        return index_url[: -len("/simple")] + "/pypi"
    return index_url


def compute_graph(
    sources: list[str],
    framework: str | None,
    runtime: str | None,
    ignore: list[str],
    include_version: bool,
    python: str | None,
    index_url: str | None,
    parallel: int,
) -> DependencyGraph:
    if len(sources) <= 1:
        path = Path(sources[0]) if sources else Path.cwd()
        if path.exists():
            resolved = resolve_project(path, framework, runtime, python, index_url)
            return build_graph(resolved.records, resolved.roots, ignores=ignore, require_versions=include_version)

    resolved = resolve_packages(sources, python, index_url, parallel)
    return build_graph(resolved.records, resolved.roots, ignores=ignore, require_versions=include_version)


def format_removal(result: RemovalResult) -> list[str]:
    """Describe the outcome of a removal request, one line per category."""
    lines = []
    if result.not_found:
        lines.append(f"[yellow]Packages not found:[/] {', '.join(sorted(result.not_found, key=str.casefold))}")
    if result.removed_roots:
        lines.append(
            f"[yellow]Direct dependencies cannot be removed:[/] "
            f"{', '.join(sorted(result.removed_roots, key=str.casefold))}"
        )
    if result.removed:
        lines.append(f"[red]Removed packages:[/] {', '.join(sorted(result.removed, key=str.casefold))}")
    else:
        lines.append("No package would be removed")
    return lines


app = typer.Typer(
    name="depgraph",
    help="depgraph - Generate and prune dependency graphs of projects and packages",
    add_completion=False,
)


@app.command()
def graph(
    sources: list[str] | None = typer.Argument(
        None,
        help="A project directory, a project or requirements file, a resolved manifest "
        "(pip report or project.assets.json) or names of packages such as rich/13.7.1",
        show_default=False,
    ),
    output: str | None = typer.Option(
        None, "--output", "-o",
        help="Path of the graph file (use '-' for stdout). If not specified, "
        "a Mermaid Live Editor URL is printed and opened in the browser.",
    ),
    framework: str | None = typer.Option(None, "--framework", "-f", help="Target framework of a project.assets.json"),
    runtime: str | None = typer.Option(None, "--runtime", "-r", help="Runtime identifier of a project.assets.json"),
    mode: str = typer.Option("view", "--mode", "-m", help="Mermaid Live Editor mode: view or edit"),
    direction: str = typer.Option("LeftToRight", "--direction", "-d", help="LeftToRight or TopToBottom"),
    include_version: bool = typer.Option(False, "--include-version", "-v", help="Include package versions, e.g. rich/13.7.1"),
    ignore: list[str] | None = typer.Option(None, "--ignore", "-i", help="Package to ignore, may be repeated"),
    remove: list[str] | None = typer.Option(None, "--remove", "-x", help="Package to remove, may be repeated"),
    format_type: str | None = typer.Option(None, "--format", help="mermaid or graphviz, defaults from the output extension"),
    include_ignored: bool = typer.Option(False, "--include-ignored-packages", hidden=True, help="Include ignored packages"),
    highlight_roots: bool = typer.Option(False, "--highlight-roots", help="Draw direct dependencies with a thick border"),
    parallel: int = typer.Option(16, "--parallel", hidden=True, min=1, help="Maximum concurrent index requests"),
    index_url: str | None = typer.Option(None, "--index-url", envvar="DEPGRAPH_INDEX_URL", help="Package index URL"),
    python: str | None = typer.Option(None, "--python", envvar="DEPGRAPH_PYTHON", help="Interpreter used to run pip"),
    no_browser: bool = typer.Option(False, "--no-browser", help="Only print the Mermaid Live Editor URL"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logs"),
    show_version: bool = typer.Option(
        False, "--version", "-V", callback=version_callback, is_eager=True, help="Print version information"
    ),
) -> None:
    """depgraph - Generate dependency graphs of projects and packages."""
    configure_logging(verbose)
    sources = sources or []
    ignore = ignore or []
    source = describe_source(sources)

    try:
        # Validate presentation before any work
        options = GraphOptions(
            direction=GraphDirection.parse(direction),
            include_versions=include_version,
            write_ignored_packages=include_ignored,
            highlight_roots=highlight_roots,
        )
        options.validate()
        notation = notation_for(output, format_type)
        try:
            editor_mode = EditorMode(mode.lower())
        except ValueError:
            raise ConfigurationError(f"Unsupported mode {mode!r}, expected view or edit") from None

        with err_console.status(f"Generating dependency graph for {source}"):
            dependency_graph = compute_graph(
                sources, framework, runtime, ignore, include_version, python, index_url, parallel
            )

        if remove:
            result = dependency_graph.remove(remove)
            for line in format_removal(result):
                err_console.print(line)

        document = GraphWriter(notation).render(dependency_graph, options)

        if output is None and notation is Notation.MERMAID:
            url = live_editor_url(document, editor_mode)
            console.print(url, soft_wrap=True, markup=False, highlight=False)
            if not no_browser:
                typer.launch(url)
        elif output is None or output == "-":
            typer.echo(document, nl=False)
        else:
            path = Path(output)
            path.write_text(document)
            console.print(
                f"The {source} dependency graph has been written to [green]{path.resolve().as_uri()}[/]",
                soft_wrap=True,
            )

    except typer.Exit:
        raise
    except ConfigurationError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}", highlight=False)
        raise typer.Exit(EX_USAGE)
    except DepGraphError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}", highlight=False)
        raise typer.Exit(1)
    except Exception:
        err_console.print_exception()
        raise typer.Exit(EX_SOFTWARE)


if __name__ == "__main__":
    app()
