"""Detection of dependency sources and output notations."""

import json
from pathlib import Path

from .errors import ConfigurationError
from .writers import Notation

PIP_REPORT = "pip-report"
NUGET_ASSETS = "nuget-assets"

MERMAID_EXTENSIONS = (".mmd", ".mermaid")


def identify(content: str, filename: str | None = None) -> str:
    """Detect the kind of resolved dependency manifest.

    Args:
        content: The manifest file content
        filename: Optional filename for additional context

    Returns:
        Detected source: 'pip-report', 'nuget-assets' or 'unknown'
    """
    # Filename-based detection (takes precedence)
    if filename and Path(filename).name.lower() == "project.assets.json":
        return NUGET_ASSETS

    # Content-based detection
    try:
        data = json.loads(content)
    except ValueError:
        return "unknown"

    if not isinstance(data, dict):
        return "unknown"
    if isinstance(data.get("install"), list):
        return PIP_REPORT
    if "targets" in data and "project" in data:
        return NUGET_ASSETS

    return "unknown"


def notation_for(output: str | Path | None, explicit: str | Notation | None = None) -> Notation:
    """Choose the notation of a graph document.

    An explicit choice wins. Otherwise Mermaid is used for ``.mmd`` and
    ``.mermaid`` files and when there is no output file at all, Graphviz for
    any other file.
    """
    if explicit is not None:
        if isinstance(explicit, Notation):
            return explicit
        try:
            return Notation(explicit.lower())
        except ValueError:
            raise ConfigurationError(
                f"Unsupported format {explicit!r}, expected mermaid or graphviz"
            ) from None

    if output is None or str(output) == "-":
        return Notation.MERMAID
    if Path(output).suffix.lower() in MERMAID_EXTENSIONS:
        return Notation.MERMAID
    return Notation.GRAPHVIZ
