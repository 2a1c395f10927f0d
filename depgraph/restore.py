"""Dependency resolution through pip."""

import json
import logging
import os
import shlex
import subprocess
import sys
from collections.abc import Iterable

from .errors import CollaboratorError, RestoreError

logger = logging.getLogger(__name__)

ENVIRONMENT_VARIABLES = {
    "PIP_DISABLE_PIP_VERSION_CHECK": "1",
    "PIP_NO_INPUT": "1",
}


def pip_command(
    targets: Iterable[str],
    python: str | None = None,
    index_url: str | None = None,
) -> list[str]:
    """Build the pip command producing an installation report on stdout."""
    command = [
        python or sys.executable,
        "-m",
        "pip",
        "install",
        "--dry-run",
        "--ignore-installed",
        "--quiet",
        "--report",
        "-",
    ]
    if index_url:
        command += ["--index-url", index_url]
    command += list(targets)
    return command


def restore(
    targets: Iterable[str],
    *,
    python: str | None = None,
    index_url: str | None = None,
    cwd: str | None = None,
    timeout: float = 600,
) -> dict:
    """Resolve ``targets`` with pip and return its installation report.

    Args:
        targets: Anything ``pip install`` accepts: project paths or requirements
        python: The interpreter whose pip is used, defaults to the current one
        index_url: Optional package index URL passed to pip
        cwd: Working directory of the pip process
        timeout: Seconds to wait for pip

    Returns:
        The decoded JSON report

    Raises:
        RestoreError: pip exited with a non-zero status
    """
    command = pip_command(targets, python, index_url)
    display = shlex.join(command)
    cwd = cwd or os.getcwd()
    logger.info(f"Running {display}")

    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            cwd=cwd,
            env={**os.environ, **ENVIRONMENT_VARIABLES},
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise CollaboratorError(f"Could not run \"{display}\": {e}") from e
    except subprocess.TimeoutExpired as e:
        raise CollaboratorError(f"Running \"{display}\" timed out after {timeout} seconds") from e

    if result.returncode != 0:
        output = result.stderr.strip() or result.stdout.strip()
        raise RestoreError(display, cwd, result.returncode, output)

    try:
        report = json.loads(result.stdout)
    except ValueError as e:
        raise CollaboratorError(f"Running \"{display}\" in \"{cwd}\" did not return a JSON report: {e}") from e
    if report is None:
        raise CollaboratorError(f"Running \"{display}\" in \"{cwd}\" returned a literal 'null' JSON payload")

    return report
