"""Pytest configuration and fixtures."""

import pytest

from depgraph.graph import build_graph
from depgraph.models import Dependency, PackageKind, PackageRecord


def record(name, version="1.0.0", *dependencies, kind=PackageKind.PACKAGE):
    """Shorthand for a package record depending on ``dependencies``."""
    return PackageRecord(
        name=name,
        version=version,
        kind=kind,
        dependencies=tuple(Dependency(dependency) for dependency in dependencies),
    )


@pytest.fixture
def make_record():
    return record


@pytest.fixture
def diamond_records():
    """root -> A, root -> B, A -> C, B -> C."""
    return [
        record("root", "1.0.0", "A", "B", kind=PackageKind.PROJECT),
        record("A", "1.0.0", "C"),
        record("B", "2.0.0", "C"),
        record("C", "3.0.0"),
    ]


@pytest.fixture
def diamond_graph(diamond_records):
    return build_graph(diamond_records, ["root"])


@pytest.fixture
def sample_pip_report():
    """A pip installation report for a local project depending on rich."""
    return {
        "version": "1",
        "pip_version": "24.0",
        "install": [
            {
                "download_info": {"url": "file:///work/app", "dir_info": {}},
                "is_direct": True,
                "requested": True,
                "metadata": {
                    "name": "app",
                    "version": "0.1.0",
                    "requires_dist": ["rich>=13", "pytest; extra == 'test'"],
                },
            },
            {
                "download_info": {
                    "url": "https://files.pythonhosted.org/rich-13.7.1-py3-none-any.whl",
                    "archive_info": {"hashes": {"sha256": "0"}},
                },
                "is_direct": False,
                "requested": False,
                "metadata": {
                    "name": "rich",
                    "version": "13.7.1",
                    "requires_dist": [
                        "markdown-it-py>=2.2.0",
                        "pygments<3.0.0,>=2.13.0",
                        "typing-extensions>=4.0.0; python_version < '3.9'",
                        "ipywidgets>=7.5.1; extra == 'jupyter'",
                    ],
                },
            },
            {
                "download_info": {
                    "url": "https://files.pythonhosted.org/markdown_it_py-3.0.0-py3-none-any.whl",
                    "archive_info": {},
                },
                "requested": False,
                "metadata": {
                    "name": "markdown-it-py",
                    "version": "3.0.0",
                    "requires_dist": ["mdurl~=0.1"],
                },
            },
            {
                "download_info": {
                    "url": "https://files.pythonhosted.org/mdurl-0.1.2-py3-none-any.whl",
                    "archive_info": {},
                },
                "requested": False,
                "metadata": {"name": "mdurl", "version": "0.1.2"},
            },
            {
                "download_info": {
                    "url": "https://files.pythonhosted.org/pygments-2.17.2-py3-none-any.whl",
                    "archive_info": {},
                },
                "requested": False,
                "metadata": {"name": "Pygments", "version": "2.17.2"},
            },
        ],
        "environment": {
            "implementation_name": "cpython",
            "python_version": "3.12",
            "python_full_version": "3.12.1",
            "sys_platform": "linux",
            "platform_system": "Linux",
            "os_name": "posix",
        },
    }


@pytest.fixture
def sample_assets():
    """A minimal NuGet project.assets.json for a net8.0 project."""
    return {
        "version": 3,
        "targets": {
            ".NETCoreApp,Version=v8.0": {
                "Serilog/3.1.1": {"type": "package"},
                "Serilog.Sinks.Console/5.0.1": {
                    "type": "package",
                    "dependencies": {"Serilog": "3.1.1"},
                },
                "Company.Shared/1.0.0": {
                    "type": "project",
                    "dependencies": {"Serilog": "3.1.1"},
                },
            },
            ".NETCoreApp,Version=v8.0/linux-x64": {
                "Serilog/3.1.1": {"type": "package"},
            },
        },
        "projectFileDependencyGroups": {
            "net8.0": ["Serilog.Sinks.Console >= 5.0.1", "Company.Shared >= 1.0.0"],
        },
        "project": {
            "version": "1.0.0",
            "frameworks": {
                "net8.0": {
                    "targetAlias": "net8.0",
                    "dependencies": {
                        "Serilog.Sinks.Console": {"target": "Package", "version": "[5.0.1, )"},
                    },
                },
            },
        },
    }
