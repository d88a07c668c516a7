"""
Package version.

A source checkout reports the ``[project]`` version of its own
``pyproject.toml``, so an editable install never shows stale metadata.
Anything else reports the installed distribution's version.
"""

from __future__ import annotations

import tomllib
from importlib import metadata
from pathlib import Path

DISTRIBUTION = "shepimport"
UNKNOWN_VERSION = "0.0.0"

# src/shepimport/_version.py -> repository root
CHECKOUT_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def checkout_version(pyproject: Path) -> str | None:
    """The version in `pyproject` when it describes this distribution, else None."""
    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return None
    project = data.get("project", {})
    if project.get("name") != DISTRIBUTION:
        return None
    version = project.get("version")
    return str(version) if version else None


def get_version(pyproject: Path = CHECKOUT_PYPROJECT) -> str:
    version = checkout_version(pyproject)
    if version is not None:
        return version
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return UNKNOWN_VERSION


__version__ = get_version()
