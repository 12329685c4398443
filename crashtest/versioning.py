"""Utilities for dealing with the driver version."""
from __future__ import annotations

from importlib import metadata
from pathlib import Path

from .paths import version_file


def read_version(path: Path | None = None) -> str:
    """Return the deployed version, falling back to the installed distribution."""

    target = path or version_file()
    try:
        return target.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        pass
    try:
        return metadata.version("crashtest")
    except metadata.PackageNotFoundError:
        return "0.0.1-dev"


__all__ = ["read_version"]
