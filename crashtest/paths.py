"""Filesystem locations used by the crash-test driver.

Everything lives under ``~/.crashtest`` unless ``CRASHTEST_HOME`` points
elsewhere.  Values are resolved on each call so a test can redirect them
with an environment variable after import.
"""
from __future__ import annotations

import os
from pathlib import Path

__all__ = ["home_dir", "log_file", "version_file"]


def home_dir() -> Path:
    return Path(os.environ.get("CRASHTEST_HOME", "~/.crashtest")).expanduser()


def log_file() -> Path:
    override = os.environ.get("CRASHTEST_LOG_FILE")
    return Path(override) if override else home_dir() / "logs" / "crashtest.log"


def version_file() -> Path:
    return home_dir() / "VERSION.txt"
