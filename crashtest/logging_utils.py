"""Logging helpers for the crash-test driver."""
from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
from typing import List

from .paths import log_file as default_log_file

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def resolve_level(name: str | None = None) -> int:
    """Map ``CRASHTEST_LOG_LEVEL`` (or ``name``) to a logging level, INFO by default."""

    value = (name or os.environ.get("CRASHTEST_LOG_LEVEL") or "INFO").upper()
    level = logging.getLevelName(value)
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {value!r}")
    return level


def setup_logging(*, level: str | None = None, log_file: Path | None = None) -> List[logging.Handler]:
    """Send driver logs to stdout and a rotating file.

    A crash run should leave a trace on disk, hence the file handler
    (2 MiB, five backups).  If the root logger is already configured, for
    instance by a test runner, nothing is added and an empty list returned.
    """

    root = logging.getLogger()
    if root.handlers:
        return []

    target = log_file or default_log_file()
    target.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    handlers: List[logging.Handler] = [
        logging.StreamHandler(),
        RotatingFileHandler(target, maxBytes=2 * 1024 * 1024, backupCount=5),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(resolve_level(level))
    return handlers


__all__ = ["LOG_FORMAT", "resolve_level", "setup_logging"]
