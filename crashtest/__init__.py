"""Navigation session lifecycle coordinator and crash reproduction driver."""
from __future__ import annotations

from importlib import import_module
from typing import Any, List

# Public name -> defining submodule; resolved on first access.
_EXPORTS = {
    "CrashTestConfig": ".config",
    "SessionCoordinator": ".session",
    "SessionManagerError": ".errors",
    "RouteStatus": ".models",
    "Waypoint": ".models",
    "read_version": ".versioning",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> Any:  # pragma: no cover - import proxy
    try:
        module = _EXPORTS[name]
    except KeyError:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}") from None
    return getattr(import_module(module, __name__), name)


def __dir__() -> List[str]:  # pragma: no cover
    return sorted(set(globals()) | set(__all__))
