"""Configuration model for the crash-test driver."""
from __future__ import annotations

from dataclasses import dataclass, field
import os
import sys
from typing import FrozenSet, Optional

from .models import LocationPermission, Waypoint


# ``slots`` support for ``dataclasses`` was added in Python 3.10. Keep using
# slots where available, but remain compatible with Python 3.9.
_DATACLASS_KWARGS = {"slots": True} if sys.version_info >= (3, 10) else {}

ENV_PREFIX = "CRASHTEST"
_FALSE_VALUES = {"0", "false", "False", "no", "off"}


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}_{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(f"{ENV_PREFIX}_{name}")
    if value is None:
        return default
    return value.strip() not in _FALSE_VALUES


def _env_timeout(name: str, default: str) -> Optional[float]:
    value = _env(name, default).strip()
    if value.lower() in {"", "none"}:
        return None
    timeout = float(value)
    if timeout < 0:
        raise ValueError(f"{ENV_PREFIX}_{name} must be non-negative, got {value!r}")
    return timeout or None


@dataclass(**_DATACLASS_KWARGS)
class CrashTestConfig:
    abnormal_termination_reporting: bool = True
    terms_title: str = "Navigation Terms"
    company_name: str = "Test Company"
    disclaimer_only: bool = False
    route_timeout_s: Optional[float] = 30.0
    guidance_delay_s: float = 1.0
    destination_lat: float = 37.791957
    destination_lon: float = -122.412529
    destination_title: str = "Grace Cathedral"
    locale: str = "en_US"
    crash_locales: FrozenSet[str] = field(default_factory=lambda: frozenset({"he_IL", "ar_SA"}))
    route_latency_s: float = 0.2
    location_permission: LocationPermission = LocationPermission.AUTHORIZED_WHEN_IN_USE

    @property
    def destination(self) -> Waypoint:
        return Waypoint(
            latitude=self.destination_lat,
            longitude=self.destination_lon,
            title=self.destination_title,
        )

    @classmethod
    def from_env(cls) -> "CrashTestConfig":
        crash_locales = _env("CRASH_LOCALES", "he_IL,ar_SA")
        return cls(
            abnormal_termination_reporting=_env_bool("ABNORMAL_TERMINATION_REPORTING", True),
            terms_title=_env("TERMS_TITLE", "Navigation Terms"),
            company_name=_env("COMPANY_NAME", "Test Company"),
            disclaimer_only=_env_bool("DISCLAIMER_ONLY", False),
            route_timeout_s=_env_timeout("ROUTE_TIMEOUT_S", "30.0"),
            guidance_delay_s=float(_env("GUIDANCE_DELAY_S", "1.0")),
            destination_lat=float(_env("DEST_LAT", "37.791957")),
            destination_lon=float(_env("DEST_LON", "-122.412529")),
            destination_title=_env("DEST_TITLE", "Grace Cathedral"),
            locale=_env("LOCALE", "en_US"),
            crash_locales=frozenset(
                item.strip() for item in crash_locales.split(",") if item.strip()
            ),
            route_latency_s=float(_env("ROUTE_LATENCY_S", "0.2")),
            location_permission=LocationPermission(
                _env("LOCATION_PERMISSION", LocationPermission.AUTHORIZED_WHEN_IN_USE.value)
            ),
        )


__all__ = ["CrashTestConfig", "ENV_PREFIX"]
