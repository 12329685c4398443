"""Value objects shared by the coordinator and the navigation engine."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import sys
from typing import Any, Dict, Optional


class RouteStatus(str, Enum):
    OK = "ok"
    INTERNAL_ERROR = "internal_error"
    NO_ROUTE_FOUND = "no_route_found"
    NETWORK_ERROR = "network_error"
    QUOTA_EXCEEDED = "quota_exceeded"
    API_KEY_NOT_AUTHORIZED = "api_key_not_authorized"
    CANCELED = "canceled"
    DUPLICATE_WAYPOINTS = "duplicate_waypoints"
    NO_WAYPOINTS = "no_waypoints"
    LOCATION_UNAVAILABLE = "location_unavailable"
    WAYPOINT_ERROR = "waypoint_error"
    TRAVEL_MODE_UNSUPPORTED = "travel_mode_unsupported"


class LocationPermission(str, Enum):
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    RESTRICTED = "restricted"
    AUTHORIZED_WHEN_IN_USE = "authorized_when_in_use"
    AUTHORIZED_ALWAYS = "authorized_always"

    @property
    def authorized(self) -> bool:
        return self in (
            LocationPermission.AUTHORIZED_WHEN_IN_USE,
            LocationPermission.AUTHORIZED_ALWAYS,
        )


class CoordinatorState(str, Enum):
    UNINITIALIZED = "uninitialized"
    TERMS_PENDING = "terms_pending"
    NO_ROUTE = "no_route"
    ROUTE_SET = "route_set"
    GUIDANCE_RUNNING = "guidance_running"


# ``slots`` support for ``dataclasses`` arrived in Python 3.10. Prefer slots
# when available but remain compatible with Python 3.9.
_DATACLASS_KWARGS = {"slots": True} if sys.version_info >= (3, 10) else {}


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class Waypoint:
    """Geographic destination handed to route calculation."""

    latitude: float
    longitude: float
    title: Optional[str] = None

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude!r}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude!r}")

    @property
    def coordinate(self) -> tuple:
        return (self.latitude, self.longitude)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "latitude": self.latitude,
            "longitude": self.longitude,
        }
        if self.title:
            payload["title"] = self.title
        return payload


@dataclass(frozen=True, **_DATACLASS_KWARGS)
class TermsAndConditionsOptions:
    """Options forwarded to the engine's consent dialog."""

    title: str
    company_name: str
    only_show_driver_awareness_disclaimer: bool = False


__all__ = [
    "CoordinatorState",
    "LocationPermission",
    "RouteStatus",
    "TermsAndConditionsOptions",
    "Waypoint",
]
