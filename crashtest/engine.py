"""Capability interfaces of the external navigation engine.

The coordinator never depends on a concrete engine.  Anything that exposes
the attributes and methods below (the vendor bindings, the in-process
simulator, or a test double) can be handed to
:class:`crashtest.session.SessionCoordinator`.
"""
from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from typing_extensions import Protocol, runtime_checkable

from .models import LocationPermission, RouteStatus, TermsAndConditionsOptions, Waypoint


@runtime_checkable
class NavigatorListener(Protocol):
    """Navigation events published by a :class:`Navigator`."""

    def on_arrival(self, navigator: Any, waypoint: Waypoint) -> None:
        ...

    def on_route_changed(self, navigator: Any) -> None:
        ...

    def on_remaining_time_updated(self, navigator: Any, seconds: float) -> None:
        ...

    def on_remaining_distance_updated(self, navigator: Any, meters: float) -> None:
        ...

    def on_speed_alert(self, navigator: Any, severity: str, percentage_above_limit: float) -> None:
        ...

    def on_nav_info_updated(self, navigator: Any, nav_info: Any) -> None:
        ...

    def on_prompt_will_present(self, navigator: Any) -> None:
        ...

    def on_prompt_dismissed(self, navigator: Any) -> None:
        ...


@runtime_checkable
class RoadSnappedLocationListener(Protocol):
    def on_road_snapped_location(self, provider: Any, location: Any) -> None:
        ...


class Navigator(Protocol):
    is_guidance_active: bool
    stop_guidance_at_arrival: bool
    time_update_threshold: float
    distance_update_threshold: float

    def set_destinations(
        self,
        waypoints: Sequence[Waypoint],
        completion: Callable[[RouteStatus], None],
    ) -> None:
        """Start an asynchronous route calculation; ``completion`` fires once."""

    def clear_destinations(self) -> None:
        ...

    def add_listener(self, listener: NavigatorListener) -> None:
        ...

    def remove_listener(self, listener: NavigatorListener) -> None:
        ...


class RoadSnappedLocationProvider(Protocol):
    def add_listener(self, listener: RoadSnappedLocationListener) -> None:
        ...

    def remove_listener(self, listener: RoadSnappedLocationListener) -> None:
        ...


class LocationSimulator(Protocol):
    def stop_simulation(self) -> None:
        ...


class NavigationSession(Protocol):
    is_started: bool
    navigator: Optional[Navigator]
    road_snapped_location_provider: Optional[RoadSnappedLocationProvider]
    location_simulator: Optional[LocationSimulator]


class NavigationServices(Protocol):
    """Process-wide entry points of the navigation engine."""

    def are_terms_and_conditions_accepted(self) -> bool:
        ...

    def show_terms_and_conditions_dialog(
        self,
        options: TermsAndConditionsOptions,
        completion: Callable[[bool], None],
    ) -> None:
        ...

    def reset_terms_and_conditions_accepted(self) -> None:
        ...

    def create_navigation_session(self) -> Optional[NavigationSession]:
        """Return a new session, or ``None`` when terms are not accepted."""

    def set_abnormal_termination_reporting_enabled(self, enabled: bool) -> None:
        ...


class LocationPermissionSource(Protocol):
    """Read-only view on the host's location authorisation."""

    def authorization_status(self) -> LocationPermission:
        ...


__all__ = [
    "LocationPermissionSource",
    "LocationSimulator",
    "NavigationServices",
    "NavigationSession",
    "Navigator",
    "NavigatorListener",
    "RoadSnappedLocationListener",
    "RoadSnappedLocationProvider",
]
