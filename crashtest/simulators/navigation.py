"""In-process navigation engine used by the crash-test driver and tests."""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Iterable, List, Optional, Sequence

from ..models import LocationPermission, RouteStatus, TermsAndConditionsOptions, Waypoint

LOGGER = logging.getLogger(__name__)

DEFAULT_CRASH_LOCALES = frozenset({"he_IL", "ar_SA"})


class EngineFault(RuntimeError):
    """Raised by the simulated engine when it reproduces the guidance crash."""


class SimulatedLocationSimulator:
    def __init__(self) -> None:
        self.simulating = False
        self.location: Optional[Waypoint] = None

    def simulate_location(self, location: Waypoint) -> None:
        self.location = location
        self.simulating = True

    def stop_simulation(self) -> None:
        self.simulating = False


class SimulatedRoadSnappedLocationProvider:
    def __init__(self) -> None:
        self.listeners: List[Any] = []

    def add_listener(self, listener: Any) -> None:
        self.listeners.append(listener)

    def remove_listener(self, listener: Any) -> None:
        self.listeners = [item for item in self.listeners if item is not listener]

    def publish(self, location: Any) -> None:
        for listener in list(self.listeners):
            listener.on_road_snapped_location(self, location)


class SimulatedNavigator:
    """Navigator that computes routes on a worker thread.

    Enabling guidance raises :class:`EngineFault` when the engine locale is
    one of ``crash_locales``.
    """

    def __init__(
        self,
        *,
        locale: str = "en_US",
        crash_locales: Iterable[str] = DEFAULT_CRASH_LOCALES,
        route_latency_s: float = 0.0,
        route_status: Optional[RouteStatus] = None,
    ) -> None:
        if route_latency_s < 0:
            raise ValueError("route_latency_s must be non-negative")
        self.locale = locale
        self.crash_locales = frozenset(crash_locales)
        self.route_latency_s = route_latency_s
        self.route_status = route_status
        self.stop_guidance_at_arrival = True
        self.time_update_threshold = 1.0
        self.distance_update_threshold = 1.0
        self.listeners: List[Any] = []
        self.destinations: List[Waypoint] = []
        self.route_requests = 0
        self._guidance_active = False
        self._route_token = 0
        self._lock = threading.Lock()

    @property
    def is_guidance_active(self) -> bool:
        return self._guidance_active

    @is_guidance_active.setter
    def is_guidance_active(self, active: bool) -> None:
        if active and self.locale in self.crash_locales:
            LOGGER.error("guidance start crashed under locale %s", self.locale)
            raise EngineFault(f"guidance start failed under locale {self.locale}")
        self._guidance_active = bool(active)

    def add_listener(self, listener: Any) -> None:
        self.listeners.append(listener)

    def remove_listener(self, listener: Any) -> None:
        self.listeners = [item for item in self.listeners if item is not listener]

    def notify(self, event: str, *args: Any) -> None:
        """Deliver ``event`` (a listener method name) to every listener."""

        for listener in list(self.listeners):
            getattr(listener, event)(self, *args)

    def set_destinations(
        self,
        waypoints: Sequence[Waypoint],
        completion: Callable[[RouteStatus], None],
    ) -> None:
        waypoints = list(waypoints)
        with self._lock:
            self._route_token += 1
            token = self._route_token
            self.route_requests += 1
            self.destinations = waypoints

        if self.route_latency_s <= 0:
            self._deliver(token, waypoints, completion)
            return
        worker = threading.Thread(
            target=self._calculate,
            args=(token, waypoints, completion),
            name=f"route-{token}",
            daemon=True,
        )
        worker.start()

    def clear_destinations(self) -> None:
        with self._lock:
            self._route_token += 1
            self.destinations = []

    def _calculate(self, token: int, waypoints: List[Waypoint], completion: Callable[[RouteStatus], None]) -> None:
        time.sleep(self.route_latency_s)
        self._deliver(token, waypoints, completion)

    def _deliver(self, token: int, waypoints: List[Waypoint], completion: Callable[[RouteStatus], None]) -> None:
        with self._lock:
            current = token == self._route_token
        if not current:
            status = RouteStatus.CANCELED
        elif self.route_status is not None:
            status = self.route_status
        elif not waypoints:
            status = RouteStatus.NO_WAYPOINTS
        elif len({wp.coordinate for wp in waypoints}) != len(waypoints):
            status = RouteStatus.DUPLICATE_WAYPOINTS
        else:
            status = RouteStatus.OK
        LOGGER.debug("route %d resolved with %s", token, status.value)
        completion(status)


class SimulatedNavigationSession:
    def __init__(self, navigator: Optional[SimulatedNavigator]) -> None:
        self.is_started = False
        self.navigator = navigator
        self.road_snapped_location_provider: Optional[SimulatedRoadSnappedLocationProvider] = (
            SimulatedRoadSnappedLocationProvider()
        )
        self.location_simulator: Optional[SimulatedLocationSimulator] = SimulatedLocationSimulator()


class SimulatedNavigationServices:
    """Process-wide engine entry points with in-memory terms acceptance."""

    def __init__(
        self,
        *,
        terms_accepted: bool = False,
        accept_on_dialog: bool = True,
        locale: str = "en_US",
        crash_locales: Iterable[str] = DEFAULT_CRASH_LOCALES,
        route_latency_s: float = 0.0,
        route_status: Optional[RouteStatus] = None,
    ) -> None:
        self.terms_accepted = terms_accepted
        self.accept_on_dialog = accept_on_dialog
        self.locale = locale
        self.crash_locales = frozenset(crash_locales)
        self.route_latency_s = route_latency_s
        self.route_status = route_status
        self.abnormal_termination_reporting_enabled = False
        self.dialog_requests: List[TermsAndConditionsOptions] = []
        self.sessions: List[SimulatedNavigationSession] = []

    @classmethod
    def from_config(cls, config: Any) -> "SimulatedNavigationServices":
        return cls(
            locale=config.locale,
            crash_locales=config.crash_locales,
            route_latency_s=config.route_latency_s,
        )

    def are_terms_and_conditions_accepted(self) -> bool:
        return self.terms_accepted

    def show_terms_and_conditions_dialog(
        self,
        options: TermsAndConditionsOptions,
        completion: Callable[[bool], None],
    ) -> None:
        self.dialog_requests.append(options)
        if not self.terms_accepted:
            self.terms_accepted = self.accept_on_dialog
        completion(self.terms_accepted)

    def reset_terms_and_conditions_accepted(self) -> None:
        self.terms_accepted = False

    def set_abnormal_termination_reporting_enabled(self, enabled: bool) -> None:
        self.abnormal_termination_reporting_enabled = enabled

    def create_navigation_session(self) -> Optional[SimulatedNavigationSession]:
        if not self.terms_accepted:
            return None
        navigator = SimulatedNavigator(
            locale=self.locale,
            crash_locales=self.crash_locales,
            route_latency_s=self.route_latency_s,
            route_status=self.route_status,
        )
        session = SimulatedNavigationSession(navigator)
        self.sessions.append(session)
        LOGGER.debug("simulated session #%d created", len(self.sessions))
        return session


class StaticLocationPermission:
    def __init__(self, status: LocationPermission = LocationPermission.AUTHORIZED_WHEN_IN_USE) -> None:
        self.status = LocationPermission(status)

    def authorization_status(self) -> LocationPermission:
        return self.status


__all__ = [
    "DEFAULT_CRASH_LOCALES",
    "EngineFault",
    "SimulatedLocationSimulator",
    "SimulatedNavigationServices",
    "SimulatedNavigationSession",
    "SimulatedNavigator",
    "SimulatedRoadSnappedLocationProvider",
    "StaticLocationPermission",
]
