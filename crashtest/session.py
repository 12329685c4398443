"""Lifecycle coordination for a single navigation session."""
from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass, field
from functools import partial
import logging
import math
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .engine import LocationPermissionSource, NavigationServices, NavigationSession, Navigator
from .errors import (
    LocationPermissionMissing,
    RouteCalculationTimeout,
    SessionNotInitialized,
    TermsNotAccepted,
    TermsResetNotAllowed,
)
from .listeners import NavigationEventSink
from .models import (
    CoordinatorState,
    LocationPermission,
    RouteStatus,
    TermsAndConditionsOptions,
    Waypoint,
)

LOGGER = logging.getLogger(__name__)

Dispatcher = Callable[[Callable[[], None]], None]

DEFAULT_ROUTE_TIMEOUT_S = 30.0


def _call_inline(callback: Callable[[], None]) -> None:
    callback()


@dataclass
class _PendingRoute:
    generation: int
    future: "Future[RouteStatus]"
    completion: Optional[Callable[[RouteStatus], None]] = None
    timer: Optional[threading.Timer] = field(default=None, repr=False)


class SessionCoordinator(NavigationEventSink):
    """Owns at most one navigation session and sequences its lifecycle.

    Entry points are serialised with a re-entrant lock.  Route calculation
    results reach the caller exactly once, through the returned future and
    the optional completion callback, the latter invoked via ``dispatcher``
    so UI callers can hop back to their own thread.
    """

    def __init__(
        self,
        services: NavigationServices,
        permissions: LocationPermissionSource,
        *,
        route_timeout_s: Optional[float] = DEFAULT_ROUTE_TIMEOUT_S,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        self._services = services
        self._permissions = permissions
        if route_timeout_s is not None and route_timeout_s < 0:
            raise ValueError("route_timeout_s must be non-negative")
        self._route_timeout_s = route_timeout_s or None
        self._dispatch: Dispatcher = dispatcher or _call_inline
        self._lock = threading.RLock()
        self._session: Optional[NavigationSession] = None
        self._navigator_listening: Optional[Navigator] = None
        self._provider_listening: Optional[Any] = None
        self._destinations_set = False
        self._terms_pending = False
        self._generation = 0
        self._pending: Optional[_PendingRoute] = None

    # Terms and conditions ------------------------------------------------
    def are_terms_accepted(self) -> bool:
        return bool(self._services.are_terms_and_conditions_accepted())

    def show_terms_dialog(
        self,
        title: str,
        company_name: str,
        disclaimer_only: bool = False,
        completion: Optional[Callable[[bool], None]] = None,
    ) -> "Future[bool]":
        """Ask the engine to present its consent dialog.

        The returned future resolves with the acceptance flag once the user
        answers.  A declined dialog resolves ``False``; nothing is retried.
        """

        options = TermsAndConditionsOptions(
            title=title,
            company_name=company_name,
            only_show_driver_awareness_disclaimer=disclaimer_only,
        )
        future: "Future[bool]" = Future()

        def _on_answer(accepted: bool) -> None:
            with self._lock:
                self._terms_pending = False
            accepted = bool(accepted)
            LOGGER.info("terms dialog answered (accepted=%s)", accepted)
            _settle(future, accepted)
            if completion is not None:
                self._dispatch(partial(completion, accepted))

        with self._lock:
            self._terms_pending = True
            LOGGER.info("showing terms dialog %r for %r", title, company_name)
            try:
                self._services.show_terms_and_conditions_dialog(options, _on_answer)
            except Exception:
                self._terms_pending = False
                raise
        return future

    def reset_terms_accepted(self) -> None:
        with self._lock:
            if self._session is not None:
                LOGGER.warning("refusing to reset terms while a session is active")
                raise TermsResetNotAllowed("cannot reset terms while a navigation session exists")
            self._services.reset_terms_and_conditions_accepted()
            LOGGER.info("terms acceptance reset")

    # Session lifecycle ---------------------------------------------------
    def create_session(self, abnormal_termination_reporting_enabled: bool = True) -> None:
        """Create the navigation session, or re-configure the existing one.

        Terms are checked before location permission so both platforms
        report the same error for a fresh install.
        """

        with self._lock:
            LOGGER.info("creating navigation session")
            if not self.are_terms_accepted():
                LOGGER.warning("terms not accepted; session not created")
                raise TermsNotAccepted("terms and conditions have not been accepted")

            self._services.set_abnormal_termination_reporting_enabled(
                bool(abnormal_termination_reporting_enabled)
            )

            status = LocationPermission(self._permissions.authorization_status())
            if not status.authorized:
                LOGGER.warning("location permission missing (status=%s)", status.value)
                raise LocationPermissionMissing(f"location permission is {status.value}")

            if self._session is None:
                session = self._services.create_navigation_session()
                if session is None:
                    # The engine only withholds a session when terms are missing.
                    LOGGER.error("engine returned no navigation session")
                    raise TermsNotAccepted("engine did not create a navigation session")
                self._session = session
                self._destinations_set = False
                LOGGER.info("navigation session created")
            else:
                LOGGER.info("reusing existing navigation session")

            self._configure(self._session)

    def _configure(self, session: NavigationSession) -> None:
        session.is_started = True
        navigator = session.navigator
        provider = session.road_snapped_location_provider
        if navigator is not None:
            if self._navigator_listening is not navigator:
                navigator.add_listener(self)
                self._navigator_listening = navigator
            navigator.stop_guidance_at_arrival = False
            # Remaining time/distance updates are not consumed.
            navigator.time_update_threshold = math.inf
            navigator.distance_update_threshold = math.inf
        if provider is not None and self._provider_listening is not provider:
            provider.add_listener(self)
            self._provider_listening = provider
        LOGGER.info("session configuration complete")

    def is_initialized(self) -> bool:
        with self._lock:
            return self._session is not None and self._session.navigator is not None

    def cleanup(self) -> List[str]:
        """Tear down the session, attempting every step.

        Returns the names of the steps that failed; each failure is logged.
        The session is released regardless.
        """

        with self._lock:
            session = self._require_session()
            pending = self._take_pending()
            self._generation += 1
            navigator = session.navigator
            provider = session.road_snapped_location_provider
            simulator = session.location_simulator
            listening_provider = self._provider_listening
            listening_navigator = self._navigator_listening

            steps: List[tuple] = []
            if simulator is not None:
                steps.append(("stop location simulation", simulator.stop_simulation))
            if navigator is not None:
                steps.append(("clear destinations", navigator.clear_destinations))
            if listening_provider is not None:
                steps.append(
                    (
                        "remove road-snapped location listener",
                        partial(listening_provider.remove_listener, self),
                    )
                )
            if listening_navigator is not None:
                steps.append(
                    ("remove navigator listener", partial(listening_navigator.remove_listener, self))
                )
            if navigator is not None:
                steps.append(("stop guidance", partial(setattr, navigator, "is_guidance_active", False)))
            steps.append(("mark session stopped", partial(setattr, session, "is_started", False)))

            failures = self._run_cleanup_steps(steps)

            self._session = None
            self._navigator_listening = None
            self._provider_listening = None
            self._destinations_set = False
            LOGGER.info("navigation session released (failed steps: %s)", failures or "none")

        if pending is not None:
            self._finish_route(pending, RouteStatus.CANCELED)
        return failures

    @staticmethod
    def _run_cleanup_steps(steps: Iterable[tuple]) -> List[str]:
        failures: List[str] = []
        for name, step in steps:
            try:
                step()
            except Exception:
                LOGGER.exception("cleanup step %r failed", name)
                failures.append(name)
        return failures

    # Navigation ----------------------------------------------------------
    def set_destinations(
        self,
        waypoints: Iterable[Waypoint],
        completion: Optional[Callable[[RouteStatus], None]] = None,
    ) -> "Future[RouteStatus]":
        """Request a route through ``waypoints``.

        Raises :class:`SessionNotInitialized` synchronously; every other
        outcome is a :class:`RouteStatus` delivered once.  A newer request
        supersedes this one, which then resolves ``CANCELED``.  When the
        route timeout elapses the future fails with
        :class:`RouteCalculationTimeout` and ``completion`` receives
        ``CANCELED``.  A future the caller cancelled is left alone; the
        completion still fires.
        """

        waypoints = list(waypoints)
        with self._lock:
            navigator = self._require_navigator()
            superseded = self._take_pending()
            self._generation += 1
            generation = self._generation
            self._destinations_set = False
            pending = _PendingRoute(generation=generation, future=Future(), completion=completion)

            rejected = _validate_waypoints(waypoints)
            if rejected is None:
                self._pending = pending
                self._arm_timeout(pending)
                LOGGER.info("setting %d destination(s) (request %d)", len(waypoints), generation)
                try:
                    navigator.set_destinations(
                        waypoints, partial(self._on_route_status, generation)
                    )
                except Exception:
                    if self._pending is pending:
                        self._take_pending()
                    if superseded is not None:
                        self._finish_route(superseded, RouteStatus.CANCELED)
                    raise

        if superseded is not None:
            LOGGER.info("route request %d superseded by %d", superseded.generation, generation)
            self._finish_route(superseded, RouteStatus.CANCELED)

        if rejected is not None:
            LOGGER.warning("rejecting destinations: %s", rejected.value)
            self._finish_route(pending, rejected)
        return pending.future

    def start_guidance(self) -> None:
        with self._lock:
            navigator = self._require_navigator()
            LOGGER.info("starting guidance")
            navigator.is_guidance_active = True
            LOGGER.info("guidance started")

    def stop_guidance(self) -> None:
        with self._lock:
            navigator = self._require_navigator()
            LOGGER.info("stopping guidance")
            navigator.is_guidance_active = False

    def is_guidance_running(self) -> bool:
        with self._lock:
            return bool(self._require_navigator().is_guidance_active)

    # State ---------------------------------------------------------------
    @property
    def state(self) -> CoordinatorState:
        with self._lock:
            if self._session is None:
                if self._terms_pending:
                    return CoordinatorState.TERMS_PENDING
                return CoordinatorState.UNINITIALIZED
            navigator = self._session.navigator
            if navigator is not None and navigator.is_guidance_active:
                return CoordinatorState.GUIDANCE_RUNNING
            if self._destinations_set:
                return CoordinatorState.ROUTE_SET
            return CoordinatorState.NO_ROUTE

    @property
    def has_session(self) -> bool:
        with self._lock:
            return self._session is not None

    @property
    def route_generation(self) -> int:
        with self._lock:
            return self._generation

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            session = self._session
            navigator = session.navigator if session is not None else None
            return {
                "state": self.state.value,
                "terms_accepted": self.are_terms_accepted(),
                "location_permission": LocationPermission(
                    self._permissions.authorization_status()
                ).value,
                "started": bool(session.is_started) if session is not None else False,
                "guidance_active": bool(navigator.is_guidance_active) if navigator else False,
                "destinations_set": self._destinations_set,
                "route_pending": self._pending is not None,
                "route_generation": self._generation,
            }

    # Internal helpers ----------------------------------------------------
    def _require_session(self) -> NavigationSession:
        if self._session is None:
            raise SessionNotInitialized("no navigation session")
        return self._session

    def _require_navigator(self) -> Navigator:
        navigator = self._require_session().navigator
        if navigator is None:
            raise SessionNotInitialized("navigation session has no navigator")
        return navigator

    def _take_pending(self) -> Optional[_PendingRoute]:
        pending, self._pending = self._pending, None
        if pending is not None and pending.timer is not None:
            pending.timer.cancel()
        return pending

    def _arm_timeout(self, pending: _PendingRoute) -> None:
        if self._route_timeout_s is None:
            return
        timer = threading.Timer(
            self._route_timeout_s, self._on_route_timeout, args=(pending.generation,)
        )
        timer.daemon = True
        pending.timer = timer
        timer.start()

    def _on_route_status(self, generation: int, status: RouteStatus) -> None:
        status = RouteStatus(status)
        with self._lock:
            pending = self._pending
            if pending is None or pending.generation != generation:
                LOGGER.info(
                    "discarding stale route status %s for request %d (current %d)",
                    status.value,
                    generation,
                    self._generation,
                )
                return
            self._take_pending()
            self._destinations_set = status is RouteStatus.OK
        LOGGER.info("route calculation completed with status %s", status.value)
        self._finish_route(pending, status)

    def _on_route_timeout(self, generation: int) -> None:
        with self._lock:
            pending = self._pending
            if pending is None or pending.generation != generation:
                return
            self._pending = None
        LOGGER.warning(
            "route request %d timed out after %.1fs", generation, self._route_timeout_s
        )
        # Callback-only callers see the abandoned request as CANCELED.
        self._finish_route(
            pending,
            RouteStatus.CANCELED,
            error=RouteCalculationTimeout(
                f"route calculation did not finish within {self._route_timeout_s}s"
            ),
        )

    def _finish_route(
        self,
        pending: _PendingRoute,
        status: RouteStatus,
        *,
        error: Optional[BaseException] = None,
    ) -> None:
        if pending.timer is not None:
            pending.timer.cancel()
        _settle(pending.future, status, error=error)
        if pending.completion is not None:
            self._dispatch(partial(pending.completion, status))


def _settle(future: Future, result: Any, *, error: Optional[BaseException] = None) -> bool:
    """Resolve ``future`` unless the caller already cancelled it."""

    if not future.set_running_or_notify_cancel():
        LOGGER.debug("future cancelled by caller; dropping %r", error or result)
        return False
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)
    return True


def _validate_waypoints(waypoints: Sequence[Waypoint]) -> Optional[RouteStatus]:
    if not waypoints:
        return RouteStatus.NO_WAYPOINTS
    seen = set()
    for waypoint in waypoints:
        if waypoint.coordinate in seen:
            return RouteStatus.DUPLICATE_WAYPOINTS
        seen.add(waypoint.coordinate)
    return None


__all__ = ["DEFAULT_ROUTE_TIMEOUT_S", "Dispatcher", "SessionCoordinator"]
