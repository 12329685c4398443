from __future__ import annotations

import threading

import pytest

from crashtest.engine import NavigatorListener, RoadSnappedLocationListener
from crashtest.models import CoordinatorState, LocationPermission, RouteStatus, Waypoint
from crashtest.session import SessionCoordinator
from crashtest.simulators import (
    EngineFault,
    SimulatedNavigationServices,
    SimulatedNavigator,
    StaticLocationPermission,
)


DESTINATION = Waypoint(37.791957, -122.412529, "Grace Cathedral")


def make_coordinator(**engine_kwargs):
    engine_kwargs.setdefault("terms_accepted", True)
    services = SimulatedNavigationServices(**engine_kwargs)
    coordinator = SessionCoordinator(
        services,
        StaticLocationPermission(LocationPermission.AUTHORIZED_WHEN_IN_USE),
        route_timeout_s=5.0,
    )
    return services, coordinator


def test_coordinator_satisfies_listener_protocols():
    _, coordinator = make_coordinator()

    assert isinstance(coordinator, NavigatorListener)
    assert isinstance(coordinator, RoadSnappedLocationListener)


def test_threaded_route_calculation_delivers_ok():
    services, coordinator = make_coordinator(route_latency_s=0.05)
    coordinator.create_session(True)

    status = coordinator.set_destinations([DESTINATION]).result(timeout=2)

    assert status is RouteStatus.OK
    coordinator.start_guidance()
    assert coordinator.is_guidance_running() is True
    assert services.sessions[0].navigator.destinations == [DESTINATION]


def test_guidance_crash_propagates_under_crash_locale():
    _, coordinator = make_coordinator(locale="he_IL")
    coordinator.create_session(True)
    assert coordinator.set_destinations([DESTINATION]).result(timeout=2) is RouteStatus.OK

    with pytest.raises(EngineFault):
        coordinator.start_guidance()

    assert coordinator.is_guidance_running() is False
    assert coordinator.state is CoordinatorState.ROUTE_SET


def test_engine_refuses_session_without_terms():
    services = SimulatedNavigationServices(terms_accepted=False)

    assert services.create_navigation_session() is None


def test_dialog_accepts_terms_once():
    services = SimulatedNavigationServices(terms_accepted=False)
    coordinator = SessionCoordinator(services, StaticLocationPermission(), route_timeout_s=None)

    assert coordinator.show_terms_dialog("Navigation Terms", "Test Company").result(timeout=1) is True
    assert coordinator.are_terms_accepted() is True
    assert len(services.dialog_requests) == 1


def test_declined_dialog_keeps_terms_unaccepted():
    services = SimulatedNavigationServices(terms_accepted=False, accept_on_dialog=False)
    coordinator = SessionCoordinator(services, StaticLocationPermission(), route_timeout_s=None)

    assert coordinator.show_terms_dialog("Navigation Terms", "Test Company").result(timeout=1) is False
    assert coordinator.are_terms_accepted() is False


def test_clear_destinations_cancels_in_flight_route():
    navigator = SimulatedNavigator(route_latency_s=0.05)
    delivered = []
    done = threading.Event()

    def completion(status):
        delivered.append(status)
        done.set()

    navigator.set_destinations([DESTINATION], completion)
    navigator.clear_destinations()

    assert done.wait(timeout=2)
    assert delivered == [RouteStatus.CANCELED]


def test_recreated_session_does_not_double_fire_events():
    services = SimulatedNavigationServices(terms_accepted=True)
    received = []

    class RecordingCoordinator(SessionCoordinator):
        def on_road_snapped_location(self, provider, location):
            received.append(location)

    coordinator = RecordingCoordinator(services, StaticLocationPermission(), route_timeout_s=None)
    coordinator.create_session(True)
    coordinator.create_session(True)
    coordinator.cleanup()
    coordinator.create_session(True)

    services.sessions[0].road_snapped_location_provider.publish("stale")
    services.sessions[1].road_snapped_location_provider.publish("fresh")

    assert received == ["fresh"]
    assert services.sessions[1].navigator.listeners == [coordinator]


def test_navigator_events_are_accepted_without_effect():
    services, coordinator = make_coordinator()
    coordinator.create_session(True)
    navigator = services.sessions[0].navigator

    navigator.notify("on_arrival", DESTINATION)
    navigator.notify("on_route_changed")
    navigator.notify("on_remaining_time_updated", 120.0)
    navigator.notify("on_remaining_distance_updated", 800.0)
    navigator.notify("on_speed_alert", "major", 12.5)
    navigator.notify("on_nav_info_updated", {"step": 1})
    navigator.notify("on_prompt_will_present")
    navigator.notify("on_prompt_dismissed")

    assert coordinator.state is CoordinatorState.NO_ROUTE


def test_cleanup_stops_location_simulation():
    services, coordinator = make_coordinator()
    coordinator.create_session(True)
    session = services.sessions[0]
    session.location_simulator.simulate_location(DESTINATION)

    coordinator.cleanup()

    assert session.location_simulator.simulating is False
    assert session.navigator.destinations == []


class CountingCoordinator(SessionCoordinator):
    """Signals every route status the engine delivers, stale or not."""

    def __init__(self, *args, expected, **kwargs):
        super().__init__(*args, **kwargs)
        self.deliveries = []
        self._expected = expected
        self.all_delivered = threading.Event()

    def _on_route_status(self, generation, status):
        super()._on_route_status(generation, status)
        self.deliveries.append((generation, status))
        if len(self.deliveries) >= self._expected:
            self.all_delivered.set()


def test_threaded_route_result_after_cleanup_is_discarded():
    services = SimulatedNavigationServices(terms_accepted=True, route_latency_s=0.1)
    coordinator = CountingCoordinator(
        services, StaticLocationPermission(), route_timeout_s=5.0, expected=1
    )
    coordinator.create_session(True)
    stale_future = coordinator.set_destinations([DESTINATION])

    coordinator.cleanup()
    coordinator.create_session(True)

    assert stale_future.result(timeout=1) is RouteStatus.CANCELED
    assert coordinator.all_delivered.wait(timeout=2)
    assert coordinator.deliveries == [(1, RouteStatus.CANCELED)]
    assert coordinator.state is CoordinatorState.NO_ROUTE
    assert coordinator.snapshot()["route_pending"] is False


def test_threaded_superseded_route_result_is_discarded():
    services = SimulatedNavigationServices(terms_accepted=True, route_latency_s=0.1)
    coordinator = CountingCoordinator(
        services, StaticLocationPermission(), route_timeout_s=5.0, expected=2
    )
    coordinator.create_session(True)
    first_delivered = []
    first = coordinator.set_destinations([DESTINATION], completion=first_delivered.append)
    second = coordinator.set_destinations([Waypoint(37.795490, -122.393738, "Ferry Building")])

    assert first.result(timeout=1) is RouteStatus.CANCELED
    assert second.result(timeout=2) is RouteStatus.OK
    assert coordinator.all_delivered.wait(timeout=2)

    assert sorted(coordinator.deliveries) == [(1, RouteStatus.CANCELED), (2, RouteStatus.OK)]
    assert first_delivered == [RouteStatus.CANCELED]
    assert coordinator.state is CoordinatorState.ROUTE_SET
