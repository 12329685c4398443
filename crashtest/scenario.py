"""Call-site sequencing policies for the crash reproduction.

The coordinator does not decide how its steps are chained.  Two policies
are provided: ``run_chained`` creates the session, routes to the configured
destination and starts guidance after a fixed delay; ``run_stepwise``
performs the same steps back to back as separate user actions would.
Engine faults raised while starting guidance are not caught here.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import time
from typing import Callable, Optional

from .config import CrashTestConfig
from .models import LocationPermission, RouteStatus
from .session import SessionCoordinator

LOGGER = logging.getLogger(__name__)


@dataclass
class ScenarioResult:
    route_status: RouteStatus
    guidance_started: bool
    message: str


def status_message(permission: LocationPermission, terms_accepted: Optional[bool]) -> str:
    """Human-readable status line for the current permission/terms pair."""

    permission = LocationPermission(permission)
    if permission is LocationPermission.NOT_DETERMINED:
        return "Location permission not requested"
    if permission in (LocationPermission.DENIED, LocationPermission.RESTRICTED):
        return "Location permission denied"
    if terms_accepted is None:
        return "Checking terms acceptance..."
    return "Ready to navigate" if terms_accepted else "Terms not accepted"


def ensure_terms(coordinator: SessionCoordinator, config: CrashTestConfig) -> bool:
    if coordinator.are_terms_accepted():
        return True
    future = coordinator.show_terms_dialog(
        config.terms_title,
        config.company_name,
        config.disclaimer_only,
    )
    return future.result()


def run_stepwise(coordinator: SessionCoordinator, config: CrashTestConfig) -> ScenarioResult:
    coordinator.create_session(config.abnormal_termination_reporting)
    status = coordinator.set_destinations([config.destination]).result()
    if status is not RouteStatus.OK:
        LOGGER.warning("route error: %s", status.value)
        return ScenarioResult(status, False, f"Route error: {status.value}")
    coordinator.start_guidance()
    return ScenarioResult(status, coordinator.is_guidance_running(), "Guidance started")


def run_chained(
    coordinator: SessionCoordinator,
    config: CrashTestConfig,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> ScenarioResult:
    LOGGER.info("starting navigation and guidance crash test")
    coordinator.create_session(config.abnormal_termination_reporting)
    LOGGER.info("setting destination %s", config.destination_title)
    status = coordinator.set_destinations([config.destination]).result()
    if status is not RouteStatus.OK:
        LOGGER.warning("route error: %s", status.value)
        return ScenarioResult(status, False, f"Route error: {status.value}")
    LOGGER.info("starting guidance in %.1fs", config.guidance_delay_s)
    sleep(config.guidance_delay_s)
    coordinator.start_guidance()
    return ScenarioResult(status, coordinator.is_guidance_running(), "Guidance started")


def stop_and_reset(coordinator: SessionCoordinator) -> str:
    """Tear down any session and revoke terms acceptance."""

    if coordinator.has_session:
        coordinator.cleanup()
    coordinator.reset_terms_accepted()
    return "Reset complete"


__all__ = [
    "ScenarioResult",
    "ensure_terms",
    "run_chained",
    "run_stepwise",
    "status_message",
    "stop_and_reset",
]
