"""Errors raised by the session coordinator."""
from __future__ import annotations


class SessionManagerError(Exception):
    """Base class for every precondition failure reported by the coordinator."""

    code = "session_manager_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class TermsNotAccepted(SessionManagerError):
    """Terms and conditions were not accepted, or the engine returned no session."""

    code = "terms_not_accepted"


class LocationPermissionMissing(SessionManagerError):
    """The OS has not authorised location access for the application."""

    code = "location_permission_missing"


class SessionNotInitialized(SessionManagerError):
    """A session-scoped operation was invoked without an active session."""

    code = "session_not_initialized"


class TermsResetNotAllowed(SessionManagerError):
    """Terms acceptance cannot be revoked while a session is active."""

    code = "terms_reset_not_allowed"


class RouteCalculationTimeout(SessionManagerError):
    code = "route_calculation_timeout"


__all__ = [
    "LocationPermissionMissing",
    "RouteCalculationTimeout",
    "SessionManagerError",
    "SessionNotInitialized",
    "TermsNotAccepted",
    "TermsResetNotAllowed",
]
