"""Simulated navigation engine."""
from .navigation import (
    DEFAULT_CRASH_LOCALES,
    EngineFault,
    SimulatedLocationSimulator,
    SimulatedNavigationServices,
    SimulatedNavigationSession,
    SimulatedNavigator,
    SimulatedRoadSnappedLocationProvider,
    StaticLocationPermission,
)

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
