"""No-op event sink registered with the navigator and location provider."""
from __future__ import annotations

from typing import Any

from .models import Waypoint


class NavigationEventSink:
    """Implements every navigator and road-snapped-location callback.

    None of these events drive coordinator state today.  Subclasses that
    need a particular event override the matching method.
    """

    def on_arrival(self, navigator: Any, waypoint: Waypoint) -> None:
        pass

    def on_route_changed(self, navigator: Any) -> None:
        pass

    def on_remaining_time_updated(self, navigator: Any, seconds: float) -> None:
        pass

    def on_remaining_distance_updated(self, navigator: Any, meters: float) -> None:
        pass

    def on_speed_alert(self, navigator: Any, severity: str, percentage_above_limit: float) -> None:
        pass

    def on_nav_info_updated(self, navigator: Any, nav_info: Any) -> None:
        pass

    def on_prompt_will_present(self, navigator: Any) -> None:
        pass

    def on_prompt_dismissed(self, navigator: Any) -> None:
        pass

    def on_road_snapped_location(self, provider: Any, location: Any) -> None:
        pass


__all__ = ["NavigationEventSink"]
