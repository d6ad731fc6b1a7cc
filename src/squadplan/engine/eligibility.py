"""Query-time eligibility filters applied to events before aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

from squadplan.models import Event


class EligibilityFilter(Protocol):
    def accepts(self, event: Event) -> bool: ...


@dataclass(frozen=True)
class NoFilter:
    """Every event is eligible."""

    def accepts(self, event: Event) -> bool:
        return True


@dataclass(frozen=True)
class DistanceFilter:
    """Keep events whose venue is within ``max_distance_km`` of base.

    Events without a known distance cannot be shown to be in range and
    are treated as not eligible.
    """

    max_distance_km: float

    def __post_init__(self) -> None:
        if self.max_distance_km < 0:
            raise ValueError("max_distance_km must be >= 0")

    def accepts(self, event: Event) -> bool:
        distance = event.distance_km
        return distance is not None and distance <= self.max_distance_km


def eligible_events(events: Iterable[Event], eligibility: EligibilityFilter) -> list[Event]:
    """Filter ``events`` keeping their catalog order."""

    return [event for event in events if eligibility.accepts(event)]
