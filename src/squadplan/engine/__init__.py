"""Availability aggregation engine and fact mutator."""

from .aggregation import (
    EventSummary,
    Recommendation,
    rank_events,
    recommend,
    summarize,
    unresponsive_players,
)
from .eligibility import DistanceFilter, EligibilityFilter, NoFilter, eligible_events
from .mutation import check_references, coerce_positive_int, flip, normalize, toggle

__all__ = [
    "DistanceFilter",
    "EligibilityFilter",
    "EventSummary",
    "NoFilter",
    "Recommendation",
    "check_references",
    "coerce_positive_int",
    "eligible_events",
    "flip",
    "normalize",
    "rank_events",
    "recommend",
    "summarize",
    "toggle",
    "unresponsive_players",
]
