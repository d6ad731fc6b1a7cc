"""Pydantic models for API I/O."""

from .availability import (
    AvailabilityEntry,
    AvailabilityResponse,
    ReplaceResponse,
    ToggleRequest,
    ToggleResponse,
)
from .planning import (
    CatalogResponse,
    EventResponse,
    EventSummaryResponse,
    PlayerResponse,
    RecommendationDetail,
    RecommendationResponse,
    SummaryResponse,
    VenueResponse,
)

__all__ = [
    "AvailabilityEntry",
    "AvailabilityResponse",
    "CatalogResponse",
    "EventResponse",
    "EventSummaryResponse",
    "PlayerResponse",
    "RecommendationDetail",
    "RecommendationResponse",
    "ReplaceResponse",
    "SummaryResponse",
    "ToggleRequest",
    "ToggleResponse",
    "VenueResponse",
]
