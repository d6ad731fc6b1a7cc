from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from squadplan.models import Event, Player, Venue


class PlayerResponse(BaseModel):
    player_id: int
    name: str
    ranking: Optional[int] = None
    locality: Optional[str] = None

    @classmethod
    def from_player(cls, player: Player) -> "PlayerResponse":
        return cls.model_validate(player.model_dump())


class VenueResponse(BaseModel):
    venue_id: int
    name: str
    address: str
    distance_km: float

    @classmethod
    def from_venue(cls, venue: Venue) -> "VenueResponse":
        return cls.model_validate(venue.model_dump())


class EventResponse(BaseModel):
    event_id: int
    label: str
    day: str
    slot: Optional[str] = None
    slot_label: Optional[str] = None
    date: Optional[str] = None
    venue_id: Optional[int] = None
    venue_name: Optional[str] = None
    distance_km: Optional[float] = None
    opponent: Optional[str] = None
    home: Optional[bool] = None

    @classmethod
    def from_event(cls, event: Event) -> "EventResponse":
        return cls(
            event_id=event.event_id,
            label=event.label,
            day=event.day,
            slot=event.slot.value if event.slot else None,
            slot_label=event.slot.label if event.slot else None,
            date=event.date,
            venue_id=event.venue.venue_id if event.venue else None,
            venue_name=event.venue.name if event.venue else None,
            distance_km=event.distance_km,
            opponent=event.opponent,
            home=event.home,
        )


class CatalogResponse(BaseModel):
    version: str
    players: List[PlayerResponse]
    venues: List[VenueResponse]
    events: List[EventResponse]


class EventSummaryResponse(BaseModel):
    event: EventResponse
    count: int
    players: List[PlayerResponse]


class SummaryResponse(BaseModel):
    catalog_version: str
    max_distance: Optional[float]
    eligible_events: int
    summaries: List[EventSummaryResponse]
    unresponsive: List[PlayerResponse]
    stale: bool = False


class RecommendationDetail(BaseModel):
    event: EventResponse
    attendee_count: int
    attendees: List[PlayerResponse]


class RecommendationResponse(BaseModel):
    catalog_version: str
    max_distance: Optional[float]
    recommendation: Optional[RecommendationDetail]
    runners_up: List[EventSummaryResponse]
    stale: bool = False
