"""Roster and event catalog models shared by the engine, stores and API."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class TimeSlot(str, Enum):
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    @property
    def label(self) -> str:
        return _SLOT_LABELS[self]


_SLOT_LABELS = {
    TimeSlot.MORNING: "7-11am",
    TimeSlot.AFTERNOON: "12-4pm",
    TimeSlot.EVENING: "5-9pm",
}


class Player(BaseModel):
    """Roster entry for one planning cycle."""

    player_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    ranking: Optional[int] = Field(default=None, ge=1, le=99)
    locality: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Venue(BaseModel):
    venue_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    address: str = ""
    distance_km: float = Field(..., ge=0.0)

    model_config = ConfigDict(frozen=True)


class Event(BaseModel):
    """A schedulable session: venue + day + slot, or a fixture against an opponent."""

    event_id: int = Field(..., ge=1)
    day: str
    slot: Optional[TimeSlot] = None
    date: Optional[str] = None
    venue: Optional[Venue] = None
    opponent: Optional[str] = None
    home: Optional[bool] = None

    model_config = ConfigDict(frozen=True)

    @property
    def distance_km(self) -> float | None:
        return self.venue.distance_km if self.venue is not None else None

    @property
    def label(self) -> str:
        parts = [self.date or self.day]
        if self.slot is not None:
            parts.append(self.slot.label)
        if self.opponent:
            parts.append(("vs " if self.home is not False else "at ") + self.opponent)
        if self.venue is not None:
            parts.append(f"at {self.venue.name}")
        return " ".join(parts)
