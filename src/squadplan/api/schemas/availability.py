from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from squadplan.models import AvailabilityFact


class AvailabilityEntry(BaseModel):
    player_id: int = Field(..., alias="playerId", ge=1)
    game_id: int = Field(..., alias="gameId", ge=1)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_fact(cls, fact: AvailabilityFact) -> "AvailabilityEntry":
        return cls(player_id=fact.player_id, game_id=fact.event_id)


class AvailabilityResponse(BaseModel):
    entries: List[AvailabilityEntry]
    source: str
    stale: bool = False


class ReplaceResponse(BaseModel):
    ok: bool = True
    count: int
    entries: List[AvailabilityEntry]
    source: str


class ToggleRequest(BaseModel):
    # ids are checked by the mutator, which rejects booleans and non-integers
    player_id: Any = Field(..., alias="playerId")
    game_id: Any = Field(..., alias="gameId")
    available: Optional[bool] = None

    model_config = ConfigDict(populate_by_name=True)


class ToggleResponse(ReplaceResponse):
    available: bool
