"""Planning catalog: the roster, venues and events for one planning cycle."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, ValidationError

from squadplan.models import Event, Player, TimeSlot, Venue


DAYS: Tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
SLOTS: Tuple[TimeSlot, ...] = (TimeSlot.MORNING, TimeSlot.AFTERNOON, TimeSlot.EVENING)
MAX_ROSTER_SIZE = 20


@dataclass(frozen=True)
class PlanningCatalog:
    """Immutable snapshot of everything the engine needs besides facts.

    ``events`` order is the catalog order used to break attendance ties.
    """

    version: str
    players: Tuple[Player, ...]
    venues: Tuple[Venue, ...] = ()
    events: Tuple[Event, ...] = ()
    _players_by_id: Dict[int, Player] = field(init=False, repr=False, compare=False)
    _events_by_id: Dict[int, Event] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        _ensure_unique("player", (player.player_id for player in self.players))
        _ensure_unique("venue", (venue.venue_id for venue in self.venues))
        _ensure_unique("event", (event.event_id for event in self.events))
        object.__setattr__(self, "_players_by_id", {p.player_id: p for p in self.players})
        object.__setattr__(self, "_events_by_id", {e.event_id: e for e in self.events})

    @property
    def player_ids(self) -> frozenset[int]:
        return frozenset(self._players_by_id)

    @property
    def event_ids(self) -> frozenset[int]:
        return frozenset(self._events_by_id)

    def player(self, player_id: int) -> Optional[Player]:
        return self._players_by_id.get(player_id)

    def event(self, event_id: int) -> Optional[Event]:
        return self._events_by_id.get(event_id)


def _ensure_unique(kind: str, ids: Iterable[int]) -> None:
    seen: set[int] = set()
    for value in ids:
        if value in seen:
            raise ValueError(f"Duplicate {kind} id {value} in catalog")
        seen.add(value)


def build_session_events(
    venues: Sequence[Venue],
    days: Sequence[str] = DAYS,
    slots: Sequence[TimeSlot] = SLOTS,
    *,
    start_id: int = 1,
) -> Tuple[Event, ...]:
    """One event per venue x day x slot, numbered in that nesting order."""

    events: list[Event] = []
    next_id = start_id
    for venue in venues:
        for day in days:
            for slot in slots:
                events.append(Event(event_id=next_id, day=day, slot=slot, venue=venue))
                next_id += 1
    return tuple(events)


_DEFAULT_PLAYER_NAMES = ["You"] + [f"Teammate {index}" for index in range(1, 10)]

_DEFAULT_VENUES: Tuple[Venue, ...] = (
    Venue(venue_id=1, name="Emerald Glen Park", address="Tassajara Rd & Central Pkwy, Dublin, CA", distance_km=0.8),
    Venue(venue_id=2, name="Fallon Sports Park", address="Lockhart St, Dublin, CA", distance_km=2.0),
    Venue(venue_id=3, name="Dublin High School Courts", address="Village Pkwy, Dublin, CA", distance_km=0.5),
    Venue(venue_id=4, name="Shannon Park Courts", address="Shannon Ave, Dublin, CA", distance_km=1.2),
    Venue(venue_id=5, name="Kolb Park Courts", address="Bristol Rd, Dublin, CA", distance_km=1.0),
)


def default_catalog() -> PlanningCatalog:
    """Ten-player squad with the five nearby courts, every day and slot."""

    players = tuple(
        Player(player_id=index, name=name, ranking=index)
        for index, name in enumerate(_DEFAULT_PLAYER_NAMES, start=1)
    )
    return PlanningCatalog(
        version="default",
        players=players,
        venues=_DEFAULT_VENUES,
        events=build_session_events(_DEFAULT_VENUES),
    )


class _EventEntry(BaseModel):
    event_id: int = Field(..., ge=1)
    day: str
    slot: Optional[TimeSlot] = None
    date: Optional[str] = None
    venue_id: Optional[int] = None
    opponent: Optional[str] = None
    home: Optional[bool] = None


class CatalogFile(BaseModel):
    """JSON layout of a catalog on disk.

    Events either come as an explicit list (fixture schedules) or are
    generated from ``days`` x ``slots`` for every venue when ``events`` is
    omitted.
    """

    version: str = "1"
    players: list[Player] = Field(default_factory=list, max_length=MAX_ROSTER_SIZE)
    venues: list[Venue] = Field(default_factory=list)
    events: Optional[list[_EventEntry]] = None
    days: list[str] = Field(default_factory=lambda: list(DAYS))
    slots: list[TimeSlot] = Field(default_factory=lambda: list(SLOTS))

    def to_catalog(self) -> PlanningCatalog:
        venues_by_id = {venue.venue_id: venue for venue in self.venues}
        if self.events is None:
            events = build_session_events(self.venues, self.days, self.slots)
        else:
            resolved: list[Event] = []
            for entry in self.events:
                venue = None
                if entry.venue_id is not None:
                    venue = venues_by_id.get(entry.venue_id)
                    if venue is None:
                        raise ValueError(f"Event {entry.event_id} references unknown venue {entry.venue_id}")
                resolved.append(
                    Event(
                        event_id=entry.event_id,
                        day=entry.day,
                        slot=entry.slot,
                        date=entry.date,
                        venue=venue,
                        opponent=entry.opponent,
                        home=entry.home,
                    )
                )
            events = tuple(resolved)
        return PlanningCatalog(
            version=self.version,
            players=tuple(self.players),
            venues=tuple(self.venues),
            events=events,
        )

    @classmethod
    def from_catalog(cls, catalog: PlanningCatalog) -> "CatalogFile":
        return cls(
            version=catalog.version,
            players=list(catalog.players),
            venues=list(catalog.venues),
            events=[
                _EventEntry(
                    event_id=event.event_id,
                    day=event.day,
                    slot=event.slot,
                    date=event.date,
                    venue_id=event.venue.venue_id if event.venue else None,
                    opponent=event.opponent,
                    home=event.home,
                )
                for event in catalog.events
            ],
        )

    def save(self, path: Path) -> None:
        path.write_text(self.model_dump_json(indent=2, exclude_none=True), encoding="utf-8")


def load_catalog(path: Path | str) -> PlanningCatalog:
    """Load a catalog JSON file, raising ValueError if it is malformed."""

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid catalog JSON in {path}: {exc}") from exc
    try:
        return CatalogFile.model_validate(data).to_catalog()
    except ValidationError as exc:
        raise ValueError(f"Invalid catalog in {path}: {exc}") from exc
