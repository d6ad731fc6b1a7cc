"""Attendance aggregation and best-slot selection.

Everything here is a pure function over snapshots: a roster, an ordered
event catalog and a collection of availability facts. Nothing is mutated
and no I/O happens. Facts naming a player or event that is not in the
provided roster/catalog are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from squadplan.models import AvailabilityFact, Event, Player

from .eligibility import EligibilityFilter, NoFilter, eligible_events


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventSummary:
    event: Event
    count: int
    players: tuple[Player, ...]


@dataclass(frozen=True)
class Recommendation:
    """Best-attended eligible event."""

    event: Event
    attendee_count: int
    attendees: tuple[Player, ...]


def _attendance(
    roster: Sequence[Player],
    events: Sequence[Event],
    facts: Iterable[AvailabilityFact],
) -> Dict[int, set[int]]:
    known_players = {player.player_id for player in roster}
    attendance: Dict[int, set[int]] = {event.event_id: set() for event in events}
    ignored = 0
    for fact in facts:
        bucket = attendance.get(fact.event_id)
        if bucket is None or fact.player_id not in known_players:
            ignored += 1
            continue
        bucket.add(fact.player_id)
    if ignored:
        logger.debug("Ignored %d facts referencing players or events outside the snapshot", ignored)
    return attendance


def summarize(
    roster: Sequence[Player],
    events: Sequence[Event],
    facts: Iterable[AvailabilityFact],
) -> Dict[int, EventSummary]:
    """Attendance for every event in ``events``, keyed by event id in catalog order.

    Events nobody marked report ``count=0`` and no players. Attendees are
    listed in roster order.
    """

    attendance = _attendance(roster, events, facts)
    summaries: Dict[int, EventSummary] = {}
    for event in events:
        if event.event_id in summaries:
            continue
        present = attendance[event.event_id]
        players = tuple(player for player in roster if player.player_id in present) if present else ()
        summaries[event.event_id] = EventSummary(event=event, count=len(players), players=players)
    return summaries


def rank_events(
    roster: Sequence[Player],
    events: Sequence[Event],
    facts: Iterable[AvailabilityFact],
    eligibility: EligibilityFilter = NoFilter(),
) -> List[EventSummary]:
    """Eligible events with at least one attendee, best first.

    Ties keep catalog order (``sorted`` is stable).
    """

    candidates = eligible_events(events, eligibility)
    summaries = summarize(roster, candidates, facts)
    attended = [summary for summary in summaries.values() if summary.count > 0]
    return sorted(attended, key=lambda summary: -summary.count)


def recommend(
    roster: Sequence[Player],
    events: Sequence[Event],
    facts: Iterable[AvailabilityFact],
    eligibility: EligibilityFilter = NoFilter(),
) -> Optional[Recommendation]:
    """Pick the eligible event with the most distinct attendees.

    The first event in catalog order wins a tie. Returns None when no
    event is eligible or no eligible event has any attendee.
    """

    candidates = eligible_events(events, eligibility)
    if not candidates:
        logger.info("No recommendation: none of %d events pass the eligibility filter", len(events))
        return None

    best: Optional[EventSummary] = None
    for summary in summarize(roster, candidates, facts).values():
        if best is None or summary.count > best.count:
            best = summary

    if best is None or best.count == 0:
        logger.info("No recommendation: %d eligible events but nobody is available", len(candidates))
        return None

    return Recommendation(event=best.event, attendee_count=best.count, attendees=best.players)


def unresponsive_players(
    roster: Sequence[Player],
    events: Sequence[Event],
    facts: Iterable[AvailabilityFact],
) -> List[Player]:
    """Roster players with no availability marked on any of ``events``."""

    event_ids = {event.event_id for event in events}
    responded = {fact.player_id for fact in facts if fact.event_id in event_ids}
    return [player for player in roster if player.player_id not in responded]
