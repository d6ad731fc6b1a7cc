"""Validation and normalization of availability input before it is stored.

Bulk payloads are sanitized best-effort: entries that are not objects,
miss a field, or carry something other than a positive integer are
dropped without failing the batch. Oversized payloads and (when a
catalog is supplied) references to unknown players or events fail the
whole request.
"""

from __future__ import annotations

import logging
import re
from typing import AbstractSet, Any, Iterable, Mapping, Optional

from squadplan.config import MAX_ENTRIES_DEFAULT, PlanningCatalog
from squadplan.errors import FactValidationError, PayloadTooLarge, UnknownReferenceError
from squadplan.models import AvailabilityFact


logger = logging.getLogger(__name__)

PLAYER_KEYS = ("playerId", "player_id")
EVENT_KEYS = ("gameId", "eventId", "game_id", "event_id")

# ids must fit a signed 64-bit storage column
MAX_ID = 2**63 - 1

_INT_PATTERN = re.compile(r"^\s*[+-]?\d{1,19}\s*$")


def coerce_positive_int(value: Any) -> Optional[int]:
    """Return ``value`` as a positive int, or None when it is not one."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        result = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        result = int(value)
    elif isinstance(value, str) and _INT_PATTERN.match(value):
        result = int(value)
    else:
        return None
    return result if 0 < result <= MAX_ID else None


def _first_present(entry: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        if key in entry:
            return entry[key]
    return None


def _parse_entry(entry: Any) -> Optional[AvailabilityFact]:
    if not isinstance(entry, Mapping):
        return None
    player_id = coerce_positive_int(_first_present(entry, PLAYER_KEYS))
    event_id = coerce_positive_int(_first_present(entry, EVENT_KEYS))
    if player_id is None or event_id is None:
        return None
    return AvailabilityFact(player_id=player_id, event_id=event_id)


def check_references(facts: Iterable[AvailabilityFact], catalog: PlanningCatalog) -> None:
    """Raise UnknownReferenceError if any fact names an id missing from ``catalog``."""

    player_ids = catalog.player_ids
    event_ids = catalog.event_ids
    unknown_players = sorted({fact.player_id for fact in facts if fact.player_id not in player_ids})
    unknown_events = sorted({fact.event_id for fact in facts if fact.event_id not in event_ids})
    if unknown_players or unknown_events:
        raise UnknownReferenceError(
            player_ids=tuple(unknown_players),
            event_ids=tuple(unknown_events),
        )


def normalize(
    raw_entries: Any,
    *,
    catalog: Optional[PlanningCatalog] = None,
    max_entries: int = MAX_ENTRIES_DEFAULT,
) -> frozenset[AvailabilityFact]:
    """Turn an untrusted ``entries`` payload into a deduplicated fact set."""

    if not isinstance(raw_entries, list):
        raise FactValidationError("`entries` must be an array")

    facts: set[AvailabilityFact] = set()
    dropped = 0
    for entry in raw_entries:
        fact = _parse_entry(entry)
        if fact is None:
            dropped += 1
            continue
        facts.add(fact)

    if dropped:
        logger.debug("Dropped %d malformed availability entries out of %d", dropped, len(raw_entries))

    if len(facts) > max_entries:
        raise PayloadTooLarge(len(facts), max_entries)

    if catalog is not None:
        check_references(facts, catalog)

    return frozenset(facts)


def _validated_fact(player_id: Any, event_id: Any, catalog: Optional[PlanningCatalog]) -> AvailabilityFact:
    pid = coerce_positive_int(player_id)
    eid = coerce_positive_int(event_id)
    if pid is None or eid is None:
        raise FactValidationError(
            f"playerId and gameId must be positive integers (got {player_id!r}, {event_id!r})"
        )
    fact = AvailabilityFact(player_id=pid, event_id=eid)
    if catalog is not None:
        check_references((fact,), catalog)
    return fact


def toggle(
    current: AbstractSet[AvailabilityFact],
    player_id: int,
    event_id: int,
    present: bool,
    *,
    catalog: Optional[PlanningCatalog] = None,
) -> frozenset[AvailabilityFact]:
    """Set one pair's presence. Applying the same toggle twice is a no-op."""

    fact = _validated_fact(player_id, event_id, catalog)
    if present:
        if fact in current:
            return frozenset(current)
        return frozenset(current) | {fact}
    if fact not in current:
        return frozenset(current)
    return frozenset(current) - {fact}


def flip(
    current: AbstractSet[AvailabilityFact],
    player_id: int,
    event_id: int,
    *,
    catalog: Optional[PlanningCatalog] = None,
) -> tuple[frozenset[AvailabilityFact], bool]:
    """Invert one pair's presence, returning the new set and new presence."""

    fact = _validated_fact(player_id, event_id, catalog)
    present = fact not in current
    return toggle(current, fact.player_id, fact.event_id, present), present
