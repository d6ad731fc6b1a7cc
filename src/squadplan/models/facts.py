"""The atomic availability fact and helpers for fact sets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True, order=True)
class AvailabilityFact:
    """``player_id`` is available for ``event_id``. Absence means not available."""

    player_id: int
    event_id: int

    def to_entry(self) -> dict[str, int]:
        return {"playerId": self.player_id, "gameId": self.event_id}


def sort_facts(facts: Iterable[AvailabilityFact]) -> list[AvailabilityFact]:
    """Canonical wire/storage ordering: by player, then event."""

    return sorted(set(facts))


def facts_to_entries(facts: Iterable[AvailabilityFact]) -> list[dict[str, int]]:
    return [fact.to_entry() for fact in sort_facts(facts)]
