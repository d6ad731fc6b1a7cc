"""Domain models for players, events and availability facts."""

from .catalog import Event, Player, TimeSlot, Venue
from .facts import AvailabilityFact, facts_to_entries, sort_facts

__all__ = [
    "AvailabilityFact",
    "Event",
    "Player",
    "TimeSlot",
    "Venue",
    "facts_to_entries",
    "sort_facts",
]
