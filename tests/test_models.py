import pytest
from pydantic import ValidationError

from squadplan.models import AvailabilityFact, Event, Player, TimeSlot, Venue, facts_to_entries, sort_facts


def test_player_is_frozen():
    player = Player(player_id=1, name="You", ranking=1)

    assert player.player_id == 1
    with pytest.raises((TypeError, ValidationError)):
        player.name = "Someone else"  # type: ignore[misc]


def test_player_ids_are_one_based():
    with pytest.raises(ValidationError):
        Player(player_id=0, name="Nobody")


def test_ranking_is_bounded():
    with pytest.raises(ValidationError):
        Player(player_id=1, name="Ace", ranking=100)


def test_event_distance_comes_from_venue():
    venue = Venue(venue_id=1, name="Kolb Park Courts", distance_km=1.0)
    event = Event(event_id=7, day="Sat", slot=TimeSlot.EVENING, venue=venue)

    assert event.distance_km == 1.0
    assert event.label == "Sat 5-9pm at Kolb Park Courts"


def test_fixture_event_label_and_missing_distance():
    event = Event(event_id=2, day="Sat", date="2026-04-11", opponent="Livermore Lobs", home=False)

    assert event.distance_km is None
    assert event.label == "2026-04-11 at Livermore Lobs"


def test_facts_collapse_in_sets():
    facts = {AvailabilityFact(1, 2), AvailabilityFact(1, 2), AvailabilityFact(2, 1)}

    assert len(facts) == 2


def test_sort_facts_orders_by_player_then_event():
    facts = {AvailabilityFact(2, 1), AvailabilityFact(1, 3), AvailabilityFact(1, 2)}

    assert sort_facts(facts) == [AvailabilityFact(1, 2), AvailabilityFact(1, 3), AvailabilityFact(2, 1)]
    assert facts_to_entries(facts)[0] == {"playerId": 1, "gameId": 2}
