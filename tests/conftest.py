import pytest

from squadplan.config import PlanningCatalog, build_session_events
from squadplan.models import Event, Player, Venue


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def players() -> tuple[Player, ...]:
    return (
        Player(player_id=1, name="P1", ranking=1),
        Player(player_id=2, name="P2", ranking=2),
        Player(player_id=3, name="P3", ranking=3),
    )


@pytest.fixture
def small_catalog(players) -> PlanningCatalog:
    near = Venue(venue_id=1, name="Near Courts", distance_km=0.5)
    far = Venue(venue_id=2, name="Far Courts", distance_km=12.0)
    return PlanningCatalog(
        version="test",
        players=players,
        venues=(near, far),
        events=(
            Event(event_id=1, day="Sat", venue=near),
            Event(event_id=2, day="Sat", venue=far),
            Event(event_id=3, day="Sun", venue=near),
        ),
    )


@pytest.fixture
def grid_catalog(players) -> PlanningCatalog:
    venues = (
        Venue(venue_id=1, name="Near Courts", distance_km=0.5),
        Venue(venue_id=2, name="Far Courts", distance_km=12.0),
    )
    return PlanningCatalog(
        version="grid",
        players=players,
        venues=venues,
        events=build_session_events(venues, days=("Sat", "Sun")),
    )
