import json

import httpx
import pytest

from squadplan.config import Settings
from squadplan.errors import PartialReplaceFailure, StorageUnavailable
from squadplan.models import AvailabilityFact
from squadplan.store import (
    CachedFactStore,
    JsonFileFactStore,
    MemoryFactStore,
    RestFactStore,
    SqliteFactStore,
    create_store,
)


SAMPLE = frozenset({AvailabilityFact(1, 2), AvailabilityFact(2, 2), AvailabilityFact(3, 7)})


@pytest.fixture(params=["memory", "file", "sqlite"])
def local_store(request, tmp_path):
    if request.param == "memory":
        return MemoryFactStore()
    if request.param == "file":
        return JsonFileFactStore(tmp_path / "availability.json")
    return SqliteFactStore(tmp_path / "availability.db")


def test_new_store_is_empty(local_store):
    assert local_store.read_all() == frozenset()


def test_replace_then_read(local_store):
    result = local_store.replace_all(SAMPLE)

    assert result.count == 3
    assert result.source == local_store.name
    assert local_store.read_all() == SAMPLE


def test_replace_discards_previous_facts(local_store):
    local_store.replace_all(SAMPLE)
    local_store.replace_all({AvailabilityFact(4, 4)})

    assert local_store.read_all() == frozenset({AvailabilityFact(4, 4)})


def test_replace_with_own_snapshot_is_noop(local_store):
    local_store.replace_all(SAMPLE)

    local_store.replace_all(local_store.read_all())

    assert local_store.read_all() == SAMPLE


def test_file_store_layout(tmp_path):
    path = tmp_path / "nested" / "availability.json"
    JsonFileFactStore(path).replace_all(SAMPLE)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["entries"] == [
        {"playerId": 1, "gameId": 2},
        {"playerId": 2, "gameId": 2},
        {"playerId": 3, "gameId": 7},
    ]
    assert "updated_at" in data
    assert [p.name for p in path.parent.iterdir()] == ["availability.json"]


def test_file_store_corrupt_file(tmp_path):
    path = tmp_path / "availability.json"
    path.write_text("{broken", encoding="utf-8")

    with pytest.raises(StorageUnavailable):
        JsonFileFactStore(path).read_all()


@pytest.mark.parametrize(
    "entry",
    [
        {"playerId": 2.7, "gameId": 1},
        {"playerId": 0, "gameId": 1},
        {"playerId": -3, "gameId": 1},
        {"playerId": True, "gameId": 1},
        {"playerId": 1},
        "1:1",
    ],
)
def test_file_store_rejects_bad_rows(tmp_path, entry):
    path = tmp_path / "availability.json"
    path.write_text(json.dumps({"entries": [{"playerId": 1, "gameId": 1}, entry]}), encoding="utf-8")

    with pytest.raises(StorageUnavailable, match="malformed entry"):
        JsonFileFactStore(path).read_all()


def test_sqlite_keeps_diagnostic_timestamp(tmp_path):
    store = SqliteFactStore(tmp_path / "availability.db")
    assert store.last_updated() is None

    store.replace_all(SAMPLE)

    assert store.last_updated() is not None


def test_sqlite_survives_reopen(tmp_path):
    SqliteFactStore(tmp_path / "availability.db").replace_all(SAMPLE)

    assert SqliteFactStore(tmp_path / "availability.db").read_all() == SAMPLE


class _FakePostgrest:
    """Minimal in-memory stand-in for a PostgREST table."""

    def __init__(self, *, fail_insert: bool = False, fail_read: bool = False):
        self.rows: list[dict] = []
        self.fail_insert = fail_insert
        self.fail_read = fail_read
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["authorization"] == "Bearer anon-key"
        assert request.url.path == "/rest/v1/availability_entries"
        if request.method == "GET":
            if self.fail_read:
                return httpx.Response(503)
            rows = sorted(self.rows, key=lambda row: (row["player_id"], row["game_id"]))
            return httpx.Response(200, json=rows)
        if request.method == "DELETE":
            assert request.url.params["player_id"] == "gte.0"
            self.rows = []
            return httpx.Response(204)
        if request.method == "POST":
            if self.fail_insert:
                return httpx.Response(500, json={"message": "boom"})
            assert request.headers["prefer"] == "resolution=merge-duplicates"
            self.rows.extend(json.loads(request.content))
            return httpx.Response(201)
        return httpx.Response(405)


def _rest_store(server: _FakePostgrest) -> RestFactStore:
    return RestFactStore("https://example.supabase.co", "anon-key", transport=httpx.MockTransport(server))


def test_rest_store_round_trip():
    server = _FakePostgrest()
    store = _rest_store(server)

    assert store.replace_all(SAMPLE).count == 3
    assert store.read_all() == SAMPLE
    store.replace_all(store.read_all())
    assert store.read_all() == SAMPLE


def test_rest_store_empty_replace_only_clears():
    server = _FakePostgrest()
    store = _rest_store(server)
    store.replace_all(SAMPLE)
    server.requests.clear()

    store.replace_all(frozenset())

    assert [request.method for request in server.requests] == ["DELETE"]
    assert store.read_all() == frozenset()


def test_rest_store_reports_partial_replace():
    server = _FakePostgrest()
    store = _rest_store(server)
    store.replace_all(SAMPLE)
    server.fail_insert = True

    with pytest.raises(PartialReplaceFailure):
        store.replace_all({AvailabilityFact(9, 9)})
    assert server.rows == []


def test_rest_store_requires_configuration():
    store = RestFactStore(None, None)

    assert not store.configured
    with pytest.raises(StorageUnavailable):
        store.read_all()


def test_rest_store_read_failure_is_unavailable():
    store = _rest_store(_FakePostgrest(fail_read=True))

    with pytest.raises(StorageUnavailable):
        store.read_all()


def test_cache_serves_last_snapshot_when_backend_down(tmp_path):
    server = _FakePostgrest()
    store = CachedFactStore(_rest_store(server), tmp_path / "cache.json")
    store.replace_all(SAMPLE)
    assert store.read_all() == SAMPLE
    assert store.stale is False

    server.fail_read = True
    assert store.read_all() == SAMPLE
    assert store.stale is True


def test_cache_file_survives_restart(tmp_path):
    cache_path = tmp_path / "cache.json"
    CachedFactStore(MemoryFactStore(), cache_path).replace_all(SAMPLE)

    store = CachedFactStore(_rest_store(_FakePostgrest(fail_read=True)), cache_path)

    assert store.read_all() == SAMPLE
    assert store.stale is True


def test_cache_without_snapshot_propagates_error():
    store = CachedFactStore(_rest_store(_FakePostgrest(fail_read=True)))

    with pytest.raises(StorageUnavailable):
        store.read_all()


def test_cache_never_swallows_write_errors(tmp_path):
    server = _FakePostgrest(fail_insert=True)
    store = CachedFactStore(_rest_store(server), tmp_path / "cache.json")

    with pytest.raises(PartialReplaceFailure):
        store.replace_all(SAMPLE)


def test_create_store_selects_backend(tmp_path):
    sqlite_store = create_store(Settings(store="sqlite", db_path=tmp_path / "a.db"))
    file_store = create_store(Settings(store="file", data_path=tmp_path / "a.json"))
    memory_store = create_store(Settings(store="memory"))

    assert isinstance(sqlite_store.backend, SqliteFactStore)
    assert isinstance(file_store.backend, JsonFileFactStore)
    assert memory_store.name == "memory"
