import json

import pytest

from squadplan.cli import main
from squadplan.models import AvailabilityFact
from squadplan.store import SqliteFactStore

from .test_catalog_config import FIXTURES_CATALOG


@pytest.fixture
def facts_file(tmp_path):
    path = tmp_path / "facts.json"
    path.write_text(
        json.dumps(
            {
                "entries": [
                    {"playerId": 1, "gameId": 3},
                    {"playerId": 2, "gameId": 3},
                    {"playerId": 3, "gameId": 1},
                    {"playerId": 0, "gameId": 1},
                ]
            }
        ),
        encoding="utf-8",
    )
    return path


def test_recommend_from_facts_file(facts_file, tmp_path, capsys):
    report = tmp_path / "report.json"

    code = main(["--catalog", str(FIXTURES_CATALOG), "--facts", str(facts_file), "recommend", "--output", str(report)])

    assert code == 0
    out = capsys.readouterr().out
    assert "2026-04-19 vs San Ramon Smash at Emerald Glen Park with 2 available players" in out
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["recommendation"]["event_id"] == 3
    assert data["recommendation"]["player_ids"] == [1, 2]


def test_summary_lists_unresponsive_players(facts_file, capsys):
    code = main(["--catalog", str(FIXTURES_CATALOG), "--facts", str(facts_file), "summary", "--all"])

    assert code == 0
    out = capsys.readouterr().out
    assert "[2] 2026-04-11 at Livermore Lobs: 0 (-)" in out
    assert "No availability marked yet: Riley" in out


def test_unknown_ids_fail(tmp_path, capsys):
    path = tmp_path / "facts.json"
    path.write_text(json.dumps({"entries": [{"playerId": 1, "gameId": 99}]}), encoding="utf-8")

    code = main(["--catalog", str(FIXTURES_CATALOG), "--facts", str(path), "recommend"])

    assert code == 1
    assert "99" in capsys.readouterr().err


def test_import_replaces_store(facts_file, tmp_path, monkeypatch, capsys):
    db_path = tmp_path / "availability.db"
    monkeypatch.setenv("SQUADPLAN_STORE", "sqlite")
    monkeypatch.setenv("SQUADPLAN_DB_PATH", str(db_path))

    code = main(["--catalog", str(FIXTURES_CATALOG), "import", str(facts_file)])

    assert code == 0
    assert "Imported 3 availability entries into sqlite store" in capsys.readouterr().out
    assert SqliteFactStore(db_path).read_all() == frozenset(
        {AvailabilityFact(1, 3), AvailabilityFact(2, 3), AvailabilityFact(3, 1)}
    )

    assert main(["--catalog", str(FIXTURES_CATALOG), "recommend"]) == 0
    assert "San Ramon Smash" in capsys.readouterr().out


def test_no_recommendation_message(tmp_path, capsys):
    path = tmp_path / "facts.json"
    path.write_text(json.dumps({"entries": []}), encoding="utf-8")

    assert main(["--facts", str(path), "recommend", "--max-distance", "5"]) == 0
    assert "No recommendation yet" in capsys.readouterr().out
