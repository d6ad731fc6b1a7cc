"""Command-line interface for availability summaries and imports."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from squadplan.config import PlanningCatalog, Settings, default_catalog, load_catalog
from squadplan.engine import (
    DistanceFilter,
    EligibilityFilter,
    NoFilter,
    eligible_events,
    normalize,
    rank_events,
    recommend,
    summarize,
    unresponsive_players,
)
from squadplan.errors import SquadplanError
from squadplan.models import AvailabilityFact
from squadplan.store import create_store


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize squad availability and pick the best session")
    parser.add_argument("--catalog", type=Path, default=None, help="Catalog JSON (defaults to the built-in squad)")
    parser.add_argument(
        "--facts",
        type=Path,
        default=None,
        help="Availability JSON ({\"entries\": [...]}); reads the configured store when omitted",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("summary", "Show attendance for every eligible event"),
        ("recommend", "Show the best-attended eligible event"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--max-distance",
            type=float,
            default=None,
            help="Only consider venues within this distance (km); no filter when omitted",
        )
        sub.add_argument("--output", type=Path, default=None, help="Optional path to write a JSON report")
        if name == "summary":
            sub.add_argument("--all", action="store_true", help="Include events nobody is available for")

    importer = subparsers.add_parser("import", help="Validate a facts file and replace the store contents")
    importer.add_argument("source", type=Path, help="Availability JSON to import")
    return parser.parse_args(argv)


def _load_catalog(path: Optional[Path], settings: Settings) -> PlanningCatalog:
    path = path or settings.catalog_path
    return load_catalog(path) if path else default_catalog()


def _read_entries(path: Path) -> object:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SquadplanError(f"Invalid JSON in {path}: {exc}") from exc
    if isinstance(payload, dict):
        return payload.get("entries")
    return payload


def _load_facts(path: Optional[Path], catalog: PlanningCatalog, settings: Settings) -> frozenset[AvailabilityFact]:
    if path is None:
        return create_store(settings).read_all()
    return normalize(_read_entries(path), catalog=catalog, max_entries=settings.max_entries)


def _eligibility(max_distance: Optional[float]) -> EligibilityFilter:
    return NoFilter() if max_distance is None else DistanceFilter(max_distance)


def _names(players) -> str:
    return ", ".join(player.name for player in players) or "-"


def _run_summary(args: argparse.Namespace, catalog: PlanningCatalog, facts: frozenset[AvailabilityFact]) -> dict:
    events = eligible_events(catalog.events, _eligibility(args.max_distance))
    summaries = summarize(catalog.players, events, facts)
    missing = unresponsive_players(catalog.players, catalog.events, facts)
    print(f"{len(events)} eligible events, {len(facts)} availability entries")
    for summary in summaries.values():
        if summary.count == 0 and not args.all:
            continue
        print(f"  [{summary.event.event_id}] {summary.event.label}: {summary.count} ({_names(summary.players)})")
    if missing:
        print(f"No availability marked yet: {_names(missing)}")
    return {
        "catalog_version": catalog.version,
        "events": [
            {
                "event_id": summary.event.event_id,
                "label": summary.event.label,
                "count": summary.count,
                "player_ids": [player.player_id for player in summary.players],
            }
            for summary in summaries.values()
        ],
        "unresponsive_player_ids": [player.player_id for player in missing],
    }


def _run_recommend(args: argparse.Namespace, catalog: PlanningCatalog, facts: frozenset[AvailabilityFact]) -> dict:
    eligibility = _eligibility(args.max_distance)
    best = recommend(catalog.players, catalog.events, facts, eligibility)
    if best is None:
        print("No recommendation yet: mark a few availability slots first.")
        return {"catalog_version": catalog.version, "recommendation": None}

    within = f" within {args.max_distance:.1f} km" if args.max_distance is not None else ""
    print(f"Best session{within}: {best.event.label} with {best.attendee_count} available players")
    print(f"Squad: {_names(best.attendees)}")
    runners_up = [
        summary
        for summary in rank_events(catalog.players, catalog.events, facts, eligibility)
        if summary.event.event_id != best.event.event_id
    ][:3]
    for summary in runners_up:
        print(f"  also: {summary.event.label} ({summary.count})")
    return {
        "catalog_version": catalog.version,
        "recommendation": {
            "event_id": best.event.event_id,
            "label": best.event.label,
            "attendee_count": best.attendee_count,
            "player_ids": [player.player_id for player in best.attendees],
        },
    }


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    settings = Settings.from_env()

    try:
        catalog = _load_catalog(args.catalog, settings)
        if args.command == "import":
            facts = normalize(_read_entries(args.source), catalog=catalog, max_entries=settings.max_entries)
            result = create_store(settings).replace_all(facts)
            print(f"Imported {result.count} availability entries into {result.source} store")
            return 0

        facts = _load_facts(args.facts, catalog, settings)
        if args.command == "summary":
            report = _run_summary(args, catalog, facts)
        else:
            report = _run_recommend(args, catalog, facts)
    except (SquadplanError, ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.output:
        args.output.write_text(json.dumps(report, indent=2), encoding="utf-8")
        print(f"Wrote report to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
