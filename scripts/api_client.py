"""Lightweight REST client for the squadplan API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def _print(payload: dict) -> None:
    print(json.dumps(payload, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the squadplan REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("--entries", action="store_true", help="Print the stored availability entries")
    parser.add_argument("--summary", action="store_true", help="Print per-event attendance")
    parser.add_argument("--max-distance", type=float, default=None, help="Distance filter (km) for summary/recommendation")
    parser.add_argument("--toggle", nargs=2, type=int, metavar=("PLAYER_ID", "GAME_ID"), help="Flip one availability cell")
    parser.add_argument("--upload", type=Path, help="Replace all availability with the entries in this JSON file")
    args = parser.parse_args()

    params = {"max_distance": args.max_distance} if args.max_distance is not None else {}

    with httpx.Client(base_url=args.base_url) as client:
        if args.upload:
            payload = json.loads(args.upload.read_text(encoding="utf-8"))
            resp = client.put("/api/availability", json=payload)
            if resp.status_code == 400:
                raise SystemExit(f"rejected: {resp.json().get('detail')}")
            resp.raise_for_status()
            print(f"Saved {resp.json()['count']} entries")
        if args.toggle:
            player_id, game_id = args.toggle
            resp = client.post("/api/availability/toggle", json={"playerId": player_id, "gameId": game_id})
            if resp.status_code == 400:
                raise SystemExit(f"rejected: {resp.json().get('detail')}")
            resp.raise_for_status()
            state = "available" if resp.json()["available"] else "not available"
            print(f"Player {player_id} is now {state} for game {game_id}")
        if args.entries:
            resp = client.get("/api/availability")
            resp.raise_for_status()
            _print(resp.json())
        if args.summary:
            resp = client.get("/api/summary", params=params)
            resp.raise_for_status()
            _print(resp.json())

        resp = client.get("/api/recommendation", params=params)
        resp.raise_for_status()
        recommendation = resp.json()["recommendation"]
        if recommendation is None:
            print("No recommendation yet")
        else:
            names = ", ".join(player["name"] for player in recommendation["attendees"])
            print(f"Best session: {recommendation['event']['label']} ({recommendation['attendee_count']}): {names}")


if __name__ == "__main__":
    main()
