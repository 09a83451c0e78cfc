#!/usr/bin/env python3
"""
Replay a week of sample Vital webhook events against the Wellness API.

Per day the script posts steps, sleep, calories and a blood pressure
reading for one user, plus a single event of a category the backend does
not map (stored under unparsed_<category>).

Usage examples:
  - Against a local backend:
      python scripts/replay_events.py --base-url http://localhost:8000 --user-id demo-user
  - Against port-forwarded backend:
      kubectl -n wellness port-forward svc/wellness-backend 8080:80 &
      python scripts/replay_events.py --base-url http://localhost:8080 --user-id <id>
"""

from __future__ import annotations

import argparse
import random
import sys
from typing import List, Tuple

try:
    import requests  # type: ignore
except Exception as exc:  # pragma: no cover
    print("This script requires the 'requests' package.\nInstall with: pip install requests", file=sys.stderr)
    raise


PROVIDER = "daily.data"


def day_events(rng: random.Random) -> List[Tuple[str, dict]]:
    """Return (event_type, data) pairs for one simulated day."""
    sleep_seconds = rng.randint(6 * 3600, 9 * 3600)
    return [
        (f"{PROVIDER}.steps.created", {"data": [{"value": rng.randint(4000, 15000)}]}),
        (f"{PROVIDER}.sleep.created", {"total": sleep_seconds, "hr_average": rng.randint(50, 65)}),
        (f"{PROVIDER}.calories_active.created", {"data": [{"value": rng.randint(300, 900)}]}),
        (
            f"{PROVIDER}.blood_pressure.created",
            {"data": [{"systolic": rng.randint(110, 130), "diastolic": rng.randint(70, 85)}]},
        ),
    ]


def post_event(base_url: str, user_id: str, event_type: str, data: dict) -> str:
    url = f"{base_url.rstrip('/')}/vital/webhook"
    payload = {"event_type": event_type, "user_id": user_id, "data": data}
    r = requests.post(url, json=payload, timeout=15)
    if r.status_code >= 300:
        raise RuntimeError(f"{event_type} -> HTTP {r.status_code}: {r.text}")
    return r.json().get("message", "")


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay sample wearable webhook events")
    ap.add_argument("--base-url", required=True, help="API base URL (e.g., http://localhost:8000)")
    ap.add_argument("--user-id", required=True, help="User id the events belong to")
    ap.add_argument("--days", type=int, default=7, help="Number of simulated days (default 7)")
    ap.add_argument("--seed", type=int, default=None, help="Random seed for repeatable values")
    args = ap.parse_args()

    rng = random.Random(args.seed)
    sent = 0
    for _ in range(args.days):
        for event_type, data in day_events(rng):
            print(post_event(args.base_url, args.user_id, event_type, data))
            sent += 1

    print(post_event(args.base_url, args.user_id, f"{PROVIDER}.electrocardiogram.created", {"samples": []}))
    sent += 1

    print(f"Replay complete: {sent} events sent.")


if __name__ == "__main__":
    main()
