"""Example client that records a usage event and prints the owner's analytics."""
from __future__ import annotations

import argparse
import os
import uuid

import requests


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send a sample track_play event")
    parser.add_argument(
        "--api-url",
        default=os.environ.get("ANALYTICS_API_URL", "http://127.0.0.1:8000"),
        help="Analytics API base URL (default: %(default)s or ANALYTICS_API_URL)",
    )
    parser.add_argument("--owner-id", required=True, help="Account that owns the played track")
    parser.add_argument(
        "--window",
        choices=("7d", "30d", "90d"),
        default="7d",
        help="Analytics window to print after recording (default: %(default)s)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    payload = {
        "owner_id": args.owner_id,
        "name": "track_play",
        "category": "engagement",
        "metadata": {"listener_id": f"listener-{uuid.uuid4().hex[:8]}", "track_id": "demo-track"},
    }
    response = requests.post(f"{args.api_url}/events", json=payload, timeout=10)
    response.raise_for_status()
    print("Event stored:", response.json())

    response = requests.get(
        f"{args.api_url}/analytics",
        params={"owner_id": args.owner_id, "window": args.window},
        timeout=10,
    )
    response.raise_for_status()
    print("Metrics:", response.json()["metrics"])


if __name__ == "__main__":
    main()
