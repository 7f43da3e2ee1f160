#!/usr/bin/env python3
"""Validate that all required environment variables are set."""

import os
import sys

REQUIRED = [
    "REVIEWBOT_DATABASE_URL",
    "REVIEWBOT_REDIS_URL",
    "REVIEWBOT_SLACK_BOT_TOKEN",
    "REVIEWBOT_SLACK_SIGNING_SECRET",
    "REVIEWBOT_GITHUB_WEBHOOK_SECRET",
    "REVIEWBOT_GITHUB_PR_NOTIFICATION_CHANNEL",
]

OPTIONAL = [
    "REVIEWBOT_LOG_LEVEL",
    "REVIEWBOT_TIMEZONE",
    "REVIEWBOT_REVIEW_REQUEST_WINDOW_SECONDS",
    "REVIEWBOT_DEDUP_RETENTION_SECONDS",
    "REVIEWBOT_DEDUP_SWEEP_INTERVAL_SECONDS",
]


def missing_variables(environ: dict) -> list[str]:
    return [var for var in REQUIRED if not environ.get(var)]


def main() -> int:
    missing = missing_variables(os.environ)
    print("=== Required Environment Variables ===")
    for var in REQUIRED:
        print(f"  {var}: {'MISSING' if var in missing else 'OK'}")

    print("\n=== Optional Environment Variables ===")
    for var in OPTIONAL:
        print(f"  {var}: {'set' if os.environ.get(var) else 'not set'}")

    if missing:
        print(f"\nERROR: Missing required variables: {', '.join(missing)}")
        return 1

    print("\nAll required environment variables are present.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
