#!/usr/bin/env python3
"""Run the Kafka notification worker.

Consumes `notifications.requested`, delivers each request over SMS and/or
email with the configured retry policy, and dead-letters exhausted requests.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from farmnotify.adapters.kafka_runtime import run_notification_worker_forever  # noqa: E402
from farmnotify.config import NotifierSettings, load_env_file  # noqa: E402


def main() -> int:
    args = parse_args()
    load_env_file(REPO_ROOT / ".env")
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    settings = NotifierSettings.from_env()
    if not settings.sms_configured:
        print("[WARN] Twilio credentials missing: SMS deliveries will fail.")
    if not settings.email_configured:
        print("[WARN] SENDGRID_API_KEY missing: email deliveries will fail.")
    return run_notification_worker_forever(settings)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run Kafka consumer loop for FarmKonnect notifications."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for the worker.",
    )
    return parser.parse_args()


if __name__ == "__main__":
    sys.exit(main())
