#!/usr/bin/env python3
"""Run multi-channel delivery locally with console senders.

No credentials or network access are needed: both providers print what
they would send.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from farmnotify.channels import (  # noqa: E402
    RetryPolicy,
    build_dispatcher,
    log_notification_delivery,
    parse_notification_payload,
    retry_notification_delivery,
    send_email_via_console,
    send_sms_via_console,
)


def main() -> int:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
    payload = parse_notification_payload(load_payload(args.payload_file))
    dispatch = build_dispatcher(
        None if args.no_sms else send_sms_via_console,
        None if args.no_email else send_email_via_console,
    )
    result = retry_notification_delivery(
        payload,
        dispatch,
        policy=RetryPolicy(max_attempts=args.max_attempts, delay_seconds=args.delay_seconds),
    )
    log_notification_delivery(args.farm_id, result, payload)

    print("")
    print("[SUMMARY]")
    print(f"success={result.success} channel={result.channel.value} attempts={result.attempts}")
    print(f"message_id={result.message_id} error={result.error}")
    return 0 if result.success else 1


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Execute SMS/email delivery with a sample payload and console senders."
    )
    parser.add_argument(
        "--payload-file",
        type=Path,
        default=None,
        help="Optional JSON file with a notification payload.",
    )
    parser.add_argument("--farm-id", type=int, default=1, help="Farm id for the audit log.")
    parser.add_argument("--no-sms", action="store_true", help="Simulate an unconfigured SMS provider.")
    parser.add_argument(
        "--no-email", action="store_true", help="Simulate an unconfigured email provider."
    )
    parser.add_argument("--max-attempts", type=int, default=3, help="Retry attempts.")
    parser.add_argument(
        "--delay-seconds", type=float, default=0.5, help="Delay between retry attempts."
    )
    return parser.parse_args()


def load_payload(payload_file: Path | None) -> dict[str, Any]:
    if payload_file is None:
        return sample_payload()
    with payload_file.open("r", encoding="utf-8") as file_handle:
        return json.load(file_handle)


def sample_payload() -> dict[str, Any]:
    return {
        "recipientPhone": "+233240000000",
        "recipientEmail": "farmer@example.com",
        "type": "health_alert",
        "subject": "Health Alert: Bessie",
        "message": "Health issue detected: elevated temperature",
        "animalName": "Bessie",
        "farmName": "Green Valley Farm",
        "urgency": "high",
        "metadata": {"temperature_c": 40.1, "recommended_action": "Isolate and call the vet"},
    }


if __name__ == "__main__":
    sys.exit(main())
