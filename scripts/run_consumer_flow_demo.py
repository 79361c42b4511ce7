#!/usr/bin/env python3
"""Run a Kafka-like consumer flow without Kafka."""

from __future__ import annotations

import logging
import sys
from functools import partial
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from farmnotify.adapters.consumer_handler import handle_batch  # noqa: E402
from farmnotify.adapters.fake_senders import (  # noqa: E402
    send_email_via_console,
    send_sms_via_console,
)
from farmnotify.application.dispatch import build_dispatcher  # noqa: E402
from farmnotify.application.retry import RetryPolicy, retry_notification_delivery  # noqa: E402


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
    committed_offsets: list[tuple[int, int]] = []
    rejected_offsets: list[tuple[int, int, str]] = []

    def commit(record: dict[str, Any]) -> None:
        partition = int(record.get("partition", -1))
        offset = int(record.get("offset", -1))
        committed_offsets.append((partition, offset))
        print(f"[COMMIT] partition={partition} offset={offset}")

    def reject(record: dict[str, Any], reason: str) -> None:
        partition = int(record.get("partition", -1))
        offset = int(record.get("offset", -1))
        rejected_offsets.append((partition, offset, reason))
        print(f"[NO-COMMIT] partition={partition} offset={offset} reason={reason}")

    deliver = partial(
        retry_notification_delivery,
        dispatch=build_dispatcher(send_sms_maybe_fail, send_email_maybe_fail),
        policy=RetryPolicy(max_attempts=2, delay_seconds=0.1),
    )
    results = handle_batch(sample_records(), deliver=deliver, commit=commit, reject=reject)

    print("")
    print("[BATCH SUMMARY]")
    for result in results:
        meta = result["record_meta"]
        print(
            f"offset={meta['offset']} status={result['status']} "
            f"should_commit={result['should_commit']} error={result['error']}"
        )

    print("")
    print("[OFFSETS]")
    print(f"committed={committed_offsets}")
    print(f"rejected={rejected_offsets}")
    return 0


def send_email_maybe_fail(
    *, to_email: str, subject: str, html_body: str, from_name: str | None = None
) -> str:
    if to_email == "fail-email@example.com":
        raise RuntimeError("email provider unavailable")
    return send_email_via_console(
        to_email=to_email, subject=subject, html_body=html_body, from_name=from_name
    )


def send_sms_maybe_fail(*, to_phone_e164: str, message: str) -> str:
    if to_phone_e164 == "+15555559999":
        raise RuntimeError("sms provider unavailable")
    return send_sms_via_console(to_phone_e164=to_phone_e164, message=message)


def sample_records() -> list[dict[str, Any]]:
    def notification(**overrides: Any) -> dict[str, Any]:
        base = {
            "type": "appointment",
            "subject": "Appointment Reminder: Daisy",
            "message": "Veterinary visit tomorrow at 09:00.",
            "animalName": "Daisy",
            "farmName": "Green Valley Farm",
            "urgency": "medium",
        }
        return base | overrides

    return [
        {
            "topic": "notifications.requested",
            "partition": 0,
            "offset": 100,
            "value": {
                "event_id": "evt-100",
                "farm_id": 7,
                "notification": notification(
                    recipientPhone="+15555550123", recipientEmail="farmer@example.com"
                ),
            },
        },
        {
            "topic": "notifications.requested",
            "partition": 0,
            "offset": 101,
            "value": {
                "event_id": "evt-101",
                "farm_id": 7,
                "notification": notification(
                    recipientPhone="+15555559999", recipientEmail="farmer@example.com"
                ),
            },
        },
        {
            "topic": "notifications.requested",
            "partition": 0,
            "offset": 102,
            "value": {"event_id": "evt-102", "farm_id": 7, "notification": {"type": "appointment"}},
        },
        {
            "topic": "notifications.requested",
            "partition": 0,
            "offset": 103,
            "value": {
                "event_id": "evt-103",
                "farm_id": 7,
                "notification": notification(recipientEmail="fail-email@example.com"),
            },
        },
    ]


if __name__ == "__main__":
    sys.exit(main())
