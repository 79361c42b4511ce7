#!/usr/bin/env python3
"""Publish one `notifications.requested` event to Kafka for local testing."""

from __future__ import annotations

import argparse
import sys
import uuid
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from farmnotify.adapters.kafka_runtime import publish_notification_requested_event  # noqa: E402
from farmnotify.config import load_env_file  # noqa: E402
from farmnotify.types import NotificationKind, Urgency  # noqa: E402


def main() -> int:
    load_env_file(REPO_ROOT / ".env")
    args = parse_args()
    event = build_event(args)
    metadata = publish_notification_requested_event(event, topic=args.topic)

    print("[PUBLISHED]")
    print(f"topic={metadata['topic']}")
    print(f"partition={metadata['partition']}")
    print(f"offset={metadata['offset']}")
    print(f"event_id={event['event_id']}")
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Publish one notifications.requested event for Kafka testing."
    )
    parser.add_argument("--phone-e164", default=None, help="Recipient phone in E.164 format.")
    parser.add_argument("--email", default=None, help="Recipient email address.")
    parser.add_argument(
        "--type",
        default=NotificationKind.HEALTH_ALERT.value,
        choices=[item.value for item in NotificationKind],
        help="Notification type.",
    )
    parser.add_argument(
        "--urgency",
        default=Urgency.MEDIUM.value,
        choices=[item.value for item in Urgency],
        help="Urgency level.",
    )
    parser.add_argument("--farm-id", type=int, default=1, help="Farm id for the audit log.")
    parser.add_argument("--farm-name", default="Demo Farm", help="Farm name.")
    parser.add_argument("--animal-name", default="Bessie", help="Animal name.")
    parser.add_argument("--subject", default="Test notification", help="Subject line.")
    parser.add_argument(
        "--message",
        default="This is a test notification from FarmKonnect.",
        help="Message body.",
    )
    parser.add_argument(
        "--event-id",
        default=None,
        help="Optional event id. Default: generated UUID.",
    )
    parser.add_argument(
        "--topic",
        default=None,
        help="Override Kafka topic (defaults to KAFKA_TOPIC_NOTIFICATIONS_REQUESTED).",
    )
    return parser.parse_args()


def build_event(args: argparse.Namespace) -> dict[str, object]:
    if not args.phone_e164 and not args.email:
        raise SystemExit("At least one of --phone-e164 or --email is required.")

    notification: dict[str, object] = {
        "type": args.type,
        "subject": args.subject,
        "message": args.message,
        "animalName": args.animal_name,
        "farmName": args.farm_name,
        "urgency": args.urgency,
    }
    if args.phone_e164:
        notification["recipientPhone"] = args.phone_e164
    if args.email:
        notification["recipientEmail"] = args.email

    return {
        "event_id": args.event_id or f"evt-{uuid.uuid4()}",
        "farm_id": args.farm_id,
        "notification": notification,
    }


if __name__ == "__main__":
    sys.exit(main())
