"""Adapter layer: payload mapping, provider clients and Kafka transport."""

from .consumer_handler import handle_batch, handle_message
from .fake_senders import send_email_via_console, send_sms_via_console
from .kafka_runtime import (
    build_delivery,
    publish_notification_requested_event,
    run_notification_worker_forever,
)
from .payload import parse_notification_payload
from .real_senders import (
    ProviderError,
    SendGridEmailClient,
    TwilioSMSClient,
    build_email_client,
    build_sms_client,
)

__all__ = [
    "ProviderError",
    "SendGridEmailClient",
    "TwilioSMSClient",
    "build_delivery",
    "build_email_client",
    "build_sms_client",
    "handle_batch",
    "handle_message",
    "parse_notification_payload",
    "publish_notification_requested_event",
    "run_notification_worker_forever",
    "send_email_via_console",
    "send_sms_via_console",
]
