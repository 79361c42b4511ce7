"""Facade over the notification layers.

Module layout by abstraction layer:
- adapters: payload mapping, provider clients, consumer flow, Kafka
- domain: channel rules, email rendering, compliance thresholds
- application: dispatch, retry, use-case builders, audit
"""

from .adapters.consumer_handler import handle_batch, handle_message
from .adapters.fake_senders import send_email_via_console, send_sms_via_console
from .adapters.kafka_runtime import (
    build_delivery,
    publish_notification_requested_event,
    run_notification_worker_forever,
)
from .adapters.payload import parse_notification_payload
from .adapters.real_senders import build_email_client, build_sms_client
from .application.audit import log_notification_delivery
from .application.builders import (
    check_and_send_compliance_alerts,
    send_appointment_reminder,
    send_bulk_compliance_notifications,
    send_compliance_alert,
    send_dose_reminder,
    send_health_alert,
    send_prescription_expiry_alert,
)
from .application.dispatch import build_dispatcher, send_multi_channel_notification
from .application.retry import RetryPolicy, retry_notification_delivery
from .domain.email import send_email_notification
from .domain.sms import send_sms_notification
from .domain.templates import generate_email_template

__all__ = [
    "RetryPolicy",
    "build_delivery",
    "build_dispatcher",
    "build_email_client",
    "build_sms_client",
    "check_and_send_compliance_alerts",
    "generate_email_template",
    "handle_batch",
    "handle_message",
    "log_notification_delivery",
    "parse_notification_payload",
    "publish_notification_requested_event",
    "retry_notification_delivery",
    "run_notification_worker_forever",
    "send_appointment_reminder",
    "send_bulk_compliance_notifications",
    "send_compliance_alert",
    "send_dose_reminder",
    "send_email_notification",
    "send_email_via_console",
    "send_health_alert",
    "send_multi_channel_notification",
    "send_prescription_expiry_alert",
    "send_sms_notification",
    "send_sms_via_console",
]
