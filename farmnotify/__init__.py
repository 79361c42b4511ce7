"""FarmKonnect notification delivery: SMS and email with retry."""

from .channels import (
    RetryPolicy,
    build_delivery,
    build_dispatcher,
    check_and_send_compliance_alerts,
    generate_email_template,
    log_notification_delivery,
    parse_notification_payload,
    retry_notification_delivery,
    send_appointment_reminder,
    send_bulk_compliance_notifications,
    send_compliance_alert,
    send_dose_reminder,
    send_health_alert,
    send_multi_channel_notification,
    send_prescription_expiry_alert,
)
from .config import NotifierSettings
from .types import (
    Channel,
    NotificationKind,
    NotificationPayload,
    NotificationResult,
    SendOutcome,
    Urgency,
)

__all__ = [
    "Channel",
    "NotificationKind",
    "NotificationPayload",
    "NotificationResult",
    "NotifierSettings",
    "RetryPolicy",
    "SendOutcome",
    "Urgency",
    "build_delivery",
    "build_dispatcher",
    "check_and_send_compliance_alerts",
    "generate_email_template",
    "log_notification_delivery",
    "parse_notification_payload",
    "retry_notification_delivery",
    "send_appointment_reminder",
    "send_bulk_compliance_notifications",
    "send_compliance_alert",
    "send_dose_reminder",
    "send_health_alert",
    "send_multi_channel_notification",
    "send_prescription_expiry_alert",
]
