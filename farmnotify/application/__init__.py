"""Application layer: dispatch, retry, builders and audit."""

from .audit import log_notification_delivery
from .builders import (
    BulkComplianceSummary,
    FarmDoseRecords,
    check_and_send_compliance_alerts,
    send_appointment_reminder,
    send_bulk_compliance_notifications,
    send_compliance_alert,
    send_dose_reminder,
    send_health_alert,
    send_prescription_expiry_alert,
)
from .dispatch import build_dispatcher, send_multi_channel_notification
from .retry import RetryPolicy, retry_notification_delivery

__all__ = [
    "BulkComplianceSummary",
    "FarmDoseRecords",
    "RetryPolicy",
    "build_dispatcher",
    "check_and_send_compliance_alerts",
    "log_notification_delivery",
    "retry_notification_delivery",
    "send_appointment_reminder",
    "send_bulk_compliance_notifications",
    "send_compliance_alert",
    "send_dose_reminder",
    "send_health_alert",
    "send_multi_channel_notification",
    "send_prescription_expiry_alert",
]
