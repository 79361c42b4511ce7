"""Domain layer: channel rules, rendering and compliance thresholds."""

from .compliance import (
    ComplianceShortfall,
    DoseRecord,
    compliance_urgency,
    expiry_urgency,
    find_low_compliance,
)
from .email import send_email_notification
from .sms import send_sms_notification
from .templates import generate_email_template

__all__ = [
    "ComplianceShortfall",
    "DoseRecord",
    "compliance_urgency",
    "expiry_urgency",
    "find_low_compliance",
    "generate_email_template",
    "send_email_notification",
    "send_sms_notification",
]
