"""HTML rendering for email notifications."""

from __future__ import annotations

import json
from html import escape
from typing import Any, Mapping

from ..types import NotificationKind, NotificationPayload, Urgency

URGENCY_COLORS: dict[Urgency, str] = {
    Urgency.LOW: "#16a34a",
    Urgency.MEDIUM: "#f59e0b",
    Urgency.HIGH: "#dc2626",
}

KIND_LABELS: dict[NotificationKind, str] = {
    NotificationKind.APPOINTMENT: "Veterinary Appointment",
    NotificationKind.PRESCRIPTION: "Prescription",
    NotificationKind.HEALTH_ALERT: "Health Alert",
    NotificationKind.COMPLIANCE: "Medication Compliance",
    NotificationKind.REFILL: "Prescription Refill",
}


def generate_email_template(payload: NotificationPayload) -> str:
    """Render the payload as a self-contained HTML email.

    The output depends only on the payload, so rendering the same payload
    twice yields identical bytes.
    """
    color = URGENCY_COLORS[payload.urgency]
    label = KIND_LABELS[payload.kind]
    details = _render_metadata(payload.metadata)

    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head><meta charset=\"utf-8\"><title>"
        f"{escape(payload.subject)}</title></head>\n"
        "<body style=\"font-family: Arial, sans-serif; color: #1f2937;\">\n"
        f"<div style=\"border-left: 6px solid {color}; padding: 16px;\">\n"
        f"<p style=\"color: {color}; font-weight: bold; text-transform: uppercase;\">"
        f"{escape(label)} &middot; {escape(payload.urgency.value)} urgency</p>\n"
        f"<h2>{escape(payload.subject)}</h2>\n"
        f"<p>{escape(payload.message)}</p>\n"
        "<table>\n"
        f"<tr><td><strong>Animal:</strong></td><td>{escape(payload.animal_name)}</td></tr>\n"
        f"<tr><td><strong>Farm:</strong></td><td>{escape(payload.farm_name)}</td></tr>\n"
        "</table>\n"
        f"{details}"
        "</div>\n"
        "<p style=\"font-size: 12px; color: #6b7280;\">Sent by FarmKonnect</p>\n"
        "</body>\n"
        "</html>\n"
    )


def _render_metadata(metadata: Mapping[str, Any]) -> str:
    if not metadata:
        return ""
    text = json.dumps(dict(metadata), indent=2, sort_keys=True, default=str)
    return f"<h3>Details</h3>\n<pre>{escape(text)}</pre>\n"
