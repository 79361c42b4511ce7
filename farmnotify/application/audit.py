"""Delivery audit logging.

Outcomes are written to the application log only; there is no delivery
table to query afterwards.
"""

from __future__ import annotations

import logging

from ..types import NotificationPayload, NotificationResult

logger = logging.getLogger("farmnotify.audit")


def log_notification_delivery(
    farm_id: int | str | None,
    result: NotificationResult,
    payload: NotificationPayload,
) -> None:
    level = logging.INFO if result.success else logging.WARNING
    status = "delivered" if result.success else "failed"
    try:
        logger.log(
            level,
            "[AUDIT] farm_id=%s status=%s kind=%s urgency=%s channel=%s attempts=%d "
            "phone=%s email=%s message_id=%s error=%s at=%s",
            farm_id,
            status,
            payload.kind.value,
            payload.urgency.value,
            result.channel.value,
            result.attempts,
            mask_phone(payload.recipient_phone),
            mask_email(payload.recipient_email),
            result.message_id,
            result.error,
            result.timestamp.isoformat(),
        )
    except Exception:
        # Audit output must not break delivery.
        logger.exception("[AUDIT] failed to record delivery for farm_id=%s", farm_id)


def mask_phone(phone: str | None) -> str | None:
    if not phone:
        return None
    if len(phone) <= 4:
        return "***"
    return f"***{phone[-4:]}"


def mask_email(email: str | None) -> str | None:
    if not email:
        return None
    _, _, domain = email.rpartition("@")
    return f"***@{domain}" if domain else "***"
