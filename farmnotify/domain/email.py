"""Email channel logic.

Same contract as the SMS channel: the provider client is injected and every
provider failure comes back as a failed `SendOutcome`.
"""

from __future__ import annotations

import logging

from ..types import SendEmailFn, SendOutcome

logger = logging.getLogger(__name__)

EMAIL_NOT_CONFIGURED = "Email service not configured"


def sender_display_name(farm_name: str) -> str:
    return f"{farm_name} via FarmKonnect" if farm_name else "FarmKonnect"


def send_email_notification(
    email: str,
    subject: str,
    html_body: str,
    farm_name: str,
    send_email: SendEmailFn | None,
) -> SendOutcome:
    """Send one HTML email through the injected provider and report the outcome."""
    if send_email is None:
        logger.warning("[EMAIL] provider not configured; skipping send to %s", email)
        return SendOutcome(success=False, error=EMAIL_NOT_CONFIGURED)

    try:
        message_id = send_email(
            to_email=email,
            subject=subject,
            html_body=html_body,
            from_name=sender_display_name(farm_name),
        )
    except Exception as exc:
        logger.error("[EMAIL] send to %s failed: %s", email, exc)
        return SendOutcome(success=False, error=str(exc))

    logger.info("[EMAIL] sent to %s message_id=%s", email, message_id)
    return SendOutcome(success=True, message_id=message_id)
