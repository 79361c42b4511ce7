"""SMS channel logic.

Mental model refresher:
- Domain modules hold channel rules: is a provider available, what text goes
  out, and how a provider failure is reported.
- The provider client is injected; this module never reads configuration.
- Provider exceptions stop here. Callers only ever see a `SendOutcome`.
"""

from __future__ import annotations

import logging

from ..types import SendOutcome, SendSMSFn

logger = logging.getLogger(__name__)

SMS_NOT_CONFIGURED = "SMS service not configured"


def format_sms_body(message: str, farm_name: str) -> str:
    return f"[{farm_name}] {message}" if farm_name else message


def send_sms_notification(
    phone: str,
    message: str,
    farm_name: str,
    send_sms: SendSMSFn | None,
) -> SendOutcome:
    """Send one SMS through the injected provider and report the outcome."""
    if send_sms is None:
        logger.warning("[SMS] provider not configured; skipping send to %s", phone)
        return SendOutcome(success=False, error=SMS_NOT_CONFIGURED)

    try:
        message_id = send_sms(to_phone_e164=phone, message=format_sms_body(message, farm_name))
    except Exception as exc:
        logger.error("[SMS] send to %s failed: %s", phone, exc)
        return SendOutcome(success=False, error=str(exc))

    logger.info("[SMS] sent to %s message_id=%s", phone, message_id)
    return SendOutcome(success=True, message_id=message_id)
