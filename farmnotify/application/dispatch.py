"""Application orchestration for multi-channel delivery.

Mental model refresher:
- Application layer coordinates use-case flow across domain modules.
- Here it renders the email, calls the SMS rules and the email rules for
  whichever recipients the payload carries, and folds both outcomes into a
  single `NotificationResult`.
"""

from __future__ import annotations

from datetime import UTC, datetime
from functools import partial

from ..domain.email import send_email_notification
from ..domain.sms import send_sms_notification
from ..domain.templates import generate_email_template
from ..types import (
    Channel,
    DispatchFn,
    NotificationPayload,
    NotificationResult,
    SendEmailFn,
    SendSMSFn,
)

NO_RECIPIENT_ERROR = "No recipient phone or email provided"


def send_multi_channel_notification(
    payload: NotificationPayload,
    *,
    send_sms: SendSMSFn | None,
    send_email: SendEmailFn | None,
    now: datetime | None = None,
) -> NotificationResult:
    """Deliver one payload over every channel it has a recipient for.

    Overall success is true when at least one attempted channel succeeded.
    """
    sms_outcome = None
    email_outcome = None

    if payload.recipient_phone:
        sms_outcome = send_sms_notification(
            payload.recipient_phone, payload.message, payload.farm_name, send_sms
        )

    if payload.recipient_email:
        email_outcome = send_email_notification(
            payload.recipient_email,
            payload.subject,
            generate_email_template(payload),
            payload.farm_name,
            send_email,
        )

    timestamp = now or datetime.now(tz=UTC)
    channel = Channel.from_attempts(sms=sms_outcome is not None, email=email_outcome is not None)
    if channel is Channel.NONE:
        return NotificationResult(
            success=False, channel=channel, timestamp=timestamp, error=NO_RECIPIENT_ERROR
        )

    outcomes = [item for item in (sms_outcome, email_outcome) if item is not None]
    return NotificationResult(
        success=any(item.success for item in outcomes),
        channel=channel,
        timestamp=timestamp,
        message_id=next((item.message_id for item in outcomes if item.message_id), None),
        error=next((item.error for item in outcomes if item.error), None),
        sms=sms_outcome,
        email=email_outcome,
    )


def build_dispatcher(
    send_sms: SendSMSFn | None,
    send_email: SendEmailFn | None,
) -> DispatchFn:
    """Bind provider clients once and return a payload -> result callable."""
    return partial(send_multi_channel_notification, send_sms=send_sms, send_email=send_email)
