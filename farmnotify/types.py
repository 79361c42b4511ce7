"""Shared types for the notification package."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Mapping


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NotificationKind(str, Enum):
    APPOINTMENT = "appointment"
    PRESCRIPTION = "prescription"
    HEALTH_ALERT = "health_alert"
    COMPLIANCE = "compliance"
    REFILL = "refill"


class Channel(str, Enum):
    """Channels a dispatch actually attempted."""

    NONE = "none"
    SMS = "sms"
    EMAIL = "email"
    BOTH = "both"

    @classmethod
    def from_attempts(cls, *, sms: bool, email: bool) -> Channel:
        if sms and email:
            return cls.BOTH
        if sms:
            return cls.SMS
        if email:
            return cls.EMAIL
        return cls.NONE


@dataclass(frozen=True)
class NotificationPayload:
    kind: NotificationKind
    subject: str
    message: str
    animal_name: str
    farm_name: str
    urgency: Urgency
    recipient_phone: str | None = None
    recipient_email: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    # Per-request override of the retry policy's attempt limit.
    max_attempts: int | None = None


@dataclass(frozen=True)
class SendOutcome:
    success: bool
    message_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class NotificationResult:
    success: bool
    channel: Channel
    timestamp: datetime
    message_id: str | None = None
    error: str | None = None
    sms: SendOutcome | None = None
    email: SendOutcome | None = None
    attempts: int = 1


# Provider clients return the provider's message id (or None when the
# provider does not report one) and raise on failure.
SendSMSFn = Callable[..., "str | None"]
SendEmailFn = Callable[..., "str | None"]
DispatchFn = Callable[[NotificationPayload], NotificationResult]
