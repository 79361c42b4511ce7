"""Payload adapter functions.

Mental model refresher:
- This is an adapter/edge module.
- It translates transport-shaped data (a request body or a Kafka record
  value) into the `NotificationPayload` used by application/domain code.
- It validates shape and required fields. It does not decide delivery.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from ..types import NotificationKind, NotificationPayload, Urgency

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def parse_notification_payload(data: Mapping[str, Any]) -> NotificationPayload:
    """Normalize a request-shaped mapping into a `NotificationPayload`.

    Accepts the camelCase keys the web client sends (`recipientPhone`,
    `animalName`, ...) as well as snake_case keys. An optional `maxRetries`
    caps delivery attempts for this request.
    """
    metadata = _field(data, "metadata")
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, Mapping):
        raise ValueError("metadata must be an object")

    email = _as_optional_str(_field(data, "recipient_email"))
    if email is not None and not _EMAIL_PATTERN.match(email):
        raise ValueError(f"Invalid recipient_email: {email!r}")

    return NotificationPayload(
        kind=_as_enum(NotificationKind, _field(data, "type", "kind"), "type"),
        subject=_as_required_str(_field(data, "subject"), "subject"),
        message=_as_required_str(_field(data, "message"), "message"),
        animal_name=_as_required_str(_field(data, "animal_name"), "animal_name"),
        farm_name=_as_required_str(_field(data, "farm_name"), "farm_name"),
        urgency=_as_enum(Urgency, _field(data, "urgency"), "urgency"),
        recipient_phone=_as_optional_str(_field(data, "recipient_phone")),
        recipient_email=email,
        metadata=dict(metadata),
        max_attempts=_as_optional_positive_int(
            _field(data, "max_retries", "max_attempts"), "max_retries"
        ),
    )


def _field(data: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        for key in (name, _camel(name)):
            if key in data:
                return data[key]
    return None


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _as_enum(enum_type: Any, value: Any, field_name: str) -> Any:
    text = _as_required_str(value, field_name).lower()
    try:
        return enum_type(text)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in enum_type)
        raise ValueError(f"Invalid {field_name}: {text!r} (expected one of {allowed})") from exc


def _as_required_str(value: Any, field_name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(f"Missing required field: {field_name}")
    return text


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_optional_positive_int(value: Any, field_name: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"Invalid {field_name}: {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {field_name}: {value!r}") from exc
    if number < 1:
        raise ValueError(f"{field_name} must be >= 1, got {number}")
    return number
