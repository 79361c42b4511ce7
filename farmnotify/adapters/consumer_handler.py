"""Consumer-handler adapter functions (Kafka-like flow without Kafka).

Mental model refresher:
- This is the controller-like entrypoint for notification requests.
- Flow:
  record -> parse adapter -> deliver (dispatch, usually with retry)
  -> audit log -> commit/no-commit decision
- This module owns transport lifecycle behavior (parse errors, commit
  callbacks), not channel rules.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Sequence

from ..application.audit import log_notification_delivery
from ..types import DispatchFn
from .payload import parse_notification_payload

Record = Mapping[str, Any]
CommitFn = Callable[[Record], None]
RejectFn = Callable[[Record, str], None]


def handle_message(
    record: Record,
    *,
    deliver: DispatchFn,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> dict[str, Any]:
    """Handle one incoming record and decide commit/no-commit.

    Commit policy:
    - Commit when delivery succeeded on at least one channel.
    - Do not commit on parse failures or when every attempt failed; the
      reject callback decides what happens to the record.
    """
    try:
        value = _get_record_value(record)
        payload = parse_notification_payload(_get_notification(value))
    except Exception as exc:
        error = f"parse_failed: {exc}"
        if reject is not None:
            reject(record, error)
        return {
            "status": "parse_failed",
            "record_meta": _record_meta(record),
            "event_id": None,
            "result": None,
            "should_commit": False,
            "error": error,
        }

    result = deliver(payload)
    log_notification_delivery(value.get("farm_id"), result, payload)

    if result.success:
        commit(record)
        status = "delivered_and_committed"
        error = None
    else:
        status = "delivery_failed"
        error = f"delivery_failed: {result.error}"
        if reject is not None:
            reject(record, error)

    return {
        "status": status,
        "record_meta": _record_meta(record),
        "event_id": value.get("event_id"),
        "result": result,
        "should_commit": result.success,
        "error": error,
    }


def handle_batch(
    records: Sequence[Record],
    *,
    deliver: DispatchFn,
    commit: CommitFn,
    reject: RejectFn | None = None,
) -> list[dict[str, Any]]:
    """Handle a batch of records sequentially using `handle_message`."""
    return [
        handle_message(record, deliver=deliver, commit=commit, reject=reject)
        for record in records
    ]


def _get_record_value(record: Record) -> Mapping[str, Any]:
    value = record.get("value")
    if not isinstance(value, Mapping):
        raise ValueError("record.value must be a dict payload")
    return value


def _get_notification(value: Mapping[str, Any]) -> Mapping[str, Any]:
    notification = value.get("notification")
    if not isinstance(notification, Mapping):
        raise ValueError("record.value.notification must be a dict payload")
    return notification


def _record_meta(record: Record) -> dict[str, Any]:
    return {
        "topic": record.get("topic"),
        "partition": record.get("partition"),
        "offset": record.get("offset"),
    }
