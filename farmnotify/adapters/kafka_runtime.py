"""Kafka transport for notification-request events.

Mental model refresher:
- This module is transport glue to Kafka itself.
- It maps Kafka records into the consumer-handler adapter flow, delivering
  each request through the retry wrapper with real provider clients.
- Offsets are committed manually: after delivery, or after the record was
  written to the dead-letter topic.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import partial
from typing import Any, Mapping

from ..application.dispatch import build_dispatcher
from ..application.retry import RetryPolicy, retry_notification_delivery
from ..config import NotifierSettings, env_bool, env_float, env_int, required_env
from ..types import DispatchFn
from .consumer_handler import handle_message
from .real_senders import build_email_client, build_sms_client

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "notifications.requested"


@dataclass(frozen=True)
class WorkerSettings:
    bootstrap_servers: list[str]
    topic: str
    dlq_enabled: bool
    dlq_topic: str
    group_id: str
    auto_offset_reset: str
    poll_timeout_ms: int
    max_records: int
    send_timeout_seconds: float
    producer_acks: str

    @classmethod
    def from_env(cls) -> WorkerSettings:
        topic = os.getenv("KAFKA_TOPIC_NOTIFICATIONS_REQUESTED", DEFAULT_TOPIC)
        return cls(
            bootstrap_servers=_bootstrap_servers_from_env(),
            topic=topic,
            dlq_enabled=env_bool("KAFKA_DLQ_ENABLED", default=True),
            dlq_topic=os.getenv("KAFKA_TOPIC_NOTIFICATIONS_REQUESTED_DLQ", f"{topic}.dlq"),
            group_id=os.getenv("KAFKA_GROUP_ID", "farmnotify-worker"),
            auto_offset_reset=os.getenv("KAFKA_AUTO_OFFSET_RESET", "earliest"),
            poll_timeout_ms=_poll_timeout_ms_from_env(),
            max_records=env_int("KAFKA_MAX_RECORDS_PER_POLL", 50),
            send_timeout_seconds=env_float("KAFKA_SEND_TIMEOUT_SECONDS", 10.0),
            producer_acks=os.getenv("KAFKA_PRODUCER_ACKS", "all"),
        )


def publish_notification_requested_event(
    event: Mapping[str, Any],
    *,
    topic: str | None = None,
) -> dict[str, Any]:
    """Publish one `notifications.requested` event to Kafka."""
    from kafka import KafkaProducer

    topic_name = topic or os.getenv("KAFKA_TOPIC_NOTIFICATIONS_REQUESTED", DEFAULT_TOPIC)
    timeout_seconds = env_float("KAFKA_SEND_TIMEOUT_SECONDS", 10.0)
    producer = KafkaProducer(
        bootstrap_servers=_bootstrap_servers_from_env(),
        value_serializer=_serialize_json_object,
        acks=os.getenv("KAFKA_PRODUCER_ACKS", "all"),
    )
    try:
        metadata = producer.send(topic_name, value=dict(event)).get(timeout=timeout_seconds)
        producer.flush(timeout=timeout_seconds)
    finally:
        producer.close()

    return {"topic": metadata.topic, "partition": metadata.partition, "offset": metadata.offset}


def build_delivery(settings: NotifierSettings) -> DispatchFn:
    """Real provider clients, bound into a dispatcher and wrapped in the retry policy."""
    dispatch = build_dispatcher(build_sms_client(settings), build_email_client(settings))
    return partial(
        retry_notification_delivery,
        dispatch=dispatch,
        policy=RetryPolicy.from_settings(settings),
    )


def run_notification_worker_forever(
    settings: NotifierSettings | None = None,
    *,
    deliver: DispatchFn | None = None,
) -> int:
    """Consume notification requests until interrupted."""
    from kafka import KafkaConsumer, KafkaProducer

    worker = WorkerSettings.from_env()
    deliver = deliver or build_delivery(settings or NotifierSettings.from_env())

    consumer = KafkaConsumer(
        worker.topic,
        bootstrap_servers=worker.bootstrap_servers,
        group_id=worker.group_id,
        enable_auto_commit=False,
        auto_offset_reset=worker.auto_offset_reset,
    )
    dlq_producer = None
    if worker.dlq_enabled:
        dlq_producer = KafkaProducer(
            bootstrap_servers=worker.bootstrap_servers,
            value_serializer=_serialize_json_object,
            acks=worker.producer_acks,
        )
    logger.info(
        "[WORKER START] topic=%s group_id=%s dlq_enabled=%s dlq_topic=%s",
        worker.topic,
        worker.group_id,
        worker.dlq_enabled,
        worker.dlq_topic,
    )

    try:
        while True:
            batches = consumer.poll(timeout_ms=worker.poll_timeout_ms, max_records=worker.max_records)
            for records in batches.values():
                for message in records:
                    _process_message(
                        message,
                        consumer=consumer,
                        dlq_producer=dlq_producer,
                        worker=worker,
                        deliver=deliver,
                    )
    except KeyboardInterrupt:
        logger.info("[WORKER STOP] received keyboard interrupt")
        return 0
    except Exception:
        logger.exception("[WORKER ERROR] consumer loop failed")
        return 1
    finally:
        _close_quietly(consumer, dlq_producer, worker.send_timeout_seconds)


def _process_message(
    message: Any,
    *,
    consumer: Any,
    dlq_producer: Any,
    worker: WorkerSettings,
    deliver: DispatchFn,
) -> None:
    topic = message.topic
    partition = int(message.partition)
    offset = int(message.offset)

    def commit_current_offset(_record: Mapping[str, Any] | None = None) -> None:
        from kafka import TopicPartition
        from kafka.structs import OffsetAndMetadata

        consumer.commit(
            offsets={
                TopicPartition(topic, partition): _offset_and_metadata(OffsetAndMetadata, offset + 1)
            }
        )
        logger.info("[COMMIT] topic=%s partition=%s offset=%s", topic, partition, offset)

    def dead_letter(reason: str, source_payload: Any) -> None:
        if dlq_producer is None:
            logger.warning(
                "[NO-COMMIT] topic=%s partition=%s offset=%s reason=%s",
                topic,
                partition,
                offset,
                reason,
            )
            return
        dlq_payload = _build_dlq_payload(
            source_topic=topic,
            source_partition=partition,
            source_offset=offset,
            source_payload=source_payload,
            failure_reason=reason,
        )
        try:
            sent = dlq_producer.send(worker.dlq_topic, value=dlq_payload).get(
                timeout=worker.send_timeout_seconds
            )
        except Exception as exc:
            logger.error(
                "[DLQ ERROR] topic=%s partition=%s offset=%s reason=%s error=%s",
                topic,
                partition,
                offset,
                reason,
                exc,
            )
            return
        logger.warning(
            "[DLQ] topic=%s partition=%s offset=%s dlq_topic=%s dlq_offset=%s reason=%s",
            topic,
            partition,
            offset,
            sent.topic,
            sent.offset,
            reason,
        )
        commit_current_offset()

    try:
        value = _deserialize_json_object(message.value)
    except Exception as exc:
        dead_letter(f"decode_failed: {exc}", message.value)
        return

    result = handle_message(
        {"topic": topic, "partition": partition, "offset": offset, "value": value},
        deliver=deliver,
        commit=commit_current_offset,
        reject=lambda record, reason: dead_letter(reason, record.get("value")),
    )
    logger.info(
        "[RESULT] topic=%s partition=%s offset=%s status=%s error=%s",
        topic,
        partition,
        offset,
        result["status"],
        result["error"],
    )


def _close_quietly(consumer: Any, producer: Any, timeout_seconds: float) -> None:
    try:
        consumer.close()
    except Exception:
        logger.debug("consumer close failed", exc_info=True)
    if producer is None:
        return
    try:
        producer.flush(timeout=timeout_seconds)
        producer.close()
    except Exception:
        logger.debug("dlq producer close failed", exc_info=True)


def _bootstrap_servers_from_env() -> list[str]:
    raw = required_env("KAFKA_BOOTSTRAP_SERVERS")
    servers = [item.strip() for item in raw.split(",") if item.strip()]
    if not servers:
        raise RuntimeError("KAFKA_BOOTSTRAP_SERVERS must include at least one host:port")
    return servers


def _poll_timeout_ms_from_env() -> int:
    timeout_ms = int(env_float("KAFKA_POLL_TIMEOUT_SECONDS", 1.0) * 1000)
    if timeout_ms <= 0:
        raise RuntimeError("KAFKA_POLL_TIMEOUT_SECONDS must be > 0")
    return timeout_ms


def _serialize_json_object(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def _deserialize_json_object(raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not isinstance(raw, str):
        raise ValueError(f"Unsupported Kafka payload type: {type(raw).__name__}")

    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Kafka payload must decode to a JSON object")
    return parsed


def _build_dlq_payload(
    *,
    source_topic: str,
    source_partition: int,
    source_offset: int,
    source_payload: Any,
    failure_reason: str,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "event_type": f"{source_topic}.dlq",
        "failed_at": datetime.now(tz=UTC).isoformat(),
        "failure_reason": failure_reason,
        "source": {"topic": source_topic, "partition": source_partition, "offset": source_offset},
        "payload": _to_json_compatible(source_payload),
    }
    if isinstance(source_payload, Mapping):
        event_id = source_payload.get("event_id")
        if isinstance(event_id, str) and event_id.strip():
            payload["source_event_id"] = event_id.strip()
    return payload


def _to_json_compatible(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _to_json_compatible(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_json_compatible(item) for item in value]
    return repr(value)


def _offset_and_metadata(offset_and_metadata_type: Any, offset: int) -> Any:
    """Build kafka-python OffsetAndMetadata across version signatures."""
    try:
        return offset_and_metadata_type(offset, "", -1)
    except TypeError:
        return offset_and_metadata_type(offset, "")
