from __future__ import annotations

import json
import unittest
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest import mock

from farmnotify.adapters import kafka_runtime
from farmnotify.config import NotifierSettings
from farmnotify.types import (
    Channel,
    NotificationKind,
    NotificationPayload,
    NotificationResult,
    Urgency,
)


def make_worker(**overrides: object) -> kafka_runtime.WorkerSettings:
    base: dict[str, object] = {
        "bootstrap_servers": ["localhost:9092"],
        "topic": "notifications.requested",
        "dlq_enabled": True,
        "dlq_topic": "notifications.requested.dlq",
        "group_id": "farmnotify-worker",
        "auto_offset_reset": "earliest",
        "poll_timeout_ms": 1000,
        "max_records": 50,
        "send_timeout_seconds": 5.0,
        "producer_acks": "all",
    }
    return kafka_runtime.WorkerSettings(**(base | overrides))


def make_message(value: object, *, offset: int = 5) -> SimpleNamespace:
    return SimpleNamespace(topic="notifications.requested", partition=0, offset=offset, value=value)


def event_bytes() -> bytes:
    return json.dumps(
        {
            "event_id": "evt-9",
            "farm_id": 3,
            "notification": {
                "recipientPhone": "+233240000000",
                "type": "health_alert",
                "subject": "Health Alert: Bessie",
                "message": "Fever",
                "animalName": "Bessie",
                "farmName": "Farm",
                "urgency": "high",
            },
        }
    ).encode("utf-8")


def fixed_result(success: bool) -> NotificationResult:
    return NotificationResult(
        success=success,
        channel=Channel.SMS,
        timestamp=datetime(2026, 3, 1, tzinfo=UTC),
        error=None if success else "timeout",
        attempts=3,
    )


class KafkaRuntimeHelperTests(unittest.TestCase):
    def test_deserialize_json_object_accepts_bytes(self) -> None:
        payload = kafka_runtime._deserialize_json_object(b'{"event_id":"evt-1","farm_id":2}')

        self.assertEqual(payload["event_id"], "evt-1")
        self.assertEqual(payload["farm_id"], 2)

    def test_deserialize_json_object_rejects_non_object_json(self) -> None:
        with self.assertRaises(ValueError):
            kafka_runtime._deserialize_json_object(b'["not","an","object"]')

    def test_bootstrap_servers_from_env_parses_csv(self) -> None:
        env = {"KAFKA_BOOTSTRAP_SERVERS": "localhost:9092, kafka:29092 "}
        with mock.patch.dict("os.environ", env, clear=True):
            servers = kafka_runtime._bootstrap_servers_from_env()
        self.assertEqual(servers, ["localhost:9092", "kafka:29092"])

    def test_bootstrap_servers_from_env_requires_value(self) -> None:
        with mock.patch.dict("os.environ", {}, clear=True):
            with self.assertRaises(RuntimeError):
                kafka_runtime._bootstrap_servers_from_env()

    def test_worker_settings_defaults(self) -> None:
        with mock.patch.dict("os.environ", {"KAFKA_BOOTSTRAP_SERVERS": "k:9092"}, clear=True):
            worker = kafka_runtime.WorkerSettings.from_env()

        self.assertEqual(worker.topic, "notifications.requested")
        self.assertEqual(worker.dlq_topic, "notifications.requested.dlq")
        self.assertTrue(worker.dlq_enabled)
        self.assertEqual(worker.poll_timeout_ms, 1000)

    def test_offset_and_metadata_falls_back_to_two_arg_signature(self) -> None:
        calls: list[tuple[int, str]] = []

        def factory(offset: int, metadata: str) -> tuple[int, str]:
            calls.append((offset, metadata))
            return (offset, metadata)

        self.assertEqual(kafka_runtime._offset_and_metadata(factory, 42), (42, ""))
        self.assertEqual(calls, [(42, "")])

    def test_build_dlq_payload_includes_source_metadata_and_event_id(self) -> None:
        dlq_payload = kafka_runtime._build_dlq_payload(
            source_topic="notifications.requested",
            source_partition=0,
            source_offset=42,
            source_payload={"event_id": "evt-abc", "raw": b"\xff"},
            failure_reason="delivery_failed: timeout",
        )

        self.assertEqual(dlq_payload["event_type"], "notifications.requested.dlq")
        self.assertEqual(dlq_payload["source"]["offset"], 42)
        self.assertEqual(dlq_payload["source_event_id"], "evt-abc")
        self.assertEqual(dlq_payload["payload"]["raw"], "\ufffd")
        self.assertIn("failed_at", dlq_payload)

    def test_build_delivery_retries_with_settings_policy(self) -> None:
        settings = NotifierSettings(retry_max_attempts=2, retry_delay_seconds=0.0)
        deliver = kafka_runtime.build_delivery(settings)
        payload = NotificationPayload(
            kind=NotificationKind.HEALTH_ALERT,
            subject="Health Alert: Bessie",
            message="Fever",
            animal_name="Bessie",
            farm_name="Farm",
            urgency=Urgency.HIGH,
            recipient_phone="+233240000000",
        )

        result = deliver(payload)

        self.assertFalse(result.success)
        self.assertEqual(result.error, "SMS service not configured")
        self.assertEqual(result.attempts, 2)

    def test_build_delivery_honours_per_request_attempt_limit(self) -> None:
        deliver = kafka_runtime.build_delivery(
            NotifierSettings(retry_max_attempts=3, retry_delay_seconds=0.0)
        )
        payload = NotificationPayload(
            kind=NotificationKind.HEALTH_ALERT,
            subject="Health Alert: Bessie",
            message="Fever",
            animal_name="Bessie",
            farm_name="Farm",
            urgency=Urgency.HIGH,
            recipient_phone="+233240000000",
            max_attempts=1,
        )

        result = deliver(payload)

        self.assertFalse(result.success)
        self.assertEqual(result.attempts, 1)


class ProcessMessageTests(unittest.TestCase):
    def test_successful_delivery_commits_next_offset(self) -> None:
        consumer = mock.Mock()
        dlq = mock.Mock()

        kafka_runtime._process_message(
            make_message(event_bytes(), offset=5),
            consumer=consumer,
            dlq_producer=dlq,
            worker=make_worker(),
            deliver=lambda payload: fixed_result(True),
        )

        consumer.commit.assert_called_once()
        offsets = consumer.commit.call_args.kwargs["offsets"]
        (committed,) = offsets.values()
        self.assertEqual(committed.offset, 6)
        dlq.send.assert_not_called()

    def test_failed_delivery_is_dead_lettered_then_committed(self) -> None:
        consumer = mock.Mock()
        dlq = mock.Mock()
        dlq.send.return_value.get.return_value = SimpleNamespace(
            topic="notifications.requested.dlq", partition=0, offset=1
        )

        kafka_runtime._process_message(
            make_message(event_bytes()),
            consumer=consumer,
            dlq_producer=dlq,
            worker=make_worker(),
            deliver=lambda payload: fixed_result(False),
        )

        dlq.send.assert_called_once()
        topic = dlq.send.call_args.args[0]
        value = dlq.send.call_args.kwargs["value"]
        self.assertEqual(topic, "notifications.requested.dlq")
        self.assertIn("timeout", value["failure_reason"])
        self.assertEqual(value["source_event_id"], "evt-9")
        consumer.commit.assert_called_once()

    def test_undecodable_record_without_dlq_is_not_committed(self) -> None:
        consumer = mock.Mock()

        kafka_runtime._process_message(
            make_message(b"not json"),
            consumer=consumer,
            dlq_producer=None,
            worker=make_worker(dlq_enabled=False),
            deliver=lambda payload: fixed_result(True),
        )

        consumer.commit.assert_not_called()

    def test_dlq_send_failure_leaves_offset_uncommitted(self) -> None:
        consumer = mock.Mock()
        dlq = mock.Mock()
        dlq.send.side_effect = RuntimeError("broker down")

        kafka_runtime._process_message(
            make_message(event_bytes()),
            consumer=consumer,
            dlq_producer=dlq,
            worker=make_worker(),
            deliver=lambda payload: fixed_result(False),
        )

        consumer.commit.assert_not_called()


if __name__ == "__main__":
    unittest.main()
