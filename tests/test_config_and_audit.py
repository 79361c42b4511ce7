from __future__ import annotations

import os
import tempfile
import unittest
from datetime import UTC, datetime
from pathlib import Path
from unittest import mock

from farmnotify.application.audit import log_notification_delivery, mask_email, mask_phone
from farmnotify.application.retry import RetryPolicy
from farmnotify.config import NotifierSettings, env_bool, load_env_file, required_env
from farmnotify.types import (
    Channel,
    NotificationKind,
    NotificationPayload,
    NotificationResult,
    Urgency,
)


class SettingsTests(unittest.TestCase):
    def test_from_env_defaults(self) -> None:
        settings = NotifierSettings.from_env({})

        self.assertFalse(settings.sms_configured)
        self.assertFalse(settings.email_configured)
        self.assertEqual(settings.retry_max_attempts, 3)
        self.assertEqual(settings.retry_delay_seconds, 5.0)
        self.assertIsNone(settings.retry_deadline_seconds)

    def test_from_env_reads_providers_and_retry(self) -> None:
        settings = NotifierSettings.from_env(
            {
                "TWILIO_ACCOUNT_SID": "AC1",
                "TWILIO_AUTH_TOKEN": "tok",
                "TWILIO_FROM_PHONE": "+15555550111",
                "SENDGRID_API_KEY": "SG.key",
                "SENDGRID_API_BASE_URL": "http://localhost:9000/",
                "NOTIFY_RETRY_MAX_ATTEMPTS": "5",
                "NOTIFY_RETRY_BACKOFF_FACTOR": "2",
                "NOTIFY_RETRY_DEADLINE_SECONDS": "30",
            }
        )

        self.assertTrue(settings.sms_configured)
        self.assertTrue(settings.email_configured)
        self.assertEqual(settings.sendgrid_api_base_url, "http://localhost:9000")
        policy = RetryPolicy.from_settings(settings)
        self.assertEqual(policy.max_attempts, 5)
        self.assertEqual(policy.backoff_factor, 2.0)
        self.assertEqual(policy.deadline_seconds, 30.0)

    def test_invalid_number_raises(self) -> None:
        with self.assertRaises(RuntimeError):
            NotifierSettings.from_env({"NOTIFY_RETRY_MAX_ATTEMPTS": "three"})

    def test_malformed_deadline_raises_runtime_error(self) -> None:
        with self.assertRaises(RuntimeError):
            NotifierSettings.from_env({"NOTIFY_RETRY_DEADLINE_SECONDS": "soon"})

    def test_negative_max_delay_setting_is_rejected_by_policy(self) -> None:
        settings = NotifierSettings.from_env({"NOTIFY_RETRY_MAX_DELAY_SECONDS": "-1"})

        with self.assertRaises(ValueError):
            RetryPolicy.from_settings(settings)

    def test_env_helpers(self) -> None:
        self.assertTrue(env_bool("FLAG", False, {"FLAG": "yes"}))
        self.assertFalse(env_bool("FLAG", True, {"FLAG": "off"}))
        self.assertTrue(env_bool("FLAG", True, {}))
        with self.assertRaises(RuntimeError):
            env_bool("FLAG", True, {"FLAG": "maybe"})
        with self.assertRaises(RuntimeError):
            required_env("MISSING", {"MISSING": "  "})

    def test_load_env_file_does_not_override_existing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / ".env"
            path.write_text(
                "# comment\nFARMNOTIFY_A='from-file'\nFARMNOTIFY_B=new\n", encoding="utf-8"
            )
            with mock.patch.dict(os.environ, {"FARMNOTIFY_B": "existing"}, clear=True):
                load_env_file(path)
                self.assertEqual(os.environ["FARMNOTIFY_A"], "from-file")
                self.assertEqual(os.environ["FARMNOTIFY_B"], "existing")


class AuditTests(unittest.TestCase):
    def setUp(self) -> None:
        self.payload = NotificationPayload(
            kind=NotificationKind.COMPLIANCE,
            subject="s",
            message="m",
            animal_name="Daisy",
            farm_name="Farm",
            urgency=Urgency.HIGH,
            recipient_phone="+233240001234",
            recipient_email="farmer@example.com",
        )

    def make_result(self, success: bool) -> NotificationResult:
        return NotificationResult(
            success=success,
            channel=Channel.BOTH,
            timestamp=datetime(2026, 3, 1, tzinfo=UTC),
            message_id="SM1" if success else None,
            error=None if success else "timeout",
            attempts=2,
        )

    def test_success_logged_at_info_with_masked_recipients(self) -> None:
        with self.assertLogs("farmnotify.audit", level="INFO") as logs:
            log_notification_delivery(7, self.make_result(True), self.payload)

        self.assertEqual(logs.records[0].levelname, "INFO")
        line = logs.output[0]
        self.assertIn("farm_id=7", line)
        self.assertIn("status=delivered", line)
        self.assertIn("channel=both", line)
        self.assertIn("***1234", line)
        self.assertIn("***@example.com", line)
        self.assertNotIn("farmer@", line)

    def test_failure_logged_at_warning(self) -> None:
        with self.assertLogs("farmnotify.audit", level="INFO") as logs:
            log_notification_delivery(7, self.make_result(False), self.payload)

        self.assertEqual(logs.records[0].levelname, "WARNING")
        self.assertIn("error=timeout", logs.output[0])

    def test_masking_helpers(self) -> None:
        self.assertIsNone(mask_phone(None))
        self.assertEqual(mask_phone("+15555550123"), "***0123")
        self.assertEqual(mask_phone("1234"), "***")
        self.assertEqual(mask_phone("12345"), "***2345")
        self.assertIsNone(mask_email(""))
        self.assertEqual(mask_email("a@b.io"), "***@b.io")


if __name__ == "__main__":
    unittest.main()
