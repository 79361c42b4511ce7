from __future__ import annotations

import unittest

from farmnotify.domain.templates import URGENCY_COLORS, generate_email_template
from farmnotify.types import NotificationKind, NotificationPayload, Urgency


def make_payload(**overrides: object) -> NotificationPayload:
    base: dict[str, object] = {
        "kind": NotificationKind.APPOINTMENT,
        "subject": "Appointment Reminder: Daisy",
        "message": "Veterinary visit tomorrow",
        "animal_name": "Daisy",
        "farm_name": "Green Valley Farm",
        "urgency": Urgency.MEDIUM,
        "recipient_email": "farmer@example.com",
    }
    return NotificationPayload(**(base | overrides))


class EmailTemplateTests(unittest.TestCase):
    def test_rendering_is_pure(self) -> None:
        payload = make_payload(metadata={"b": 2, "a": [1, 2]})

        self.assertEqual(generate_email_template(payload), generate_email_template(payload))

    def test_metadata_key_order_does_not_change_output(self) -> None:
        first = generate_email_template(make_payload(metadata={"a": 1, "b": 2}))
        second = generate_email_template(make_payload(metadata={"b": 2, "a": 1}))

        self.assertEqual(first, second)

    def test_urgency_colors(self) -> None:
        for urgency, color in URGENCY_COLORS.items():
            with self.subTest(urgency=urgency):
                html = generate_email_template(make_payload(urgency=urgency))
                self.assertIn(color, html)
                for other in set(URGENCY_COLORS.values()) - {color}:
                    self.assertNotIn(other, html)

    def test_metadata_block_only_when_present(self) -> None:
        without = generate_email_template(make_payload())
        with_metadata = generate_email_template(make_payload(metadata={"clinic": "North"}))

        self.assertNotIn("<pre>", without)
        self.assertIn("<pre>", with_metadata)
        self.assertIn("&quot;clinic&quot;: &quot;North&quot;", with_metadata)

    def test_user_text_is_escaped(self) -> None:
        html = generate_email_template(make_payload(animal_name="<script>x</script>"))

        self.assertNotIn("<script>", html)
        self.assertIn("&lt;script&gt;", html)

    def test_includes_kind_label_and_fields(self) -> None:
        html = generate_email_template(make_payload())

        self.assertIn("Veterinary Appointment", html)
        self.assertIn("Daisy", html)
        self.assertIn("Green Valley Farm", html)
        self.assertIn("medium urgency", html)


if __name__ == "__main__":
    unittest.main()
