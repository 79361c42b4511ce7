"""Console provider clients for local runs without credentials.

They satisfy the same callable contract as the real clients and return a
locally generated message id.
"""

from __future__ import annotations

import uuid


def send_email_via_console(
    *,
    to_email: str,
    subject: str,
    html_body: str,
    from_name: str | None = None,
) -> str:
    message_id = f"console-email-{uuid.uuid4().hex[:12]}"
    print("[EMAIL]")
    print(f"from={from_name or ''}")
    print(f"to={to_email}")
    print(f"subject={subject}")
    print(f"html_bytes={len(html_body.encode('utf-8'))}")
    print(f"message_id={message_id}")
    return message_id


def send_sms_via_console(*, to_phone_e164: str, message: str) -> str:
    message_id = f"console-sms-{uuid.uuid4().hex[:12]}"
    print("[SMS]")
    print(f"to={to_phone_e164}")
    print(f"message={message}")
    print(f"message_id={message_id}")
    return message_id
