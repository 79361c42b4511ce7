"""Real provider clients (Twilio SMS, SendGrid email).

Mental model refresher:
- This module is an outbound adapter.
- Clients are built once from `NotifierSettings` and injected into the
  dispatcher; domain/application code only sees plain callables.
- A client returns the provider's message id and raises `ProviderError` on
  any failure. The channel senders turn that into a failed outcome.
"""

from __future__ import annotations

import base64
import json
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass

from ..config import NotifierSettings


class ProviderError(RuntimeError):
    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


@dataclass(frozen=True)
class TwilioSMSClient:
    account_sid: str
    auth_token: str
    from_phone: str
    base_url: str = "https://api.twilio.com"
    timeout_seconds: float = 10.0

    def __call__(self, *, to_phone_e164: str, message: str) -> str | None:
        endpoint = f"{self.base_url}/2010-04-01/Accounts/{self.account_sid}/Messages.json"
        data = urllib.parse.urlencode(
            {"To": to_phone_e164, "From": self.from_phone, "Body": message}
        ).encode("utf-8")

        request = urllib.request.Request(endpoint, data=data, method="POST")
        request.add_header("Authorization", _basic_auth_header(self.account_sid, self.auth_token))
        request.add_header("Content-Type", "application/x-www-form-urlencoded")

        _status, _headers, body = _send("Twilio SMS", request, self.timeout_seconds)
        try:
            parsed = json.loads(body.decode("utf-8") or "{}")
        except ValueError:
            return None
        sid = parsed.get("sid") if isinstance(parsed, dict) else None
        return str(sid) if sid else None


@dataclass(frozen=True)
class SendGridEmailClient:
    api_key: str
    from_email: str
    base_url: str = "https://api.sendgrid.com"
    timeout_seconds: float = 10.0

    def __call__(
        self,
        *,
        to_email: str,
        subject: str,
        html_body: str,
        from_name: str | None = None,
    ) -> str | None:
        sender: dict[str, str] = {"email": self.from_email}
        if from_name:
            sender["name"] = from_name
        document = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": sender,
            "subject": subject,
            "content": [{"type": "text/html", "value": html_body}],
        }

        request = urllib.request.Request(
            f"{self.base_url}/v3/mail/send",
            data=json.dumps(document).encode("utf-8"),
            method="POST",
        )
        request.add_header("Authorization", f"Bearer {self.api_key}")
        request.add_header("Content-Type", "application/json")

        _status, headers, _body = _send("SendGrid email", request, self.timeout_seconds)
        return headers.get("x-message-id")


def build_sms_client(settings: NotifierSettings) -> TwilioSMSClient | None:
    if not settings.sms_configured:
        return None
    return TwilioSMSClient(
        account_sid=str(settings.twilio_account_sid),
        auth_token=str(settings.twilio_auth_token),
        from_phone=str(settings.twilio_from_phone),
        base_url=settings.twilio_api_base_url,
        timeout_seconds=settings.twilio_timeout_seconds,
    )


def build_email_client(settings: NotifierSettings) -> SendGridEmailClient | None:
    if not settings.email_configured:
        return None
    return SendGridEmailClient(
        api_key=str(settings.sendgrid_api_key),
        from_email=settings.sendgrid_from_email,
        base_url=settings.sendgrid_api_base_url,
        timeout_seconds=settings.sendgrid_timeout_seconds,
    )


def _send(
    provider: str,
    request: urllib.request.Request,
    timeout_seconds: float,
) -> tuple[int, dict[str, str], bytes]:
    try:
        with urllib.request.urlopen(request, timeout=timeout_seconds) as response:
            status = int(response.getcode())
            if status < 200 or status >= 300:
                raise ProviderError(f"{provider} send failed with status {status}", status=status)
            headers = {key.lower(): value for key, value in response.headers.items()}
            return status, headers, response.read()
    except urllib.error.HTTPError as exc:
        details = exc.read().decode("utf-8", errors="replace")
        raise ProviderError(
            f"{provider} send failed HTTP {exc.code}: {details[:300]}", status=exc.code
        ) from exc
    except urllib.error.URLError as exc:
        raise ProviderError(f"{provider} send failed: {exc.reason}") from exc
    except TimeoutError as exc:
        raise ProviderError(f"{provider} send timed out after {timeout_seconds}s") from exc


def _basic_auth_header(username: str, password: str) -> str:
    token = f"{username}:{password}".encode("utf-8")
    encoded = base64.b64encode(token).decode("ascii")
    return f"Basic {encoded}"
