"""Environment-variable configuration.

Settings are read once at process start and handed to the code that builds
provider clients. Nothing below caches or mutates module-level state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

Environ = Mapping[str, str]


@dataclass(frozen=True)
class NotifierSettings:
    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_from_phone: str | None = None
    twilio_api_base_url: str = "https://api.twilio.com"
    twilio_timeout_seconds: float = 10.0

    sendgrid_api_key: str | None = None
    sendgrid_from_email: str = "notifications@farmkonnect.app"
    sendgrid_api_base_url: str = "https://api.sendgrid.com"
    sendgrid_timeout_seconds: float = 10.0

    retry_max_attempts: int = 3
    retry_delay_seconds: float = 5.0
    retry_backoff_factor: float = 1.0
    retry_max_delay_seconds: float = 60.0
    retry_jitter_seconds: float = 0.0
    retry_deadline_seconds: float | None = None

    @property
    def sms_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_from_phone)

    @property
    def email_configured(self) -> bool:
        return bool(self.sendgrid_api_key)

    @classmethod
    def from_env(cls, environ: Environ | None = None) -> NotifierSettings:
        env = os.environ if environ is None else environ
        return cls(
            twilio_account_sid=optional_env("TWILIO_ACCOUNT_SID", env),
            twilio_auth_token=optional_env("TWILIO_AUTH_TOKEN", env),
            twilio_from_phone=optional_env("TWILIO_FROM_PHONE", env),
            twilio_api_base_url=env.get("TWILIO_API_BASE_URL", cls.twilio_api_base_url).rstrip("/"),
            twilio_timeout_seconds=env_float("TWILIO_TIMEOUT_SECONDS", 10.0, env),
            sendgrid_api_key=optional_env("SENDGRID_API_KEY", env),
            sendgrid_from_email=env.get("SENDGRID_FROM_EMAIL", cls.sendgrid_from_email).strip(),
            sendgrid_api_base_url=env.get(
                "SENDGRID_API_BASE_URL", cls.sendgrid_api_base_url
            ).rstrip("/"),
            sendgrid_timeout_seconds=env_float("SENDGRID_TIMEOUT_SECONDS", 10.0, env),
            retry_max_attempts=env_int("NOTIFY_RETRY_MAX_ATTEMPTS", 3, env),
            retry_delay_seconds=env_float("NOTIFY_RETRY_DELAY_SECONDS", 5.0, env),
            retry_backoff_factor=env_float("NOTIFY_RETRY_BACKOFF_FACTOR", 1.0, env),
            retry_max_delay_seconds=env_float("NOTIFY_RETRY_MAX_DELAY_SECONDS", 60.0, env),
            retry_jitter_seconds=env_float("NOTIFY_RETRY_JITTER_SECONDS", 0.0, env),
            retry_deadline_seconds=optional_env_float("NOTIFY_RETRY_DEADLINE_SECONDS", env),
        )


def required_env(name: str, environ: Environ | None = None) -> str:
    value = optional_env(name, environ)
    if value is None:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def optional_env(name: str, environ: Environ | None = None) -> str | None:
    env = os.environ if environ is None else environ
    value = env.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def env_bool(name: str, default: bool, environ: Environ | None = None) -> bool:
    env = os.environ if environ is None else environ
    raw = env.get(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise RuntimeError(f"Invalid boolean value for {name}: {raw!r}")


def env_float(name: str, default: float, environ: Environ | None = None) -> float:
    raw = optional_env(name, environ)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid number for {name}: {raw!r}") from exc


def optional_env_float(name: str, environ: Environ | None = None) -> float | None:
    if optional_env(name, environ) is None:
        return None
    return env_float(name, 0.0, environ)


def env_int(name: str, default: int, environ: Environ | None = None) -> int:
    raw = optional_env(name, environ)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"Invalid integer for {name}: {raw!r}") from exc


def load_env_file(path: Path) -> None:
    """Populate os.environ from a `.env` file without overriding existing keys."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        text = line.strip()
        if not text or text.startswith("#") or "=" not in text:
            continue
        key, value = text.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if value.startswith(("'", '"')) and value.endswith(("'", '"')) and len(value) >= 2:
            value = value[1:-1]
        os.environ.setdefault(key, value)
