"""Retry wrapper around a dispatch callable."""

from __future__ import annotations

import logging
import random
import threading
import time
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Callable

from ..config import NotifierSettings
from ..types import Channel, DispatchFn, NotificationPayload, NotificationResult

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], None]
ClockFn = Callable[[], float]

CANCELLED_ERROR = "Notification delivery cancelled"


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to dispatch and how long to wait in between.

    The defaults give a fixed 5 second delay between at most 3 attempts.
    A `backoff_factor` above 1 grows the delay exponentially, capped at
    `max_delay_seconds` (never below `delay_seconds`); `jitter_seconds` adds
    a uniform random extra.
    `deadline_seconds` bounds the total time spent, measured from the first
    attempt.
    """

    max_attempts: int = 3
    delay_seconds: float = 5.0
    backoff_factor: float = 1.0
    max_delay_seconds: float = 60.0
    jitter_seconds: float = 0.0
    deadline_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay_seconds < 0 or self.jitter_seconds < 0:
            raise ValueError("delays must be >= 0")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")
        if self.max_delay_seconds < 0:
            raise ValueError("max_delay_seconds must be >= 0")
        if self.deadline_seconds is not None and self.deadline_seconds < 0:
            raise ValueError("deadline_seconds must be >= 0")

    @classmethod
    def from_settings(cls, settings: NotifierSettings) -> RetryPolicy:
        return cls(
            max_attempts=settings.retry_max_attempts,
            delay_seconds=settings.retry_delay_seconds,
            backoff_factor=settings.retry_backoff_factor,
            max_delay_seconds=settings.retry_max_delay_seconds,
            jitter_seconds=settings.retry_jitter_seconds,
            deadline_seconds=settings.retry_deadline_seconds,
        )

    def delay_for(self, attempt: int, rng: random.Random | None = None) -> float:
        """Delay to wait after failed attempt number `attempt` (1-based)."""
        base = self.delay_seconds * (self.backoff_factor ** (attempt - 1))
        # The cap bounds growth only; the configured base delay is always honoured.
        delay = min(base, max(self.max_delay_seconds, self.delay_seconds))
        if self.jitter_seconds:
            delay += (rng or random).uniform(0, self.jitter_seconds)
        return delay


def retry_notification_delivery(
    payload: NotificationPayload,
    dispatch: DispatchFn,
    *,
    policy: RetryPolicy | None = None,
    sleep: SleepFn = time.sleep,
    clock: ClockFn = time.monotonic,
    cancel: threading.Event | None = None,
    rng: random.Random | None = None,
) -> NotificationResult:
    """Dispatch until success, attempts run out, the deadline passes or `cancel` is set.

    A payload's own `max_attempts` takes precedence over the policy's.
    Returns the last dispatch result with `attempts` set to the number of
    dispatches made.
    """
    policy = policy or RetryPolicy()
    max_attempts = payload.max_attempts or policy.max_attempts
    started = clock()
    result: NotificationResult | None = None
    attempts = 0

    while attempts < max_attempts:
        if cancel is not None and cancel.is_set():
            logger.info("[RETRY] cancelled before attempt %d", attempts + 1)
            break

        attempts += 1
        result = dispatch(payload)
        if result.success:
            if attempts > 1:
                logger.info("[RETRY] delivered on attempt %d", attempts)
            return replace(result, attempts=attempts)

        if attempts >= max_attempts:
            break

        delay = policy.delay_for(attempts, rng)
        if policy.deadline_seconds is not None:
            elapsed = clock() - started
            if elapsed + delay > policy.deadline_seconds:
                logger.warning(
                    "[RETRY] deadline of %.1fs reached after %d attempts",
                    policy.deadline_seconds,
                    attempts,
                )
                break

        logger.warning(
            "[RETRY] attempt %d/%d failed (%s); retrying in %.1fs",
            attempts,
            max_attempts,
            result.error,
            delay,
        )
        if cancel is not None:
            if cancel.wait(delay):
                logger.info("[RETRY] cancelled after attempt %d", attempts)
                break
        else:
            sleep(delay)

    if result is None:
        return NotificationResult(
            success=False,
            channel=Channel.NONE,
            timestamp=datetime.now(tz=UTC),
            error=CANCELLED_ERROR,
            attempts=0,
        )

    logger.error("[RETRY] giving up after %d attempts: %s", attempts, result.error)
    return replace(result, attempts=attempts)
