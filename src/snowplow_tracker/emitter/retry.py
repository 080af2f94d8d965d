"""Retry decisions and backoff for failed sends."""

from __future__ import annotations

import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass, field


# Client errors that will never succeed on resend
DEFAULT_NON_RETRY_STATUS_CODES = frozenset({400, 401, 403, 410, 422})

# Highest doubling exponent applied to initial_seconds
MAX_BACKOFF_EXPONENT = 32


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


def should_retry(status_code: int, custom_retry: Mapping[int, bool] | None = None) -> bool:
    """
    Decide whether a collector response warrants another attempt.

    Custom overrides win, then the default non-retry set. 2xx responses
    are successes and never retried.
    """
    if custom_retry and status_code in custom_retry:
        return bool(custom_retry[status_code])
    if status_code in DEFAULT_NON_RETRY_STATUS_CODES:
        return False
    if is_success_status(status_code):
        return False
    return True


@dataclass
class Backoff:
    """
    Exponential delay between send attempts after failures.

    The delay starts at `initial_seconds`, doubles with each consecutive
    failure and is capped at `max_seconds`. Any success resets it.

    Failures of attempts that started before the latest recorded failure
    belong to the same round and do not double the delay again.
    """
    initial_seconds: float = 0.1
    max_seconds: float = 60.0

    _failures: int = field(default=0, init=False)
    _not_before: float = field(default=0.0, init=False)
    _last_failure_at: float = field(default=0.0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def record_failure(self, started_at: float | None = None) -> float:
        """
        Register a failure and return the delay now in force.

        `started_at` is the monotonic time the failed attempt began.
        """
        with self._lock:
            now = time.monotonic()
            if started_at is not None and started_at < self._last_failure_at:
                return max(0.0, self._not_before - now)

            exponent = min(self._failures, MAX_BACKOFF_EXPONENT)
            delay = min(self.max_seconds, self.initial_seconds * (2.0 ** exponent))
            self._failures += 1
            self._last_failure_at = now
            self._not_before = now + delay
            return delay

    def record_success(self) -> None:
        with self._lock:
            self._failures = 0
            self._not_before = 0.0

    def remaining(self) -> float:
        """Seconds until sending may resume (0 when not backing off)."""
        with self._lock:
            return max(0.0, self._not_before - time.monotonic())

    @property
    def consecutive_failures(self) -> int:
        return self._failures
