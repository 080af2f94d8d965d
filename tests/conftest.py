"""Shared test fixtures for tracker tests."""

from __future__ import annotations

import json
import threading
import time

import pytest

from snowplow_tracker.adapters.base import HttpClientAdapter
from snowplow_tracker.emitter.callback import EmitterCallback, FailureType
from snowplow_tracker.payload import TrackerPayload


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.01) -> bool:
    """Poll until predicate() is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class RecordingCallback(EmitterCallback):
    """Collects every callback invocation."""

    def __init__(self):
        self.successes: list[list[TrackerPayload]] = []
        self.failures: list[tuple[FailureType, bool, list[TrackerPayload]]] = []
        self._lock = threading.Lock()

    def on_success(self, payloads):
        with self._lock:
            self.successes.append(list(payloads))

    def on_failure(self, failure_type, will_retry, payloads):
        with self._lock:
            self.failures.append((failure_type, will_retry, list(payloads)))

    @property
    def success_count(self) -> int:
        with self._lock:
            return sum(len(p) for p in self.successes)


class FakeAdapter(HttpClientAdapter):
    """
    Adapter with scripted outcomes.

    Each request consumes the next entry of `responses`: an int is returned
    as the status code, an exception instance is raised. Once the script is
    exhausted every request gets `default_status`.
    """

    def __init__(self, responses=(), default_status: int = 200, url: str = "http://collector.test"):
        super().__init__(url)
        self.responses = list(responses)
        self.default_status = default_status
        self.posts: list[dict] = []
        self.gets: list[dict[str, str]] = []
        self.closed = False
        self._lock = threading.Lock()

    def _next(self):
        with self._lock:
            outcome = self.responses.pop(0) if self.responses else self.default_status
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def _do_post(self, url, body):
        with self._lock:
            self.posts.append({"url": url, "body": json.loads(body)})
        return self._next()

    def _do_get(self, url, params):
        with self._lock:
            self.gets.append(dict(params))
        return self._next()

    def close(self):
        self.closed = True

    @property
    def posted_events(self) -> list[dict]:
        with self._lock:
            return [event for post in self.posts for event in post["body"]["data"]]


class BlockingAdapter(FakeAdapter):
    """FakeAdapter whose requests wait until `gate` is set."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gate = threading.Event()
        self.entered = threading.Event()

    def _do_post(self, url, body):
        self.entered.set()
        self.gate.wait(timeout=10)
        return super()._do_post(url, body)

    def _do_get(self, url, params):
        self.entered.set()
        self.gate.wait(timeout=10)
        return super()._do_get(url, params)


@pytest.fixture
def make_payload():
    """Factory for small distinguishable payloads."""
    def _make(n: int, **extra) -> TrackerPayload:
        return TrackerPayload({"e": "pv", "eid": f"event-{n}", "url": f"https://example.com/{n}", **extra})
    return _make


@pytest.fixture
def callback():
    return RecordingCallback()


@pytest.fixture
def adapter():
    return FakeAdapter()


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    monkeypatch.delenv("SNOWPLOW_COLLECTOR_URL", raising=False)
    monkeypatch.delenv("SNOWPLOW_TIMEOUT", raising=False)
