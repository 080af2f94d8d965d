"""Emitter result callbacks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

from ..payload import TrackerPayload


class FailureType(str, Enum):
    """Why payloads failed to reach the collector."""

    # Non-2xx response; may or may not be retried depending on status code
    REJECTED_BY_COLLECTOR = "rejected_by_collector"

    # Buffer at capacity, on emit or when a failed batch is requeued
    TRACKER_STORAGE_FULL = "tracker_storage_full"

    # Transport failure inside the HTTP adapter
    HTTP_CONNECTION_FAILURE = "http_connection_failure"

    # Any other exception while sending
    EMITTER_REQUEST_FAILURE = "emitter_request_failure"


class EmitterCallback(ABC):
    """
    Observer for delivery outcomes.

    Called from emitter worker threads (and from the caller's thread for
    TRACKER_STORAGE_FULL on emit), so implementations must be thread-safe.
    """

    @abstractmethod
    def on_success(self, payloads: list[TrackerPayload]) -> None:
        ...

    @abstractmethod
    def on_failure(
        self,
        failure_type: FailureType,
        will_retry: bool,
        payloads: list[TrackerPayload],
    ) -> None:
        ...
