"""Event buffering and batched delivery."""

from .batch_emitter import BatchEmitter
from .callback import EmitterCallback, FailureType
from .retry import DEFAULT_NON_RETRY_STATUS_CODES, Backoff, is_success_status, should_retry
from .store import Batch, EventStore, InMemoryEventStore

__all__ = [
    "BatchEmitter",
    "EmitterCallback",
    "FailureType",
    "DEFAULT_NON_RETRY_STATUS_CODES",
    "Backoff",
    "is_success_status",
    "should_retry",
    "Batch",
    "EventStore",
    "InMemoryEventStore",
]
