"""Snowplow analytics tracker - buffered, batched event delivery to a collector."""

from ._version import __version__
from .adapters import HttpClientAdapter, HttpxClientAdapter
from .config import Config, EmitterConfig, NetworkConfig, TrackerConfig
from .constants import DevicePlatform
from .emitter import (
    BatchEmitter,
    EmitterCallback,
    EventStore,
    FailureType,
    InMemoryEventStore,
    should_retry,
)
from .errors import (
    CollectorConnectionError,
    ConfigurationError,
    TrackerError,
    ValidationError,
)
from .events import (
    EcommerceTransaction,
    EcommerceTransactionItem,
    Event,
    PageView,
    ScreenView,
    SelfDescribing,
    Structured,
    Timing,
)
from .payload import SelfDescribingJson, TrackerPayload
from .registry import TrackerRegistry
from .subject import Subject
from .tracker import Tracker, TrackerEvent

__all__ = [
    "__version__",
    "HttpClientAdapter",
    "HttpxClientAdapter",
    "Config",
    "EmitterConfig",
    "NetworkConfig",
    "TrackerConfig",
    "DevicePlatform",
    "BatchEmitter",
    "EmitterCallback",
    "EventStore",
    "FailureType",
    "InMemoryEventStore",
    "should_retry",
    "CollectorConnectionError",
    "ConfigurationError",
    "TrackerError",
    "ValidationError",
    "EcommerceTransaction",
    "EcommerceTransactionItem",
    "Event",
    "PageView",
    "ScreenView",
    "SelfDescribing",
    "Structured",
    "Timing",
    "SelfDescribingJson",
    "TrackerPayload",
    "TrackerRegistry",
    "Subject",
    "Tracker",
    "TrackerEvent",
]
