"""Configuration for trackers, emitters and network access."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .constants import DevicePlatform
from .errors import ConfigurationError
from .subject import Subject

if TYPE_CHECKING:
    from .adapters.base import HttpClientAdapter
    from .emitter.callback import EmitterCallback
    from .emitter.store import EventStore


REQUEST_METHODS = ("post", "get")


@dataclass
class NetworkConfig:
    """
    Where and how to reach the collector.

    Exactly one of `collector_url` and `http_client_adapter` must be set.
    When neither is passed, `collector_url` falls back to the
    SNOWPLOW_COLLECTOR_URL environment variable.
    """
    collector_url: str | None = None
    http_client_adapter: HttpClientAdapter | None = None

    # Request timeout (seconds) for the default adapter
    timeout: float = field(
        default_factory=lambda: float(os.environ.get("SNOWPLOW_TIMEOUT", "5"))
    )

    def __post_init__(self):
        if self.collector_url is None and self.http_client_adapter is None:
            self.collector_url = os.environ.get("SNOWPLOW_COLLECTOR_URL")
        self.validate()

    def validate(self) -> None:
        if self.collector_url and self.http_client_adapter is not None:
            raise ConfigurationError(
                "collector_url and http_client_adapter are mutually exclusive"
            )
        if not self.collector_url and self.http_client_adapter is None:
            raise ConfigurationError(
                "Either collector_url or http_client_adapter is required"
            )
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be greater than 0, got {self.timeout}")

    def build_adapter(self) -> tuple[HttpClientAdapter, bool]:
        """Return the adapter to use and whether the caller owns it."""
        self.validate()
        if self.http_client_adapter is not None:
            return self.http_client_adapter, False

        from .adapters.httpx_adapter import HttpxClientAdapter
        return HttpxClientAdapter(self.collector_url, timeout=self.timeout), True


@dataclass
class EmitterConfig:
    """Batching, buffering and retry behaviour of the emitter."""
    # Events per request
    batch_size: int = 50

    # Max pending payloads held in the default store
    buffer_capacity: int = 10000

    # Max concurrent send tasks
    thread_count: int = 50

    # Status code -> retry? (overrides the default policy)
    custom_retry_for_status_codes: dict[int, bool] = field(default_factory=dict)

    # Replaces the default InMemoryEventStore
    event_store: EventStore | None = None

    callback: EmitterCallback | None = None

    # "post" sends batches; "get" sends each payload as its own request
    request_method: str = "post"

    # Partial batches are sent at least this often
    flush_interval_seconds: float = 1.0

    # Delay after a failed attempt, doubling per consecutive failure
    backoff_initial_seconds: float = 0.1
    backoff_max_seconds: float = 60.0

    # How long close() waits for in-flight sends
    close_timeout_seconds: float = 5.0

    # Requeue batches even when the status code is marked non-retryable
    requeue_non_retryable: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.batch_size <= 0:
            raise ConfigurationError(f"batch_size must be greater than 0, got {self.batch_size}")
        if self.buffer_capacity <= 0:
            raise ConfigurationError(
                f"buffer_capacity must be greater than 0, got {self.buffer_capacity}"
            )
        if self.thread_count <= 0:
            raise ConfigurationError(f"thread_count must be greater than 0, got {self.thread_count}")
        if self.request_method not in REQUEST_METHODS:
            raise ConfigurationError(
                f"request_method must be one of {REQUEST_METHODS}, got {self.request_method!r}"
            )
        if self.flush_interval_seconds <= 0:
            raise ConfigurationError("flush_interval_seconds must be greater than 0")
        if self.backoff_initial_seconds < 0 or self.backoff_max_seconds < self.backoff_initial_seconds:
            raise ConfigurationError(
                "backoff must satisfy 0 <= backoff_initial_seconds <= backoff_max_seconds"
            )
        if self.close_timeout_seconds < 0:
            raise ConfigurationError("close_timeout_seconds cannot be negative")
        for code in self.custom_retry_for_status_codes:
            if 200 <= int(code) < 300:
                raise ConfigurationError(f"Success status {code} cannot have a retry override")


@dataclass
class TrackerConfig:
    """Identity of a tracker instance."""
    namespace: str
    app_id: str
    platform: DevicePlatform = DevicePlatform.SERVER_SIDE_APP

    # Base64-encode self-describing JSON and contexts
    base64_encoded: bool = True

    def __post_init__(self):
        if not self.namespace:
            raise ConfigurationError("namespace cannot be empty")
        if not self.app_id:
            raise ConfigurationError("app_id cannot be empty")
        if not isinstance(self.platform, DevicePlatform):
            self.platform = DevicePlatform(self.platform)


@dataclass
class Config:
    """
    Main configuration container.

    Example YAML:

        tracker:
          namespace: web
          app_id: shop
        network:
          collector_url: https://collector.example.com
        emitter:
          batch_size: 25
          custom_retry_for_status_codes: {429: true}
        subject:
          language: en
    """
    tracker: TrackerConfig
    network: NetworkConfig
    emitter: EmitterConfig = field(default_factory=EmitterConfig)
    subject: Subject | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create config from dictionary."""
        if "tracker" not in data:
            raise ConfigurationError("Missing 'tracker' section")

        emitter_data = dict(data.get("emitter", {}))
        overrides = emitter_data.get("custom_retry_for_status_codes")
        if overrides:
            emitter_data["custom_retry_for_status_codes"] = {
                int(code): bool(retry) for code, retry in overrides.items()
            }

        subject_data = data.get("subject")
        return cls(
            tracker=TrackerConfig(**data["tracker"]),
            network=NetworkConfig(**data.get("network", {})),
            emitter=EmitterConfig(**emitter_data),
            subject=Subject(**subject_data) if subject_data else None,
        )

    @classmethod
    def from_yaml(cls, path: str) -> Config:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str) -> Config:
        """Load config from JSON file."""
        import json
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)
