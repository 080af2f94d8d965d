"""HTTP client adapters for sending payloads to a collector."""

from .base import HttpClientAdapter, normalize_collector_url
from .httpx_adapter import HttpxClientAdapter

__all__ = [
    "HttpClientAdapter",
    "HttpxClientAdapter",
    "normalize_collector_url",
]
