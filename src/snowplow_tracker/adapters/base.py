"""HTTP client adapter interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from urllib.parse import urlsplit

from ..constants import GET_PATH, PROTOCOL_VENDOR, PROTOCOL_VERSION
from ..errors import ConfigurationError
from ..payload import SelfDescribingJson


def normalize_collector_url(url: str) -> str:
    """Validate a collector URL and strip trailing slashes."""
    if not url or not url.strip():
        raise ConfigurationError("collector URL cannot be empty")

    url = url.strip().rstrip("/")
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"Invalid collector URL: {url!r} (expected http(s)://host)")
    return url


class HttpClientAdapter(ABC):
    """
    Sends payloads to a collector.

    `post` and `get` return the HTTP status code. Implementations raise
    CollectorConnectionError when no response is received at all.
    """

    def __init__(self, url: str):
        self.url = normalize_collector_url(url)

    @property
    def post_url(self) -> str:
        return f"{self.url}/{PROTOCOL_VENDOR}/{PROTOCOL_VERSION}"

    @property
    def get_url(self) -> str:
        return f"{self.url}{GET_PATH}"

    def post(self, envelope: SelfDescribingJson) -> int:
        """Send a batch envelope as a JSON POST."""
        return self._do_post(self.post_url, envelope.to_json())

    def get(self, payload: Mapping[str, str]) -> int:
        """Send one payload as GET query parameters."""
        return self._do_get(self.get_url, dict(payload))

    def close(self) -> None:
        """Release transport resources."""
        pass

    @abstractmethod
    def _do_post(self, url: str, body: str) -> int:
        ...

    @abstractmethod
    def _do_get(self, url: str, params: dict[str, str]) -> int:
        ...
