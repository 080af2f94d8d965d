"""Default HTTP adapter backed by httpx."""

from __future__ import annotations

import logging

import httpx

from ..constants import POST_CONTENT_TYPE
from ..errors import CollectorConnectionError
from .base import HttpClientAdapter


logger = logging.getLogger(__name__)


class HttpxClientAdapter(HttpClientAdapter):
    """
    Adapter using a synchronous httpx.Client.

    Pass `client` to share a pre-configured client (proxies, TLS, cookies,
    transports); it is then left open on `close()`. Otherwise the adapter
    creates and owns one.
    """

    def __init__(
        self,
        url: str,
        client: httpx.Client | None = None,
        timeout: float = 5.0,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(url)
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(timeout=timeout)
        self._headers = dict(headers or {})

    @property
    def http_client(self) -> httpx.Client:
        return self._client

    def _do_post(self, url: str, body: str) -> int:
        headers = {**self._headers, "Content-Type": POST_CONTENT_TYPE}
        try:
            response = self._client.post(url, content=body.encode("utf-8"), headers=headers)
        except httpx.TransportError as e:
            logger.error(f"POST to {url} failed: {e}")
            raise CollectorConnectionError(url, e) from e

        if not response.is_success:
            logger.error(f"POST to {url} returned {response.status_code}")
        return response.status_code

    def _do_get(self, url: str, params: dict[str, str]) -> int:
        try:
            response = self._client.get(url, params=params, headers=self._headers)
        except httpx.TransportError as e:
            logger.error(f"GET to {url} failed: {e}")
            raise CollectorConnectionError(url, e) from e

        if not response.is_success:
            logger.error(f"GET to {url} returned {response.status_code}")
        return response.status_code

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
