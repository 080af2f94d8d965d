"""FastAPI application - development collector.

Accepts tracker protocol v2 requests (POST batches and GET pixels) and keeps
the received payloads in memory so they can be inspected. Not meant for
production traffic.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ._version import __version__
from .constants import GET_PATH, PROTOCOL_VENDOR, PROTOCOL_VERSION, SCHEMA_PAYLOAD_DATA


logger = logging.getLogger(__name__)


POST_PATH = f"/{PROTOCOL_VENDOR}/{PROTOCOL_VERSION}"


class PayloadEnvelope(BaseModel):
    """Body of a tp2 POST: a schema-tagged array of payload maps."""
    model_config = ConfigDict(populate_by_name=True)

    schema_: str = Field(alias="schema")
    data: list[dict[str, Any]]


class ReceivedEvent(BaseModel):
    method: str
    received_at: float
    event: dict[str, Any]


class CollectorCounts(BaseModel):
    total: int
    good: int
    bad: int


class HealthResponse(BaseModel):
    status: str
    version: str
    counts: CollectorCounts


class CollectorStore:
    """Thread-safe record of what the collector has received."""

    def __init__(self):
        self._good: list[ReceivedEvent] = []
        self._bad = 0
        self._lock = threading.Lock()

    def add_good(self, method: str, events: list[dict[str, Any]]) -> None:
        now = time.time()
        with self._lock:
            self._good.extend(
                ReceivedEvent(method=method, received_at=now, event=event)
                for event in events
            )

    def add_bad(self) -> None:
        with self._lock:
            self._bad += 1

    def good(self) -> list[ReceivedEvent]:
        with self._lock:
            return list(self._good)

    def counts(self) -> CollectorCounts:
        with self._lock:
            good = len(self._good)
            return CollectorCounts(total=good + self._bad, good=good, bad=self._bad)

    def reset(self) -> None:
        with self._lock:
            self._good.clear()
            self._bad = 0


def create_collector_app(
    store: CollectorStore | None = None,
    response_status: int = 200,
) -> FastAPI:
    """
    Build the collector app.

    `response_status` is returned for well-formed requests, so a test can
    make the collector reject everything (e.g. 500 or 422).
    """
    store = store if store is not None else CollectorStore()

    app = FastAPI(
        title="Snowplow Dev Collector",
        description="Receives tracker protocol v2 events and keeps them in memory.",
        version=__version__,
    )
    app.state.store = store

    @app.post(POST_PATH)
    async def collect_post(request: Request):
        """Receive a batch of payloads."""
        try:
            envelope = PayloadEnvelope.model_validate(await request.json())
        except (ValueError, PydanticValidationError) as e:
            store.add_bad()
            logger.warning(f"Rejected malformed envelope: {e}")
            raise HTTPException(status_code=422, detail="Malformed payload envelope")

        if envelope.schema_ != SCHEMA_PAYLOAD_DATA:
            logger.warning(f"Unexpected envelope schema: {envelope.schema_}")

        if 200 <= response_status < 300:
            store.add_good("post", envelope.data)
            logger.debug(f"Received {len(envelope.data)} events via POST")
        return Response(status_code=response_status)

    @app.get(GET_PATH)
    async def collect_get(request: Request):
        """Receive a single payload as query parameters."""
        event = dict(request.query_params)
        if not event:
            store.add_bad()
            raise HTTPException(status_code=400, detail="Empty payload")

        if 200 <= response_status < 300:
            store.add_good("get", [event])
        return Response(status_code=response_status)

    @app.get("/micro/all", response_model=CollectorCounts)
    async def micro_all():
        return store.counts()

    @app.get("/micro/good", response_model=list[ReceivedEvent])
    async def micro_good():
        return store.good()

    @app.get("/micro/reset", response_model=CollectorCounts)
    async def micro_reset():
        store.reset()
        return store.counts()

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Health check endpoint."""
        return HealthResponse(status="healthy", version=__version__, counts=store.counts())

    return app


def run(host: str = "127.0.0.1", port: int = 9090) -> None:
    """Run the collector with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    uvicorn.run(create_collector_app(), host=host, port=port)


if __name__ == "__main__":
    run()
