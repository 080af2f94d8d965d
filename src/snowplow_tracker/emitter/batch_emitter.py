"""Batch emitter - background delivery of buffered payloads."""

from __future__ import annotations

import functools
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Protocol

from ..constants import Param, SCHEMA_PAYLOAD_DATA
from ..config import EmitterConfig, NetworkConfig
from ..errors import CollectorConnectionError
from ..payload import SelfDescribingJson, TrackerPayload
from .callback import EmitterCallback, FailureType
from .retry import Backoff, is_success_status, should_retry
from .store import Batch, EventStore, InMemoryEventStore


logger = logging.getLogger(__name__)


class Emittable(Protocol):
    """Anything that expands into wire payloads (e.g. a TrackerEvent)."""

    def payloads(self) -> list[TrackerPayload]:
        ...


class BatchEmitter:
    """
    Buffers payloads and sends them to the collector in batches.

    `emit` only enqueues into the event store and never blocks on the
    network. A background loop checks out batches and hands each one to a
    worker pool; the worker POSTs the batch, classifies the outcome, commits
    or requeues the batch in the store, then notifies the callback.

    The loop wakes when a full batch is pending, when `flush()` is called,
    and every `flush_interval_seconds`. After a failed attempt it backs off
    exponentially before checking out more batches.

    Usage:
        emitter = BatchEmitter(NetworkConfig(collector_url="https://c.example.com"))
        tracker = Tracker("web", "shop", emitter)
        tracker.track(PageView(page_url="https://shop.example.com/"))
        emitter.close()
    """

    def __init__(
        self,
        network: NetworkConfig,
        config: EmitterConfig | None = None,
    ):
        config = config if config is not None else EmitterConfig()
        # Validate before creating any resources
        config.validate()
        network.validate()

        self.config = config
        self._adapter, self._owns_adapter = network.build_adapter()
        self._store: EventStore = (
            config.event_store
            if config.event_store is not None
            else InMemoryEventStore(config.buffer_capacity)
        )
        self._callback: EmitterCallback | None = config.callback
        self._custom_retry = dict(config.custom_retry_for_status_codes)
        self._backoff = Backoff(config.backoff_initial_seconds, config.backoff_max_seconds)

        # GET sends each payload as its own request
        self._checkout_size = 1 if config.request_method == "get" else config.batch_size

        self._emit_lock = threading.Lock()
        self._condition = threading.Condition()
        self._futures: dict[Future, int] = {}
        self._flush_requested = False
        self._closing = False
        self._closed = False

        self._stats_lock = threading.Lock()
        self._stats = {
            "emitted": 0,
            "dropped": 0,
            "sent": 0,
            "failed": 0,
            "batches_sent": 0,
            "batches_failed": 0,
            "callback_errors": 0,
        }

        self._executor = ThreadPoolExecutor(
            max_workers=config.thread_count,
            thread_name_prefix="snowplow-emitter-request",
        )
        self._loop_thread = threading.Thread(
            target=self._run_loop,
            name="snowplow-emitter-loop",
            daemon=True,
        )
        self._loop_thread.start()

        logger.info(
            f"Batch emitter started (url={self._adapter.url}, batch_size={config.batch_size}, "
            f"method={config.request_method}, threads={config.thread_count})"
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def emit(self, event: Emittable | TrackerPayload) -> bool:
        """
        Enqueue an event's payloads (non-blocking).

        Returns True if every payload was accepted. Payloads rejected because
        the buffer is full are reported as TRACKER_STORAGE_FULL.
        """
        payloads = [event] if isinstance(event, TrackerPayload) else event.payloads()

        # close() takes this lock before its final drain, so accepted
        # payloads are always part of that drain
        rejected: list[TrackerPayload] = []
        with self._emit_lock:
            if self._closed:
                logger.warning(f"Emitter closed, dropping {len(payloads)} payloads")
                self._count("dropped", len(payloads))
                return False

            for payload in payloads:
                if self._store.add_event(payload):
                    self._count("emitted")
                else:
                    rejected.append(payload)

        for payload in rejected:
            self._count("dropped")
            logger.warning("Event buffer is full, dropping payload")
            self._notify_failure(FailureType.TRACKER_STORAGE_FULL, False, [payload])

        if self._store.size() >= self._checkout_size:
            with self._condition:
                self._condition.notify_all()
        return not rejected

    def flush(self) -> None:
        """Ask the send loop to drain the buffer now."""
        with self._condition:
            self._flush_requested = True
            self._condition.notify_all()

    def close(self) -> None:
        """
        Stop the emitter.

        Makes a final best-effort attempt to send everything pending, waits
        up to `close_timeout_seconds` for in-flight sends, then shuts the
        worker pool down. Further `emit` calls are rejected.
        """
        # Waits for emits already adding to the store
        with self._emit_lock:
            if self._closed:
                return
            self._closed = True

        with self._condition:
            self._closing = True
            self._condition.notify_all()

        timeout = self.config.close_timeout_seconds
        deadline = time.monotonic() + timeout
        self._loop_thread.join(timeout=timeout)

        self._dispatch_remaining()

        with self._condition:
            pending_futures = list(self._futures)
        remaining = max(0.0, deadline - time.monotonic())
        _, not_done = wait(pending_futures, timeout=remaining)
        if not_done:
            logger.warning(f"{len(not_done)} send tasks still running after {timeout}s")

        # Cancelled tasks requeue their batch in _on_task_done
        self._executor.shutdown(wait=False, cancel_futures=True)

        if self._owns_adapter and not not_done:
            self._adapter.close()

        logger.info(f"Batch emitter closed. Stats: {self.stats}")

    def __enter__(self) -> BatchEmitter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def store(self) -> EventStore:
        return self._store

    @property
    def adapter(self):
        return self._adapter

    @property
    def batch_size(self) -> int:
        return self.config.batch_size

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def buffer(self) -> list[TrackerPayload]:
        """Pending payloads (diagnostics only)."""
        return self._store.get_all_events()

    @property
    def stats(self) -> dict:
        """Get emitter statistics."""
        with self._stats_lock:
            stats = dict(self._stats)
        with self._condition:
            in_flight_tasks = len(self._futures)
        return {
            **stats,
            "pending": self._store.size(),
            "in_flight": self._store.in_flight_size(),
            "in_flight_tasks": in_flight_tasks,
            "backoff_seconds": round(self._backoff.remaining(), 3),
        }

    # ------------------------------------------------------------------
    # Send loop
    # ------------------------------------------------------------------

    def _run_loop(self) -> None:
        interval = self.config.flush_interval_seconds
        next_tick = time.monotonic() + interval
        logger.debug("Emitter send loop started")

        while True:
            with self._condition:
                while True:
                    if self._closing:
                        logger.debug("Emitter send loop stopped")
                        return

                    now = time.monotonic()
                    backoff = self._backoff.remaining()
                    has_capacity = len(self._futures) < self.config.thread_count
                    due = (
                        self._flush_requested
                        or now >= next_tick
                        or self._store.size() >= self._checkout_size
                    )
                    if due and has_capacity and backoff <= 0:
                        break

                    if not has_capacity:
                        timeout = interval
                    elif backoff > 0:
                        timeout = backoff
                    else:
                        timeout = next_tick - now
                    self._condition.wait(timeout=timeout)

                self._flush_requested = False

            next_tick = time.monotonic() + interval
            try:
                self._dispatch()
            except Exception as e:
                logger.error(f"Error in emitter send loop: {e}")

    def _dispatch(self) -> None:
        """Check out batches while there is work and free worker capacity."""
        while True:
            with self._condition:
                if self._closing or len(self._futures) >= self.config.thread_count:
                    return
            if self._backoff.remaining() > 0 or self._store.size() == 0:
                return

            batch = self._store.get_events_batch(self._checkout_size)
            if batch.is_empty:
                self._store.cleanup_after_sending_attempt(True, batch.batch_id)
                return
            self._submit(batch)

    def _dispatch_remaining(self) -> None:
        """Final flush on close: submit everything pending once."""
        remaining = self._store.size()
        while remaining > 0:
            batch = self._store.get_events_batch(min(self._checkout_size, remaining))
            if batch.is_empty:
                self._store.cleanup_after_sending_attempt(True, batch.batch_id)
                return
            remaining -= len(batch)
            self._submit(batch)

    def _submit(self, batch: Batch) -> None:
        try:
            future = self._executor.submit(self._send_batch, batch)
        except RuntimeError as e:
            # Pool already shut down
            logger.error(f"Could not schedule batch {batch.batch_id}: {e}")
            self._store.cleanup_after_sending_attempt(False, batch.batch_id)
            return

        with self._condition:
            self._futures[future] = batch.batch_id
        future.add_done_callback(functools.partial(self._on_task_done, batch.batch_id))

    def _on_task_done(self, batch_id: int, future: Future) -> None:
        if future.cancelled():
            self._store.cleanup_after_sending_attempt(False, batch_id)
        with self._condition:
            self._futures.pop(future, None)
            self._condition.notify_all()

    # ------------------------------------------------------------------
    # Send task (runs on a worker thread)
    # ------------------------------------------------------------------

    def _send_batch(self, batch: Batch) -> None:
        started_at = time.monotonic()
        payloads = list(batch.payloads)
        try:
            if self.config.request_method == "get":
                status_code = self._adapter.get(self._stamp_sent(payloads, _now_millis())[0])
            else:
                status_code = self._adapter.post(self._build_envelope(payloads))
        except CollectorConnectionError as e:
            logger.error(f"Failed to send {len(payloads)} events: {e}")
            self._finish_failure(batch, FailureType.HTTP_CONNECTION_FAILURE, True, started_at)
            return
        except Exception as e:
            logger.error(f"Unexpected error sending {len(payloads)} events: {e}")
            self._finish_failure(batch, FailureType.EMITTER_REQUEST_FAILURE, True, started_at)
            return

        if is_success_status(status_code):
            logger.debug(f"Sent {len(payloads)} events (batch {batch.batch_id}): code {status_code}")
            self._finish_success(batch)
        elif status_code < 0:
            # Adapter signalled a transport failure without raising
            logger.error(f"Failed to send {len(payloads)} events: no response")
            self._finish_failure(batch, FailureType.HTTP_CONNECTION_FAILURE, True, started_at)
        else:
            will_retry = should_retry(status_code, self._custom_retry)
            logger.error(
                f"Collector rejected {len(payloads)} events: code {status_code} "
                f"(retry={will_retry})"
            )
            self._finish_failure(batch, FailureType.REJECTED_BY_COLLECTOR, will_retry, started_at)

    def _build_envelope(self, payloads: list[TrackerPayload]) -> SelfDescribingJson:
        stamped = self._stamp_sent(payloads, _now_millis())
        return SelfDescribingJson(SCHEMA_PAYLOAD_DATA, [p.to_dict() for p in stamped])

    @staticmethod
    def _stamp_sent(payloads: list[TrackerPayload], sent_at: int) -> list[TrackerPayload]:
        return [p.with_pairs({Param.DEVICE_SENT_TIMESTAMP: sent_at}) for p in payloads]

    def _finish_success(self, batch: Batch) -> None:
        self._store.cleanup_after_sending_attempt(True, batch.batch_id)
        self._backoff.record_success()
        self._count("sent", len(batch))
        self._count("batches_sent")
        self._notify_success(list(batch.payloads))

    def _finish_failure(
        self,
        batch: Batch,
        failure_type: FailureType,
        will_retry: bool,
        started_at: float,
    ) -> None:
        requeue = will_retry or self.config.requeue_non_retryable
        if requeue:
            evicted = self._store.cleanup_after_sending_attempt(False, batch.batch_id)
            delay = self._backoff.record_failure(started_at)
            logger.debug(f"Batch {batch.batch_id} requeued, backing off {delay:.2f}s")
        else:
            # Discard: the collector will never accept these payloads
            self._store.cleanup_after_sending_attempt(True, batch.batch_id)
            evicted = []
            self._count("dropped", len(batch))

        self._count("failed", len(batch))
        self._count("batches_failed")
        self._notify_failure(failure_type, will_retry, list(batch.payloads))

        if evicted:
            self._count("dropped", len(evicted))
            self._notify_failure(FailureType.TRACKER_STORAGE_FULL, False, evicted)

    # ------------------------------------------------------------------
    # Callback plumbing
    # ------------------------------------------------------------------

    def _notify_success(self, payloads: list[TrackerPayload]) -> None:
        if self._callback is None:
            return
        try:
            self._callback.on_success(payloads)
        except Exception as e:
            logger.error(f"Emitter callback error (on_success): {e}")
            self._count("callback_errors")

    def _notify_failure(
        self,
        failure_type: FailureType,
        will_retry: bool,
        payloads: list[TrackerPayload],
    ) -> None:
        if self._callback is None:
            return
        try:
            self._callback.on_failure(failure_type, will_retry, payloads)
        except Exception as e:
            logger.error(f"Emitter callback error (on_failure): {e}")
            self._count("callback_errors")

    def _count(self, key: str, n: int = 1) -> None:
        with self._stats_lock:
            self._stats[key] += n


def _now_millis() -> int:
    return int(time.time() * 1000)
