"""
Thread-safe tracker registry.

An explicit object passed to the code that needs named-tracker lookup,
instead of process-wide state.
"""

from __future__ import annotations

import logging
import threading

from .config import EmitterConfig, NetworkConfig, TrackerConfig
from .emitter.batch_emitter import BatchEmitter
from .subject import Subject
from .tracker import Tracker


logger = logging.getLogger(__name__)


class TrackerRegistry:
    """
    Thread-safe registry of trackers keyed by namespace.

    The first tracker registered becomes the default unless another one is
    chosen with `set_default`.
    """

    def __init__(self):
        self._trackers: dict[str, Tracker] = {}
        self._default: str | None = None
        self._lock = threading.RLock()

    def register(self, tracker: Tracker) -> None:
        """
        Register a tracker under its namespace.

        Raises:
            ValueError: If a tracker with the same namespace already exists
        """
        with self._lock:
            if tracker.namespace in self._trackers:
                raise ValueError(f"Tracker '{tracker.namespace}' already registered")
            self._trackers[tracker.namespace] = tracker
            if self._default is None:
                self._default = tracker.namespace
        logger.info(f"Registered tracker '{tracker.namespace}'")

    def create_tracker(
        self,
        tracker_config: TrackerConfig,
        network_config: NetworkConfig,
        emitter_config: EmitterConfig | None = None,
        subject: Subject | None = None,
    ) -> Tracker:
        """Build an emitter and tracker from config and register the tracker."""
        with self._lock:
            if tracker_config.namespace in self._trackers:
                raise ValueError(f"Tracker '{tracker_config.namespace}' already registered")

            emitter = BatchEmitter(network_config, emitter_config)
            tracker = Tracker(
                tracker_config.namespace,
                tracker_config.app_id,
                emitter,
                subject=subject,
                platform=tracker_config.platform,
                base64_encoded=tracker_config.base64_encoded,
            )
            self.register(tracker)
            return tracker

    def get(self, namespace: str) -> Tracker | None:
        with self._lock:
            return self._trackers.get(namespace)

    def get_or_raise(self, namespace: str) -> Tracker:
        """
        Get a tracker by namespace, raising if not found.

        Raises:
            KeyError: If no tracker is registered under the namespace
        """
        with self._lock:
            if namespace not in self._trackers:
                raise KeyError(f"Tracker '{namespace}' not found")
            return self._trackers[namespace]

    def remove(self, namespace: str) -> Tracker | None:
        """
        Unregister a tracker. Does not close its emitter.

        Returns the removed tracker, or None if it was not registered. If it
        was the default, the default is cleared.
        """
        with self._lock:
            tracker = self._trackers.pop(namespace, None)
            if tracker is not None and self._default == namespace:
                self._default = None
        if tracker is not None:
            logger.info(f"Removed tracker '{namespace}'")
        return tracker

    def namespaces(self) -> list[str]:
        with self._lock:
            return sorted(self._trackers)

    @property
    def default(self) -> Tracker | None:
        with self._lock:
            if self._default is None:
                return None
            return self._trackers.get(self._default)

    def set_default(self, namespace: str) -> None:
        """
        Raises:
            KeyError: If no tracker is registered under the namespace
        """
        with self._lock:
            if namespace not in self._trackers:
                raise KeyError(f"Tracker '{namespace}' not found")
            self._default = namespace

    def close_all(self) -> None:
        """Close every registered tracker's emitter and clear the registry."""
        with self._lock:
            trackers = list(self._trackers.values())
            self._trackers.clear()
            self._default = None

        for tracker in trackers:
            try:
                tracker.close()
            except Exception as e:
                logger.error(f"Error closing tracker '{tracker.namespace}': {e}")

    def __contains__(self, namespace: str) -> bool:
        with self._lock:
            return namespace in self._trackers

    def __len__(self) -> int:
        with self._lock:
            return len(self._trackers)
