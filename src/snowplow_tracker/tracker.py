"""Tracker - turns events into payloads and hands them to an emitter."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ._version import __version__
from .constants import DevicePlatform
from .emitter.batch_emitter import BatchEmitter
from .errors import ConfigurationError
from .events.base import Event, TrackerParameters
from .payload import TrackerPayload
from .subject import Subject


logger = logging.getLogger(__name__)


TRACKER_VERSION = f"py-{__version__}"


@dataclass(frozen=True, slots=True)
class TrackerEvent:
    """An event bound to the tracker parameters and subject it was tracked with."""
    event: Event
    parameters: TrackerParameters
    subject: Subject | None = None

    def payloads(self) -> list[TrackerPayload]:
        return self.event.payloads(self.parameters, self.subject)


class Tracker:
    """
    Entry point for application code.

    Usage:
        tracker = Tracker("web", "shop", emitter, subject=Subject(user_id="u-1"))
        tracker.track(PageView(page_url="https://shop.example.com/"))
    """

    def __init__(
        self,
        namespace: str,
        app_id: str,
        emitter: BatchEmitter,
        subject: Subject | None = None,
        platform: DevicePlatform | str = DevicePlatform.SERVER_SIDE_APP,
        base64_encoded: bool = True,
    ):
        if not namespace:
            raise ConfigurationError("namespace cannot be empty")
        if not app_id:
            raise ConfigurationError("app_id cannot be empty")
        if emitter is None:
            raise ConfigurationError("emitter is required")

        self.emitter = emitter
        self.subject = subject
        self.parameters = TrackerParameters(
            app_id=app_id,
            namespace=namespace,
            tracker_version=TRACKER_VERSION,
            platform=DevicePlatform(platform),
            base64_encoded=base64_encoded,
        )

    @property
    def namespace(self) -> str:
        return self.parameters.namespace

    @property
    def app_id(self) -> str:
        return self.parameters.app_id

    def track(self, event: Event) -> bool:
        """
        Track an event.

        Never raises for delivery problems; returns False if any payload was
        rejected by the emitter (buffer full or emitter closed).
        """
        return self.emitter.emit(TrackerEvent(event, self.parameters, self.subject))

    def with_subject(self, subject: Subject | None) -> Tracker:
        """A tracker sharing this one's emitter and parameters, with another subject."""
        return Tracker(
            self.namespace,
            self.app_id,
            self.emitter,
            subject=subject,
            platform=self.parameters.platform,
            base64_encoded=self.parameters.base64_encoded,
        )

    def flush(self) -> None:
        self.emitter.flush()

    def close(self) -> None:
        self.emitter.close()

    def __repr__(self) -> str:
        return f"Tracker(namespace={self.namespace!r}, app_id={self.app_id!r})"
