"""Event base type and tracker parameters."""

from __future__ import annotations

import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..constants import (
    EVENT_SELF_DESCRIBING,
    Param,
    SCHEMA_CONTEXTS,
    SCHEMA_UNSTRUCT_EVENT,
    DevicePlatform,
)
from ..errors import ValidationError
from ..payload import SelfDescribingJson, TrackerPayload, encode_json
from ..subject import Subject


def current_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def new_event_id() -> str:
    return str(uuid.uuid4())


def require_text(value: str | None, name: str) -> None:
    """Raise ValidationError if a required string is missing or empty."""
    if value is None or value == "":
        raise ValidationError(f"{name} cannot be empty", field=name)


def require_value(value: Any, name: str) -> None:
    if value is None:
        raise ValidationError(f"{name} is required", field=name)


@dataclass(frozen=True, slots=True)
class TrackerParameters:
    """Tracker-level fields stamped onto every payload."""
    app_id: str
    namespace: str
    tracker_version: str
    platform: DevicePlatform = DevicePlatform.SERVER_SIDE_APP
    base64_encoded: bool = True

    def to_pairs(self) -> dict[str, str]:
        return {
            Param.PLATFORM: self.platform.value,
            Param.APP_ID: self.app_id,
            Param.NAMESPACE: self.namespace,
            Param.TRACKER_VERSION: self.tracker_version,
        }


@dataclass(frozen=True, kw_only=True)
class Event(ABC):
    """
    Base for all event kinds.

    Subclasses supply `_pairs()`; `payloads()` completes them with tracker
    parameters, contexts and subject. Kinds that expand into several wire
    payloads (transactions) override `payloads()`.
    """

    context: tuple[SelfDescribingJson, ...] = ()
    device_created_timestamp: int = field(default_factory=current_millis)
    true_timestamp: int | None = None
    event_id: str = field(default_factory=new_event_id)
    subject: Subject | None = None

    def __post_init__(self):
        require_text(self.event_id, "event_id")
        if not isinstance(self.context, tuple):
            object.__setattr__(self, "context", tuple(self.context))
        for entity in self.context:
            if not isinstance(entity, SelfDescribingJson):
                raise ValidationError(
                    "context entries must be SelfDescribingJson", field="context"
                )

    def payloads(
        self,
        parameters: TrackerParameters,
        subject: Subject | None = None,
    ) -> list[TrackerPayload]:
        """Expand this event into the wire payloads to enqueue."""
        return [self._complete(self._pairs(parameters), parameters, subject)]

    @abstractmethod
    def _pairs(self, parameters: TrackerParameters) -> dict[str, Any]:
        """Event-specific key-value pairs for the wire payload."""

    def _default_pairs(self) -> dict[str, Any]:
        return {
            Param.EID: self.event_id,
            Param.DEVICE_CREATED_TIMESTAMP: self.device_created_timestamp,
            Param.TRUE_TIMESTAMP: self.true_timestamp,
        }

    def _self_describing_pairs(
        self,
        event_data: SelfDescribingJson,
        parameters: TrackerParameters,
    ) -> dict[str, Any]:
        envelope = SelfDescribingJson(SCHEMA_UNSTRUCT_EVENT, event_data)
        key, value = encode_json(
            envelope.to_dict(),
            parameters.base64_encoded,
            Param.SELF_DESCRIBING_ENCODED,
            Param.SELF_DESCRIBING,
        )
        return {Param.EVENT: EVENT_SELF_DESCRIBING, key: value, **self._default_pairs()}

    def _complete(
        self,
        pairs: dict[str, Any],
        parameters: TrackerParameters,
        subject: Subject | None,
    ) -> TrackerPayload:
        pairs.update(parameters.to_pairs())

        if self.context:
            contexts = SelfDescribingJson(SCHEMA_CONTEXTS, list(self.context))
            key, value = encode_json(
                contexts.to_dict(),
                parameters.base64_encoded,
                Param.CONTEXT_ENCODED,
                Param.CONTEXT,
            )
            pairs[key] = value

        # Event subject wins over the tracker subject
        effective = self.subject or subject
        if effective is not None:
            pairs.update(effective.to_pairs())

        return TrackerPayload(pairs)
