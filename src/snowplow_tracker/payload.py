"""Wire payload types."""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ValidationError


logger = logging.getLogger(__name__)


class TrackerPayload(Mapping[str, str]):
    """
    One finalized event record, ready for transmission.

    Immutable and ordered. Pairs whose key or value is None or empty are
    skipped at construction, so optional fields can be passed through
    without checks at every call site.
    """

    __slots__ = ("_data",)

    def __init__(self, pairs: Mapping[str, Any] | Iterable[tuple[str, Any]] = ()):
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        data: dict[str, str] = {}
        for key, value in items:
            if not key:
                logger.error(f"Invalid payload key: {key!r}")
                continue
            if value is None or value == "":
                continue
            data[key] = value if isinstance(value, str) else _to_wire(value)
        self._data = data

    def with_pairs(self, pairs: Mapping[str, Any]) -> TrackerPayload:
        """Return a new payload with extra pairs (later pairs win)."""
        merged = dict(self._data)
        merged.update(TrackerPayload(pairs)._data)
        return TrackerPayload(merged)

    def to_dict(self) -> dict[str, str]:
        return dict(self._data)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TrackerPayload):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == dict(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._data.items()))

    def __repr__(self) -> str:
        return f"TrackerPayload({self._data!r})"


@dataclass(frozen=True)
class SelfDescribingJson:
    """A JSON value tagged with the Iglu schema that describes it."""
    schema: str
    data: Any = field(default_factory=dict)

    def __post_init__(self):
        if not self.schema:
            raise ValidationError("schema cannot be empty", field="schema")

    def to_dict(self) -> dict[str, Any]:
        return {"schema": self.schema, "data": _to_json_value(self.data)}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


def encode_json(
    value: Mapping[str, Any],
    base64_encoded: bool,
    encoded_key: str,
    plain_key: str,
) -> tuple[str, str]:
    """
    Serialize a JSON map for embedding in a payload.

    Returns the (key, value) pair to add: the encoded key with URL-safe
    base64 content, or the plain key with raw JSON.
    """
    text = json.dumps(_to_json_value(value), separators=(",", ":"))
    if base64_encoded:
        return encoded_key, base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")
    return plain_key, text


def _to_json_value(value: Any) -> Any:
    if isinstance(value, SelfDescribingJson):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {k: _to_json_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_json_value(v) for v in value]
    return value


def _to_wire(value: Any) -> str:
    if isinstance(value, (Mapping, list, tuple, SelfDescribingJson)):
        return json.dumps(_to_json_value(value), separators=(",", ":"))
    return str(value)
