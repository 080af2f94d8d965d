"""Subject - who and what device an event is about."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

from .constants import Param


@dataclass(frozen=True, slots=True)
class Subject:
    """
    Properties of the user and device an event is attributed to.

    Attached either to a tracker (applies to every event) or to a single
    event (overrides the tracker subject for that event).
    """
    user_id: str | None = None

    # Display (pixels)
    screen_width: int = 0
    screen_height: int = 0
    viewport_width: int = 0
    viewport_height: int = 0
    color_depth: int = 0

    timezone: str | None = None
    language: str | None = None
    ip_address: str | None = None
    useragent: str | None = None

    # Overrides the network user id the collector sets via cookie
    network_user_id: str | None = None
    domain_user_id: str | None = None
    domain_session_id: str | None = None

    def to_pairs(self) -> dict[str, str]:
        """Wire pairs for the fields that are set."""
        pairs: dict[str, str] = {}
        if self.user_id is not None:
            pairs[Param.UID] = self.user_id
        if self.screen_width > 0 and self.screen_height > 0:
            pairs[Param.RESOLUTION] = f"{self.screen_width}x{self.screen_height}"
        if self.viewport_width > 0 and self.viewport_height > 0:
            pairs[Param.VIEWPORT] = f"{self.viewport_width}x{self.viewport_height}"
        if self.color_depth > 0:
            pairs[Param.COLOR_DEPTH] = str(self.color_depth)
        if self.timezone is not None:
            pairs[Param.TIMEZONE] = self.timezone
        if self.language is not None:
            pairs[Param.LANGUAGE] = self.language
        if self.ip_address is not None:
            pairs[Param.IP_ADDRESS] = self.ip_address
        if self.useragent is not None:
            pairs[Param.USERAGENT] = self.useragent
        if self.network_user_id is not None:
            pairs[Param.NETWORK_UID] = self.network_user_id
        if self.domain_user_id is not None:
            pairs[Param.DOMAIN_UID] = self.domain_user_id
        if self.domain_session_id is not None:
            pairs[Param.SESSION_UID] = self.domain_session_id
        return pairs

    def merged(self, other: Subject | None) -> Subject:
        """Overlay the fields that are set on `other` onto this subject."""
        if other is None:
            return self
        changes = {}
        for f in fields(other):
            value = getattr(other, f.name)
            if value is not None and value != 0:
                changes[f.name] = value
        return replace(self, **changes)
