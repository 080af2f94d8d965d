"""Exceptions raised by the tracker."""

from __future__ import annotations


class TrackerError(Exception):
    """Base exception for tracker errors."""
    pass


class ConfigurationError(TrackerError, ValueError):
    """Invalid tracker, emitter or network configuration."""
    pass


class ValidationError(TrackerError, ValueError):
    """An event or payload failed validation at construction."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class CollectorConnectionError(TrackerError):
    """The HTTP transport failed before a response was received."""

    def __init__(self, url: str, cause: Exception | None = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Request to {url} failed{detail}")
        self.url = url
        self.cause = cause
