"""Event kinds that a tracker can emit."""

from .base import Event, TrackerParameters
from .types import (
    EcommerceTransaction,
    EcommerceTransactionItem,
    PageView,
    ScreenView,
    SelfDescribing,
    Structured,
    Timing,
)

__all__ = [
    "Event",
    "TrackerParameters",
    "PageView",
    "Structured",
    "SelfDescribing",
    "ScreenView",
    "Timing",
    "EcommerceTransaction",
    "EcommerceTransactionItem",
]
