"""Concrete event kinds."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from ..constants import (
    EVENT_ECOMM,
    EVENT_ECOMM_ITEM,
    EVENT_PAGE_VIEW,
    EVENT_STRUCTURED,
    Param,
    SCHEMA_SCREEN_VIEW,
    SCHEMA_TIMING,
)
from ..errors import ValidationError
from ..payload import SelfDescribingJson, TrackerPayload
from ..subject import Subject
from .base import Event, TrackerParameters, require_text, require_value


@dataclass(frozen=True, kw_only=True)
class PageView(Event):
    """A page view."""

    page_url: str
    page_title: str | None = None
    referrer: str | None = None

    def __post_init__(self):
        super().__post_init__()
        require_text(self.page_url, "page_url")

    def _pairs(self, parameters: TrackerParameters) -> dict[str, Any]:
        return {
            Param.EVENT: EVENT_PAGE_VIEW,
            Param.PAGE_URL: self.page_url,
            Param.PAGE_TITLE: self.page_title,
            Param.PAGE_REFR: self.referrer,
            **self._default_pairs(),
        }


@dataclass(frozen=True, kw_only=True)
class Structured(Event):
    """A structured event (category / action / label / property / value)."""

    category: str
    action: str
    label: str | None = None
    property: str | None = None
    value: float | None = None

    def __post_init__(self):
        super().__post_init__()
        require_text(self.category, "category")
        require_text(self.action, "action")

    def _pairs(self, parameters: TrackerParameters) -> dict[str, Any]:
        return {
            Param.EVENT: EVENT_STRUCTURED,
            Param.SE_CATEGORY: self.category,
            Param.SE_ACTION: self.action,
            Param.SE_LABEL: self.label,
            Param.SE_PROPERTY: self.property,
            Param.SE_VALUE: float(self.value) if self.value is not None else None,
            **self._default_pairs(),
        }


@dataclass(frozen=True, kw_only=True)
class SelfDescribing(Event):
    """A custom event described by its own Iglu schema."""

    event_data: SelfDescribingJson

    def __post_init__(self):
        super().__post_init__()
        if not isinstance(self.event_data, SelfDescribingJson):
            raise ValidationError(
                "event_data must be SelfDescribingJson", field="event_data"
            )

    def _pairs(self, parameters: TrackerParameters) -> dict[str, Any]:
        return self._self_describing_pairs(self.event_data, parameters)


@dataclass(frozen=True, kw_only=True)
class ScreenView(Event):
    """A screen view, sent as a self-describing event."""

    name: str | None = None
    id: str | None = None

    def __post_init__(self):
        super().__post_init__()
        if not self.name and not self.id:
            raise ValidationError("name or id must be set", field="name")

    def _pairs(self, parameters: TrackerParameters) -> dict[str, Any]:
        data = {Param.SV_ID: self.id, Param.SV_NAME: self.name}
        event_data = SelfDescribingJson(
            SCHEMA_SCREEN_VIEW,
            {k: v for k, v in data.items() if v is not None},
        )
        return self._self_describing_pairs(event_data, parameters)


@dataclass(frozen=True, kw_only=True)
class Timing(Event):
    """A user timing measurement, sent as a self-describing event."""

    category: str
    variable: str
    timing: int
    label: str | None = None

    def __post_init__(self):
        super().__post_init__()
        require_text(self.category, "category")
        require_text(self.variable, "variable")
        require_value(self.timing, "timing")

    def _pairs(self, parameters: TrackerParameters) -> dict[str, Any]:
        data = {
            Param.UT_CATEGORY: self.category,
            Param.UT_VARIABLE: self.variable,
            Param.UT_TIMING: self.timing,
            Param.UT_LABEL: self.label,
        }
        event_data = SelfDescribingJson(
            SCHEMA_TIMING,
            {k: v for k, v in data.items() if v is not None},
        )
        return self._self_describing_pairs(event_data, parameters)


@dataclass(frozen=True, kw_only=True)
class EcommerceTransactionItem(Event):
    """One line item of an e-commerce transaction."""

    item_id: str
    sku: str
    price: float
    quantity: int
    name: str | None = None
    category: str | None = None
    currency: str | None = None

    def __post_init__(self):
        super().__post_init__()
        require_text(self.item_id, "item_id")
        require_text(self.sku, "sku")
        require_value(self.price, "price")
        require_value(self.quantity, "quantity")

    def _pairs(self, parameters: TrackerParameters) -> dict[str, Any]:
        return {
            Param.EVENT: EVENT_ECOMM_ITEM,
            Param.TI_ITEM_ID: self.item_id,
            Param.TI_ITEM_SKU: self.sku,
            Param.TI_ITEM_NAME: self.name,
            Param.TI_ITEM_CATEGORY: self.category,
            Param.TI_ITEM_PRICE: float(self.price),
            Param.TI_ITEM_QUANTITY: int(self.quantity),
            Param.TI_ITEM_CURRENCY: self.currency,
            **self._default_pairs(),
        }


@dataclass(frozen=True, kw_only=True)
class EcommerceTransaction(Event):
    """
    An e-commerce transaction.

    Expands into N+1 payloads: the transaction itself followed by one
    payload per item. Items take the transaction's device-created
    timestamp, and its currency when they have none of their own.
    """

    order_id: str
    total_value: float
    affiliation: str | None = None
    tax_value: float | None = None
    shipping: float | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    currency: str | None = None
    items: tuple[EcommerceTransactionItem, ...] = ()

    def __post_init__(self):
        super().__post_init__()
        require_text(self.order_id, "order_id")
        require_value(self.total_value, "total_value")
        if not isinstance(self.items, tuple):
            object.__setattr__(self, "items", tuple(self.items))
        for item in self.items:
            if not isinstance(item, EcommerceTransactionItem):
                raise ValidationError(
                    "items must be EcommerceTransactionItem", field="items"
                )

    def _pairs(self, parameters: TrackerParameters) -> dict[str, Any]:
        return {
            Param.EVENT: EVENT_ECOMM,
            Param.TR_ID: self.order_id,
            Param.TR_TOTAL: float(self.total_value),
            Param.TR_AFFILIATION: self.affiliation,
            Param.TR_TAX: float(self.tax_value) if self.tax_value is not None else None,
            Param.TR_SHIPPING: float(self.shipping) if self.shipping is not None else None,
            Param.TR_CITY: self.city,
            Param.TR_STATE: self.state,
            Param.TR_COUNTRY: self.country,
            Param.TR_CURRENCY: self.currency,
            **self._default_pairs(),
        }

    def payloads(
        self,
        parameters: TrackerParameters,
        subject: Subject | None = None,
    ) -> list[TrackerPayload]:
        payloads = [self._complete(self._pairs(parameters), parameters, subject)]
        fallback_subject = self.subject or subject
        for item in self.items:
            item = replace(
                item,
                device_created_timestamp=self.device_created_timestamp,
                currency=item.currency or self.currency,
            )
            payloads.extend(item.payloads(parameters, fallback_subject))
        return payloads
