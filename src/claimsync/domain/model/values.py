"""Incoming records handed to the core by sync jobs and request handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from .primitives import normalize_address, normalize_email, normalize_name, normalize_phone

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import Provider


@dataclass(frozen=True, kw_only=True)
class ContactDetails:
    """Partial customer contact tuple; any field may be missing."""

    email: str | None = None
    phone: str | None = None
    name: str | None = None
    address: str | None = None

    def normalized(self) -> ContactDetails:
        return ContactDetails(
            email=normalize_email(self.email),
            phone=normalize_phone(self.phone),
            name=normalize_name(self.name),
            address=normalize_address(self.address),
        )


@dataclass(frozen=True, kw_only=True)
class ShipmentEvent:
    """Shipment/tracking record from the shipping platform."""

    shipment_id: str | None = None
    tracking_number: str | None = None
    carrier_code: str | None = None
    service_code: str | None = None
    order_number: str | None = None
    order_key: str | None = None
    order_id: str | None = None
    customer_email: str | None = None
    recipient_name: str | None = None
    ship_date: datetime | None = None
    voided: bool = False


@dataclass(frozen=True, kw_only=True)
class IncomingOrder:
    """Order record as pulled from a storefront import."""

    source: Provider
    source_order_id: str
    order_number: str
    status: str
    created_at: datetime
    total: Decimal = Decimal("0.00")
    shipping_cost: Decimal = Decimal("0.00")
    tax: Decimal = Decimal("0.00")
    line_items: list[dict[str, Any]] = field(default_factory=list)
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    shipping_address: dict[str, Any] = field(default_factory=dict)
    order_key: str | None = None
    notes: str | None = None
    raw_payload: dict[str, Any] = field(default_factory=dict)
