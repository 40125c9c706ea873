"""Orders and their append-only change log."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any, cast

from .entity import Entity, utcnow
from .enums import ChangeType, Provider

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from .values import ShipmentEvent

SHIPPED_STATUS = "shipped"


def _zero() -> Decimal:
    return Decimal("0.00")


@dataclass(eq=False, kw_only=True)
class Order(Entity):
    """Local order record, linked to the storefront and the shipping platform."""

    order_number: str
    source: Provider = Provider.WOOCOMMERCE
    source_order_id: str | None = None
    external_id: str | None = None
    order_key: str | None = None
    status: str = "pending"
    order_date: datetime | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    shipping_address: dict[str, Any] = field(default_factory=dict)
    total: Decimal = field(default_factory=_zero)
    shipping_cost: Decimal = field(default_factory=_zero)
    tax: Decimal = field(default_factory=_zero)
    line_items: list[dict[str, Any]] = field(default_factory=list)
    notes: str | None = None
    tags: list[str] = field(default_factory=list)
    tracking_number: str | None = None
    carrier_code: str | None = None
    service_code: str | None = None
    ship_date: datetime | None = None
    raw_payload: dict[str, Any] | str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def payload(self) -> dict[str, Any]:
        """Return the raw source snapshot as a mapping.

        Snapshots that are missing or do not decode to a JSON object are
        treated as empty.
        """

        raw = self.raw_payload
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                return {}
        if not isinstance(raw, dict):
            return {}
        return cast("dict[str, Any]", raw)

    @property
    def recipient_name(self) -> str | None:
        name = self.shipping_address.get("name") if self.shipping_address else None
        if isinstance(name, str) and name.strip():
            return name
        return self.customer_name

    def link_shipment(self, shipment: ShipmentEvent, *, at: datetime | None = None) -> None:
        self.tracking_number = shipment.tracking_number
        self.carrier_code = shipment.carrier_code
        self.service_code = shipment.service_code
        self.ship_date = shipment.ship_date
        self.status = SHIPPED_STATUS
        self.updated_at = at or utcnow()


@dataclass(eq=False, kw_only=True)
class OrderChangeRecord(Entity):
    """Who changed an order, from which source, and what changed."""

    order_id: UUID
    change_type: ChangeType
    source: Provider
    changed_by: str | None = None
    changed_fields: dict[str, dict[str, Any]] = field(default_factory=dict)
    snapshot: dict[str, Any] = field(default_factory=dict)
    notes: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_manual_edit(self) -> bool:
        return self.change_type == ChangeType.MANUAL_EDIT
