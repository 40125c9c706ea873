"""Read storefront orders and shipping events from JSON Lines exports."""

from __future__ import annotations

import json
from datetime import datetime  # noqa: TC003
from decimal import Decimal
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from claimsync.domain.model import IncomingOrder, Provider, ShipmentEvent, to_money

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

log = getLogger(__name__)


class RecordError(ValueError):
    """A line of a JSON Lines export could not be parsed."""

    def __init__(self, path: Path, line_number: int, message: str) -> None:
        super().__init__(f"{path}:{line_number}: {message}")
        self.path = path
        self.line_number = line_number


class RecordBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)


class OrderRecord(RecordBaseModel):
    source: Provider = Provider.WOOCOMMERCE
    source_order_id: str = Field(alias="id")
    order_number: str = Field(alias="number")
    status: str
    created_at: datetime = Field(alias="date_created")
    total: Decimal = Decimal("0.00")
    shipping_cost: Decimal = Field(default=Decimal("0.00"), alias="shipping_total")
    tax: Decimal = Field(default=Decimal("0.00"), alias="total_tax")
    line_items: list[dict[str, Any]] = Field(default_factory=list)
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    shipping_address: dict[str, Any] = Field(default_factory=dict, alias="shipping")
    order_key: str | None = None
    notes: str | None = Field(default=None, alias="customer_note")

    def to_domain(self, raw: dict[str, Any]) -> IncomingOrder:
        return IncomingOrder(
            source=self.source,
            source_order_id=self.source_order_id,
            order_number=self.order_number,
            status=self.status,
            created_at=self.created_at,
            total=to_money(self.total),
            shipping_cost=to_money(self.shipping_cost),
            tax=to_money(self.tax),
            line_items=self.line_items,
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            customer_phone=self.customer_phone,
            shipping_address=self.shipping_address,
            order_key=self.order_key,
            notes=self.notes,
            raw_payload=raw,
        )


class ShipmentRecord(RecordBaseModel):
    shipment_id: str | None = Field(default=None, alias="shipmentId")
    tracking_number: str | None = Field(default=None, alias="trackingNumber")
    carrier_code: str | None = Field(default=None, alias="carrierCode")
    service_code: str | None = Field(default=None, alias="serviceCode")
    order_number: str | None = Field(default=None, alias="orderNumber")
    order_key: str | None = Field(default=None, alias="orderKey")
    order_id: str | None = Field(default=None, alias="orderId")
    customer_email: str | None = Field(default=None, alias="customerEmail")
    recipient_name: str | None = Field(default=None, alias="recipientName")
    ship_date: datetime | None = Field(default=None, alias="shipDate")
    voided: bool = False

    def to_domain(self) -> ShipmentEvent:
        return ShipmentEvent(
            shipment_id=self.shipment_id,
            tracking_number=self.tracking_number,
            carrier_code=self.carrier_code,
            service_code=self.service_code,
            order_number=self.order_number,
            order_key=self.order_key,
            order_id=self.order_id,
            customer_email=self.customer_email,
            recipient_name=self.recipient_name,
            ship_date=self.ship_date,
            voided=self.voided,
        )


def _iter_objects(path: Path) -> Iterator[tuple[int, dict[str, Any]]]:
    with path.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                loaded = json.loads(line)
            except json.JSONDecodeError as exc:
                raise RecordError(path, line_number, f"invalid JSON: {exc.msg}") from exc
            if not isinstance(loaded, dict):
                raise RecordError(path, line_number, "expected a JSON object")
            yield line_number, loaded


def read_incoming_orders(path: Path) -> list[IncomingOrder]:
    orders: list[IncomingOrder] = []
    for line_number, payload in _iter_objects(path):
        try:
            record = OrderRecord.model_validate(payload)
        except ValidationError as exc:
            raise RecordError(path, line_number, str(exc)) from exc
        orders.append(record.to_domain(payload))
    log.info("Read %d orders from %s", len(orders), path)
    return orders


def read_shipments(path: Path) -> list[ShipmentEvent]:
    shipments: list[ShipmentEvent] = []
    for line_number, payload in _iter_objects(path):
        try:
            record = ShipmentRecord.model_validate(payload)
        except ValidationError as exc:
            raise RecordError(path, line_number, str(exc)) from exc
        shipments.append(record.to_domain())
    log.info("Read %d shipments from %s", len(shipments), path)
    return shipments
