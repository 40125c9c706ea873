"""Match shipment events to local orders with an ordered strategy cascade.

Strategies run in declaration order and the first one that finds an order
wins; the order of ``STRATEGIES`` is the tie-break. A strategy only runs when
the shipment carries the key it needs.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from claimsync.domain.model import MatchStrategy

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import date, datetime

    from claimsync.domain.model import Order, ShipmentEvent

log = getLogger(__name__)

DEFAULT_DATE_WINDOW = timedelta(days=3)

type OrderPredicate = Callable[[Order], bool]
type StrategyBuilder = Callable[[ShipmentEvent, timedelta], OrderPredicate | None]


@dataclass(frozen=True, slots=True)
class OrderMatch:
    order: Order
    strategy: MatchStrategy


def _fold(value: str | None) -> str | None:
    if value is None:
        return None
    folded = value.strip().casefold()
    return folded or None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _utc_date(value: datetime) -> date:
    return _as_utc(value).date()


def _order_key(order: Order) -> str | None:
    if order.order_key:
        return order.order_key
    payload = order.payload()
    for key in ("orderKey", "order_key"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def _order_notes(order: Order) -> str:
    payload = order.payload()
    parts = [order.notes or ""]
    for key in ("customer_notes", "customerNotes", "internal_notes", "internalNotes"):
        value = payload.get(key)
        if isinstance(value, str):
            parts.append(value)
    return " ".join(parts).casefold()


def _by_order_number(shipment: ShipmentEvent, _window: timedelta) -> OrderPredicate | None:
    number = shipment.order_number
    if not number:
        return None
    return lambda order: order.order_number == number


def _by_external_id(shipment: ShipmentEvent, _window: timedelta) -> OrderPredicate | None:
    external_id = shipment.order_id
    if not external_id:
        return None
    return lambda order: order.external_id == str(external_id)


def _by_order_key(shipment: ShipmentEvent, _window: timedelta) -> OrderPredicate | None:
    key = shipment.order_key
    if not key:
        return None
    return lambda order: _order_key(order) == key


def _by_notes(shipment: ShipmentEvent, _window: timedelta) -> OrderPredicate | None:
    needle = _fold(shipment.order_number)
    if needle is None:
        return None
    return lambda order: needle in _order_notes(order)


def _by_email_and_date(shipment: ShipmentEvent, window: timedelta) -> OrderPredicate | None:
    email = _fold(shipment.customer_email)
    if email is None or shipment.ship_date is None:
        return None
    shipped_at = _as_utc(shipment.ship_date)

    def matches(order: Order) -> bool:
        if _fold(order.customer_email) != email or order.order_date is None:
            return False
        return abs(_as_utc(order.order_date) - shipped_at) <= window

    return matches


def _by_name_and_date(shipment: ShipmentEvent, _window: timedelta) -> OrderPredicate | None:
    name = _fold(shipment.recipient_name)
    if name is None or shipment.ship_date is None:
        return None
    ship_day = _utc_date(shipment.ship_date)

    def matches(order: Order) -> bool:
        if _fold(order.recipient_name) != name or order.order_date is None:
            return False
        return _utc_date(order.order_date) == ship_day

    return matches


def _by_tracking_number(shipment: ShipmentEvent, _window: timedelta) -> OrderPredicate | None:
    tracking = shipment.tracking_number
    if not tracking:
        return None
    return lambda order: order.tracking_number == tracking


STRATEGIES: tuple[tuple[MatchStrategy, StrategyBuilder], ...] = (
    (MatchStrategy.ORDER_NUMBER, _by_order_number),
    (MatchStrategy.EXTERNAL_ID, _by_external_id),
    (MatchStrategy.ORDER_KEY, _by_order_key),
    (MatchStrategy.NOTES_ORDER_NUMBER, _by_notes),
    (MatchStrategy.EMAIL_AND_DATE, _by_email_and_date),
    (MatchStrategy.NAME_AND_DATE, _by_name_and_date),
    (MatchStrategy.TRACKING_NUMBER, _by_tracking_number),
)


def find_matching_order(
    shipment: ShipmentEvent,
    candidate_orders: Iterable[Order],
    *,
    date_window: timedelta = DEFAULT_DATE_WINDOW,
) -> OrderMatch | None:
    """Return the first order matched by the cascade, or ``None``.

    Voided shipments never match.
    """

    if shipment.voided:
        return None
    candidates = list(candidate_orders)
    for strategy, build in STRATEGIES:
        predicate = build(shipment, date_window)
        if predicate is None:
            continue
        for order in candidates:
            if predicate(order):
                log.debug(
                    "Shipment %s matched order %s by %s",
                    shipment.tracking_number,
                    order.order_number,
                    strategy,
                )
                return OrderMatch(order=order, strategy=strategy)
    return None
