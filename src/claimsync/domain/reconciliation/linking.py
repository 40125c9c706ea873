"""Link shipment events to stored orders."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from claimsync.domain.model import ChangeType, OrderChangeRecord, Provider, utcnow

from .cascade import DEFAULT_DATE_WINDOW, OrderMatch, find_matching_order

if TYPE_CHECKING:
    from collections.abc import Iterable

    from claimsync.domain.model import MatchStrategy, Order, ShipmentEvent
    from claimsync.domain.ports import UnitOfWorkFactory

log = getLogger(__name__)

DEFAULT_CANDIDATE_LIMIT = 500


@dataclass(slots=True)
class ShipmentSyncResult:
    """Outcome of a shipment link run. Voided shipments are only counted as ``voided``."""

    processed: int = 0
    matched: int = 0
    unmatched: int = 0
    voided: int = 0
    strategies: Counter[MatchStrategy] = field(default_factory=Counter)
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ShipmentLinkStats:
    """How many stored orders carry tracking details, by carrier and status."""

    total_orders: int = 0
    with_tracking: int = 0
    without_tracking: int = 0
    by_carrier: dict[str, int] = field(default_factory=dict)
    by_status: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class OrderReconciler:
    unit_of_work_factory: UnitOfWorkFactory
    candidate_limit: int = DEFAULT_CANDIDATE_LIMIT
    date_window: timedelta = DEFAULT_DATE_WINDOW
    clock: Callable[[], datetime] = utcnow

    def find_matching_order(
        self,
        shipment: ShipmentEvent,
        candidate_orders: Iterable[Order],
    ) -> OrderMatch | None:
        return find_matching_order(shipment, candidate_orders, date_window=self.date_window)

    def sync_stats(self) -> ShipmentLinkStats:
        with self.unit_of_work_factory() as uow:
            counts = uow.repositories.orders.shipping_counts()

        stats = ShipmentLinkStats()
        by_carrier: Counter[str] = Counter()
        by_status: Counter[str] = Counter()
        for (carrier_code, status, tracked), total in counts.items():
            stats.total_orders += total
            if tracked:
                stats.with_tracking += total
            else:
                stats.without_tracking += total
            if carrier_code:
                by_carrier[carrier_code] += total
            by_status[status] += total
        stats.by_carrier = dict(by_carrier)
        stats.by_status = dict(by_status)
        return stats

    def link_shipments(
        self,
        shipments: Iterable[ShipmentEvent],
        *,
        actor_id: str | None = None,
        should_cancel: Callable[[], bool] | None = None,
    ) -> ShipmentSyncResult:
        """Match each shipment and copy its tracking details onto the order.

        Every shipment runs in its own unit of work; a failure is recorded in
        ``errors`` and the run moves on to the next shipment.
        """

        result = ShipmentSyncResult()
        for shipment in shipments:
            if should_cancel is not None and should_cancel():
                log.info("Shipment link cancelled after %s shipments", result.processed)
                break
            if shipment.voided:
                result.voided += 1
                log.debug("Skipping voided shipment %s", shipment.tracking_number)
                continue

            result.processed += 1
            try:
                match = self._link_one(shipment, actor_id=actor_id)
            except Exception as exc:  # noqa: BLE001
                log.exception("Failed to link shipment %s", shipment.tracking_number)
                result.errors.append(f"Shipment {shipment.tracking_number}: {exc}")
                continue

            if match is None:
                result.unmatched += 1
                log.info("No order found for shipment %s", shipment.tracking_number)
                continue
            result.matched += 1
            result.strategies[match.strategy] += 1

        log.info(
            "Shipment link finished: processed=%s, matched=%s, unmatched=%s, voided=%s, errors=%s",
            result.processed,
            result.matched,
            result.unmatched,
            result.voided,
            len(result.errors),
        )
        return result

    def _link_one(self, shipment: ShipmentEvent, *, actor_id: str | None) -> OrderMatch | None:
        with self.unit_of_work_factory() as uow:
            candidates = uow.repositories.orders.list_recent(limit=self.candidate_limit)
            match = self.find_matching_order(shipment, candidates)
            if match is None:
                return None

            now = self.clock()
            order = match.order
            before = {"status": order.status, "tracking_number": order.tracking_number}
            order.link_shipment(shipment, at=now)
            uow.repositories.order_changes.add(
                OrderChangeRecord(
                    order_id=order.id,
                    change_type=ChangeType.SHIPMENT_LINKED,
                    source=Provider.SHIPSTATION,
                    changed_by=actor_id,
                    changed_fields={
                        "status": {"old": before["status"], "new": order.status},
                        "tracking_number": {
                            "old": before["tracking_number"],
                            "new": order.tracking_number,
                        },
                    },
                    notes=f"Matched by {match.strategy}",
                    created_at=now,
                )
            )
            uow.commit()
            log.info(
                "Linked shipment %s to order %s (%s)",
                shipment.tracking_number,
                order.order_number,
                match.strategy,
            )
            return match
