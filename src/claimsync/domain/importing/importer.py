"""Import storefront orders without clobbering local edits.

Each incoming order is classified as created, updated, conflict or skipped.
An order that was ever edited by hand is never overwritten by an import:
the differences are handed back as an ``OrderConflict`` for a person to
resolve through ``resolve_conflict``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from itertools import batched
from logging import getLogger
from math import ceil
from typing import TYPE_CHECKING, Any

from claimsync.domain.model import (
    ChangeType,
    ImportAction,
    IncomingOrder,
    Order,
    OrderChangeRecord,
    OrderNotFoundError,
    Provider,
    normalize_email,
    utcnow,
)

from .diff import (
    DIFF_FIELDS_BY_NAME,
    FieldChange,
    apply_changes,
    changes_as_json,
    detect_changes,
    jsonable,
    order_snapshot,
)
from .lookup import (
    DEFAULT_EMAIL_CANDIDATE_LIMIT,
    DEFAULT_MATCH_WINDOW,
    find_existing_order,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from decimal import Decimal
    from uuid import UUID

    from claimsync.domain.ports import ClaimsUnitOfWork, UnitOfWorkFactory

log = getLogger(__name__)

DEFAULT_IMPORT_BATCH_SIZE = 50


@dataclass(frozen=True, slots=True)
class ConflictField:
    field: str
    local_value: Any
    incoming_value: Any
    last_modified_by: str | None = None
    last_modified_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class OrderConflict:
    """Local edits and an incoming import disagree; a person has to decide."""

    order_id: UUID
    order_number: str
    source: Provider
    source_order_id: str
    conflict_fields: tuple[ConflictField, ...]
    local_snapshot: dict[str, Any]
    incoming_snapshot: dict[str, Any]
    incoming: IncomingOrder

    @property
    def field_names(self) -> list[str]:
        return [item.field for item in self.conflict_fields]


@dataclass(frozen=True, slots=True)
class ImportOutcome:
    action: ImportAction
    order_id: UUID | None = None
    changes: dict[str, FieldChange] = field(default_factory=dict)
    conflict: OrderConflict | None = None


@dataclass(frozen=True, slots=True)
class RecordFailure:
    order_number: str
    source_order_id: str
    message: str


@dataclass(frozen=True, slots=True)
class ImportProgress:
    total: int
    processed: int
    current_batch: int
    total_batches: int
    created: int
    updated: int
    skipped: int
    conflicts: int
    errors: int
    current_order: str | None


@dataclass(slots=True)
class ImportResult:
    total: int = 0
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    cancelled: bool = False
    conflicts: list[OrderConflict] = field(default_factory=list)
    errors: list[RecordFailure] = field(default_factory=list)

    def record(self, outcome: ImportOutcome) -> None:
        if outcome.action == ImportAction.CREATED:
            self.created += 1
        elif outcome.action == ImportAction.UPDATED:
            self.updated += 1
        elif outcome.action == ImportAction.SKIPPED:
            self.skipped += 1
        elif outcome.conflict is not None:
            self.conflicts.append(outcome.conflict)


type ProgressCallback = Callable[[ImportProgress], None]


def order_tags(total: Decimal, status: str) -> list[str]:
    tags: list[str] = []
    if total >= 500:
        tags.append("High-Value")
    elif total >= 200:
        tags.append("Medium-Value")
    elif total < 50:
        tags.append("Low-Value")
    status_tag = {"processing": "Processing", "completed": "Completed", "refunded": "Refunded"}
    if status in status_tag:
        tags.append(status_tag[status])
    return tags


def _new_order(incoming: IncomingOrder, *, now: datetime) -> Order:
    status = incoming.status.strip().lower()
    return Order(
        order_number=incoming.order_number,
        source=incoming.source,
        source_order_id=incoming.source_order_id,
        order_key=incoming.order_key,
        status=status,
        order_date=incoming.created_at,
        customer_name=incoming.customer_name,
        customer_email=normalize_email(incoming.customer_email),
        customer_phone=incoming.customer_phone,
        shipping_address=jsonable(dict(incoming.shipping_address)),
        total=incoming.total,
        shipping_cost=incoming.shipping_cost,
        tax=incoming.tax,
        line_items=jsonable([dict(item) for item in incoming.line_items]),
        notes=incoming.notes,
        tags=order_tags(incoming.total, status),
        raw_payload=jsonable(dict(incoming.raw_payload)),
        created_at=now,
        updated_at=now,
    )


@dataclass(slots=True)
class ImportDeduplicator:
    unit_of_work_factory: UnitOfWorkFactory
    email_candidate_limit: int = DEFAULT_EMAIL_CANDIDATE_LIMIT
    match_window: timedelta = DEFAULT_MATCH_WINDOW
    clock: Callable[[], datetime] = utcnow

    def find_existing_order(self, incoming: IncomingOrder) -> Order | None:
        with self.unit_of_work_factory() as uow:
            return self._find_existing(uow, incoming)

    def import_single_order(
        self,
        incoming: IncomingOrder,
        *,
        actor_id: str | None = None,
    ) -> ImportOutcome:
        with self.unit_of_work_factory() as uow:
            outcome = self._import(uow, incoming, actor_id=actor_id)
            if outcome.action in (ImportAction.CREATED, ImportAction.UPDATED):
                uow.commit()
            return outcome

    def import_orders(
        self,
        records: Sequence[IncomingOrder],
        *,
        actor_id: str | None = None,
        batch_size: int = DEFAULT_IMPORT_BATCH_SIZE,
        on_progress: ProgressCallback | None = None,
        should_cancel: Callable[[], bool] | None = None,
    ) -> ImportResult:
        """Import ``records`` page by page, reporting progress after every record.

        A failing record is logged, added to ``errors`` and skipped; the run
        continues. Cancellation is checked before each record.
        """

        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        result = ImportResult(total=len(records))
        total_batches = ceil(len(records) / batch_size) if records else 0
        log.info(
            "Starting order import: records=%s, batch_size=%s, batches=%s",
            len(records),
            batch_size,
            total_batches,
        )

        for batch_number, batch in enumerate(batched(records, batch_size), start=1):
            for incoming in batch:
                if should_cancel is not None and should_cancel():
                    result.cancelled = True
                    log.info("Order import cancelled after %s records", result.processed)
                    return result
                try:
                    outcome = self.import_single_order(incoming, actor_id=actor_id)
                except Exception as exc:  # noqa: BLE001
                    log.exception("Failed to import order %s", incoming.order_number)
                    result.errors.append(
                        RecordFailure(
                            order_number=incoming.order_number,
                            source_order_id=incoming.source_order_id,
                            message=str(exc),
                        )
                    )
                else:
                    result.record(outcome)
                result.processed += 1
                if on_progress is not None:
                    on_progress(
                        ImportProgress(
                            total=result.total,
                            processed=result.processed,
                            current_batch=batch_number,
                            total_batches=total_batches,
                            created=result.created,
                            updated=result.updated,
                            skipped=result.skipped,
                            conflicts=len(result.conflicts),
                            errors=len(result.errors),
                            current_order=incoming.order_number,
                        )
                    )

        log.info(
            "Finished order import: created=%s, updated=%s, skipped=%s, conflicts=%s, errors=%s",
            result.created,
            result.updated,
            result.skipped,
            len(result.conflicts),
            len(result.errors),
        )
        return result

    def record_manual_edit(
        self,
        order_id: UUID,
        changes: Mapping[str, Any],
        *,
        actor_id: str | None = None,
        notes: str | None = None,
    ) -> Order | None:
        """Apply a hand edit to declared fields and log it as ``manual_edit``."""

        unknown = sorted(set(changes) - set(DIFF_FIELDS_BY_NAME))
        if unknown:
            raise ValueError(f"Fields cannot be edited: {', '.join(unknown)}")

        with self.unit_of_work_factory() as uow:
            order = uow.repositories.orders.get(order_id)
            if order is None:
                return None
            applied: dict[str, FieldChange] = {}
            for name, value in changes.items():
                declared = DIFF_FIELDS_BY_NAME[name]
                old = declared.coerce(getattr(order, name))
                new = declared.coerce(value)
                if declared.comparable(old) != declared.comparable(new):
                    applied[name] = FieldChange(old=old, new=new)
            if not applied:
                return order
            now = self.clock()
            apply_changes(order, applied)
            order.updated_at = now
            uow.repositories.order_changes.add(
                OrderChangeRecord(
                    order_id=order.id,
                    change_type=ChangeType.MANUAL_EDIT,
                    source=Provider.MANUAL,
                    changed_by=actor_id,
                    changed_fields=changes_as_json(applied),
                    snapshot=order_snapshot(order),
                    notes=notes,
                    created_at=now,
                )
            )
            uow.commit()
            return order

    def resolve_conflict(
        self,
        conflict: OrderConflict,
        *,
        accept_incoming: bool,
        actor_id: str | None = None,
    ) -> Order:
        """Settle a conflict explicitly, keeping either the local or the incoming values."""

        with self.unit_of_work_factory() as uow:
            order = uow.repositories.orders.get(conflict.order_id)
            if order is None:
                raise OrderNotFoundError(conflict.order_id)
            now = self.clock()
            if accept_incoming:
                changes = {
                    item.field: FieldChange(old=item.local_value, new=item.incoming_value)
                    for item in conflict.conflict_fields
                }
                apply_changes(order, changes)
                order.updated_at = now
                record = OrderChangeRecord(
                    order_id=order.id,
                    change_type=ChangeType.UPDATED,
                    source=conflict.source,
                    changed_by=actor_id,
                    changed_fields=changes_as_json(changes),
                    snapshot=order_snapshot(order),
                    notes="Conflict resolved: accepted incoming values",
                    created_at=now,
                )
            else:
                record = OrderChangeRecord(
                    order_id=order.id,
                    change_type=ChangeType.MANUAL_EDIT,
                    source=Provider.MANUAL,
                    changed_by=actor_id,
                    snapshot=order_snapshot(order),
                    notes="Conflict resolved: kept local values",
                    created_at=now,
                )
            uow.repositories.order_changes.add(record)
            uow.commit()
            log.info(
                "Resolved conflict on order %s (accept_incoming=%s)",
                order.order_number,
                accept_incoming,
            )
            return order

    def _find_existing(self, uow: ClaimsUnitOfWork, incoming: IncomingOrder) -> Order | None:
        return find_existing_order(
            incoming,
            uow.repositories.orders,
            email_candidate_limit=self.email_candidate_limit,
            match_window=self.match_window,
        )

    def _import(
        self,
        uow: ClaimsUnitOfWork,
        incoming: IncomingOrder,
        *,
        actor_id: str | None,
    ) -> ImportOutcome:
        now = self.clock()
        existing = self._find_existing(uow, incoming)

        if existing is None:
            order = _new_order(incoming, now=now)
            uow.repositories.orders.add(order)
            uow.repositories.order_changes.add(
                OrderChangeRecord(
                    order_id=order.id,
                    change_type=ChangeType.IMPORTED,
                    source=incoming.source,
                    changed_by=actor_id,
                    snapshot=order_snapshot(order),
                    created_at=now,
                )
            )
            log.info("Imported new order %s", incoming.order_number)
            return ImportOutcome(action=ImportAction.CREATED, order_id=order.id)

        changes = detect_changes(existing, incoming)
        if not changes:
            return ImportOutcome(action=ImportAction.SKIPPED, order_id=existing.id)

        manual_edit = uow.repositories.order_changes.latest_manual_edit(existing.id)
        if manual_edit is not None:
            conflict = OrderConflict(
                order_id=existing.id,
                order_number=existing.order_number,
                source=incoming.source,
                source_order_id=incoming.source_order_id,
                conflict_fields=tuple(
                    ConflictField(
                        field=name,
                        local_value=change.old,
                        incoming_value=change.new,
                        last_modified_by=manual_edit.changed_by,
                        last_modified_at=manual_edit.created_at,
                    )
                    for name, change in changes.items()
                ),
                local_snapshot=order_snapshot(existing),
                incoming_snapshot=order_snapshot(incoming),
                incoming=incoming,
            )
            log.info(
                "Order %s has local edits; conflicting fields: %s",
                existing.order_number,
                ", ".join(conflict.field_names),
            )
            return ImportOutcome(
                action=ImportAction.CONFLICT,
                order_id=existing.id,
                changes=changes,
                conflict=conflict,
            )

        apply_changes(existing, changes)
        existing.tags = order_tags(existing.total, existing.status)
        existing.raw_payload = jsonable(dict(incoming.raw_payload))
        existing.updated_at = now
        uow.repositories.order_changes.add(
            OrderChangeRecord(
                order_id=existing.id,
                change_type=ChangeType.UPDATED,
                source=incoming.source,
                changed_by=actor_id,
                changed_fields=changes_as_json(changes),
                snapshot=order_snapshot(existing),
                created_at=now,
            )
        )
        log.info("Updated order %s: %s", existing.order_number, ", ".join(changes))
        return ImportOutcome(action=ImportAction.UPDATED, order_id=existing.id, changes=changes)
