"""Declared order fields and the structural diff over them.

New fields are tracked by appending to ``ORDER_DIFF_FIELDS``; every consumer
(diffing, applying updates, manual edits, snapshots) walks that list.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from claimsync.domain.model import to_money

if TYPE_CHECKING:
    from collections.abc import Mapping

    from claimsync.domain.model import IncomingOrder, Order

ORDER_SNAPSHOT_VERSION = 1


def _as_status(value: Any) -> str:
    return str(value).strip().lower()


def _as_line_items(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        raise TypeError("line_items must be a list of objects")
    return jsonable([dict(item) for item in value])


@dataclass(frozen=True, slots=True)
class DiffField:
    name: str
    coerce: Callable[[Any], Any]
    structural: bool = False

    def comparable(self, value: Any) -> Any:
        if self.structural:
            return canonical_json(value)
        return value


ORDER_DIFF_FIELDS: tuple[DiffField, ...] = (
    DiffField("status", _as_status),
    DiffField("total", to_money),
    DiffField("shipping_cost", to_money),
    DiffField("tax", to_money),
    DiffField("line_items", _as_line_items, structural=True),
)
DIFF_FIELDS_BY_NAME: dict[str, DiffField] = {field.name: field for field in ORDER_DIFF_FIELDS}


@dataclass(frozen=True, slots=True)
class FieldChange:
    old: Any
    new: Any

    def as_json(self) -> dict[str, Any]:
        return {"old": jsonable(self.old), "new": jsonable(self.new)}


def jsonable(value: Any) -> Any:
    """Convert a value to something ``json.dumps`` accepts."""

    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, dict):
        return {str(key): jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    return json.dumps(jsonable(value), sort_keys=True, separators=(",", ":"))


def detect_changes(existing: Order, incoming: IncomingOrder) -> dict[str, FieldChange]:
    """Return the declared fields whose values differ, in declaration order."""

    changes: dict[str, FieldChange] = {}
    for field in ORDER_DIFF_FIELDS:
        old = field.coerce(getattr(existing, field.name))
        new = field.coerce(getattr(incoming, field.name))
        if field.comparable(old) != field.comparable(new):
            changes[field.name] = FieldChange(old=old, new=new)
    return changes


def apply_changes(order: Order, changes: Mapping[str, FieldChange]) -> None:
    for name, change in changes.items():
        field = DIFF_FIELDS_BY_NAME[name]
        setattr(order, name, field.coerce(change.new))


def changes_as_json(changes: Mapping[str, FieldChange]) -> dict[str, dict[str, Any]]:
    return {name: change.as_json() for name, change in changes.items()}


def order_snapshot(order: Order | IncomingOrder) -> dict[str, Any]:
    """Versioned JSON snapshot of the declared fields."""

    snapshot: dict[str, Any] = {"version": ORDER_SNAPSHOT_VERSION}
    for field in ORDER_DIFF_FIELDS:
        snapshot[field.name] = jsonable(field.coerce(getattr(order, field.name)))
    return snapshot
