from __future__ import annotations

from decimal import Decimal
from typing import Any

import pytest

from claimsync.domain.importing import detect_changes, order_snapshot
from claimsync.domain.importing.diff import apply_changes, changes_as_json
from claimsync.domain.model import Order
from tests.helpers.builders import make_incoming, make_order


def _stored_order(**overrides: Any) -> Order:
    values: dict[str, Any] = {
        "status": "processing",
        "total": "49.99",
        "line_items": [{"sku": "MUG-1", "quantity": 1}],
    }
    values.update(overrides)
    return make_order("1001", **values)


def test_identical_orders_have_no_changes() -> None:
    assert detect_changes(_stored_order(), make_incoming("1001")) == {}


def test_status_comparison_ignores_case() -> None:
    assert detect_changes(_stored_order(), make_incoming("1001", status=" Processing ")) == {}


def test_line_item_key_order_does_not_matter() -> None:
    stored = _stored_order(line_items=[{"quantity": 1, "sku": "MUG-1"}])

    assert detect_changes(stored, make_incoming("1001")) == {}


def test_detects_changed_fields_in_declaration_order() -> None:
    incoming = make_incoming(
        "1001",
        status="completed",
        total="59.99",
        line_items=[{"sku": "MUG-1", "quantity": 2}],
    )

    changes = detect_changes(_stored_order(), incoming)

    assert list(changes) == ["status", "total", "line_items"]
    assert changes["total"].old == Decimal("49.99")
    assert changes["total"].new == Decimal("59.99")
    assert changes_as_json(changes)["total"] == {"old": "49.99", "new": "59.99"}


def test_apply_changes_writes_coerced_values() -> None:
    order = _stored_order()
    changes = detect_changes(order, make_incoming("1001", status="COMPLETED", total="10.5"))

    apply_changes(order, changes)

    assert order.status == "completed"
    assert order.total == Decimal("10.50")


def test_line_items_must_be_a_list() -> None:
    with pytest.raises(TypeError):
        detect_changes(_stored_order(line_items={"sku": "MUG-1"}), make_incoming("1001"))


def test_order_snapshot_is_versioned_json() -> None:
    snapshot = order_snapshot(make_incoming("1001"))

    assert snapshot == {
        "version": 1,
        "status": "processing",
        "total": "49.99",
        "shipping_cost": "0.00",
        "tax": "0.00",
        "line_items": [{"sku": "MUG-1", "quantity": 1}],
    }
