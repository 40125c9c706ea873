from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from claimsync.domain.model import MatchStrategy
from claimsync.domain.reconciliation import STRATEGIES, find_matching_order
from tests.helpers.builders import BASE_TIME, make_order, make_shipment


def test_strategies_run_in_fixed_order() -> None:
    assert [strategy for strategy, _ in STRATEGIES] == [
        MatchStrategy.ORDER_NUMBER,
        MatchStrategy.EXTERNAL_ID,
        MatchStrategy.ORDER_KEY,
        MatchStrategy.NOTES_ORDER_NUMBER,
        MatchStrategy.EMAIL_AND_DATE,
        MatchStrategy.NAME_AND_DATE,
        MatchStrategy.TRACKING_NUMBER,
    ]


def test_matches_by_order_number() -> None:
    order = make_order("1001")

    match = find_matching_order(make_shipment(order_number="1001"), [make_order("1002"), order])

    assert match is not None
    assert match.order is order
    assert match.strategy == MatchStrategy.ORDER_NUMBER


def test_matches_by_external_id() -> None:
    order = make_order("1001", external_id="88231")

    match = find_matching_order(make_shipment(order_number="X-1", order_id="88231"), [order])

    assert match is not None
    assert match.strategy == MatchStrategy.EXTERNAL_ID


def test_matches_by_order_key_from_raw_payload() -> None:
    order = make_order("1001", raw_payload={"orderKey": "wc_order_abc"})

    match = find_matching_order(make_shipment(order_key="wc_order_abc"), [order])

    assert match is not None
    assert match.order is order
    assert match.strategy == MatchStrategy.ORDER_KEY


def test_matches_order_number_mentioned_in_notes() -> None:
    order = make_order("1001", notes="Replacement for order #WEB-77")

    match = find_matching_order(make_shipment(order_number="web-77"), [order])

    assert match is not None
    assert match.strategy == MatchStrategy.NOTES_ORDER_NUMBER


def test_matches_by_email_within_date_window() -> None:
    order = make_order("1001", customer_email="jane@example.com")
    shipment = make_shipment(
        customer_email="Jane@Example.com",
        ship_date=BASE_TIME + timedelta(days=2, hours=23),
    )

    match = find_matching_order(shipment, [order])

    assert match is not None
    assert match.strategy == MatchStrategy.EMAIL_AND_DATE


def test_email_match_outside_window_falls_through() -> None:
    order = make_order("1001", customer_email="jane@example.com")
    shipment = make_shipment(
        customer_email="jane@example.com",
        ship_date=BASE_TIME + timedelta(days=3, minutes=1),
    )

    assert find_matching_order(shipment, [order]) is None


def test_date_window_is_configurable() -> None:
    order = make_order("1001", customer_email="jane@example.com")
    shipment = make_shipment(
        customer_email="jane@example.com",
        ship_date=BASE_TIME + timedelta(days=5),
    )

    match = find_matching_order(shipment, [order], date_window=timedelta(days=7))

    assert match is not None
    assert match.strategy == MatchStrategy.EMAIL_AND_DATE


def test_matches_by_recipient_name_on_same_utc_day() -> None:
    order = make_order(
        "1001",
        order_date=datetime(2024, 3, 1, 2, 0, tzinfo=UTC),
        shipping_address={"name": "Jane Doe"},
    )
    # 2024-03-01 20:00 UTC expressed in a UTC-5 offset
    shipped = datetime(2024, 3, 1, 15, 0, tzinfo=timezone(timedelta(hours=-5)))
    shipment = make_shipment(recipient_name="jane doe", ship_date=shipped)

    match = find_matching_order(shipment, [order])

    assert match is not None
    assert match.strategy == MatchStrategy.NAME_AND_DATE


def test_recipient_name_on_different_day_does_not_match() -> None:
    order = make_order("1001", customer_name="Jane Doe")
    shipment = make_shipment(recipient_name="Jane Doe", ship_date=BASE_TIME + timedelta(days=1))

    assert find_matching_order(shipment, [order]) is None


def test_matches_by_tracking_number_last() -> None:
    order = make_order("1001", tracking_number="1Z999")

    match = find_matching_order(make_shipment(tracking_number="1Z999"), [order])

    assert match is not None
    assert match.strategy == MatchStrategy.TRACKING_NUMBER


def test_earlier_strategy_wins_over_later_one() -> None:
    by_tracking = make_order("2000", tracking_number="1Z999")
    by_number = make_order("1001")

    match = find_matching_order(
        make_shipment(order_number="1001", tracking_number="1Z999"),
        [by_tracking, by_number],
    )

    assert match is not None
    assert match.order is by_number
    assert match.strategy == MatchStrategy.ORDER_NUMBER


def test_voided_shipment_never_matches() -> None:
    order = make_order("1001")

    assert find_matching_order(make_shipment(order_number="1001", voided=True), [order]) is None


def test_shipment_without_keys_matches_nothing() -> None:
    shipment = make_shipment(tracking_number=None, carrier_code=None, service_code=None)

    assert find_matching_order(shipment, [make_order("1001")]) is None
