"""Tests for SQLAlchemy repositories."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

from sqlalchemy.orm import Session  # noqa: TC002

from claimsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCustomerIdentityRepository,
    SqlAlchemyIdentityMatchRepository,
    SqlAlchemyOrderChangeRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyRiskScoreRepository,
)
from claimsync.domain.model import (
    ChangeType,
    IdentityMatch,
    MatchType,
    OrderChangeRecord,
    Provider,
    RiskLevel,
    RiskScore,
)
from tests.helpers.builders import BASE_TIME, make_identity, make_order


def test_identity_lookups_by_email_and_phone(sqlite_session: Session) -> None:
    repository = SqlAlchemyCustomerIdentityRepository(sqlite_session)
    jane = make_identity("Jane", email="jane@example.com", phone="5550100")
    repository.add(jane)
    sqlite_session.commit()

    assert repository.find_by_email("jane@example.com") == [jane]
    assert repository.find_by_phone("5550100") == [jane]
    assert repository.find_by_email("other@example.com") == []


def test_recent_active_skips_tombstones_and_orders_by_last_seen(
    sqlite_session: Session,
) -> None:
    repository = SqlAlchemyCustomerIdentityRepository(sqlite_session)
    older = make_identity("Older", seen_at=BASE_TIME - timedelta(days=2))
    newer = make_identity("Newer", seen_at=BASE_TIME)
    merged = make_identity("Merged", seen_at=BASE_TIME + timedelta(days=1))
    merged.mark_merged_into(newer, at=BASE_TIME, actor=None)
    for identity in (older, newer, merged):
        repository.add(identity)
    sqlite_session.commit()

    assert repository.recent_active(limit=10) == [newer, older]
    assert repository.recent_active(limit=1) == [newer]


def test_add_if_absent_rejects_duplicate_active_email(sqlite_session: Session) -> None:
    repository = SqlAlchemyCustomerIdentityRepository(sqlite_session)
    first = make_identity("First", email="dup@example.com")
    assert repository.add_if_absent(first) is True
    sqlite_session.commit()

    second = make_identity("Second", email="dup@example.com")
    other = make_identity("Other", email="other@example.com")

    assert repository.add_if_absent(second) is False
    assert repository.add_if_absent(other) is True
    sqlite_session.commit()

    assert repository.get(second.id) is None
    assert repository.get(other.id) is other


def test_add_if_absent_allows_email_of_merged_identity(sqlite_session: Session) -> None:
    repository = SqlAlchemyCustomerIdentityRepository(sqlite_session)
    master = make_identity("Master")
    tombstone = make_identity("Tombstone", phone="5550100")
    tombstone.mark_merged_into(master, at=BASE_TIME, actor=None)
    repository.add(master)
    repository.add(tombstone)
    sqlite_session.commit()

    fresh = make_identity("Fresh", phone="5550100")

    assert repository.add_if_absent(fresh) is True
    sqlite_session.commit()
    assert {identity.id for identity in repository.find_by_phone("5550100")} == {
        tombstone.id,
        fresh.id,
    }


def test_identity_match_repository(sqlite_session: Session) -> None:
    identities = SqlAlchemyCustomerIdentityRepository(sqlite_session)
    matches = SqlAlchemyIdentityMatchRepository(sqlite_session)
    first = make_identity("Jon Smith")
    second = make_identity("John Smyth")
    third = make_identity("Jane Doe")
    for identity in (first, second, third):
        identities.add(identity)
    older = IdentityMatch(
        identity_id=first.id,
        candidate_id=second.id,
        match_type=MatchType.FUZZY_NAME,
        confidence=84,
        reason="Name similarity: 84%",
        created_at=BASE_TIME,
    )
    newer = IdentityMatch(
        identity_id=third.id,
        candidate_id=second.id,
        match_type=MatchType.FUZZY_NAME,
        confidence=81,
        reason="Name similarity: 81%",
        created_at=BASE_TIME + timedelta(minutes=5),
    )
    matches.add(older)
    matches.add(newer)
    sqlite_session.commit()

    assert matches.list_pending(limit=10) == [newer, older]
    assert matches.list_pending(limit=1) == [newer]
    assert matches.list_for_identity(second.id) == [older, newer]
    assert matches.list_for_identity(first.id) == [older]
    assert matches.get(older.id) is older


def test_order_repository_lookups(sqlite_session: Session) -> None:
    repository = SqlAlchemyOrderRepository(sqlite_session)
    first = make_order(
        "1001",
        customer_email="Jane@Example.com",
        line_items=[{"sku": "MUG-1", "quantity": 1}],
        shipping_address={"name": "Jane Doe", "city": "Berlin"},
    )
    second = make_order("1002", order_date=BASE_TIME + timedelta(days=1))
    repository.add(first)
    repository.add(second)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    by_source = repository.get_by_source_id(Provider.WOOCOMMERCE, "1001")
    assert by_source is not None
    assert by_source.id == first.id
    assert by_source.total == Decimal("49.99")
    assert by_source.line_items == [{"sku": "MUG-1", "quantity": 1}]
    assert by_source.shipping_address["city"] == "Berlin"
    assert by_source.order_date == BASE_TIME
    assert repository.get_by_source_id(Provider.SHIPSTATION, "1001") is None

    by_number = repository.get_by_order_number("1002")
    assert by_number is not None
    assert by_number.id == second.id

    recent = repository.recent_by_email("jane@example.com", source=Provider.WOOCOMMERCE, limit=5)
    assert [order.id for order in recent] == [first.id]
    assert [order.id for order in repository.list_recent(limit=5)] == [second.id, first.id]


def test_order_repository_shipping_counts(sqlite_session: Session) -> None:
    repository = SqlAlchemyOrderRepository(sqlite_session)
    repository.add(make_order("1001", tracking_number="1Z1", carrier_code="ups", status="shipped"))
    repository.add(make_order("1002", tracking_number="1Z2", carrier_code="ups", status="shipped"))
    repository.add(make_order("1003", tracking_number=""))
    repository.add(make_order("1004"))
    sqlite_session.commit()

    assert repository.shipping_counts() == {
        ("ups", "shipped", True): 2,
        (None, "processing", False): 2,
    }


def test_order_change_repository_latest_manual_edit(sqlite_session: Session) -> None:
    orders = SqlAlchemyOrderRepository(sqlite_session)
    changes = SqlAlchemyOrderChangeRepository(sqlite_session)
    order = make_order("1001")
    orders.add(order)
    imported = OrderChangeRecord(
        order_id=order.id,
        change_type=ChangeType.IMPORTED,
        source=Provider.WOOCOMMERCE,
        created_at=BASE_TIME,
    )
    first_edit = OrderChangeRecord(
        order_id=order.id,
        change_type=ChangeType.MANUAL_EDIT,
        source=Provider.MANUAL,
        changed_by="agent-1",
        changed_fields={"total": {"old": "49.99", "new": "45.00"}},
        created_at=BASE_TIME + timedelta(hours=1),
    )
    second_edit = OrderChangeRecord(
        order_id=order.id,
        change_type=ChangeType.MANUAL_EDIT,
        source=Provider.MANUAL,
        changed_by="agent-2",
        created_at=BASE_TIME + timedelta(hours=2),
    )
    for record in (second_edit, imported, first_edit):
        changes.add(record)
    sqlite_session.commit()

    assert changes.list_for_order(order.id) == [imported, first_edit, second_edit]
    assert changes.latest_manual_edit(order.id) is second_edit
    assert changes.latest_manual_edit(uuid4()) is None


def test_risk_score_upsert_keeps_one_row_per_identity(sqlite_session: Session) -> None:
    identities = SqlAlchemyCustomerIdentityRepository(sqlite_session)
    scores = SqlAlchemyRiskScoreRepository(sqlite_session)
    identity = make_identity()
    identities.add(identity)

    def snapshot(overall: int, level: RiskLevel) -> RiskScore:
        return RiskScore(
            identity_id=identity.id,
            overall_score=overall,
            level=level,
            dispute_score=0,
            support_score=0,
            review_score=0,
            order_frequency_score=0,
            engagement_score=0,
            confidence=30,
            breakdown={"dispute": {"score": 0}},
            recommendations=["LOW RISK - standard processing recommended"],
            unavailable_signals=["support"],
            calculated_at=BASE_TIME,
        )

    first = scores.upsert(snapshot(10, RiskLevel.LOW))
    sqlite_session.commit()
    second = scores.upsert(snapshot(80, RiskLevel.CRITICAL))
    sqlite_session.commit()
    sqlite_session.expunge_all()

    stored = scores.get(identity.id)
    assert second is first
    assert stored is not None
    assert stored.overall_score == 80
    assert stored.level == RiskLevel.CRITICAL
    assert stored.unavailable_signals == ["support"]
    assert stored.calculated_at == BASE_TIME
