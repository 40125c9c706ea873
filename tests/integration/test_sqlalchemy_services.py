"""Domain services running against the SQLite-backed unit of work."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from claimsync.domain.identity import IdentityResolver
from claimsync.domain.importing import ImportDeduplicator
from claimsync.domain.model import (
    ChangeType,
    ContactDetails,
    ImportAction,
    MatchStatus,
    MatchStrategy,
    RiskLevel,
)
from claimsync.domain.reconciliation import OrderReconciler
from claimsync.domain.risk import RiskScorer
from tests.helpers.builders import BASE_TIME, make_incoming, make_shipment, ticking_clock

if TYPE_CHECKING:
    from collections.abc import Callable

    from claimsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork


def test_identity_resolution_and_review(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    resolver = IdentityResolver(sqlite_unit_of_work, clock=lambda: BASE_TIME)

    original = resolver.find_or_create(
        ContactDetails(name="John Smyth", email="john@example.com", address="12 Elm Street")
    )
    again = resolver.find_or_create(ContactDetails(email="JOHN@example.com"))
    lookalike = resolver.find_or_create(
        ContactDetails(name="Jon Smith", email="jon@example.com", address="99 Other Way")
    )

    assert original.is_new
    assert again.identity.id == original.identity.id
    assert lookalike.is_new
    [pending] = resolver.list_pending_matches()
    assert pending.identity.id == lookalike.identity.id
    assert pending.candidate.id == original.identity.id

    reviewed = resolver.review_match(pending.match.id, approve=True, actor_id="agent-1")

    assert reviewed.status == MatchStatus.MERGED
    history = resolver.get_identity_with_history(original.identity.id)
    assert history is not None
    assert history.address_history == ["12 Elm Street", "99 Other Way"]
    tombstone = resolver.get_identity_with_history(lookalike.identity.id)
    assert tombstone is not None
    assert tombstone.identity.master_identity_id == original.identity.id

    # the merged identity's email now resolves to the surviving identity
    via_tombstone = resolver.find_or_create(ContactDetails(email="jon@example.com"))
    assert via_tombstone.identity.id == original.identity.id


def test_phone_of_merged_identity_resolves_to_master(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    resolver = IdentityResolver(sqlite_unit_of_work, clock=lambda: BASE_TIME)
    keep = resolver.find_or_create(ContactDetails(name="Keep", email="keep@example.com"))
    gone = resolver.find_or_create(ContactDetails(name="Gone", phone="5550100"))

    merged = resolver.merge_identities(keep.identity.id, gone.identity.id, actor_id="agent-2")

    assert merged.id == keep.identity.id
    assert resolver.find_or_create(ContactDetails(phone="555 0100")).identity.id == merged.id


def test_import_conflict_and_shipment_link(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    clock = ticking_clock()
    deduplicator = ImportDeduplicator(sqlite_unit_of_work, clock=clock)
    created = deduplicator.import_orders(
        [
            make_incoming("1001", customer_email="jane@example.com"),
            make_incoming("1002", customer_email=None, total="250.00"),
        ]
    )
    assert created.created == 2
    order = deduplicator.find_existing_order(make_incoming("1001"))
    assert order is not None
    assert order.tags == ["Low-Value", "Processing"]

    deduplicator.record_manual_edit(order.id, {"total": "45.00"}, actor_id="agent-5")
    outcome = deduplicator.import_single_order(make_incoming("1001", total="49.99"))

    assert outcome.action == ImportAction.CONFLICT
    assert outcome.conflict is not None
    assert outcome.conflict.field_names == ["total"]

    resolved = deduplicator.resolve_conflict(outcome.conflict, accept_incoming=False)
    assert resolved.total == Decimal("45.00")

    reconciler = OrderReconciler(sqlite_unit_of_work, clock=clock)
    result = reconciler.link_shipments(
        [
            make_shipment(order_number="1002", tracking_number="TRACK-2"),
            make_shipment(
                tracking_number="TRACK-1",
                customer_email="jane@example.com",
                ship_date=BASE_TIME + timedelta(days=1),
            ),
        ],
        actor_id="sync-job",
    )

    assert result.matched == 2
    assert result.strategies[MatchStrategy.ORDER_NUMBER] == 1
    assert result.strategies[MatchStrategy.EMAIL_AND_DATE] == 1
    with sqlite_unit_of_work() as uow:
        linked = uow.repositories.orders.get_by_order_number("1001")
        assert linked is not None
        assert linked.tracking_number == "TRACK-1"
        assert linked.status == "shipped"
        changes = uow.repositories.order_changes.list_for_order(linked.id)
    change_types = [change.change_type for change in changes]
    assert change_types == [
        ChangeType.IMPORTED,
        ChangeType.MANUAL_EDIT,
        ChangeType.MANUAL_EDIT,
        ChangeType.SHIPMENT_LINKED,
    ]


def test_risk_score_is_stored_and_replaced(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    resolver = IdentityResolver(sqlite_unit_of_work, clock=lambda: BASE_TIME)
    identity = resolver.find_or_create(ContactDetails(name="Jane", email="jane@example.com"))
    for _ in range(4):
        resolver.update_identity_stats(identity.identity.id, order_total=Decimal("25.00"))
    resolver.record_dispute(identity.identity.id)
    scorer = RiskScorer(sqlite_unit_of_work, clock=lambda: BASE_TIME)

    first = scorer.calculate_risk_score(identity.identity.id)
    resolver.record_dispute(identity.identity.id)
    second = scorer.calculate_risk_score(identity.identity.id)
    cached = scorer.get_cached_risk_score(identity.identity.id)

    assert first is not None
    assert second is not None
    assert cached is not None
    assert first.dispute_score == 40
    assert second.dispute_score == 40 + 15
    assert cached.breakdown["dispute"]["total_disputes"] == 2
    assert cached.breakdown["dispute"]["recent_disputes"] == 2
    assert cached.level == RiskLevel.LOW
    assert cached.breakdown["order_frequency"]["lifetime_value"] == "100.00"


def test_status_edit_survives_reimport(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    deduplicator = ImportDeduplicator(sqlite_unit_of_work, clock=ticking_clock())
    created = deduplicator.import_single_order(make_incoming("1001"))
    assert created.order_id is not None
    deduplicator.record_manual_edit(created.order_id, {"status": "on-hold"}, actor_id="agent-5")

    outcome = deduplicator.import_single_order(make_incoming("1001", status="completed"))

    assert outcome.action == ImportAction.CONFLICT
    assert outcome.conflict is not None
    assert outcome.conflict.field_names == ["status"]
    [field] = outcome.conflict.conflict_fields
    assert (field.local_value, field.incoming_value) == ("on-hold", "completed")
    assert field.last_modified_by == "agent-5"
    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.orders.get(created.order_id)
        assert stored is not None
        assert stored.status == "on-hold"


def test_shipment_sync_stats(sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork]) -> None:
    clock = ticking_clock()
    ImportDeduplicator(sqlite_unit_of_work, clock=clock).import_orders(
        [
            make_incoming("1001", customer_email="jane@example.com"),
            make_incoming("1002", customer_email="sam@example.com"),
        ]
    )
    reconciler = OrderReconciler(sqlite_unit_of_work, clock=clock)
    reconciler.link_shipments([make_shipment(order_number="1001")])

    stats = reconciler.sync_stats()

    assert (stats.total_orders, stats.with_tracking, stats.without_tracking) == (2, 1, 1)
    assert stats.by_carrier == {"ups": 1}
    assert stats.by_status == {"shipped": 1, "processing": 1}
