"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from claimsync.adapters.klaviyo import KlaviyoMarketingSource
from claimsync.adapters.reamaze import ReamazeSupportSource
from claimsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from claimsync.config import (
    MissingConfigurationError,
    get_klaviyo_config,
    get_reamaze_config,
    get_sync_config,
)
from claimsync.domain.identity import IdentityResolver
from claimsync.domain.importing import ImportDeduplicator
from claimsync.domain.ports import SignalSources
from claimsync.domain.reconciliation import OrderReconciler
from claimsync.domain.risk import RiskScorer

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from claimsync.domain.identity import PendingMatch, Resolution
    from claimsync.domain.importing import ImportResult
    from claimsync.domain.importing.importer import ProgressCallback
    from claimsync.domain.model import (
        ContactDetails,
        CustomerIdentity,
        IdentityMatch,
        IncomingOrder,
        RiskScore,
        ShipmentEvent,
    )
    from claimsync.domain.ports import UnitOfWorkFactory
    from claimsync.domain.reconciliation import ShipmentLinkStats, ShipmentSyncResult

log = getLogger(__name__)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork


def build_signal_sources() -> SignalSources:
    """Wire the HTTP signal sources whose credentials are configured."""

    sources = SignalSources()
    try:
        sources.support = ReamazeSupportSource(config=get_reamaze_config())
    except MissingConfigurationError as exc:
        log.info("Support signal disabled: %s", exc)
    try:
        sources.marketing = KlaviyoMarketingSource(config=get_klaviyo_config())
    except MissingConfigurationError as exc:
        log.info("Marketing signal disabled: %s", exc)
    return sources


def resolve_customer(
    contact: ContactDetails,
    *,
    actor_id: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Resolution:
    resolver = IdentityResolver(
        _unit_of_work_factory(unit_of_work_factory),
        fuzzy_candidate_limit=get_sync_config().fuzzy_candidate_limit,
    )
    return resolver.find_or_create(contact, actor_id=actor_id)


def merge_customers(
    keep_id: UUID,
    merge_id: UUID,
    *,
    actor_id: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> CustomerIdentity:
    resolver = IdentityResolver(_unit_of_work_factory(unit_of_work_factory))
    return resolver.merge_identities(keep_id, merge_id, actor_id=actor_id)


def pending_matches(
    *,
    limit: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[PendingMatch]:
    resolver = IdentityResolver(_unit_of_work_factory(unit_of_work_factory))
    return resolver.list_pending_matches(limit=limit or get_sync_config().pending_match_limit)


def review_match(
    match_id: UUID,
    *,
    approve: bool,
    actor_id: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> IdentityMatch:
    resolver = IdentityResolver(_unit_of_work_factory(unit_of_work_factory))
    return resolver.review_match(match_id, approve=approve, actor_id=actor_id)


def import_orders(
    records: Sequence[IncomingOrder],
    *,
    actor_id: str | None = None,
    batch_size: int | None = None,
    on_progress: ProgressCallback | None = None,
    should_cancel: Callable[[], bool] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ImportResult:
    """Import storefront orders, keeping locally edited orders untouched."""

    deduplicator = ImportDeduplicator(_unit_of_work_factory(unit_of_work_factory))
    return deduplicator.import_orders(
        records,
        actor_id=actor_id,
        batch_size=batch_size or get_sync_config().import_batch_size,
        on_progress=on_progress,
        should_cancel=should_cancel,
    )


def link_shipments(
    shipments: Sequence[ShipmentEvent],
    *,
    actor_id: str | None = None,
    should_cancel: Callable[[], bool] | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ShipmentSyncResult:
    """Attach tracking details from shipping events to their orders."""

    reconciler = OrderReconciler(
        _unit_of_work_factory(unit_of_work_factory),
        candidate_limit=get_sync_config().shipment_page_size,
    )
    return reconciler.link_shipments(shipments, actor_id=actor_id, should_cancel=should_cancel)


def shipment_stats(*, unit_of_work_factory: UnitOfWorkFactory | None = None) -> ShipmentLinkStats:
    """Count stored orders with and without tracking details."""

    return OrderReconciler(_unit_of_work_factory(unit_of_work_factory)).sync_stats()


def score_customer(
    identity_id: UUID,
    *,
    email: str | None = None,
    sources: SignalSources | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> RiskScore | None:
    scorer = RiskScorer(
        _unit_of_work_factory(unit_of_work_factory),
        sources=sources if sources is not None else build_signal_sources(),
    )
    return scorer.calculate_risk_score(identity_id, email=email)
