"""Compose behavioural signals into a persisted risk snapshot."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from logging import getLogger
from statistics import fmean
from typing import TYPE_CHECKING

from claimsync.domain.identity.resolver import resolve_master
from claimsync.domain.model import (
    DisputeStats,
    OrderStats,
    RiskScore,
    Signal,
    SignalUnavailableError,
    SupportStats,
    normalize_email,
    utcnow,
)
from claimsync.domain.ports import SignalSources

from . import rules

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from uuid import UUID

    from claimsync.domain.model import (
        CustomerIdentity,
        EngagementStats,
        MarketingProfile,
        ReviewStats,
    )
    from claimsync.domain.ports import UnitOfWorkFactory

log = getLogger(__name__)

CLOSED_TICKET_STATUSES = frozenset({"resolved", "closed"})
RECENT_DISPUTE_WINDOW = timedelta(days=90)


@dataclass(slots=True)
class GatheredSignals:
    disputes: DisputeStats | None = None
    support: SupportStats | None = None
    engagement: EngagementStats | None = None
    reviews: ReviewStats | None = None
    orders: OrderStats | None = None
    local_orders: bool = False
    unavailable: list[Signal] = field(default_factory=list)


def identity_dispute_stats(
    identity: CustomerIdentity,
    *,
    at: datetime | None = None,
) -> DisputeStats:
    """Dispute statistics from the identity's own counters and history.

    Disputes opened within ``RECENT_DISPUTE_WINDOW`` before ``at`` count as
    recent.
    """

    since = (at or utcnow()) - RECENT_DISPUTE_WINDOW
    return DisputeStats(
        total_disputes=identity.dispute_count,
        recent_disputes=identity.disputes_since(since),
        total_orders=identity.total_orders,
    )


def identity_order_stats(identity: CustomerIdentity) -> OrderStats:
    return OrderStats(total_orders=identity.total_orders, lifetime_value=identity.lifetime_value)


def aggregate_support_stats(tickets: Iterable[Mapping[str, object]]) -> SupportStats | None:
    """Summarise support tickets into ``SupportStats``.

    Each ticket mapping may carry ``status``, ``resolution_hours`` and
    ``satisfaction``. Returns ``None`` when there are no tickets.
    """

    ticket_list = list(tickets)
    if not ticket_list:
        return None
    open_count = 0
    resolution_hours: list[float] = []
    ratings: list[float] = []
    for ticket in ticket_list:
        status = str(ticket.get("status") or "").casefold()
        if status not in CLOSED_TICKET_STATUSES:
            open_count += 1
        hours = ticket.get("resolution_hours")
        if isinstance(hours, int | float):
            resolution_hours.append(float(hours))
        rating = ticket.get("satisfaction")
        if isinstance(rating, int | float) and rating > 0:
            ratings.append(float(rating))
    return SupportStats(
        total_tickets=len(ticket_list),
        open_tickets=open_count,
        resolved_tickets=len(ticket_list) - open_count,
        average_resolution_hours=round(fmean(resolution_hours), 1) if resolution_hours else 0.0,
        average_satisfaction=round(fmean(ratings), 1) if ratings else 0.0,
    )


def score_signals(identity_id: UUID, signals: GatheredSignals, *, at: datetime) -> RiskScore:
    """Apply the scoring rules to already gathered signals."""

    dispute = rules.score_disputes(signals.disputes)
    support = rules.score_support(signals.support)
    review = rules.score_reviews(signals.reviews)
    order_frequency = rules.score_order_frequency(signals.orders)
    engagement = rules.score_engagement(signals.engagement)

    overall = rules.overall_score(
        dispute=dispute.score,
        support=support.score,
        review=review.score,
        order_frequency=order_frequency.score,
        engagement=engagement.score,
    )
    level = rules.risk_level(overall)
    confidence = rules.confidence_score(
        disputes=signals.disputes,
        support=signals.support,
        reviews=signals.reviews,
        orders=None if signals.local_orders else signals.orders,
        engagement=signals.engagement,
    )
    advice = rules.recommendations(
        dispute=dispute.score,
        support=support.score,
        review=review.score,
        order_frequency=order_frequency.score,
        engagement=engagement.score,
        level=level,
        recent_disputes=signals.disputes.recent_disputes if signals.disputes else 0,
        open_tickets=signals.support.open_tickets if signals.support else 0,
    )
    breakdown = {
        "dispute": {"score": dispute.score, **dispute.details},
        "support": {"score": support.score, **support.details},
        "review": {"score": review.score, **review.details},
        "order_frequency": {"score": order_frequency.score, **order_frequency.details},
        "engagement": {"score": engagement.score, **engagement.details},
    }
    return RiskScore(
        identity_id=identity_id,
        overall_score=overall,
        level=level,
        dispute_score=dispute.score,
        support_score=support.score,
        review_score=review.score,
        order_frequency_score=order_frequency.score,
        engagement_score=engagement.score,
        confidence=confidence,
        breakdown=breakdown,
        recommendations=advice,
        unavailable_signals=[str(signal) for signal in signals.unavailable],
        calculated_at=at,
    )


@dataclass(slots=True)
class RiskScorer:
    """Score customers from dispute, support and marketing signals."""

    unit_of_work_factory: UnitOfWorkFactory
    sources: SignalSources = field(default_factory=SignalSources)
    clock: Callable[[], datetime] = utcnow

    def calculate_risk_score(
        self,
        identity_id: UUID,
        *,
        email: str | None = None,
    ) -> RiskScore | None:
        """Recalculate and store the risk snapshot of ``identity_id``.

        Merged identities are scored as their active master. Returns ``None``
        for unknown identities.
        """

        with self.unit_of_work_factory() as uow:
            identities = uow.repositories.identities
            identity = identities.get(identity_id)
            if identity is None:
                log.info("Cannot score unknown identity %s", identity_id)
                return None
            identity = resolve_master(identities, identity)
            contact_email = normalize_email(email) or identity.email

            now = self.clock()
            signals = self._gather(identity, contact_email, at=now)
            score = score_signals(identity.id, signals, at=now)
            stored = uow.repositories.risk_scores.upsert(score)
            uow.commit()

        log.info(
            "Risk score for identity %s: %s (%s, confidence %s)",
            identity.id,
            stored.overall_score,
            stored.level,
            stored.confidence,
        )
        return stored

    def get_cached_risk_score(self, identity_id: UUID) -> RiskScore | None:
        with self.unit_of_work_factory() as uow:
            identities = uow.repositories.identities
            identity = identities.get(identity_id)
            if identity is not None:
                identity_id = resolve_master(identities, identity).id
            return uow.repositories.risk_scores.get(identity_id)

    def _gather(
        self,
        identity: CustomerIdentity,
        email: str | None,
        *,
        at: datetime,
    ) -> GatheredSignals:
        signals = GatheredSignals()

        try:
            if self.sources.disputes is not None:
                signals.disputes = self.sources.disputes(identity)
            else:
                signals.disputes = identity_dispute_stats(identity, at=at)
        except SignalUnavailableError as exc:
            _degrade(signals, Signal.DISPUTES, exc)

        if email and self.sources.support is not None:
            try:
                signals.support = self.sources.support(email)
            except SignalUnavailableError as exc:
                _degrade(signals, Signal.SUPPORT, exc)

        profile: MarketingProfile | None = None
        if email and self.sources.marketing is not None:
            try:
                profile = self.sources.marketing(email)
            except SignalUnavailableError as exc:
                _degrade(signals, Signal.MARKETING, exc)
        if profile is not None:
            signals.engagement = profile.engagement
            signals.reviews = profile.reviews
            signals.orders = profile.orders
        if signals.orders is None and Signal.MARKETING not in signals.unavailable:
            signals.orders = identity_order_stats(identity)
            signals.local_orders = True
        return signals


def _degrade(signals: GatheredSignals, signal: Signal, exc: SignalUnavailableError) -> None:
    log.warning("Scoring without %s signal: %s", signal, exc)
    signals.unavailable.append(signal)
