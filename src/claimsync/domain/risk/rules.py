"""Fixed scoring rules for each behavioural signal.

Every factor scores 0-100 where higher means riskier. Thresholds within a
factor are tiered (only the highest matching tier applies); tiers of
different measures add up and the total is capped at 100. A missing signal
set scores 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from claimsync.domain.model import RiskLevel

if TYPE_CHECKING:
    from claimsync.domain.model import (
        DisputeStats,
        EngagementStats,
        OrderStats,
        ReviewStats,
        SupportStats,
    )

MAX_SCORE = 100

WEIGHTS: dict[str, float] = {
    "dispute": 0.35,
    "support": 0.25,
    "review": 0.20,
    "order_frequency": 0.10,
    "engagement": 0.10,
}

LEVEL_THRESHOLDS: tuple[tuple[int, RiskLevel], ...] = (
    (75, RiskLevel.CRITICAL),
    (50, RiskLevel.HIGH),
    (25, RiskLevel.MEDIUM),
)

LOW_CONFIDENCE_CAP = 40
MIN_CONTRIBUTING_SIGNALS = 2


@dataclass(frozen=True, slots=True)
class FactorScore:
    score: int
    details: dict[str, Any] = field(default_factory=dict)


def _tier(value: float, tiers: tuple[tuple[float, int], ...]) -> int:
    """Points of the first ``(threshold, points)`` pair that ``value`` exceeds."""

    for threshold, points in tiers:
        if value > threshold:
            return points
    return 0


def _capped(points: int) -> int:
    return min(MAX_SCORE, points)


def score_disputes(stats: DisputeStats | None) -> FactorScore:
    if stats is None:
        return FactorScore(0, {"available": False})
    rate = stats.dispute_rate
    points = _tier(rate, ((0.20, 40), (0.10, 25), (0.05, 15)))
    points += _tier(stats.recent_disputes, ((3, 30), (1, 15)))
    points += _tier(stats.total_disputes, ((10, 20), (5, 10)))
    return FactorScore(
        _capped(points),
        {
            "total_disputes": stats.total_disputes,
            "total_orders": stats.total_orders,
            "dispute_rate": round(rate, 4),
            "recent_disputes": stats.recent_disputes,
        },
    )


def score_support(stats: SupportStats | None) -> FactorScore:
    if stats is None:
        return FactorScore(0, {"available": False})
    points = _tier(stats.total_tickets, ((10, 20), (5, 10)))
    points += _tier(stats.open_tickets, ((3, 25), (1, 15)))
    points += _tier(stats.average_resolution_hours, ((72, 20), (48, 10)))
    satisfaction = stats.average_satisfaction
    if 0 < satisfaction < 3:
        points += 25
    elif 0 < satisfaction < 4:
        points += 10
    return FactorScore(
        _capped(points),
        {
            "total_tickets": stats.total_tickets,
            "open_tickets": stats.open_tickets,
            "average_resolution_hours": stats.average_resolution_hours,
            "average_satisfaction": stats.average_satisfaction,
        },
    )


def score_reviews(stats: ReviewStats | None) -> FactorScore:
    if stats is None:
        return FactorScore(0, {"available": False})
    points = 0
    rating = stats.average_rating
    if 0 < rating < 2.5:
        points += 40
    elif 0 < rating < 3.5:
        points += 25
    elif 0 < rating < 4.0:
        points += 10
    if 0 < stats.total_reviews < 3:
        points += 5
    return FactorScore(
        _capped(points),
        {"average_rating": rating, "total_reviews": stats.total_reviews},
    )


def score_order_frequency(stats: OrderStats | None) -> FactorScore:
    if stats is None:
        return FactorScore(0, {"available": False})
    points = 0
    if stats.total_orders < 3:
        points += 25
        frequency = "low"
    elif stats.total_orders < 10:
        points += 10
        frequency = "medium"
    else:
        frequency = "high"
    lifetime_value = stats.lifetime_value
    if lifetime_value < Decimal(100) and stats.total_orders > 0:
        points += 15
    elif lifetime_value < Decimal(500) and stats.total_orders > 0:
        points += 5
    return FactorScore(
        _capped(points),
        {
            "total_orders": stats.total_orders,
            "lifetime_value": str(lifetime_value),
            "frequency": frequency,
        },
    )


def score_engagement(stats: EngagementStats | None) -> FactorScore:
    if stats is None:
        return FactorScore(0, {"available": False})
    points = 0
    if stats.email_open_rate < 20:
        points += 25
    elif stats.email_open_rate < 40:
        points += 10
    if stats.email_click_rate < 5:
        points += 15
    elif stats.email_click_rate < 10:
        points += 5
    return FactorScore(
        _capped(points),
        {"email_open_rate": stats.email_open_rate, "email_click_rate": stats.email_click_rate},
    )


def overall_score(
    *,
    dispute: int,
    support: int,
    review: int,
    order_frequency: int,
    engagement: int,
) -> int:
    weighted = (
        dispute * WEIGHTS["dispute"]
        + support * WEIGHTS["support"]
        + review * WEIGHTS["review"]
        + order_frequency * WEIGHTS["order_frequency"]
        + engagement * WEIGHTS["engagement"]
    )
    return round(weighted)


def risk_level(score: int) -> RiskLevel:
    for threshold, level in LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return RiskLevel.LOW


def confidence_score(
    *,
    disputes: DisputeStats | None,
    support: SupportStats | None,
    reviews: ReviewStats | None,
    orders: OrderStats | None,
    engagement: EngagementStats | None,
) -> int:
    """How much underlying data the score rests on, 0-100."""

    contributions = (
        (disputes is not None and disputes.total_orders > 0, 30),
        (support is not None and support.total_tickets > 0, 25),
        (reviews is not None and reviews.total_reviews > 0, 20),
        (orders is not None and orders.total_orders > 0, 15),
        (engagement is not None and engagement.email_open_rate > 0, 10),
    )
    confidence = sum(points for present, points in contributions if present)
    contributing = sum(1 for present, _ in contributions if present)
    if contributing < MIN_CONTRIBUTING_SIGNALS:
        confidence = min(confidence, LOW_CONFIDENCE_CAP)
    return min(MAX_SCORE, confidence)


def recommendations(
    *,
    dispute: int,
    support: int,
    review: int,
    order_frequency: int,
    engagement: int,
    level: RiskLevel,
    recent_disputes: int,
    open_tickets: int,
) -> list[str]:
    texts: list[str] = []
    if dispute > 30:
        texts.append("High dispute rate - review the case carefully and gather strong evidence")
        if recent_disputes > 2:
            texts.append("Multiple recent disputes - consider flagging for manual review")
    if support > 30:
        texts.append("High support activity - review ticket history for context")
        if open_tickets > 2:
            texts.append("Multiple open tickets - customer may be experiencing ongoing issues")
    if review > 25:
        texts.append("Low review ratings - customer satisfaction concerns noted")
    if order_frequency > 20:
        texts.append("New or infrequent customer - exercise caution with claim approval")
    if engagement > 20:
        texts.append("Low email engagement - customer may be disengaged")

    if level == RiskLevel.CRITICAL:
        texts.append("CRITICAL RISK - require manager approval before proceeding")
    elif level == RiskLevel.HIGH:
        texts.append("HIGH RISK - request additional documentation and verification")
    elif level == RiskLevel.LOW:
        texts.append("LOW RISK - standard processing recommended")
    return texts
