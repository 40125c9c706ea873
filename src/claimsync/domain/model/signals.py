"""Pre-aggregated behavioural statistics consumed by risk scoring.

Rates are percentages (0-100), ratings are on a 0-5 scale, money is in
currency units. A signal set that is ``None`` had no data at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True, slots=True)
class DisputeStats:
    total_disputes: int = 0
    total_orders: int = 0
    recent_disputes: int = 0

    @property
    def dispute_rate(self) -> float:
        if self.total_orders <= 0:
            return 0.0
        return self.total_disputes / self.total_orders


@dataclass(frozen=True, slots=True)
class SupportStats:
    total_tickets: int = 0
    open_tickets: int = 0
    resolved_tickets: int = 0
    average_resolution_hours: float = 0.0
    average_satisfaction: float = 0.0


@dataclass(frozen=True, slots=True)
class ReviewStats:
    average_rating: float = 0.0
    total_reviews: int = 0


@dataclass(frozen=True, slots=True)
class EngagementStats:
    email_open_rate: float = 0.0
    email_click_rate: float = 0.0


@dataclass(frozen=True, slots=True)
class OrderStats:
    total_orders: int = 0
    lifetime_value: Decimal = Decimal("0.00")


@dataclass(frozen=True, slots=True)
class MarketingProfile:
    """Everything the email-marketing platform knows about one customer."""

    engagement: EngagementStats | None = None
    reviews: ReviewStats | None = None
    orders: OrderStats | None = None
