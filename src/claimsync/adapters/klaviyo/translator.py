"""Translate Klaviyo profiles into marketing statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

from claimsync.domain.model import (
    EngagementStats,
    MarketingProfile,
    OrderStats,
    ReviewStats,
    to_money,
)

if TYPE_CHECKING:
    from .schema import KlaviyoProfile


def _percent(fraction: float) -> float:
    return round(fraction * 100, 2)


def translate_profile(profile: KlaviyoProfile) -> MarketingProfile:
    properties = profile.attributes.properties

    engagement: EngagementStats | None = None
    if properties.email_open_rate is not None or properties.email_click_rate is not None:
        engagement = EngagementStats(
            email_open_rate=_percent(properties.email_open_rate or 0.0),
            email_click_rate=_percent(properties.email_click_rate or 0.0),
        )

    reviews: ReviewStats | None = None
    if properties.total_reviews:
        reviews = ReviewStats(
            average_rating=round(properties.average_review_rating or 0.0, 2),
            total_reviews=properties.total_reviews,
        )

    orders: OrderStats | None = None
    if properties.total_orders is not None:
        orders = OrderStats(
            total_orders=properties.total_orders,
            lifetime_value=to_money(properties.lifetime_value),
        )

    return MarketingProfile(engagement=engagement, reviews=reviews, orders=orders)
