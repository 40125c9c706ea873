"""Find the local order an imported record corresponds to."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from claimsync.domain.model import normalize_email

if TYPE_CHECKING:
    from claimsync.domain.model import IncomingOrder, Order
    from claimsync.domain.ports import OrderRepository

DEFAULT_EMAIL_CANDIDATE_LIMIT = 10
DEFAULT_MATCH_WINDOW = timedelta(hours=1)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def find_existing_order(
    incoming: IncomingOrder,
    orders: OrderRepository,
    *,
    email_candidate_limit: int = DEFAULT_EMAIL_CANDIDATE_LIMIT,
    match_window: timedelta = DEFAULT_MATCH_WINDOW,
) -> Order | None:
    """Source id, then order number, then email plus a creation-time window."""

    existing = orders.get_by_source_id(incoming.source, incoming.source_order_id)
    if existing is not None:
        return existing

    existing = orders.get_by_order_number(incoming.order_number)
    if existing is not None:
        return existing

    email = normalize_email(incoming.customer_email)
    if email is None:
        return None
    created_at = _as_utc(incoming.created_at)
    for candidate in orders.recent_by_email(
        email,
        source=incoming.source,
        limit=email_candidate_limit,
    ):
        if candidate.order_date is None:
            continue
        if abs(_as_utc(candidate.order_date) - created_at) < match_window:
            return candidate
    return None
