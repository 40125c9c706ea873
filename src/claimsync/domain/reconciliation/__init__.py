"""Shipment-to-order reconciliation."""

from __future__ import annotations

from .cascade import DEFAULT_DATE_WINDOW, STRATEGIES, OrderMatch, find_matching_order
from .linking import (
    DEFAULT_CANDIDATE_LIMIT,
    OrderReconciler,
    ShipmentLinkStats,
    ShipmentSyncResult,
)

__all__ = [
    "DEFAULT_CANDIDATE_LIMIT",
    "DEFAULT_DATE_WINDOW",
    "STRATEGIES",
    "OrderMatch",
    "OrderReconciler",
    "ShipmentLinkStats",
    "ShipmentSyncResult",
    "find_matching_order",
]
