"""Customer risk scoring."""

from __future__ import annotations

from .rules import FactorScore, risk_level
from .scorer import (
    GatheredSignals,
    RiskScorer,
    aggregate_support_stats,
    identity_dispute_stats,
    identity_order_stats,
    score_signals,
)

__all__ = [
    "FactorScore",
    "GatheredSignals",
    "RiskScorer",
    "aggregate_support_stats",
    "identity_dispute_stats",
    "identity_order_stats",
    "risk_level",
    "score_signals",
]
