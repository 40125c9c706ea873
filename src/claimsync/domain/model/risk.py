"""Risk score snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any

from .entity import utcnow

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from .enums import RiskLevel


@dataclass(eq=False, kw_only=True)
class RiskScore:
    """Latest risk snapshot for one identity; replaced on every recalculation."""

    identity_id: UUID
    overall_score: int
    level: RiskLevel
    dispute_score: int
    support_score: int
    review_score: int
    order_frequency_score: int
    engagement_score: int
    confidence: int
    breakdown: dict[str, Any] = field(default_factory=dict)
    recommendations: list[str] = field(default_factory=list)
    unavailable_signals: list[str] = field(default_factory=list)
    calculated_at: datetime = field(default_factory=utcnow)

    def replace_with(self, other: RiskScore) -> None:
        """Overwrite this snapshot in place with ``other``'s values."""

        if other.identity_id != self.identity_id:
            raise ValueError("risk snapshots can only be replaced for the same identity")
        for item in fields(self):
            setattr(self, item.name, getattr(other, item.name))
