"""Ports for behavioural statistics consumed by risk scoring.

Sources return ``None`` when the upstream system has no data for the
customer and raise ``SignalUnavailableError`` when it could not be asked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from claimsync.domain.model import (
        CustomerIdentity,
        DisputeStats,
        MarketingProfile,
        SupportStats,
    )


@runtime_checkable
class DisputeStatsSource(Protocol):
    def __call__(self, identity: CustomerIdentity) -> DisputeStats | None: ...


@runtime_checkable
class SupportStatsSource(Protocol):
    def __call__(self, email: str) -> SupportStats | None: ...


@runtime_checkable
class MarketingProfileSource(Protocol):
    def __call__(self, email: str) -> MarketingProfile | None: ...


@dataclass(slots=True)
class SignalSources:
    """Signal sources wired in by the application; missing ones contribute nothing."""

    disputes: DisputeStatsSource | None = None
    support: SupportStatsSource | None = None
    marketing: MarketingProfileSource | None = None
