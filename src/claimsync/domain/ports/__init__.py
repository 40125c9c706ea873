"""Ports (protocols) the domain services depend on."""

from __future__ import annotations

from claimsync.domain.ports.persistence import (
    CustomerIdentityRepository,
    IdentityMatchRepository,
    OrderChangeRepository,
    OrderRepository,
    Repository,
    RiskScoreRepository,
)
from claimsync.domain.ports.signals import (
    DisputeStatsSource,
    MarketingProfileSource,
    SignalSources,
    SupportStatsSource,
)
from claimsync.domain.ports.unit_of_work import (
    ClaimsRepositories,
    ClaimsUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
    UnitOfWorkFactory,
)

__all__ = [
    "ClaimsRepositories",
    "ClaimsUnitOfWork",
    "CustomerIdentityRepository",
    "DisputeStatsSource",
    "IdentityMatchRepository",
    "MarketingProfileSource",
    "OrderChangeRepository",
    "OrderRepository",
    "Repository",
    "RepositoryCollection",
    "RiskScoreRepository",
    "SignalSources",
    "SupportStatsSource",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
