"""SQLAlchemy adapter package for claimsync."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyCustomerIdentityRepository,
    SqlAlchemyIdentityMatchRepository,
    SqlAlchemyOrderChangeRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyRiskScoreRepository,
)
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    create_database_engine,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCustomerIdentityRepository",
    "SqlAlchemyIdentityMatchRepository",
    "SqlAlchemyOrderChangeRepository",
    "SqlAlchemyOrderRepository",
    "SqlAlchemyRiskScoreRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_database_engine",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
