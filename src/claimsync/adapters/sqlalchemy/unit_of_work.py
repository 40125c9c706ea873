"""SQLAlchemy-backed unit of work for the claims repositories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from claimsync.adapters.sqlalchemy.mappings import start_mappers
from claimsync.adapters.sqlalchemy.migrations import upgrade_head
from claimsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyCustomerIdentityRepository,
    SqlAlchemyIdentityMatchRepository,
    SqlAlchemyOrderChangeRepository,
    SqlAlchemyOrderRepository,
    SqlAlchemyRiskScoreRepository,
)
from claimsync.config import get_database_config
from claimsync.domain.ports.unit_of_work import ClaimsRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Connection, Engine


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call claimsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def create_database_engine(database_uri: str, *, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections get real SAVEPOINT support.

    pysqlite defers ``BEGIN`` on its own, which breaks nested transactions.
    The driver's transaction handling is switched off and SQLAlchemy emits
    ``BEGIN`` itself.
    """

    engine = create_engine(database_uri, echo=echo, future=True)
    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_transactions(dbapi_connection: Any, _record: Any) -> None:
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(connection: Connection) -> None:
            connection.exec_driver_sql("BEGIN")

    return engine


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, mappers and session factory, then migrate."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        config = get_database_config()
        engine = create_database_engine(database_uri or config.uri, echo=config.echo)
    start_mappers()
    upgrade_head(engine=engine)
    _STATE.engine = engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyUnitOfWork(BaseSqlAlchemyUnitOfWork[ClaimsRepositories]):
    """Unit of work over identities, orders, change records and risk scores."""

    def _build_repositories(self, session: Session) -> ClaimsRepositories:
        return ClaimsRepositories(
            identities=SqlAlchemyCustomerIdentityRepository(session),
            identity_matches=SqlAlchemyIdentityMatchRepository(session),
            orders=SqlAlchemyOrderRepository(session),
            order_changes=SqlAlchemyOrderChangeRepository(session),
            risk_scores=SqlAlchemyRiskScoreRepository(session),
        )


if TYPE_CHECKING:
    from claimsync.domain.ports.unit_of_work import ClaimsUnitOfWork

    _uow_check: ClaimsUnitOfWork = SqlAlchemyUnitOfWork()
