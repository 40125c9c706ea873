"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, cast

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from claimsync.adapters.sqlalchemy.mappings import (
    customer_identity_table,
    identity_match_table,
    order_change_table,
    order_table,
)
from claimsync.domain.model import (
    ChangeType,
    CustomerIdentity,
    IdentityMatch,
    MatchStatus,
    Order,
    OrderChangeRecord,
    RiskScore,
)

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.orm import Session

    from claimsync.domain.model import Email, Phone, Provider

log = logging.getLogger(__name__)


class SqlAlchemyCustomerIdentityRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: CustomerIdentity) -> None:
        self.session.add(entity)

    def get(self, identity_id: uuid.UUID) -> CustomerIdentity | None:
        return self.session.get(CustomerIdentity, identity_id)

    def find_by_email(self, email: Email) -> list[CustomerIdentity]:
        stmt = (
            select(CustomerIdentity)
            .where(customer_identity_table.c.email == email)
            .order_by(customer_identity_table.c.first_seen_at)
        )
        return list(self.session.execute(stmt).scalars())

    def find_by_phone(self, phone: Phone) -> list[CustomerIdentity]:
        stmt = (
            select(CustomerIdentity)
            .where(customer_identity_table.c.phone == phone)
            .order_by(customer_identity_table.c.first_seen_at)
        )
        return list(self.session.execute(stmt).scalars())

    def recent_active(self, *, limit: int) -> list[CustomerIdentity]:
        stmt = (
            select(CustomerIdentity)
            .where(customer_identity_table.c.master_identity_id.is_(None))
            .order_by(customer_identity_table.c.last_seen_at.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def add_if_absent(self, identity: CustomerIdentity) -> bool:
        """Insert inside a savepoint; a unique-index violation leaves the session usable."""

        try:
            with self.session.begin_nested():
                self.session.add(identity)
        except IntegrityError:
            log.info(
                "Active identity with email %s or phone %s already exists",
                identity.email,
                identity.phone,
            )
            return False
        return True


class SqlAlchemyIdentityMatchRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: IdentityMatch) -> None:
        self.session.add(entity)

    def get(self, match_id: uuid.UUID) -> IdentityMatch | None:
        return self.session.get(IdentityMatch, match_id)

    def list_pending(self, *, limit: int) -> list[IdentityMatch]:
        stmt = (
            select(IdentityMatch)
            .where(identity_match_table.c.status == MatchStatus.PENDING)
            .order_by(identity_match_table.c.created_at.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def list_for_identity(self, identity_id: uuid.UUID) -> list[IdentityMatch]:
        stmt = (
            select(IdentityMatch)
            .where(
                (identity_match_table.c.identity_id == identity_id)
                | (identity_match_table.c.candidate_id == identity_id)
            )
            .order_by(identity_match_table.c.created_at)
        )
        return list(self.session.execute(stmt).scalars())


class SqlAlchemyOrderRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Order) -> None:
        # change records reference the order row, so it has to exist first
        self.session.add(entity)
        self.session.flush()

    def get(self, order_id: uuid.UUID) -> Order | None:
        return self.session.get(Order, order_id)

    def get_by_source_id(self, source: Provider, source_order_id: str) -> Order | None:
        stmt = (
            select(Order)
            .where(order_table.c.source == source)
            .where(order_table.c.source_order_id == source_order_id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def get_by_order_number(self, order_number: str) -> Order | None:
        stmt = (
            select(Order)
            .where(order_table.c.order_number == order_number)
            .order_by(order_table.c.created_at)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def recent_by_email(self, email: str, *, source: Provider, limit: int) -> list[Order]:
        stmt = (
            select(Order)
            .where(func.lower(order_table.c.customer_email) == email.lower())
            .where(order_table.c.source == source)
            .order_by(order_table.c.order_date.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def list_recent(self, *, limit: int) -> list[Order]:
        stmt = select(Order).order_by(order_table.c.order_date.desc()).limit(limit)
        return list(self.session.execute(stmt).scalars())

    def shipping_counts(self) -> Counter[tuple[str | None, str, bool]]:
        has_tracking = (func.coalesce(order_table.c.tracking_number, "") != "").label(
            "has_tracking"
        )
        stmt = select(
            order_table.c.carrier_code,
            order_table.c.status,
            has_tracking,
            func.count(),
        ).group_by(order_table.c.carrier_code, order_table.c.status, has_tracking)
        counts: Counter[tuple[str | None, str, bool]] = Counter()
        for carrier_code, status, tracked, total in self.session.execute(stmt):
            counts[carrier_code, status, bool(tracked)] += total
        return counts


class SqlAlchemyOrderChangeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: OrderChangeRecord) -> None:
        self.session.add(entity)

    def list_for_order(self, order_id: uuid.UUID) -> list[OrderChangeRecord]:
        stmt = (
            select(OrderChangeRecord)
            .where(order_change_table.c.order_id == order_id)
            .order_by(order_change_table.c.created_at)
        )
        return list(self.session.execute(stmt).scalars())

    def latest_manual_edit(self, order_id: uuid.UUID) -> OrderChangeRecord | None:
        stmt = (
            select(OrderChangeRecord)
            .where(order_change_table.c.order_id == order_id)
            .where(order_change_table.c.change_type == ChangeType.MANUAL_EDIT)
            .order_by(order_change_table.c.created_at.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyRiskScoreRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, identity_id: uuid.UUID) -> RiskScore | None:
        return self.session.get(RiskScore, identity_id)

    def upsert(self, score: RiskScore) -> RiskScore:
        existing = self.get(score.identity_id)
        if existing is None:
            self.session.add(score)
            return score
        existing.replace_with(score)
        return existing


if TYPE_CHECKING:
    from claimsync.domain.ports.persistence import (
        CustomerIdentityRepository,
        IdentityMatchRepository,
        OrderChangeRepository,
        OrderRepository,
        RiskScoreRepository,
    )

    _session_stub = cast("Session", object())
    _identity_repo: CustomerIdentityRepository = SqlAlchemyCustomerIdentityRepository(_session_stub)
    _match_repo: IdentityMatchRepository = SqlAlchemyIdentityMatchRepository(_session_stub)
    _order_repo: OrderRepository = SqlAlchemyOrderRepository(_session_stub)
    _change_repo: OrderChangeRepository = SqlAlchemyOrderChangeRepository(_session_stub)
    _risk_repo: RiskScoreRepository = SqlAlchemyRiskScoreRepository(_session_stub)
