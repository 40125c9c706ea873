"""In-memory repositories and unit of work for domain service tests."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, Self

from claimsync.domain.model import ChangeType, MatchStatus
from claimsync.domain.ports import ClaimsRepositories

if TYPE_CHECKING:
    from types import TracebackType
    from uuid import UUID

    from claimsync.domain.model import (
        CustomerIdentity,
        IdentityMatch,
        Order,
        OrderChangeRecord,
        Provider,
        RiskScore,
    )


class FakeCustomerIdentityRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, CustomerIdentity] = {}
        self.hide_from_lookups: set[UUID] = set()

    def add(self, entity: CustomerIdentity) -> None:
        self.items[entity.id] = entity

    def get(self, identity_id: UUID) -> CustomerIdentity | None:
        return self.items.get(identity_id)

    def find_by_email(self, email: str) -> list[CustomerIdentity]:
        return [item for item in self._visible() if item.email == email]

    def find_by_phone(self, phone: str) -> list[CustomerIdentity]:
        return [item for item in self._visible() if item.phone == phone]

    def recent_active(self, *, limit: int) -> list[CustomerIdentity]:
        active = [item for item in self.items.values() if item.is_active]
        active.sort(key=lambda item: item.last_seen_at, reverse=True)
        return active[:limit]

    def add_if_absent(self, identity: CustomerIdentity) -> bool:
        for item in self.items.values():
            if not item.is_active:
                continue
            if identity.email and item.email == identity.email:
                return False
            if identity.phone and item.phone == identity.phone:
                return False
        self.add(identity)
        return True

    def _visible(self) -> list[CustomerIdentity]:
        visible = [item for item in self.items.values() if item.id not in self.hide_from_lookups]
        return sorted(visible, key=lambda item: item.first_seen_at)


class FakeIdentityMatchRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, IdentityMatch] = {}

    def add(self, entity: IdentityMatch) -> None:
        self.items[entity.id] = entity

    def get(self, match_id: UUID) -> IdentityMatch | None:
        return self.items.get(match_id)

    def list_pending(self, *, limit: int) -> list[IdentityMatch]:
        pending = [item for item in self.items.values() if item.status == MatchStatus.PENDING]
        pending.sort(key=lambda item: item.created_at, reverse=True)
        return pending[:limit]

    def list_for_identity(self, identity_id: UUID) -> list[IdentityMatch]:
        return [
            item
            for item in self.items.values()
            if identity_id in (item.identity_id, item.candidate_id)
        ]


class FakeOrderRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, Order] = {}

    def add(self, entity: Order) -> None:
        self.items[entity.id] = entity

    def get(self, order_id: UUID) -> Order | None:
        return self.items.get(order_id)

    def get_by_source_id(self, source: Provider, source_order_id: str) -> Order | None:
        for item in self.items.values():
            if item.source == source and item.source_order_id == source_order_id:
                return item
        return None

    def get_by_order_number(self, order_number: str) -> Order | None:
        for item in self.items.values():
            if item.order_number == order_number:
                return item
        return None

    def recent_by_email(self, email: str, *, source: Provider, limit: int) -> list[Order]:
        found = [
            item
            for item in self.items.values()
            if item.source == source and (item.customer_email or "").lower() == email.lower()
        ]
        return found[:limit]

    def list_recent(self, *, limit: int) -> list[Order]:
        return list(self.items.values())[:limit]

    def shipping_counts(self) -> Counter[tuple[str | None, str, bool]]:
        return Counter(
            (item.carrier_code, item.status, bool(item.tracking_number))
            for item in self.items.values()
        )


class FakeOrderChangeRepository:
    def __init__(self) -> None:
        self.items: list[OrderChangeRecord] = []

    def add(self, entity: OrderChangeRecord) -> None:
        self.items.append(entity)

    def list_for_order(self, order_id: UUID) -> list[OrderChangeRecord]:
        return [item for item in self.items if item.order_id == order_id]

    def latest_manual_edit(self, order_id: UUID) -> OrderChangeRecord | None:
        edits = [
            item
            for item in self.list_for_order(order_id)
            if item.change_type == ChangeType.MANUAL_EDIT
        ]
        return edits[-1] if edits else None


class FakeRiskScoreRepository:
    def __init__(self) -> None:
        self.items: dict[UUID, RiskScore] = {}

    def get(self, identity_id: UUID) -> RiskScore | None:
        return self.items.get(identity_id)

    def upsert(self, score: RiskScore) -> RiskScore:
        existing = self.items.get(score.identity_id)
        if existing is None:
            self.items[score.identity_id] = score
            return score
        existing.replace_with(score)
        return existing


@dataclass
class FakeUnitOfWork:
    repositories: ClaimsRepositories
    commits: int = 0

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        return False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        return None


@dataclass
class FakeUnitOfWorkFactory:
    """Hands out units of work that share one set of in-memory repositories."""

    identities: FakeCustomerIdentityRepository = field(
        default_factory=FakeCustomerIdentityRepository
    )
    identity_matches: FakeIdentityMatchRepository = field(
        default_factory=FakeIdentityMatchRepository
    )
    orders: FakeOrderRepository = field(default_factory=FakeOrderRepository)
    order_changes: FakeOrderChangeRepository = field(default_factory=FakeOrderChangeRepository)
    risk_scores: FakeRiskScoreRepository = field(default_factory=FakeRiskScoreRepository)
    created: list[FakeUnitOfWork] = field(default_factory=list["FakeUnitOfWork"])

    def __call__(self) -> FakeUnitOfWork:
        uow = FakeUnitOfWork(
            repositories=ClaimsRepositories(
                identities=self.identities,
                identity_matches=self.identity_matches,
                orders=self.orders,
                order_changes=self.order_changes,
                risk_scores=self.risk_scores,
            )
        )
        self.created.append(uow)
        return uow

    @property
    def commits(self) -> int:
        return sum(uow.commits for uow in self.created)
