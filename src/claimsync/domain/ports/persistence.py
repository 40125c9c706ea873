"""Ports for persisting domain aggregates."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from claimsync.domain.model import (
    CustomerIdentity,
    IdentityMatch,
    Order,
    OrderChangeRecord,
)

if TYPE_CHECKING:
    from collections import Counter
    from uuid import UUID

    from claimsync.domain.model import Email, Phone, Provider, RiskScore


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class CustomerIdentityRepository(Repository[CustomerIdentity], Protocol):
    """Persistence contract for customer identities (tombstones included)."""

    def get(self, identity_id: UUID) -> CustomerIdentity | None: ...

    def find_by_email(self, email: Email) -> list[CustomerIdentity]: ...

    def find_by_phone(self, phone: Phone) -> list[CustomerIdentity]: ...

    def recent_active(self, *, limit: int) -> list[CustomerIdentity]: ...

    def add_if_absent(self, identity: CustomerIdentity) -> bool:
        """Insert unless an active identity already owns the email or phone."""
        ...


@runtime_checkable
class IdentityMatchRepository(Repository[IdentityMatch], Protocol):
    def get(self, match_id: UUID) -> IdentityMatch | None: ...

    def list_pending(self, *, limit: int) -> list[IdentityMatch]: ...

    def list_for_identity(self, identity_id: UUID) -> list[IdentityMatch]: ...


@runtime_checkable
class OrderRepository(Repository[Order], Protocol):
    def get(self, order_id: UUID) -> Order | None: ...

    def get_by_source_id(self, source: Provider, source_order_id: str) -> Order | None: ...

    def get_by_order_number(self, order_number: str) -> Order | None: ...

    def recent_by_email(self, email: str, *, source: Provider, limit: int) -> list[Order]: ...

    def list_recent(self, *, limit: int) -> list[Order]: ...

    def shipping_counts(self) -> Counter[tuple[str | None, str, bool]]:
        """Order counts keyed by ``(carrier_code, status, has_tracking)``."""
        ...


@runtime_checkable
class OrderChangeRepository(Repository[OrderChangeRecord], Protocol):
    def list_for_order(self, order_id: UUID) -> list[OrderChangeRecord]: ...

    def latest_manual_edit(self, order_id: UUID) -> OrderChangeRecord | None: ...


@runtime_checkable
class RiskScoreRepository(Protocol):
    """Risk snapshots keyed by identity id; one row per identity."""

    def get(self, identity_id: UUID) -> RiskScore | None: ...

    def upsert(self, score: RiskScore) -> RiskScore: ...
