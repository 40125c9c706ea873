"""Customer identities, their address history and candidate match edges."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from .entity import Entity, utcnow
from .enums import MatchStatus, MatchType
from .errors import InvalidMergeError, MatchReviewError
from .primitives import normalize_address

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from uuid import UUID

    from .primitives import Address, Email, Phone

UNKNOWN_NAME = "Unknown"
AUTO_MERGE_CONFIDENCE = 90


@dataclass(eq=False, kw_only=True)
class AddressRecord(Entity):
    """One entry of an identity's ordered address history."""

    address: Address
    position: int = 0
    recorded_at: datetime = field(default_factory=utcnow)
    identity_id: UUID | None = None


@dataclass(eq=False, kw_only=True)
class DisputeRecord(Entity):
    """When a dispute was opened against an identity."""

    opened_at: datetime = field(default_factory=utcnow)
    identity_id: UUID | None = None


@dataclass(eq=False, kw_only=True)
class CustomerIdentity(Entity):
    """Canonical customer record.

    A merged identity is kept as a tombstone pointing at its master through
    ``master_identity_id`` and no longer takes part in matching.
    """

    name: str = UNKNOWN_NAME
    email: Email | None = None
    phone: Phone | None = None
    current_address: Address | None = None
    first_seen_at: datetime = field(default_factory=utcnow)
    last_seen_at: datetime = field(default_factory=utcnow)
    total_orders: int = 0
    lifetime_value: Decimal = field(default_factory=lambda: Decimal("0.00"))
    dispute_count: int = 0
    master_identity_id: UUID | None = None
    merged_at: datetime | None = None
    merged_by: str | None = None
    created_by: str | None = None

    _addresses: list[AddressRecord] = field(default_factory=list, init=False, repr=False)
    _disputes: list[DisputeRecord] = field(default_factory=list, init=False, repr=False)

    @property
    def is_active(self) -> bool:
        return self.master_identity_id is None

    @property
    def address_history(self) -> list[Address]:
        return [record.address for record in sorted(self._addresses, key=lambda r: r.position)]

    @property
    def address_records(self) -> tuple[AddressRecord, ...]:
        return tuple(sorted(self._addresses, key=lambda r: r.position))

    @property
    def dispute_records(self) -> tuple[DisputeRecord, ...]:
        return tuple(sorted(self._disputes, key=lambda r: r.opened_at))

    def knows_address(self, address: Address) -> bool:
        wanted = address.casefold()
        return any(record.address.casefold() == wanted for record in self._addresses)

    def record_address(self, address: str | None, *, at: datetime | None = None) -> bool:
        """Append an address to the history unless it is already present."""

        normalized = normalize_address(address)
        if normalized is None or self.knows_address(normalized):
            return False
        self._addresses.append(
            AddressRecord(
                address=normalized,
                position=len(self._addresses),
                recorded_at=at or utcnow(),
            )
        )
        return True

    def record_addresses(self, addresses: Iterable[str | None], *, at: datetime) -> None:
        for address in addresses:
            self.record_address(address, at=at)

    def touch(self, at: datetime | None = None) -> None:
        self.last_seen_at = at or utcnow()

    def add_order(self, order_total: Decimal, *, at: datetime | None = None) -> None:
        self.total_orders += 1
        self.lifetime_value += order_total
        self.touch(at)

    def add_dispute(self, *, at: datetime | None = None) -> None:
        self.dispute_count += 1
        self._disputes.append(DisputeRecord(opened_at=at or utcnow()))

    def disputes_since(self, since: datetime) -> int:
        return sum(1 for record in self._disputes if record.opened_at >= since)

    def absorb(self, other: CustomerIdentity, *, at: datetime) -> None:
        """Fold another identity's history and counters into this one."""

        if other is self:
            raise InvalidMergeError("An identity cannot absorb itself")
        self.record_addresses([*other.address_history, other.current_address], at=at)
        self.total_orders += other.total_orders
        self.lifetime_value += other.lifetime_value
        self.dispute_count += other.dispute_count
        self._disputes.extend(
            DisputeRecord(opened_at=record.opened_at) for record in other._disputes
        )
        self.first_seen_at = min(self.first_seen_at, other.first_seen_at)
        self.last_seen_at = at

    def mark_merged_into(
        self,
        master: CustomerIdentity,
        *,
        at: datetime,
        actor: str | None,
    ) -> None:
        if master.id == self.id:
            raise InvalidMergeError("An identity cannot be merged into itself")
        self.master_identity_id = master.id
        self.merged_at = at
        self.merged_by = actor


@dataclass(eq=False, kw_only=True)
class IdentityMatch(Entity):
    """Candidate edge between a (new) identity and an existing one."""

    identity_id: UUID
    candidate_id: UUID
    match_type: MatchType
    confidence: int
    reason: str
    status: MatchStatus = MatchStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    created_by: str | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None

    @classmethod
    def logged(
        cls,
        *,
        identity_id: UUID,
        candidate_id: UUID,
        match_type: MatchType,
        confidence: int,
        reason: str,
        actor: str | None,
    ) -> IdentityMatch:
        # status is fixed here and never recomputed from later confidence changes
        status = (
            MatchStatus.AUTO_MERGED if confidence >= AUTO_MERGE_CONFIDENCE else MatchStatus.PENDING
        )
        return cls(
            identity_id=identity_id,
            candidate_id=candidate_id,
            match_type=match_type,
            confidence=confidence,
            reason=reason,
            status=status,
            created_by=actor,
        )

    @property
    def is_pending(self) -> bool:
        return self.status == MatchStatus.PENDING

    def approve(self, *, actor: str | None, at: datetime) -> None:
        self._review(MatchStatus.MERGED, actor=actor, at=at)

    def reject(self, *, actor: str | None, at: datetime) -> None:
        self._review(MatchStatus.REJECTED, actor=actor, at=at)

    def _review(self, status: MatchStatus, *, actor: str | None, at: datetime) -> None:
        if not self.is_pending:
            raise MatchReviewError(self.id, self.status)
        self.status = status
        self.reviewed_at = at
        self.reviewed_by = actor
