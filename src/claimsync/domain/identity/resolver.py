"""Resolve contact records to canonical customer identities."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from logging import getLogger
from typing import TYPE_CHECKING

from claimsync.domain.model import (
    AUTO_MERGE_CONFIDENCE,
    UNKNOWN_NAME,
    ContactDetails,
    CustomerIdentity,
    IdentityMatch,
    IdentityNotFoundError,
    IdentityResolutionError,
    InvalidMergeError,
    MatchReviewError,
    MatchType,
    utcnow,
)

from .similarity import IdentityCandidate, rank_fuzzy_candidates

if TYPE_CHECKING:
    from uuid import UUID

    from claimsync.domain.ports import (
        ClaimsUnitOfWork,
        CustomerIdentityRepository,
        UnitOfWorkFactory,
    )

log = getLogger(__name__)

DEFAULT_FUZZY_CANDIDATE_LIMIT = 1000
REVIEW_CONFIDENCE = 50
EXACT_CONFIDENCE = 100


@dataclass(slots=True)
class Resolution:
    """Outcome of ``find_or_create``."""

    identity: CustomerIdentity
    is_new: bool
    matches: list[IdentityCandidate] = field(default_factory=list)


@dataclass(slots=True)
class IdentityHistory:
    identity: CustomerIdentity
    address_history: list[str]
    matches: list[IdentityMatch]


@dataclass(slots=True)
class PendingMatch:
    match: IdentityMatch
    identity: CustomerIdentity
    candidate: CustomerIdentity


@dataclass(slots=True)
class IdentityResolver:
    """Find, create and merge customer identities."""

    unit_of_work_factory: UnitOfWorkFactory
    fuzzy_candidate_limit: int = DEFAULT_FUZZY_CANDIDATE_LIMIT
    clock: Callable[[], datetime] = utcnow

    def find_or_create(self, contact: ContactDetails, *, actor_id: str | None = None) -> Resolution:
        """Resolve ``contact`` to an active identity, creating one when nothing matches.

        Exact email/phone hits win outright (email before phone). Otherwise a
        fuzzy name pass runs over recently seen identities; a candidate at or
        above the auto-merge confidence is returned as is. When a new identity
        is created, every fuzzy candidate at or above the review confidence is
        logged as an ``IdentityMatch``.
        """

        normalized = contact.normalized()
        with self.unit_of_work_factory() as uow:
            identities = uow.repositories.identities

            exact = _exact_matches(identities, normalized)
            if exact:
                return Resolution(identity=exact[0].identity, is_new=False, matches=exact)

            candidates: list[IdentityCandidate] = []
            if normalized.name:
                recent = identities.recent_active(limit=self.fuzzy_candidate_limit)
                candidates = rank_fuzzy_candidates(normalized, recent)

            if candidates and candidates[0].confidence >= AUTO_MERGE_CONFIDENCE:
                best = candidates[0]
                log.info(
                    "Matched contact to identity %s (%s, confidence=%s)",
                    best.identity.id,
                    best.reason,
                    best.confidence,
                )
                return Resolution(identity=best.identity, is_new=False, matches=candidates)

            now = self.clock()
            identity = _new_identity(normalized, now=now, actor_id=actor_id)
            if not identities.add_if_absent(identity):
                # another writer created an identity with the same email/phone first
                exact = _exact_matches(identities, normalized)
                if not exact:
                    raise IdentityResolutionError(
                        "Identity insert was rejected but no existing identity matches"
                    )
                log.info("Identity insert lost a race; using %s", exact[0].identity.id)
                return Resolution(identity=exact[0].identity, is_new=False, matches=exact)

            for candidate in candidates:
                if candidate.confidence < REVIEW_CONFIDENCE:
                    continue
                match = IdentityMatch.logged(
                    identity_id=identity.id,
                    candidate_id=candidate.identity.id,
                    match_type=candidate.match_type,
                    confidence=candidate.confidence,
                    reason=candidate.reason,
                    actor=actor_id,
                )
                uow.repositories.identity_matches.add(match)
                log.info(
                    "Logged %s identity match %s -> %s (confidence=%s)",
                    match.status,
                    identity.id,
                    candidate.identity.id,
                    candidate.confidence,
                )

            uow.commit()
            log.info("Created customer identity %s", identity.id)
            return Resolution(identity=identity, is_new=True, matches=candidates)

    def merge_identities(
        self,
        keep_id: UUID,
        merge_id: UUID,
        *,
        actor_id: str | None = None,
    ) -> CustomerIdentity:
        """Fold ``merge_id`` into ``keep_id`` and tombstone it. Nothing is deleted."""

        with self.unit_of_work_factory() as uow:
            keep = _merge(uow, keep_id, merge_id, actor_id=actor_id, at=self.clock())
            uow.commit()
        log.info("Merged identity %s into %s", merge_id, keep_id)
        return keep

    def get_identity_with_history(self, identity_id: UUID) -> IdentityHistory | None:
        with self.unit_of_work_factory() as uow:
            identity = uow.repositories.identities.get(identity_id)
            if identity is None:
                return None
            matches = uow.repositories.identity_matches.list_for_identity(identity_id)
            return IdentityHistory(
                identity=identity,
                address_history=identity.address_history,
                matches=matches,
            )

    def list_pending_matches(self, *, limit: int = 50) -> list[PendingMatch]:
        """Pending matches awaiting manual review, newest first."""

        results: list[PendingMatch] = []
        with self.unit_of_work_factory() as uow:
            identities = uow.repositories.identities
            for match in uow.repositories.identity_matches.list_pending(limit=limit):
                identity = identities.get(match.identity_id)
                candidate = identities.get(match.candidate_id)
                if identity is None or candidate is None:
                    continue
                results.append(PendingMatch(match=match, identity=identity, candidate=candidate))
        return results

    def review_match(
        self,
        match_id: UUID,
        *,
        approve: bool,
        actor_id: str | None = None,
    ) -> IdentityMatch:
        """Approve (merge the new identity into the candidate) or reject a pending match."""

        now = self.clock()
        with self.unit_of_work_factory() as uow:
            match = uow.repositories.identity_matches.get(match_id)
            if match is None:
                raise MatchReviewError(match_id, None)
            if approve:
                match.approve(actor=actor_id, at=now)
                _merge(uow, match.candidate_id, match.identity_id, actor_id=actor_id, at=now)
            else:
                match.reject(actor=actor_id, at=now)
            uow.commit()
        log.info("Reviewed identity match %s: %s", match_id, match.status)
        return match

    def update_identity_stats(
        self,
        identity_id: UUID,
        *,
        order_total: Decimal,
    ) -> CustomerIdentity | None:
        """Count one more order against the identity's active master."""

        with self.unit_of_work_factory() as uow:
            identity = _active_identity(uow.repositories.identities, identity_id)
            if identity is None:
                return None
            identity.add_order(order_total, at=self.clock())
            uow.commit()
            return identity

    def record_dispute(
        self,
        identity_id: UUID,
        *,
        at: datetime | None = None,
    ) -> CustomerIdentity | None:
        with self.unit_of_work_factory() as uow:
            identity = _active_identity(uow.repositories.identities, identity_id)
            if identity is None:
                return None
            identity.add_dispute(at=at or self.clock())
            uow.commit()
            return identity


def resolve_master(
    identities: CustomerIdentityRepository,
    identity: CustomerIdentity,
) -> CustomerIdentity:
    """Follow merge pointers to the active identity."""

    seen = {identity.id}
    current = identity
    while current.master_identity_id is not None:
        master = identities.get(current.master_identity_id)
        if master is None or master.id in seen:
            log.warning(
                "Broken merge chain at identity %s (master %s)",
                current.id,
                current.master_identity_id,
            )
            return current
        seen.add(master.id)
        current = master
    return current


def _active_identity(
    identities: CustomerIdentityRepository,
    identity_id: UUID,
) -> CustomerIdentity | None:
    identity = identities.get(identity_id)
    if identity is None:
        return None
    return resolve_master(identities, identity)


def _exact_matches(
    identities: CustomerIdentityRepository,
    contact: ContactDetails,
) -> list[IdentityCandidate]:
    found: list[IdentityCandidate] = []
    seen: set[UUID] = set()

    def collect(hits: list[CustomerIdentity], match_type: MatchType, reason: str) -> None:
        for hit in hits:
            master = resolve_master(identities, hit)
            if master.id in seen:
                continue
            seen.add(master.id)
            found.append(
                IdentityCandidate(
                    identity=master,
                    match_type=match_type,
                    confidence=EXACT_CONFIDENCE,
                    reason=reason,
                )
            )

    if contact.email:
        collect(
            identities.find_by_email(contact.email),
            MatchType.EXACT_EMAIL,
            f"Exact email match: {contact.email}",
        )
    if contact.phone:
        collect(
            identities.find_by_phone(contact.phone),
            MatchType.EXACT_PHONE,
            f"Exact phone match: {contact.phone}",
        )
    return found


def _new_identity(
    contact: ContactDetails,
    *,
    now: datetime,
    actor_id: str | None,
) -> CustomerIdentity:
    identity = CustomerIdentity(
        name=contact.name or UNKNOWN_NAME,
        email=contact.email,
        phone=contact.phone,
        current_address=contact.address,
        first_seen_at=now,
        last_seen_at=now,
        created_by=actor_id,
    )
    identity.record_address(contact.address, at=now)
    return identity


def _merge(
    uow: ClaimsUnitOfWork,
    keep_id: UUID,
    merge_id: UUID,
    *,
    actor_id: str | None,
    at: datetime,
) -> CustomerIdentity:
    if keep_id == merge_id:
        raise InvalidMergeError("Cannot merge an identity into itself")
    identities = uow.repositories.identities
    keep = identities.get(keep_id)
    if keep is None:
        raise IdentityNotFoundError(keep_id)
    merge = identities.get(merge_id)
    if merge is None:
        raise IdentityNotFoundError(merge_id)
    if not keep.is_active or not merge.is_active:
        raise InvalidMergeError(
            f"Identities {keep_id} and {merge_id} must both be active to merge"
        )

    keep.absorb(merge, at=at)
    merge.mark_merged_into(keep, at=at, actor=actor_id)
    return keep
