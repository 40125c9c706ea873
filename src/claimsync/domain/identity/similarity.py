"""Fuzzy name and address scoring for identity candidates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from rapidfuzz import fuzz

from claimsync.domain.model import MatchType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from claimsync.domain.model import ContactDetails, CustomerIdentity

NAME_SIMILARITY_THRESHOLD = 0.80
ADDRESS_SIMILARITY_THRESHOLD = 0.70
CURRENT_ADDRESS_BOOST = 10
HISTORICAL_ADDRESS_BOOST = 5
MAX_CONFIDENCE = 100


@dataclass(frozen=True, slots=True)
class IdentityCandidate:
    """An existing identity considered for an incoming contact."""

    identity: CustomerIdentity
    match_type: MatchType
    confidence: int
    reason: str


def text_similarity(left: str, right: str) -> float:
    """Case-insensitive similarity in [0, 1]."""

    return fuzz.ratio(left.casefold(), right.casefold()) / 100


def score_candidate(
    contact: ContactDetails,
    identity: CustomerIdentity,
) -> IdentityCandidate | None:
    """Score one identity against a normalised contact, or ``None`` below threshold."""

    if not contact.name:
        return None
    name_similarity = text_similarity(contact.name, identity.name)
    if name_similarity < NAME_SIMILARITY_THRESHOLD:
        return None

    confidence = round(name_similarity * 100)
    reasons = [f"Name similarity: {round(name_similarity * 100)}%"]

    if contact.address and identity.current_address:
        address_similarity = text_similarity(contact.address, identity.current_address)
        if address_similarity >= ADDRESS_SIMILARITY_THRESHOLD:
            confidence = min(MAX_CONFIDENCE, confidence + CURRENT_ADDRESS_BOOST)
            reasons.append(f"Address overlap: {round(address_similarity * 100)}%")

    if contact.address:
        for historical in identity.address_history:
            if text_similarity(contact.address, historical) >= ADDRESS_SIMILARITY_THRESHOLD:
                confidence = min(MAX_CONFIDENCE, confidence + HISTORICAL_ADDRESS_BOOST)
                reasons.append("Historical address match")
                break

    return IdentityCandidate(
        identity=identity,
        match_type=MatchType.FUZZY_NAME,
        confidence=confidence,
        reason=" + ".join(reasons),
    )


def rank_fuzzy_candidates(
    contact: ContactDetails,
    identities: Iterable[CustomerIdentity],
) -> list[IdentityCandidate]:
    """Return candidates above the name threshold, highest confidence first.

    Inactive (merged) identities are ignored.
    """

    candidates: list[IdentityCandidate] = []
    for identity in identities:
        if not identity.is_active:
            continue
        candidate = score_candidate(contact, identity)
        if candidate is not None:
            candidates.append(candidate)
    # stable sort keeps the repository's recency order among equal scores
    candidates.sort(key=lambda candidate: candidate.confidence, reverse=True)
    return candidates
