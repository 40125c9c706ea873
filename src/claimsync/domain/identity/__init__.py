"""Customer identity resolution."""

from __future__ import annotations

from .resolver import (
    DEFAULT_FUZZY_CANDIDATE_LIMIT,
    REVIEW_CONFIDENCE,
    IdentityHistory,
    IdentityResolver,
    PendingMatch,
    Resolution,
    resolve_master,
)
from .similarity import IdentityCandidate, rank_fuzzy_candidates, score_candidate, text_similarity

__all__ = [
    "DEFAULT_FUZZY_CANDIDATE_LIMIT",
    "REVIEW_CONFIDENCE",
    "IdentityCandidate",
    "IdentityHistory",
    "IdentityResolver",
    "PendingMatch",
    "Resolution",
    "rank_fuzzy_candidates",
    "resolve_master",
    "score_candidate",
    "text_similarity",
]
