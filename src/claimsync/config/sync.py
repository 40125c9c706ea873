"""Batch and matching defaults for the sync services."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int

DEFAULT_IMPORT_BATCH_SIZE = 50
DEFAULT_SHIPMENT_PAGE_SIZE = 500
DEFAULT_FUZZY_CANDIDATE_LIMIT = 1000
DEFAULT_PENDING_MATCH_LIMIT = 50


@dataclass(frozen=True, slots=True)
class SyncConfig:
    import_batch_size: int = DEFAULT_IMPORT_BATCH_SIZE
    shipment_page_size: int = DEFAULT_SHIPMENT_PAGE_SIZE
    fuzzy_candidate_limit: int = DEFAULT_FUZZY_CANDIDATE_LIMIT
    pending_match_limit: int = DEFAULT_PENDING_MATCH_LIMIT


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        import_batch_size=env_int("CLAIMSYNC_IMPORT_BATCH_SIZE", DEFAULT_IMPORT_BATCH_SIZE),
        shipment_page_size=env_int("CLAIMSYNC_SHIPMENT_PAGE_SIZE", DEFAULT_SHIPMENT_PAGE_SIZE),
        fuzzy_candidate_limit=env_int(
            "CLAIMSYNC_FUZZY_CANDIDATE_LIMIT", DEFAULT_FUZZY_CANDIDATE_LIMIT
        ),
        pending_match_limit=env_int("CLAIMSYNC_PENDING_MATCH_LIMIT", DEFAULT_PENDING_MATCH_LIMIT),
    )
