"""Storefront order import with change detection and conflict handling."""

from __future__ import annotations

from .diff import ORDER_DIFF_FIELDS, DiffField, FieldChange, detect_changes, order_snapshot
from .importer import (
    DEFAULT_IMPORT_BATCH_SIZE,
    ConflictField,
    ImportDeduplicator,
    ImportOutcome,
    ImportProgress,
    ImportResult,
    OrderConflict,
    RecordFailure,
    order_tags,
)
from .lookup import DEFAULT_EMAIL_CANDIDATE_LIMIT, DEFAULT_MATCH_WINDOW, find_existing_order

__all__ = [
    "DEFAULT_EMAIL_CANDIDATE_LIMIT",
    "DEFAULT_IMPORT_BATCH_SIZE",
    "DEFAULT_MATCH_WINDOW",
    "ORDER_DIFF_FIELDS",
    "ConflictField",
    "DiffField",
    "FieldChange",
    "ImportDeduplicator",
    "ImportOutcome",
    "ImportProgress",
    "ImportResult",
    "OrderConflict",
    "RecordFailure",
    "detect_changes",
    "find_existing_order",
    "order_snapshot",
    "order_tags",
]
