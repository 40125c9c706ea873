"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Provider(StrEnum):
    """Systems that feed records into the core."""

    SHIPSTATION = "shipstation"
    WOOCOMMERCE = "woocommerce"
    KLAVIYO = "klaviyo"
    REAMAZE = "reamaze"
    MANUAL = "manual"


class MatchType(StrEnum):
    EXACT_EMAIL = "exact_email"
    EXACT_PHONE = "exact_phone"
    FUZZY_NAME = "fuzzy_name"
    ADDRESS_OVERLAP = "address_overlap"
    MANUAL = "manual"


class MatchStatus(StrEnum):
    PENDING = "pending"
    AUTO_MERGED = "auto_merged"
    REJECTED = "rejected"
    # a pending match approved by a reviewer
    MERGED = "merged"


class ChangeType(StrEnum):
    IMPORTED = "imported"
    UPDATED = "updated"
    MANUAL_EDIT = "manual_edit"
    SHIPMENT_LINKED = "shipment_linked"


class MatchStrategy(StrEnum):
    """Order reconciliation strategies, in cascade order."""

    ORDER_NUMBER = "order_number"
    EXTERNAL_ID = "external_id"
    ORDER_KEY = "order_key"
    NOTES_ORDER_NUMBER = "notes_order_number"
    EMAIL_AND_DATE = "email_and_date"
    NAME_AND_DATE = "name_and_date"
    TRACKING_NUMBER = "tracking_number"


class ImportAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    CONFLICT = "conflict"
    SKIPPED = "skipped"


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Signal(StrEnum):
    """Independent behavioural signal sets consumed by risk scoring."""

    DISPUTES = "disputes"
    SUPPORT = "support"
    MARKETING = "marketing"
