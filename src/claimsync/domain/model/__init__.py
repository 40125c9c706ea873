"""Public domain model surface."""

from __future__ import annotations

from claimsync.domain.model.entity import Entity, new_id, utcnow
from claimsync.domain.model.enums import (
    ChangeType,
    ImportAction,
    MatchStatus,
    MatchStrategy,
    MatchType,
    Provider,
    RiskLevel,
    Signal,
)
from claimsync.domain.model.errors import (
    IdentityNotFoundError,
    IdentityResolutionError,
    InvalidMergeError,
    MatchReviewError,
    OrderNotFoundError,
    SignalUnavailableError,
)
from claimsync.domain.model.identity import (
    AUTO_MERGE_CONFIDENCE,
    UNKNOWN_NAME,
    AddressRecord,
    CustomerIdentity,
    DisputeRecord,
    IdentityMatch,
)
from claimsync.domain.model.order import SHIPPED_STATUS, Order, OrderChangeRecord
from claimsync.domain.model.primitives import (
    Address,
    Email,
    Phone,
    normalize_address,
    normalize_email,
    normalize_name,
    normalize_phone,
    to_money,
)
from claimsync.domain.model.risk import RiskScore
from claimsync.domain.model.signals import (
    DisputeStats,
    EngagementStats,
    MarketingProfile,
    OrderStats,
    ReviewStats,
    SupportStats,
)
from claimsync.domain.model.values import ContactDetails, IncomingOrder, ShipmentEvent

__all__ = [
    "AUTO_MERGE_CONFIDENCE",
    "SHIPPED_STATUS",
    "UNKNOWN_NAME",
    "Address",
    "AddressRecord",
    "ChangeType",
    "ContactDetails",
    "CustomerIdentity",
    "DisputeRecord",
    "DisputeStats",
    "Email",
    "EngagementStats",
    "Entity",
    "IdentityMatch",
    "IdentityNotFoundError",
    "IdentityResolutionError",
    "ImportAction",
    "IncomingOrder",
    "InvalidMergeError",
    "MarketingProfile",
    "MatchReviewError",
    "MatchStatus",
    "MatchStrategy",
    "MatchType",
    "Order",
    "OrderChangeRecord",
    "OrderNotFoundError",
    "OrderStats",
    "Phone",
    "Provider",
    "ReviewStats",
    "RiskLevel",
    "RiskScore",
    "ShipmentEvent",
    "Signal",
    "SignalUnavailableError",
    "SupportStats",
    "new_id",
    "normalize_address",
    "normalize_email",
    "normalize_name",
    "normalize_phone",
    "to_money",
    "utcnow",
]
