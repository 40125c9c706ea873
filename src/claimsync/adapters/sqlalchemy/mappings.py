"""SQLAlchemy mapping metadata for the claimsync domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from claimsync.domain.model import (
    AddressRecord,
    ChangeType,
    CustomerIdentity,
    DisputeRecord,
    IdentityMatch,
    MatchStatus,
    MatchType,
    Order,
    OrderChangeRecord,
    Provider,
    RiskLevel,
    RiskScore,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]
MoneyType = Numeric(12, 2, asdecimal=True)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Identities ------------------------------------------------------------------

customer_identity_table = Table(
    "customer_identity",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("email", String, nullable=True),
    Column("phone", String, nullable=True),
    Column("current_address", Text, nullable=True),
    Column("first_seen_at", UTCDateTime(), nullable=False),
    Column("last_seen_at", UTCDateTime(), nullable=False),
    Column("total_orders", Integer, nullable=False, default=0),
    Column("lifetime_value", MoneyType, nullable=False),
    Column("dispute_count", Integer, nullable=False, default=0),
    Column(
        "master_identity_id",
        UUIDColumnType,
        ForeignKey("customer_identity.id"),
        nullable=True,
    ),
    Column("merged_at", UTCDateTime(), nullable=True),
    Column("merged_by", String, nullable=True),
    Column("created_by", String, nullable=True),
    Index("ix_customer_identity_email", "email"),
    Index("ix_customer_identity_phone", "phone"),
    Index("ix_customer_identity_last_seen_at", "last_seen_at"),
)

# Two active identities never share a normalised email or phone; tombstones may.
Index(
    "uq_customer_identity_active_email",
    customer_identity_table.c.email,
    unique=True,
    sqlite_where=customer_identity_table.c.master_identity_id.is_(None),
    postgresql_where=customer_identity_table.c.master_identity_id.is_(None),
)
Index(
    "uq_customer_identity_active_phone",
    customer_identity_table.c.phone,
    unique=True,
    sqlite_where=customer_identity_table.c.master_identity_id.is_(None),
    postgresql_where=customer_identity_table.c.master_identity_id.is_(None),
)

customer_identity_address_table = Table(
    "customer_identity_address",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "identity_id",
        UUIDColumnType,
        ForeignKey("customer_identity.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("address", Text, nullable=False),
    Column("position", Integer, nullable=False),
    Column("recorded_at", UTCDateTime(), nullable=False),
    UniqueConstraint("identity_id", "position", name="uq_customer_identity_address_position"),
)

customer_identity_dispute_table = Table(
    "customer_identity_dispute",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "identity_id",
        UUIDColumnType,
        ForeignKey("customer_identity.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("opened_at", UTCDateTime(), nullable=False),
    Index("ix_customer_identity_dispute_identity_id", "identity_id", "opened_at"),
)

identity_match_table = Table(
    "identity_match",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("identity_id", UUIDColumnType, ForeignKey("customer_identity.id"), nullable=False),
    Column("candidate_id", UUIDColumnType, ForeignKey("customer_identity.id"), nullable=False),
    Column("match_type", Enum(MatchType, native_enum=False), nullable=False),
    Column("confidence", Integer, nullable=False),
    Column("reason", Text, nullable=False),
    Column("status", Enum(MatchStatus, native_enum=False), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("created_by", String, nullable=True),
    Column("reviewed_at", UTCDateTime(), nullable=True),
    Column("reviewed_by", String, nullable=True),
    Index("ix_identity_match_status", "status"),
    Index("ix_identity_match_identity_id", "identity_id"),
)

# Orders ----------------------------------------------------------------------

order_table = Table(
    "orders",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("order_number", String, nullable=False),
    Column("source", Enum(Provider, native_enum=False), nullable=False),
    Column("source_order_id", String, nullable=True),
    Column("external_id", String, nullable=True),
    Column("order_key", String, nullable=True),
    Column("status", String, nullable=False),
    Column("order_date", UTCDateTime(), nullable=True),
    Column("customer_name", String, nullable=True),
    Column("customer_email", String, nullable=True),
    Column("customer_phone", String, nullable=True),
    Column("shipping_address", JSON, nullable=False),
    Column("total", MoneyType, nullable=False),
    Column("shipping_cost", MoneyType, nullable=False),
    Column("tax", MoneyType, nullable=False),
    Column("line_items", JSON, nullable=False),
    Column("notes", Text, nullable=True),
    Column("tags", JSON, nullable=False),
    Column("tracking_number", String, nullable=True),
    Column("carrier_code", String, nullable=True),
    Column("service_code", String, nullable=True),
    Column("ship_date", UTCDateTime(), nullable=True),
    Column("raw_payload", JSON, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("source", "source_order_id", name="uq_orders_source_order"),
    Index("ix_orders_order_number", "order_number"),
    Index("ix_orders_customer_email", "customer_email"),
    Index("ix_orders_order_date", "order_date"),
)

order_change_table = Table(
    "order_change",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "order_id",
        UUIDColumnType,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("change_type", Enum(ChangeType, native_enum=False), nullable=False),
    Column("source", Enum(Provider, native_enum=False), nullable=False),
    Column("changed_by", String, nullable=True),
    Column("changed_fields", JSON, nullable=False),
    Column("snapshot", JSON, nullable=False),
    Column("notes", Text, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_order_change_order_id", "order_id", "created_at"),
)

# Risk ------------------------------------------------------------------------

risk_score_table = Table(
    "risk_score",
    mapper_registry.metadata,
    Column(
        "identity_id",
        UUIDColumnType,
        ForeignKey("customer_identity.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("overall_score", Integer, nullable=False),
    Column("level", Enum(RiskLevel, native_enum=False), nullable=False),
    Column("dispute_score", Integer, nullable=False),
    Column("support_score", Integer, nullable=False),
    Column("review_score", Integer, nullable=False),
    Column("order_frequency_score", Integer, nullable=False),
    Column("engagement_score", Integer, nullable=False),
    Column("confidence", Integer, nullable=False),
    Column("breakdown", JSON, nullable=False),
    Column("recommendations", JSON, nullable=False),
    Column("unavailable_signals", JSON, nullable=False),
    Column("calculated_at", UTCDateTime(), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(
        AddressRecord,
        customer_identity_address_table,
    )

    mapper_registry.map_imperatively(
        DisputeRecord,
        customer_identity_dispute_table,
    )

    mapper_registry.map_imperatively(
        CustomerIdentity,
        customer_identity_table,
        properties={
            "_addresses": relationship(
                AddressRecord,
                cascade="all, delete-orphan",
                order_by=customer_identity_address_table.c.position,
                foreign_keys=[customer_identity_address_table.c.identity_id],
                lazy="selectin",
            ),
            "_disputes": relationship(
                DisputeRecord,
                cascade="all, delete-orphan",
                order_by=customer_identity_dispute_table.c.opened_at,
                foreign_keys=[customer_identity_dispute_table.c.identity_id],
                lazy="selectin",
            ),
        },
    )

    mapper_registry.map_imperatively(
        IdentityMatch,
        identity_match_table,
    )

    mapper_registry.map_imperatively(
        Order,
        order_table,
    )

    mapper_registry.map_imperatively(
        OrderChangeRecord,
        order_change_table,
    )

    mapper_registry.map_imperatively(
        RiskScore,
        risk_score_table,
    )

    configure_mappers()
    return mapper_registry
