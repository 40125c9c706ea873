"""Initial schema: identities, matches, orders, change log and risk scores.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from claimsync.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_IDENTITY = "master_identity_id IS NULL"


def _enum(length: int = 32) -> sa.String:
    return sa.String(length)


def upgrade() -> None:
    op.create_table(
        "customer_identity",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("current_address", sa.Text(), nullable=True),
        sa.Column("first_seen_at", UTCDateTime(), nullable=False),
        sa.Column("last_seen_at", UTCDateTime(), nullable=False),
        sa.Column("total_orders", sa.Integer(), nullable=False),
        sa.Column("lifetime_value", sa.Numeric(12, 2), nullable=False),
        sa.Column("dispute_count", sa.Integer(), nullable=False),
        sa.Column("master_identity_id", sa.Uuid(), nullable=True),
        sa.Column("merged_at", UTCDateTime(), nullable=True),
        sa.Column("merged_by", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["master_identity_id"],
            ["customer_identity.id"],
            name="fk_customer_identity_master_identity_id_customer_identity",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_customer_identity"),
    )
    op.create_index("ix_customer_identity_email", "customer_identity", ["email"])
    op.create_index("ix_customer_identity_phone", "customer_identity", ["phone"])
    op.create_index("ix_customer_identity_last_seen_at", "customer_identity", ["last_seen_at"])
    op.create_index(
        "uq_customer_identity_active_email",
        "customer_identity",
        ["email"],
        unique=True,
        sqlite_where=sa.text(ACTIVE_IDENTITY),
        postgresql_where=sa.text(ACTIVE_IDENTITY),
    )
    op.create_index(
        "uq_customer_identity_active_phone",
        "customer_identity",
        ["phone"],
        unique=True,
        sqlite_where=sa.text(ACTIVE_IDENTITY),
        postgresql_where=sa.text(ACTIVE_IDENTITY),
    )

    op.create_table(
        "customer_identity_address",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("identity_id", sa.Uuid(), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("recorded_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["identity_id"],
            ["customer_identity.id"],
            name="fk_customer_identity_address_identity_id_customer_identity",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_customer_identity_address"),
        sa.UniqueConstraint(
            "identity_id", "position", name="uq_customer_identity_address_position"
        ),
    )

    op.create_table(
        "identity_match",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("identity_id", sa.Uuid(), nullable=False),
        sa.Column("candidate_id", sa.Uuid(), nullable=False),
        sa.Column("match_type", _enum(), nullable=False),
        sa.Column("confidence", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("status", _enum(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("reviewed_at", UTCDateTime(), nullable=True),
        sa.Column("reviewed_by", sa.String(), nullable=True),
        sa.ForeignKeyConstraint(
            ["identity_id"],
            ["customer_identity.id"],
            name="fk_identity_match_identity_id_customer_identity",
        ),
        sa.ForeignKeyConstraint(
            ["candidate_id"],
            ["customer_identity.id"],
            name="fk_identity_match_candidate_id_customer_identity",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_identity_match"),
    )
    op.create_index("ix_identity_match_status", "identity_match", ["status"])
    op.create_index("ix_identity_match_identity_id", "identity_match", ["identity_id"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_number", sa.String(), nullable=False),
        sa.Column("source", _enum(), nullable=False),
        sa.Column("source_order_id", sa.String(), nullable=True),
        sa.Column("external_id", sa.String(), nullable=True),
        sa.Column("order_key", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("order_date", UTCDateTime(), nullable=True),
        sa.Column("customer_name", sa.String(), nullable=True),
        sa.Column("customer_email", sa.String(), nullable=True),
        sa.Column("customer_phone", sa.String(), nullable=True),
        sa.Column("shipping_address", sa.JSON(), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("shipping_cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("tax", sa.Numeric(12, 2), nullable=False),
        sa.Column("line_items", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("tracking_number", sa.String(), nullable=True),
        sa.Column("carrier_code", sa.String(), nullable=True),
        sa.Column("service_code", sa.String(), nullable=True),
        sa.Column("ship_date", UTCDateTime(), nullable=True),
        sa.Column("raw_payload", sa.JSON(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_orders"),
        sa.UniqueConstraint("source", "source_order_id", name="uq_orders_source_order"),
    )
    op.create_index("ix_orders_order_number", "orders", ["order_number"])
    op.create_index("ix_orders_customer_email", "orders", ["customer_email"])
    op.create_index("ix_orders_order_date", "orders", ["order_date"])

    op.create_table(
        "order_change",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("change_type", _enum(), nullable=False),
        sa.Column("source", _enum(), nullable=False),
        sa.Column("changed_by", sa.String(), nullable=True),
        sa.Column("changed_fields", sa.JSON(), nullable=False),
        sa.Column("snapshot", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["order_id"],
            ["orders.id"],
            name="fk_order_change_order_id_orders",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_order_change"),
    )
    op.create_index("ix_order_change_order_id", "order_change", ["order_id", "created_at"])

    op.create_table(
        "risk_score",
        sa.Column("identity_id", sa.Uuid(), nullable=False),
        sa.Column("overall_score", sa.Integer(), nullable=False),
        sa.Column("level", _enum(), nullable=False),
        sa.Column("dispute_score", sa.Integer(), nullable=False),
        sa.Column("support_score", sa.Integer(), nullable=False),
        sa.Column("review_score", sa.Integer(), nullable=False),
        sa.Column("order_frequency_score", sa.Integer(), nullable=False),
        sa.Column("engagement_score", sa.Integer(), nullable=False),
        sa.Column("confidence", sa.Integer(), nullable=False),
        sa.Column("breakdown", sa.JSON(), nullable=False),
        sa.Column("recommendations", sa.JSON(), nullable=False),
        sa.Column("unavailable_signals", sa.JSON(), nullable=False),
        sa.Column("calculated_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["identity_id"],
            ["customer_identity.id"],
            name="fk_risk_score_identity_id_customer_identity",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("identity_id", name="pk_risk_score"),
    )


def downgrade() -> None:
    op.drop_table("risk_score")
    op.drop_index("ix_order_change_order_id", table_name="order_change")
    op.drop_table("order_change")
    op.drop_index("ix_orders_order_date", table_name="orders")
    op.drop_index("ix_orders_customer_email", table_name="orders")
    op.drop_index("ix_orders_order_number", table_name="orders")
    op.drop_table("orders")
    op.drop_index("ix_identity_match_identity_id", table_name="identity_match")
    op.drop_index("ix_identity_match_status", table_name="identity_match")
    op.drop_table("identity_match")
    op.drop_table("customer_identity_address")
    op.drop_index("uq_customer_identity_active_phone", table_name="customer_identity")
    op.drop_index("uq_customer_identity_active_email", table_name="customer_identity")
    op.drop_index("ix_customer_identity_last_seen_at", table_name="customer_identity")
    op.drop_index("ix_customer_identity_phone", table_name="customer_identity")
    op.drop_index("ix_customer_identity_email", table_name="customer_identity")
    op.drop_table("customer_identity")
