"""Dispute history per identity.

Revision ID: 0002_identity_disputes
Revises: 0001_initial
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from claimsync.adapters.sqlalchemy.mappings import UTCDateTime

revision = "0002_identity_disputes"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "customer_identity_dispute",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("identity_id", sa.Uuid(), nullable=False),
        sa.Column("opened_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["identity_id"],
            ["customer_identity.id"],
            name="fk_customer_identity_dispute_identity_id_customer_identity",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_customer_identity_dispute"),
    )
    op.create_index(
        "ix_customer_identity_dispute_identity_id",
        "customer_identity_dispute",
        ["identity_id", "opened_at"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_customer_identity_dispute_identity_id",
        table_name="customer_identity_dispute",
    )
    op.drop_table("customer_identity_dispute")
