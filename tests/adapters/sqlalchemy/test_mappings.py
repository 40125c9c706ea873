from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import inspect, text

from claimsync.adapters.sqlalchemy import mapper_registry, start_mappers
from claimsync.adapters.sqlalchemy.migrations import upgrade_head

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_start_mappers_is_idempotent() -> None:
    # First invocation happens in the sqlite_engine fixture; calling again should be harmless.
    start_mappers()
    start_mappers()


def test_migrations_create_every_mapped_table(sqlite_engine: Engine) -> None:
    table_names = set(inspect(sqlite_engine).get_table_names())

    assert set(mapper_registry.metadata.tables) <= table_names
    assert "alembic_version" in table_names


def test_migrations_create_partial_unique_indexes(sqlite_engine: Engine) -> None:
    indexes = {
        index["name"]: index for index in inspect(sqlite_engine).get_indexes("customer_identity")
    }

    assert indexes["uq_customer_identity_active_email"]["unique"]
    assert indexes["uq_customer_identity_active_phone"]["unique"]


def test_upgrade_head_is_repeatable(sqlite_engine: Engine) -> None:
    upgrade_head(engine=sqlite_engine)

    with sqlite_engine.connect() as connection:
        version = connection.execute(text("SELECT version_num FROM alembic_version")).scalar_one()

    assert version == "0002_identity_disputes"
