"""Schema checks against a database built by the Alembic migrations."""
from __future__ import annotations

from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic import command
from alembic.config import Config


@pytest.fixture(scope="module")
def alembic_config(tmp_path_factory: pytest.TempPathFactory) -> Config:
    project_root = Path(__file__).resolve().parents[2]
    db_path = tmp_path_factory.mktemp("db") / "schema.db"

    config = Config(str(project_root / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", f"sqlite:///{db_path}")
    config.set_main_option("script_location", str(project_root / "migrations"))
    config.attributes["configure_logger"] = False
    return config


@pytest.fixture(scope="module")
def migrated_engine(alembic_config: Config):  # type: ignore[no-untyped-def]
    command.upgrade(alembic_config, "head")
    engine = sa.create_engine(alembic_config.get_main_option("sqlalchemy.url"))
    try:
        yield engine
    finally:
        engine.dispose()


def test_tables_exist(migrated_engine: sa.Engine) -> None:
    tables = set(sa.inspect(migrated_engine).get_table_names())

    assert {"properties", "accounts", "transactions", "marco_zero", "reconciliation_adjustments"} <= tables


def test_foreign_keys(migrated_engine: sa.Engine) -> None:
    inspector = sa.inspect(migrated_engine)
    fk_expectations = {
        "transactions": {"property_id": "properties", "account_id": "accounts"},
        "reconciliation_adjustments": {"marco_zero_id": "marco_zero", "account_id": "accounts"},
    }

    for table, expected in fk_expectations.items():
        fk_map = {
            tuple(fk["constrained_columns"]): fk["referred_table"] for fk in inspector.get_foreign_keys(table)
        }
        for column, target in expected.items():
            assert fk_map[(column,)] == target


def test_lookup_indexes(migrated_engine: sa.Engine) -> None:
    inspector = sa.inspect(migrated_engine)

    assert {"ix_transactions_property_id", "ix_transactions_date"} <= {
        index["name"] for index in inspector.get_indexes("transactions")
    }
    assert "ix_reconciliation_adjustments_date" in {
        index["name"] for index in inspector.get_indexes("reconciliation_adjustments")
    }


def test_only_one_active_baseline_is_allowed(migrated_engine: sa.Engine) -> None:
    insert = sa.text(
        "INSERT INTO marco_zero (marco_date, account_balances, total_balance, is_active) "
        "VALUES (:marco_date, '[]', 0, :is_active)"
    )

    with migrated_engine.connect() as connection:
        transaction = connection.begin()
        connection.execute(insert, {"marco_date": "2025-01-01", "is_active": False})
        connection.execute(insert, {"marco_date": "2025-01-15", "is_active": False})
        connection.execute(insert, {"marco_date": "2025-02-01", "is_active": True})
        with pytest.raises(sa.exc.IntegrityError):
            connection.execute(insert, {"marco_date": "2025-03-01", "is_active": True})
        transaction.rollback()
