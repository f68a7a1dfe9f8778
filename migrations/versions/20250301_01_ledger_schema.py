"""Ledger schema: properties, accounts, transactions, baselines and adjustments."""
from __future__ import annotations

from collections.abc import Iterable

import sqlalchemy as sa
from alembic import op

revision = "20250301_01"
down_revision = None
branch_labels = None
depends_on: Iterable[str] | None = None

MONEY = sa.Numeric(14, 2)


def _timestamps(*, updated: bool = True) -> list[sa.Column]:
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)]
    if updated:
        columns.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
        )
    return columns


def _drop_enum(name: str) -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute(sa.text(f"DROP TYPE IF EXISTS {name}"))


def upgrade() -> None:  # noqa: D401
    """Create ledger tables, indexes and the single-active-baseline constraint."""

    property_status = sa.Enum("active", "decoration", "financing", "inactive", name="property_status")
    transaction_type = sa.Enum("revenue", "expense", name="transaction_type")

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("nickname", sa.String(length=255), nullable=True),
        sa.Column("status", property_status, nullable=False, server_default="active"),
        sa.Column("purchase_price", MONEY, nullable=True),
        sa.Column("commission_value", MONEY, nullable=True),
        sa.Column("taxes_and_registration", MONEY, nullable=True),
        sa.Column("renovation_and_decoration", MONEY, nullable=True),
        sa.Column("other_initial_values", MONEY, nullable=True),
        sa.Column("purchase_date", sa.Date(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("bank_name", sa.String(length=255), nullable=True),
        sa.Column("initial_balance", MONEY, nullable=False, server_default="0"),
        sa.Column("current_balance", MONEY, nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="SET NULL"), nullable=True),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("type", transaction_type, nullable=False),
        sa.Column("category", sa.String(length=64), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_historical", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_transactions_property_id", "transactions", ["property_id"])
    op.create_index("ix_transactions_date", "transactions", ["date"])

    op.create_table(
        "marco_zero",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("marco_date", sa.Date(), nullable=False),
        sa.Column("account_balances", sa.JSON(), nullable=False),
        sa.Column("total_balance", MONEY, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("deactivated_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index(
        "uq_marco_zero_single_active",
        "marco_zero",
        ["is_active"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "reconciliation_adjustments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("marco_zero_id", sa.Integer(), sa.ForeignKey("marco_zero.id", ondelete="SET NULL"), nullable=True),
        sa.Column("account_id", sa.Integer(), sa.ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("adjustment_date", sa.Date(), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("bank_reference", sa.String(length=100), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index("ix_reconciliation_adjustments_date", "reconciliation_adjustments", ["adjustment_date"])


def downgrade() -> None:  # noqa: D401
    """Drop ledger tables."""

    op.drop_index("ix_reconciliation_adjustments_date", table_name="reconciliation_adjustments")
    op.drop_table("reconciliation_adjustments")
    op.drop_index("uq_marco_zero_single_active", table_name="marco_zero")
    op.drop_table("marco_zero")
    op.drop_index("ix_transactions_date", table_name="transactions")
    op.drop_index("ix_transactions_property_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("accounts")
    op.drop_table("properties")
    _drop_enum("transaction_type")
    _drop_enum("property_status")
