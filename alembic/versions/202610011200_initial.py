"""initial ledger schema

Revision ID: 202610011200
Revises:
Create Date: 2026-10-01 12:00:00.000000

"""

from alembic import op
import sqlalchemy as sa


revision = "202610011200"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    direction = sa.Enum("income", "expense", name="direction")

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column(
            "role",
            sa.Enum("income", "expense", "transfer", name="categoryrole"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("color", sa.String(length=7), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("start_month", sa.String(length=7)),
        sa.Column("end_month", sa.String(length=7)),
        *_timestamps(),
        sa.UniqueConstraint("role", "key", name="uq_category_role_key"),
    )
    op.create_table(
        "subcategories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "category_id",
            sa.Integer(),
            sa.ForeignKey("categories.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("start_month", sa.String(length=7)),
        sa.Column("end_month", sa.String(length=7)),
        *_timestamps(),
        sa.UniqueConstraint("category_id", "key", name="uq_subcategory_category_key"),
    )
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(length=100), nullable=False, unique=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column(
            "type",
            sa.Enum("bank", "credit", "cash", "investment", "pool", name="accounttype"),
            nullable=False,
        ),
        sa.Column("color", sa.String(length=7), nullable=False),
        sa.Column("initial_balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="JPY"),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_table(
        "flow_rules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("direction", direction, nullable=False),
        sa.Column("category_key", sa.String(length=100), nullable=False),
        sa.Column("from_account", sa.String(length=100)),
        sa.Column("to_account", sa.String(length=100)),
        *_timestamps(),
        sa.UniqueConstraint("direction", "category_key", name="uq_flow_rule_scope"),
    )
    op.create_table(
        "monthly_records",
        sa.Column("month", sa.String(length=7), primary_key=True),
        *_timestamps(),
    )
    op.create_table(
        "category_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "month",
            sa.String(length=7),
            sa.ForeignKey("monthly_records.month", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("direction", direction, nullable=False),
        sa.Column("category_key", sa.String(length=100), nullable=False),
        sa.Column("amount_json", sa.Text(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "month", "direction", "category_key", name="uq_entry_month_category"
        ),
    )
    op.create_table(
        "transfers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "month",
            sa.String(length=7),
            sa.ForeignKey("monthly_records.month", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("from_account", sa.String(length=100), nullable=False),
        sa.Column("to_account", sa.String(length=100), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("note", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_transfers_amount_positive"),
    )
    op.create_index("ix_transfers_month_position", "transfers", ["month", "position"])
    op.create_table(
        "budget_history",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "kind",
            sa.Enum("salary", "expense", "allocation", name="budgethistorykind"),
            nullable=False,
        ),
        sa.Column("key", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("start_month", sa.String(length=7), nullable=False),
        sa.Column("amount_json", sa.Text(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "kind", "key", "start_month", name="uq_budget_history_scope_start"
        ),
    )
    op.create_index("ix_budget_history_kind_key", "budget_history", ["kind", "key"])
    op.create_table(
        "budget_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("base_salary", sa.Integer()),
        sa.Column("legacy_expense_json", sa.Text()),
        sa.Column("legacy_allocations_json", sa.Text()),
        *_timestamps(),
    )
    op.create_table(
        "budget_alerts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "kind", sa.Enum("percentage", "amount", name="alertkind"), nullable=False
        ),
        sa.Column("threshold", sa.Float(), nullable=False),
        sa.Column("message", sa.String(length=200), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("threshold > 0", name="ck_budget_alert_threshold_positive"),
    )
    op.create_table(
        "recurring_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(length=100), nullable=False, unique=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("direction", direction, nullable=False),
        sa.Column("category_key", sa.String(length=100), nullable=False),
        sa.Column("amount_json", sa.Text(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("note", sa.Text()),
        *_timestamps(),
    )
    op.create_table(
        "recurring_transfers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("key", sa.String(length=100), nullable=False, unique=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("from_account", sa.String(length=100), nullable=False),
        sa.Column("to_account", sa.String(length=100), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("note", sa.Text()),
        *_timestamps(),
        sa.CheckConstraint(
            "amount > 0", name="ck_recurring_transfer_amount_positive"
        ),
    )


def downgrade():
    op.drop_table("recurring_transfers")
    op.drop_table("recurring_items")
    op.drop_table("budget_alerts")
    op.drop_table("budget_settings")
    op.drop_index("ix_budget_history_kind_key", table_name="budget_history")
    op.drop_table("budget_history")
    op.drop_index("ix_transfers_month_position", table_name="transfers")
    op.drop_table("transfers")
    op.drop_table("category_entries")
    op.drop_table("monthly_records")
    op.drop_table("flow_rules")
    op.drop_table("accounts")
    op.drop_table("subcategories")
    op.drop_table("categories")
