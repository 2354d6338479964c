"""Members, opening balances, transactions and audit log.

Revision ID: 0001_ledger_core
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ledger_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


CATEGORY_VALUES = (
    "balance",
    "vip_voucher",
    "designated_lesson",
    "boat_voucher_g23",
    "boat_voucher_g21_panther",
    "gift_boat",
)


def _category_enum() -> sa.Enum:
    return sa.Enum(*CATEGORY_VALUES, name="category_enum")


def upgrade() -> None:
    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("external_id", sa.Uuid(), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("nickname", sa.String(100), nullable=True),
        sa.Column("balance", sa.Numeric(12, 2), nullable=True),
        sa.Column("vip_voucher_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("designated_lesson_minutes", sa.Integer(), nullable=True),
        sa.Column("boat_voucher_g23_minutes", sa.Integer(), nullable=True),
        sa.Column("boat_voucher_g21_panther_minutes", sa.Integer(), nullable=True),
        sa.Column("gift_boat_hours", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_members_name", "members", ["name"])

    op.create_table(
        "opening_balances",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=False
        ),
        sa.Column("category", _category_enum(), nullable=False),
        sa.Column("value", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("member_id", "category", name="uq_opening_balance"),
    )
    op.create_index(
        "ix_opening_balances_member_id", "opening_balances", ["member_id"]
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "member_id", sa.Integer(), sa.ForeignKey("members.id"), nullable=False
        ),
        sa.Column(
            "category",
            sa.Enum(*CATEGORY_VALUES, name="category_enum", create_type=False)
            if op.get_bind().dialect.name == "postgresql"
            else _category_enum(),
            nullable=False,
        ),
        sa.Column(
            "adjust_type",
            sa.Enum("increase", "decrease", name="adjust_type_enum"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("minutes", sa.Integer(), nullable=True),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("balance_after", sa.Numeric(12, 2), nullable=True),
        sa.Column("vip_voucher_amount_after", sa.Numeric(12, 2), nullable=True),
        sa.Column("designated_lesson_minutes_after", sa.Integer(), nullable=True),
        sa.Column("boat_voucher_g23_minutes_after", sa.Integer(), nullable=True),
        sa.Column(
            "boat_voucher_g21_panther_minutes_after", sa.Integer(), nullable=True
        ),
        sa.Column("gift_boat_hours_after", sa.Integer(), nullable=True),
    )
    op.create_index("ix_transactions_member_id", "transactions", ["member_id"])
    op.create_index(
        "ix_transactions_member_category_date",
        "transactions",
        ["member_id", "category", "transaction_date"],
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("member_id", sa.Integer(), nullable=True),
        sa.Column("transaction_id", sa.Integer(), nullable=True),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_log_member_id", "audit_log", ["member_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_log_member_id", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("ix_transactions_member_category_date", table_name="transactions")
    op.drop_index("ix_transactions_member_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_opening_balances_member_id", table_name="opening_balances")
    op.drop_table("opening_balances")
    op.drop_index("ix_members_name", table_name="members")
    op.drop_table("members")
    sa.Enum(name="adjust_type_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="category_enum").drop(op.get_bind(), checkfirst=True)
