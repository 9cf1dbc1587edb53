"""Create submissions, custody, notifications and wallet tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "submissions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("participant", sa.String(length=128), nullable=False),
        sa.Column("repo_link", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("is_winner", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint("id >= 0", name="ck_submission_id_nonneg"),
        sa.CheckConstraint("length(repo_link) > 0", name="ck_submission_repo_link_nonempty"),
    )
    op.create_index("ix_submissions_participant", "submissions", ["participant"])

    # Single row: guard identity + pool balance
    op.create_table(
        "custody",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("guard_identity", sa.String(length=128), nullable=False),
        sa.Column("balance", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("initialized_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("balance >= 0", name="ck_custody_balance_nonneg"),
        sa.CheckConstraint("id = 1", name="ck_custody_single_row"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("kind", sa.String(length=32), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_notifications_kind", "notifications", ["kind"])

    op.create_table(
        "wallet_entries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("identity", sa.String(length=128), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),  # PAYOUT | WITHDRAWAL
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("external_id", sa.String(length=64), nullable=True),
        sa.Column("note", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("external_id", name="uq_wallet_external_id"),
        sa.CheckConstraint("amount > 0", name="ck_wallet_amount_pos"),
    )
    op.create_index("ix_wallet_entries_identity", "wallet_entries", ["identity"])


def downgrade() -> None:
    op.drop_index("ix_wallet_entries_identity", table_name="wallet_entries")
    op.drop_table("wallet_entries")
    op.drop_index("ix_notifications_kind", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("custody")
    op.drop_index("ix_submissions_participant", table_name="submissions")
    op.drop_table("submissions")
