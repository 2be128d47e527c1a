"""Pipeline tables: recent_tokens, checked_tokens, token_monitors, token_swaps.

Revision ID: a1c2e3f4b5d6
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op

revision = "a1c2e3f4b5d6"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "recent_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token_address", sa.String(64), nullable=False, unique=True),
        sa.Column("creation_time", sa.DateTime(), nullable=False),
        sa.Column("is_processed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("discovered_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    # Scoring scans unprocessed rows by age
    op.create_index("idx_recent_tokens_due", "recent_tokens", ["is_processed", "creation_time"])

    op.create_table(
        "checked_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token_address", sa.String(64), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("checked_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("idx_checked_tokens_address", "checked_tokens", ["token_address"])

    op.create_table(
        "token_monitors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token_address", sa.String(64), nullable=False, unique=True),
        sa.Column("is_monitoring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("last_checked_at", sa.DateTime(), nullable=True),
    )

    op.create_table(
        "token_swaps",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("transaction_hash", sa.String(128), nullable=False, unique=True),
        sa.Column("token_address", sa.String(64), nullable=False),
        sa.Column("transaction_type", sa.String(4), nullable=False),
        sa.Column("block_timestamp", sa.DateTime(), nullable=False),
        sa.Column("block_number", sa.Integer(), nullable=True),
        sa.Column("wallet_address", sa.String(64), nullable=True),
        sa.Column("pair_address", sa.String(64), nullable=True),
        sa.Column("exchange_name", sa.String(100), nullable=True),
        sa.Column("base_token", sa.String(64), nullable=True),
        sa.Column("quote_token", sa.String(64), nullable=True),
        sa.Column("base_amount", sa.Numeric(), nullable=True),
        sa.Column("base_amount_usd", sa.Numeric(), nullable=True),
        sa.Column("quote_amount", sa.Numeric(), nullable=True),
        sa.Column("quote_amount_usd", sa.Numeric(), nullable=True),
    )
    op.create_index(
        "idx_token_swaps_token_time", "token_swaps", ["token_address", "block_timestamp"]
    )


def downgrade() -> None:
    op.drop_index("idx_token_swaps_token_time", table_name="token_swaps")
    op.drop_table("token_swaps")
    op.drop_table("token_monitors")
    op.drop_index("idx_checked_tokens_address", table_name="checked_tokens")
    op.drop_table("checked_tokens")
    op.drop_index("idx_recent_tokens_due", table_name="recent_tokens")
    op.drop_table("recent_tokens")
