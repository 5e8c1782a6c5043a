"""token_prices and backfill_jobs tables

Revision ID: 0001_price_oracle
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_price_oracle"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "token_prices",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("network", sa.String(20), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("price", sa.Numeric(38, 18), nullable=False),
        sa.Column("source", sa.String(20), nullable=False, server_default="live"),
        sa.Column("timestamp", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_token_prices")),
        sa.UniqueConstraint("token", "network", "date", name="uq_token_prices_token_network_date"),
    )
    op.create_index("ix_token_prices_token", "token_prices", ["token"])
    op.create_index("ix_token_prices_token_network_timestamp", "token_prices", ["token", "network", "timestamp"])

    op.create_table(
        "backfill_jobs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("job_id", sa.String(64), nullable=False),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("network", sa.String(20), nullable=False),
        sa.Column("creation_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("total_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("processed_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_backfill_jobs")),
        sa.UniqueConstraint("job_id", name=op.f("uq_backfill_jobs_job_id")),
    )
    op.create_index("ix_backfill_jobs_token_network", "backfill_jobs", ["token", "network"])


def downgrade() -> None:
    op.drop_index("ix_backfill_jobs_token_network", table_name="backfill_jobs")
    op.drop_table("backfill_jobs")
    op.drop_index("ix_token_prices_token_network_timestamp", table_name="token_prices")
    op.drop_index("ix_token_prices_token", table_name="token_prices")
    op.drop_table("token_prices")
