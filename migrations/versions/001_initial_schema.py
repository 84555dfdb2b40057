"""Initial schema: users, sleep_logs

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )

    # --- sleep_logs ---
    op.create_table(
        "sleep_logs",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.BigInteger,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("sleep_date", sa.Date, nullable=False),
        sa.Column("time_in_bed_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("time_in_bed_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_time_in_bed_minutes", sa.Integer, nullable=False),
        sa.Column("morning_feeling", sa.String(16), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        # Constraints
        sa.UniqueConstraint("user_id", "sleep_date", name="uq_sleep_logs_user_date"),
        sa.CheckConstraint(
            "total_time_in_bed_minutes >= 1 AND total_time_in_bed_minutes <= 1440",
            name="chk_total_time_in_bed_minutes",
        ),
        sa.CheckConstraint(
            "time_in_bed_end > time_in_bed_start",
            name="chk_time_in_bed_end_after_start",
        ),
        sa.CheckConstraint(
            "morning_feeling IN ('BAD', 'OK', 'GOOD')",
            name="chk_morning_feeling",
        ),
    )
    op.create_index(
        "idx_sleep_logs_user_date", "sleep_logs", ["user_id", sa.text("sleep_date DESC")]
    )

    # updated_at trigger
    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = now();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TRIGGER trg_sleep_logs_updated_at
            BEFORE UPDATE ON sleep_logs
            FOR EACH ROW
            EXECUTE FUNCTION update_updated_at_column();
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS trg_sleep_logs_updated_at ON sleep_logs")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column")
    op.drop_table("sleep_logs")
    op.drop_table("users")
