"""create pizza readings, spikes, patterns and forecast view

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-01-10

"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # pizza_readings: one row per collection tick
    op.create_table(
        "pizza_readings",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("index_value", sa.Numeric(5, 2), nullable=False),
        sa.Column("dc_hour", sa.Integer(), nullable=False),
        sa.Column("dc_weekday", sa.Integer(), nullable=False),
        sa.Column("is_overtime", sa.Boolean(), server_default=sa.false()),
        sa.Column("is_weekend", sa.Boolean(), server_default=sa.false()),
        sa.Column("raw_data", JSONB(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_pizza_readings"),
    )
    op.execute("CREATE INDEX ix_pizza_readings_timestamp ON pizza_readings (timestamp DESC)")
    op.create_index("ix_pizza_readings_dc_hour", "pizza_readings", ["dc_hour"])
    op.create_index("ix_pizza_readings_dc_weekday", "pizza_readings", ["dc_weekday"])
    # At most one reading per UTC minute
    op.execute(
        "CREATE UNIQUE INDEX uq_pizza_readings_minute ON pizza_readings "
        "(date_trunc('minute', timestamp AT TIME ZONE 'UTC'))"
    )

    # pizza_spikes: append-only, written after the reading commits
    op.create_table(
        "pizza_spikes",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("index_from", sa.Numeric(5, 2), nullable=True),
        sa.Column("index_to", sa.Numeric(5, 2), nullable=True),
        sa.Column("change_amount", sa.Numeric(5, 2), nullable=True),
        sa.Column("is_overtime", sa.Boolean(), server_default=sa.false()),
        sa.Column("is_weekend", sa.Boolean(), server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_pizza_spikes"),
    )
    op.execute("CREATE INDEX ix_pizza_spikes_timestamp ON pizza_spikes (timestamp DESC)")

    # Aggregate pattern tables, seeded with flat priors
    for table, key, upper in (("hourly_patterns", "hour", 23), ("weekday_patterns", "weekday", 6)):
        op.create_table(
            table,
            sa.Column(key, sa.Integer(), nullable=False),
            sa.Column("avg_index", sa.Numeric(5, 2), nullable=True),
            sa.Column("min_index", sa.Numeric(5, 2), nullable=True),
            sa.Column("max_index", sa.Numeric(5, 2), nullable=True),
            sa.Column("std_dev", sa.Numeric(5, 2), nullable=True),
            sa.Column("sample_count", sa.Integer(), nullable=True),
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                server_default=sa.func.now(),
            ),
            sa.PrimaryKeyConstraint(key, name=f"pk_{table}"),
        )
        op.execute(
            f"INSERT INTO {table} ({key}, avg_index, min_index, max_index, std_dev, sample_count) "
            f"SELECT generate_series(0, {upper}), 30, 0, 100, 15, 0"
        )

    op.execute(
        """
        CREATE VIEW readings_with_forecast AS
        SELECT
            r.*,
            h.avg_index AS hourly_forecast,
            h.std_dev AS hourly_stddev,
            w.avg_index AS weekday_forecast,
            (h.avg_index * 0.6 + w.avg_index * 0.3
                + (SELECT AVG(index_value) FROM pizza_readings) * 0.1) AS combined_forecast
        FROM pizza_readings r
        LEFT JOIN hourly_patterns h ON r.dc_hour = h.hour
        LEFT JOIN weekday_patterns w ON r.dc_weekday = w.weekday
        ORDER BY r.timestamp DESC
        """
    )


def downgrade() -> None:
    op.execute("DROP VIEW IF EXISTS readings_with_forecast")
    op.drop_table("weekday_patterns")
    op.drop_table("hourly_patterns")
    op.execute("DROP INDEX IF EXISTS ix_pizza_spikes_timestamp")
    op.drop_table("pizza_spikes")
    op.execute("DROP INDEX IF EXISTS uq_pizza_readings_minute")
    op.drop_index("ix_pizza_readings_dc_weekday")
    op.drop_index("ix_pizza_readings_dc_hour")
    op.execute("DROP INDEX IF EXISTS ix_pizza_readings_timestamp")
    op.drop_table("pizza_readings")
