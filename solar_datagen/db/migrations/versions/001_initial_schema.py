"""
Initial schema: energy_generation_records hypertable.

Enables the TimescaleDB extension, creates energy_generation_records with a
composite primary key (unit_serial, ts), then converts it to a hypertable
partitioned on ts with a 30-day chunk interval (12 rows per unit per day).

Revision ID: 001
Revises: None
Create Date: 2026-10-03
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# Revision identifiers used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the timescaledb extension and the records hypertable."""
    op.execute("CREATE EXTENSION IF NOT EXISTS timescaledb")

    op.create_table(
        "energy_generation_records",
        sa.Column("unit_serial", sa.Text(), nullable=False),
        sa.Column("ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("unit_id", sa.Text(), nullable=True),
        sa.Column("energy_generated", sa.Double(), nullable=False),
        sa.Column("peak_power", sa.Double(), nullable=False),
        sa.Column("efficiency", sa.Double(), nullable=False),
        sa.Column("temperature", sa.Double(), nullable=False),
        sa.Column("anomaly_kind", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("unit_serial", "ts"),
    )

    op.execute(
        "SELECT create_hypertable("
        "'energy_generation_records', 'ts', "
        "chunk_time_interval => INTERVAL '30 days', "
        "if_not_exists => TRUE"
        ")"
    )


def downgrade() -> None:
    """Drop energy_generation_records.

    Note: Does not drop the timescaledb extension as other tables may use it.
    """
    op.drop_table("energy_generation_records")
