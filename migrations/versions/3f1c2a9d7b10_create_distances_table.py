"""Create distance cache and api usage tables.

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# Alembic identifiers
revision: str = "3f1c2a9d7b10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "distances",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("from_lat", sa.Numeric(9, 5), nullable=False),
        sa.Column("from_lng", sa.Numeric(9, 5), nullable=False),
        sa.Column("to_lat", sa.Numeric(9, 5), nullable=False),
        sa.Column("to_lng", sa.Numeric(9, 5), nullable=False),
        sa.Column("distance_km", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_distances"),
        sa.UniqueConstraint(
            "from_lat", "from_lng", "to_lat", "to_lng", name="uq_distances_coordinates"
        ),
    )
    op.create_index("ix_distances_expires_at", "distances", ["expires_at"])

    op.create_table(
        "api_usages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("service", sa.String(length=64), nullable=False),
        sa.Column("metric", sa.String(length=64), nullable=False),
        sa.Column("value", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_api_usages"),
        sa.UniqueConstraint(
            "service", "metric", "date", name="uq_api_usage_service_metric_date"
        ),
    )
    op.create_index("ix_api_usages_date", "api_usages", ["date"])


def downgrade() -> None:
    op.drop_index("ix_api_usages_date", table_name="api_usages")
    op.drop_table("api_usages")
    op.drop_index("ix_distances_expires_at", table_name="distances")
    op.drop_table("distances")
