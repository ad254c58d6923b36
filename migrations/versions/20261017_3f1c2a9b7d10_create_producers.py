"""create producers

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "3f1c2a9b7d10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "producers",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            autoincrement=True,
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("tax_id", sa.String(length=18), nullable=False),
        sa.Column("farm_name", sa.String(length=255), nullable=False),
        sa.Column("city", sa.String(length=255), nullable=False),
        sa.Column("state", sa.String(length=64), nullable=False),
        sa.Column("total_area", sa.Float(), nullable=False),
        sa.Column("agricultural_area", sa.Float(), nullable=False),
        sa.Column("vegetation_area", sa.Float(), nullable=False),
        sa.Column("crops", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_producers")),
    )
    op.create_index(
        op.f("ix_producers_state"), "producers", ["state"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_producers_state"), table_name="producers")
    op.drop_table("producers")
