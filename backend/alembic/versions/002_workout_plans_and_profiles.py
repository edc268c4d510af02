"""Workout plans, extra profile fields and gym owner client management.

workout_plan_clients links a plan to each client it is assigned to. users.gym_owner_id
points at the gym owner managing a client (NULL when unmanaged).

Revision ID: 002
Revises: 001
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column("users", sa.Column("date_of_birth", sa.Date(), nullable=True))
    op.add_column("users", sa.Column("sex", sa.String(16), nullable=True))
    op.add_column(
        "users",
        sa.Column(
            "certifications",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
            server_default="[]",
        ),
    )
    op.add_column(
        "users",
        sa.Column("gym_owner_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_users_gym_owner_id", "users", ["gym_owner_id"], unique=False)

    op.create_table(
        "workout_plans",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "trainer_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
        ),
        sa.Column("title", sa.String(128), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "exercises",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
            server_default="[]",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "workout_plan_clients",
        sa.Column(
            "plan_id", sa.Integer(), sa.ForeignKey("workout_plans.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "client_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
        ),
    )


def downgrade() -> None:
    op.drop_table("workout_plan_clients")
    op.drop_table("workout_plans")
    op.drop_index("ix_users_gym_owner_id", table_name="users")
    op.drop_column("users", "gym_owner_id")
    op.drop_column("users", "certifications")
    op.drop_column("users", "sex")
    op.drop_column("users", "date_of_birth")
