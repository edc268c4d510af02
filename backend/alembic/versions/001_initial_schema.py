"""Initial schema: users, trainer availability, bookings, subscriptions, payments, messages.

bookings carries a partial unique index on (trainer_id, client_id, session_time) for rows
whose status is not cancelled, so a cancelled slot can be booked again.

Revision ID: 001
Revises:
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_BOOKING_PREDICATE = sa.text("status <> 'cancelled'")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False, unique=True, index=True),
        sa.Column("email", sa.String(256), nullable=False, unique=True, index=True),
        sa.Column("password_hash", sa.String(128), nullable=False),
        sa.Column("role", sa.String(16), nullable=False, index=True),
        sa.Column("phone_number", sa.String(32), nullable=False, server_default=""),
        sa.Column(
            "specialties",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
            server_default="[]",
        ),
        sa.Column("experience_years", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("height_cm", sa.Float(), nullable=False, server_default="0"),
        sa.Column("weight_kg", sa.Float(), nullable=False, server_default="0"),
        sa.Column("goal", sa.String(128), nullable=False, server_default="none"),
        sa.Column("workout_days_per_week", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("balance_due", sa.Float(), nullable=False, server_default="0"),
        sa.Column("balance_limit", sa.Float(), nullable=False, server_default="200"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "trainer_availability",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "trainer_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False, unique=True, index=True,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "availability_slots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "availability_id", sa.Integer(), sa.ForeignKey("trainer_availability.id", ondelete="CASCADE"),
            nullable=False, index=True,
        ),
        sa.Column("trainer_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("day", sa.String(32), nullable=False),
        sa.Column("slot_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("trainer_id", "day", "slot_time", name="uq_availability_slots_trainer_day_time"),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("trainer_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, index=True),
        sa.Column("session_time", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("session_cost", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "uq_bookings_active_trainer_client_time",
        "bookings",
        ["trainer_id", "client_id", "session_time"],
        unique=True,
        postgresql_where=ACTIVE_BOOKING_PREDICATE,
        sqlite_where=ACTIVE_BOOKING_PREDICATE,
    )

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("plan_type", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="active", index=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("renewal_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("amount_paid", sa.Float(), nullable=False),
        sa.Column("payment_method", sa.String(16), nullable=True),
        sa.Column("transaction_id", sa.String(128), nullable=True),
        sa.Column("session_discount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("max_bookings_per_month", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("method", sa.String(16), nullable=False),
        sa.Column("transaction_id", sa.String(128), nullable=True),
        sa.Column("recorded_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("payment_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("sender_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "receiver_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
        ),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_messages_sender_receiver_timestamp",
        "messages",
        ["sender_id", "receiver_id", "timestamp"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_messages_sender_receiver_timestamp", table_name="messages")
    op.drop_table("messages")
    op.drop_table("payments")
    op.drop_table("subscriptions")
    op.drop_index("uq_bookings_active_trainer_client_time", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("availability_slots")
    op.drop_table("trainer_availability")
    op.drop_table("users")
