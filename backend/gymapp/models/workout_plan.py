"""Workout plan written by a trainer: an ordered exercise list, assigned to any number of clients."""
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from gymapp.db.base import Base


class WorkoutPlan(Base):
    __tablename__ = "workout_plans"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trainer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(128), nullable=False, unique=True)
    description = Column(Text, nullable=False)
    # [{name, sets, reps, duration, rest, notes}, ...]
    exercises = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    assignments = relationship(
        "WorkoutPlanClient",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="WorkoutPlanClient.client_id",
    )


class WorkoutPlanClient(Base):
    __tablename__ = "workout_plan_clients"

    plan_id = Column(Integer, ForeignKey("workout_plans.id", ondelete="CASCADE"), primary_key=True)
    client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True)

    plan = relationship("WorkoutPlan", back_populates="assignments")
