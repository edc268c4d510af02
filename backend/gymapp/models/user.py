"""Account for every role (client, trainer, gym owner): one id space shared by chat participants."""
from sqlalchemy import JSON, Column, Date, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from gymapp.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(256), nullable=False, unique=True, index=True)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(16), nullable=False, index=True)  # client | trainer | gym_owner
    phone_number = Column(String(32), nullable=False, server_default="")
    date_of_birth = Column(Date, nullable=True)
    sex = Column(String(16), nullable=True)

    # Trainer profile
    specialties = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)
    experience_years = Column(Integer, nullable=False, server_default="0")
    certifications = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False, default=list)

    # Client profile
    height_cm = Column(Float, nullable=False, server_default="0")
    weight_kg = Column(Float, nullable=False, server_default="0")
    goal = Column(String(128), nullable=False, server_default="none")
    workout_days_per_week = Column(Integer, nullable=False, server_default="3")
    balance_due = Column(Float, nullable=False, server_default="0")
    balance_limit = Column(Float, nullable=False, server_default="200")
    # Gym owner managing this client, if any
    gym_owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
