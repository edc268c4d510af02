"""Trainer availability: one row per trainer, with its (day, instant) slots as child rows.

A (day, slot_time) pair may appear only once per trainer; the unique constraint makes the
store reject duplicates instead of letting them double-book.
"""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from gymapp.db.base import Base


class TrainerAvailability(Base):
    __tablename__ = "trainer_availability"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trainer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    slots = relationship(
        "AvailabilitySlot",
        back_populates="availability",
        cascade="all, delete-orphan",
        order_by="AvailabilitySlot.position",
    )


class AvailabilitySlot(Base):
    __tablename__ = "availability_slots"
    __table_args__ = (
        UniqueConstraint("trainer_id", "day", "slot_time", name="uq_availability_slots_trainer_day_time"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    availability_id = Column(
        Integer, ForeignKey("trainer_availability.id", ondelete="CASCADE"), nullable=False, index=True
    )
    trainer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(String(32), nullable=False)
    slot_time = Column(DateTime(timezone=True), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # order of declaration across the document

    availability = relationship("TrainerAvailability", back_populates="slots")
