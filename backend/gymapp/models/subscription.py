"""Client subscription plan: gates bookings and sets the session discount and monthly cap."""
from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.sql import func

from gymapp.db.base import Base


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_type = Column(String(16), nullable=False)  # basic | premium | pro
    status = Column(String(16), nullable=False, default="active", index=True)  # active | pending | expired | canceled
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    renewal_date = Column(DateTime(timezone=True), nullable=False)
    amount_paid = Column(Float, nullable=False)
    payment_method = Column(String(16), nullable=True)
    transaction_id = Column(String(128), nullable=True)
    session_discount = Column(Float, nullable=False, default=0)  # percent, 0..100
    max_bookings_per_month = Column(Integer, nullable=False, default=10)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
