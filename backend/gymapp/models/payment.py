"""Recorded payment (cash at the desk, subscription purchase or renewal)."""
from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.sql import func

from gymapp.db.base import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    method = Column(String(16), nullable=False)  # cash | credit_card | bank_transfer | stripe | paypal
    transaction_id = Column(String(128), nullable=True)
    recorded_by = Column(Integer, ForeignKey("users.id"), nullable=True)  # gym owner who recorded it
    payment_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
