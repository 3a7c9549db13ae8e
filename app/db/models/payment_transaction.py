"""
PaymentTransaction model - one row per checkout attempt.
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base

TERMINAL_PAYMENT_STATUSES = ("success", "failed", "cancelled", "refunded")


class PaymentTransaction(Base):
    __tablename__ = "payment_transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    subscription_id = Column(Integer, ForeignKey("subscriptions.id", ondelete="SET NULL"), nullable=True)

    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="NGN")
    status = Column(String, nullable=False, default="pending")  # pending | success | failed | cancelled | refunded
    reference = Column(String, unique=True, nullable=False, index=True)
    gateway = Column(String, nullable=False, default="stripe")
    gateway_response = Column(JSON, nullable=False, default=dict)
    transaction_type = Column(String, nullable=False, default="subscription")  # subscription | one_time | refund

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    subscription = relationship("Subscription", backref="transactions")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_PAYMENT_STATUSES

    def __repr__(self):
        return f"<PaymentTransaction(id={self.id}, reference='{self.reference}', status='{self.status}')>"
