from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.db.base import Base

SUBSCRIPTION_STATUSES = ("pending", "active", "inactive", "cancelled", "expired")


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = Column(Integer, ForeignKey("subscription_plans.id", ondelete="RESTRICT"), nullable=False)

    status = Column(String, nullable=False, default="pending", index=True)  # pending | active | inactive | cancelled | expired
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    payment_reference = Column(String, unique=True, nullable=True)  # Checkout session id
    customer_reference = Column(String, nullable=True)  # Gateway customer id
    auto_renew = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    plan = relationship("SubscriptionPlan", lazy="joined")
    user = relationship("User", backref="subscriptions")

    __table_args__ = (
        Index("idx_subscriptions_user_status", "user_id", "status"),
    )

    def __repr__(self):
        return f"<Subscription(id={self.id}, user_id={self.user_id}, plan_id={self.plan_id}, status='{self.status}')>"
