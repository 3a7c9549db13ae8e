"""
SubscriptionPlan model - platform-owned reference data seeded at deployment.
"""
from sqlalchemy import Column, Integer, String, Text, Numeric, Boolean, DateTime, JSON
from sqlalchemy.sql import func
from app.db.base import Base


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)  # "Free", "Pro", "Enterprise"
    price = Column(Numeric(10, 2), nullable=False, default=0)
    currency = Column(String(3), nullable=False, default="NGN")
    description = Column(Text, nullable=True)
    features = Column(JSON, nullable=False, default=list)  # Display labels
    tier_level = Column(Integer, nullable=False, unique=True)  # 0: Free, 1: Pro, 2: Enterprise
    duration_days = Column(Integer, nullable=True)  # None -> SUBSCRIPTION_PERIOD_DAYS
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<SubscriptionPlan(id={self.id}, name='{self.name}', tier_level={self.tier_level})>"
