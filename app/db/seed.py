"""
Seed data for subscription plans.

Plans are platform-owned reference data; seeding is an upsert keyed on name so
it can run on every start-up.
"""
import logging
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from app.db.models.subscription_plan import SubscriptionPlan

logger = logging.getLogger(__name__)

DEFAULT_PLANS = [
    {
        "name": "Free",
        "price": Decimal("0.00"),
        "currency": "NGN",
        "description": "Basic resume analysis with limited features",
        "features": [
            "Job match analysis",
            "Keyword detection",
            "Gap suggestions",
            "Analysis history",
        ],
        "tier_level": 0,
    },
    {
        "name": "Pro",
        "price": Decimal("29999.00"),
        "currency": "NGN",
        "description": "Advanced resume analysis with premium reports",
        "features": [
            "Everything in Free",
            "ATS compatibility report",
            "Impact statement review",
            "Skills gap assessment",
            "Format optimization",
            "Career story flow",
            "Tailored resume generation",
            "Cover letter generation",
            "Priority support",
        ],
        "tier_level": 1,
    },
    {
        "name": "Enterprise",
        "price": Decimal("99999.00"),
        "currency": "NGN",
        "description": "Complete suite for teams",
        "features": [
            "All Pro features",
            "Team collaboration",
            "AI drafting assistant",
            "Analytics dashboard",
            "White-label option",
            "Dedicated support",
        ],
        "tier_level": 2,
    },
]


def seed_subscription_plans(db: Session, plans: List[dict] = None) -> List[SubscriptionPlan]:
    """Insert or update the default plans. Returns the plans ordered by tier."""
    plans = plans if plans is not None else DEFAULT_PLANS
    for data in plans:
        plan = db.query(SubscriptionPlan).filter(SubscriptionPlan.name == data["name"]).first()
        if plan:
            plan.price = data["price"]
            plan.description = data["description"]
            plan.features = data["features"]
        else:
            plan = SubscriptionPlan(is_active=True, **data)
            db.add(plan)
    db.commit()
    logger.info(f"Seeded subscription plans: count={len(plans)}")
    return db.query(SubscriptionPlan).order_by(SubscriptionPlan.tier_level).all()
