"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.

All models must be imported here to be included in database migrations and table creation.
"""
from app.db.models.user import User
from app.db.models.subscription_plan import SubscriptionPlan
from app.db.models.subscription import Subscription
from app.db.models.payment_transaction import PaymentTransaction
from app.db.models.analysis_record import AnalysisRecord
from app.db.models.tailored_resume import TailoredResume
from app.db.models.document import Document, DocumentChunk
from app.db.models.chat import ChatSession, Message
from app.db.models.citation import Citation

# Explicitly export all models for clarity
__all__ = [
    "User",
    "SubscriptionPlan",
    "Subscription",
    "PaymentTransaction",
    "AnalysisRecord",
    "TailoredResume",
    "Document",
    "DocumentChunk",
    "ChatSession",
    "Message",
    "Citation",
]
