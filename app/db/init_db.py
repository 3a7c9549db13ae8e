"""
Create all tables directly from the models (local development without Alembic).
Run: python -m app.db.init_db
"""
import logging

from app.db.session import engine, SessionLocal
from app.db.base import Base
import app.db.models  # noqa: F401  # register models on Base.metadata
from app.db.seed import seed_subscription_plans

logger = logging.getLogger(__name__)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_subscription_plans(db)
    finally:
        db.close()
    logger.info("Database tables created and plans seeded")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
