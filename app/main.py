import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import CORS_ORIGINS, LOG_LEVEL, RUN_MIGRATIONS
from app.core.logging_config import setup_logging
from app.api.routes import admin, analysis, auth, billing, chat, citations, health, me, tailor

logger = logging.getLogger(__name__)


def prepare_database() -> None:
    """Bring the schema up to date and make sure the plans exist."""
    if RUN_MIGRATIONS:
        from app.db.migrate import run_migrations
        from app.db.seed import seed_subscription_plans
        from app.db.session import SessionLocal

        run_migrations()
        db = SessionLocal()
        try:
            seed_subscription_plans(db)
        finally:
            db.close()
    else:
        from app.db.init_db import init_db
        init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(LOG_LEVEL)
    prepare_database()
    logger.info("Resume Tailor API started")
    yield


# ============================================
# FASTAPI APP INIT
# ============================================

app = FastAPI(title="Resume Tailor API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# ============================================
# REGISTER ALL ROUTERS
# ============================================

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(me.router)
app.include_router(analysis.router)
app.include_router(tailor.router)
app.include_router(billing.router)
app.include_router(chat.router)
app.include_router(citations.router)
app.include_router(admin.router)


@app.get("/")
def root():
    return {"status": "Resume Tailor API running"}
