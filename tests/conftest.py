"""
Shared fixtures: in-memory database, users on each tier, a scripted LLM and
an API client wired to both.
"""
import json
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.models.user import User
from app.db.models.subscription import Subscription
from app.db.models.subscription_plan import SubscriptionPlan
from app.db.seed import seed_subscription_plans
from app.db.session import get_db
from app.core.rate_limit import reset_rate_limits
from app.core.security import hash_password, create_access_token
from app.llm.provider import LLMProvider, LLMResponse
from app.services.analysis_provider import AnalysisProvider, get_analysis_provider


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


def analysis_payload(score: int = 72, **sections: Dict[str, Any]) -> Dict[str, Any]:
    """A well-formed analysis as the model would return it."""
    payload = {
        "match_summary": "Strong backend profile, light on cloud experience.",
        "match_score": f"{score}/100",
        "job_keywords_detected": [
            {"keyword": "Python", "status": "Present"},
            {"keyword": "FastAPI", "status": "Present"},
            {"keyword": "Kubernetes", "status": "Missing"},
        ],
        "gaps_and_suggestions": ["Add a project that shows container orchestration"],
    }
    payload.update(sections)
    return payload


def premium_section(score: float = 7) -> Dict[str, Any]:
    return {"score": score, "summary": "Mostly fine", "issues": ["One issue"], "suggestions": ["One fix"]}


class FakeLLM(LLMProvider):
    """Scripted LLM: returns queued replies in order and records every call."""

    def __init__(self, replies: Optional[List[Any]] = None):
        self.replies = list(replies or [])
        self.calls: List[Dict[str, Any]] = []

    def queue(self, reply: Any) -> None:
        self.replies.append(reply)

    def chat(self, messages, model, temperature=0.3, max_tokens=None, json_mode=False, **kwargs):
        self.calls.append({"messages": messages, "model": model, "json_mode": json_mode})
        reply = self.replies.pop(0) if self.replies else analysis_payload()
        if isinstance(reply, Exception):
            raise reply
        content = reply if isinstance(reply, str) else json.dumps(reply)
        return LLMResponse(content=content, tokens_in=100, tokens_out=200, model=model)


@pytest.fixture(autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    reset_rate_limits()
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def plans(db) -> Dict[str, SubscriptionPlan]:
    return {plan.name.lower(): plan for plan in seed_subscription_plans(db)}


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: str = "free", email: Optional[str] = None, password: str = "testpass123") -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            password_hash=hash_password(password),
            name=f"User {counter['n']}",
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def subscribe(db, plans):
    """Attach an active subscription on the named plan."""
    def _subscribe(user: User, plan: str, days: Optional[int] = 30, status: str = "active") -> Subscription:
        now = datetime.utcnow()
        subscription = Subscription(
            user_id=user.id,
            plan_id=plans[plan].id,
            status=status,
            start_date=now,
            end_date=now + timedelta(days=days) if days is not None else None,
        )
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
        return subscription

    return _subscribe


@pytest.fixture
def free_user(make_user):
    return make_user("free")


@pytest.fixture
def pro_user(make_user, subscribe):
    user = make_user("pro")
    subscribe(user, "pro")
    return user


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def provider(fake_llm):
    return AnalysisProvider(llm=fake_llm)


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture
def client(provider):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_analysis_provider] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_for():
    return auth_headers


@pytest.fixture
def make_payload():
    return analysis_payload


@pytest.fixture
def section():
    return premium_section
