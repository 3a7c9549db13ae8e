"""
Tests for checkout, verification and webhook handling with Stripe mocked out.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe

from app.core.exceptions import PaymentNotFoundError, PaymentProviderError, PlanNotFoundError
from app.db.models.payment_transaction import PaymentTransaction
from app.db.models.subscription import Subscription
from app.services import payment_service
from app.services.tier_service import resolve_tier


@pytest.fixture
def pending_checkout(db, plans, free_user):
    """A pending Pro checkout with reference R123."""
    subscription = Subscription(user_id=free_user.id, plan_id=plans["pro"].id, status="pending", payment_reference="R123")
    db.add(subscription)
    db.flush()
    transaction = PaymentTransaction(
        user_id=free_user.id,
        subscription_id=subscription.id,
        amount=plans["pro"].price,
        currency="NGN",
        status="pending",
        reference="R123",
    )
    db.add(transaction)
    db.commit()
    return transaction


def paid_session(reference="R123"):
    return {"id": reference, "status": "complete", "payment_status": "paid", "amount_total": 2999900}


def test_verify_twice_activates_once(db, free_user, pending_checkout):
    """Verifying R123 twice yields one active subscription ending 30 days after activation."""
    now = datetime(2025, 3, 1, 12, 0, 0)
    with patch("stripe.checkout.Session.retrieve", return_value=paid_session()) as retrieve:
        first = payment_service.verify_payment(db, "R123", now=now)
        second = payment_service.verify_payment(db, "R123", now=now + timedelta(days=2))

    assert retrieve.call_count == 1
    assert first.status == second.status == "success"

    subscriptions = db.query(Subscription).filter(Subscription.user_id == free_user.id).all()
    assert len(subscriptions) == 1
    subscription = subscriptions[0]
    assert subscription.status == "active"
    assert subscription.start_date.replace(tzinfo=None) == now
    assert subscription.end_date.replace(tzinfo=None) == now + timedelta(days=30)

    db.refresh(free_user)
    assert free_user.role == "pro"


def test_verified_payment_unlocks_the_tier(db, free_user, pending_checkout):
    with patch("stripe.checkout.Session.retrieve", return_value=paid_session()):
        payment_service.verify_payment(db, "R123")
    assert resolve_tier(db, free_user.id) == "pro"


def test_plan_duration_overrides_default_period(db, plans, free_user, pending_checkout):
    plans["pro"].duration_days = 365
    db.commit()
    now = datetime(2025, 1, 1)

    with patch("stripe.checkout.Session.retrieve", return_value=paid_session()):
        payment_service.verify_payment(db, "R123", now=now)

    subscription = db.query(Subscription).one()
    assert subscription.end_date.replace(tzinfo=None) == now + timedelta(days=365)


def test_unpaid_session_stays_pending(db, pending_checkout):
    session = {"id": "R123", "status": "open", "payment_status": "unpaid"}
    with patch("stripe.checkout.Session.retrieve", return_value=session):
        transaction = payment_service.verify_payment(db, "R123")

    assert transaction.status == "pending"
    assert db.query(Subscription).one().status == "pending"


def test_expired_session_cancels(db, free_user, pending_checkout):
    session = {"id": "R123", "status": "expired", "payment_status": "unpaid"}
    with patch("stripe.checkout.Session.retrieve", return_value=session):
        transaction = payment_service.verify_payment(db, "R123")

    assert transaction.status == "cancelled"
    assert db.query(Subscription).one().status == "inactive"
    db.refresh(free_user)
    assert free_user.role == "free"


def test_failed_payment_is_terminal(db, pending_checkout):
    payment_service.mark_payment_failed(db, "R123")

    with patch("stripe.checkout.Session.retrieve", return_value=paid_session()) as retrieve:
        transaction = payment_service.verify_payment(db, "R123")

    retrieve.assert_not_called()
    assert transaction.status == "failed"
    assert db.query(Subscription).one().status == "inactive"


def test_verify_is_scoped_to_the_payer(db, make_user, pending_checkout):
    stranger = make_user()
    with pytest.raises(PaymentNotFoundError):
        payment_service.verify_payment(db, "R123", user_id=stranger.id)


def test_unknown_reference(db, plans):
    with pytest.raises(PaymentNotFoundError):
        payment_service.verify_payment(db, "nope")


def test_gateway_error_leaves_payment_pending(db, pending_checkout):
    with patch("stripe.checkout.Session.retrieve", side_effect=stripe.APIConnectionError("offline")):
        with pytest.raises(PaymentProviderError):
            payment_service.verify_payment(db, "R123")

    db.expire_all()
    assert db.query(PaymentTransaction).one().status == "pending"


def test_initialize_checkout_records_pending_rows(db, plans, free_user, monkeypatch):
    monkeypatch.setattr(payment_service, "STRIPE_SECRET_KEY", "sk_test_123")
    session = SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.com/c/cs_test_1", customer=None)

    with patch("stripe.checkout.Session.create", return_value=session) as create:
        result = payment_service.initialize_checkout(db, free_user, plans["pro"].id)

    assert result == {"checkout_url": session.url, "reference": "cs_test_1"}
    kwargs = create.call_args.kwargs
    assert kwargs["mode"] == "payment"
    assert kwargs["line_items"][0]["price_data"]["unit_amount"] == 2999900
    assert kwargs["line_items"][0]["price_data"]["currency"] == "ngn"

    transaction = db.query(PaymentTransaction).one()
    assert transaction.status == "pending"
    assert transaction.amount == Decimal("29999.00")
    assert transaction.subscription.status == "pending"
    assert transaction.subscription.payment_reference == "cs_test_1"


def test_free_plan_cannot_be_purchased(db, plans, free_user, monkeypatch):
    monkeypatch.setattr(payment_service, "STRIPE_SECRET_KEY", "sk_test_123")
    with pytest.raises(PlanNotFoundError):
        payment_service.initialize_checkout(db, free_user, plans["free"].id)
    with pytest.raises(PlanNotFoundError):
        payment_service.initialize_checkout(db, free_user, 9999)


def test_checkout_without_stripe_key(db, plans, free_user, monkeypatch):
    monkeypatch.setattr(payment_service, "STRIPE_SECRET_KEY", None)
    with pytest.raises(PaymentProviderError):
        payment_service.initialize_checkout(db, free_user, plans["pro"].id)
    assert db.query(Subscription).count() == 0


def test_webhook_completed_event_activates(db, free_user, pending_checkout):
    event = {"id": "evt_1", "type": "checkout.session.completed", "data": {"object": {"id": "R123"}}}
    with patch("stripe.checkout.Session.retrieve", return_value=paid_session()):
        transaction = payment_service.handle_webhook_event(db, event)

    assert transaction.status == "success"
    assert db.query(Subscription).one().status == "active"


def test_webhook_failure_and_expiry_events(db, pending_checkout):
    event = {"id": "evt_2", "type": "checkout.session.async_payment_failed", "data": {"object": {"id": "R123"}}}
    assert payment_service.handle_webhook_event(db, event).status == "failed"


def test_webhook_ignores_unrelated_and_unknown(db, plans):
    unrelated = {"id": "evt_3", "type": "invoice.paid", "data": {"object": {"id": "in_1"}}}
    unknown = {"id": "evt_4", "type": "checkout.session.expired", "data": {"object": {"id": "cs_unknown"}}}
    assert payment_service.handle_webhook_event(db, unrelated) is None
    assert payment_service.handle_webhook_event(db, unknown) is None


def test_webhook_requires_a_valid_signature(monkeypatch):
    monkeypatch.setattr(payment_service, "STRIPE_WEBHOOK_SECRET", "whsec_test")
    with pytest.raises(ValueError):
        payment_service.verify_webhook(b'{"id": "evt_1"}', "t=1,v1=bad")
