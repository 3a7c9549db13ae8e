"""
Payment service for Stripe Checkout.

One-time `payment` mode checkouts buy a fixed subscription period. The checkout
session id is the payment reference: it keys the PaymentTransaction row and
the Subscription it pays for.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import stripe
from sqlalchemy.orm import Session

from app.core.config import FRONTEND_URL, STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET
from app.core.exceptions import PaymentNotFoundError, PaymentProviderError, PlanNotFoundError
from app.db.models.payment_transaction import PaymentTransaction
from app.db.models.subscription import Subscription
from app.db.models.subscription_plan import SubscriptionPlan
from app.db.models.user import User
from app.services.subscription_service import activate_subscription

logger = logging.getLogger(__name__)

# Initialize Stripe client
if STRIPE_SECRET_KEY:
    stripe.api_key = STRIPE_SECRET_KEY
else:
    logger.warning("STRIPE_SECRET_KEY not configured - payments disabled")


def _minor_units(amount: Decimal) -> int:
    return int((Decimal(amount) * 100).to_integral_value())


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _session_snapshot(session: Any) -> Dict[str, Any]:
    """The parts of a checkout session worth keeping on the transaction."""
    return {
        "id": _field(session, "id"),
        "status": _field(session, "status"),
        "payment_status": _field(session, "payment_status"),
        "amount_total": _field(session, "amount_total"),
        "currency": _field(session, "currency"),
        "customer": _field(session, "customer"),
        "payment_intent": _field(session, "payment_intent"),
    }


def initialize_checkout(
    db: Session,
    user: User,
    plan_id: int,
    success_url: Optional[str] = None,
    cancel_url: Optional[str] = None,
) -> Dict[str, str]:
    """
    Start a checkout for a paid plan.

    Creates a pending Subscription and a pending PaymentTransaction keyed by the
    Stripe session id.

    Returns:
        {"checkout_url": ..., "reference": ...}

    Raises:
        PlanNotFoundError: Unknown, inactive or free plan
        PaymentProviderError: Stripe is not configured or rejected the request
    """
    plan = (
        db.query(SubscriptionPlan)
        .filter(SubscriptionPlan.id == plan_id, SubscriptionPlan.is_active.is_(True))
        .first()
    )
    if plan is None or plan.tier_level <= 0 or Decimal(plan.price) <= 0:
        raise PlanNotFoundError(f"Plan {plan_id} is not available for purchase")
    if not STRIPE_SECRET_KEY:
        raise PaymentProviderError("Payments are not configured")

    if not success_url:
        success_url = f"{FRONTEND_URL}/success?reference={{CHECKOUT_SESSION_ID}}"
    if not cancel_url:
        cancel_url = f"{FRONTEND_URL}/pricing?cancelled=1"

    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            customer_email=user.email,
            line_items=[{
                "price_data": {
                    "currency": plan.currency.lower(),
                    "unit_amount": _minor_units(plan.price),
                    "product_data": {"name": f"{plan.name} plan", "description": plan.description or ""},
                },
                "quantity": 1,
            }],
            success_url=success_url,
            cancel_url=cancel_url,
            metadata={"user_id": str(user.id), "plan_id": str(plan.id)},
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe error creating checkout session: user_id={user.id}, error={e}")
        raise PaymentProviderError("Failed to create checkout session") from e

    reference = _field(session, "id")
    subscription = Subscription(
        user_id=user.id,
        plan_id=plan.id,
        status="pending",
        payment_reference=reference,
        customer_reference=_field(session, "customer"),
    )
    db.add(subscription)
    db.flush()

    transaction = PaymentTransaction(
        user_id=user.id,
        subscription_id=subscription.id,
        amount=plan.price,
        currency=plan.currency,
        status="pending",
        reference=reference,
        gateway="stripe",
        gateway_response=_session_snapshot(session),
        transaction_type="subscription",
    )
    db.add(transaction)
    db.commit()

    logger.info(f"Checkout initialized: user_id={user.id}, plan={plan.name}, reference={reference}")
    return {"checkout_url": _field(session, "url"), "reference": reference}


def get_transaction(db: Session, reference: str, user_id: Optional[int] = None) -> PaymentTransaction:
    """
    Load a transaction by reference, scoped to `user_id` when given.

    Raises:
        PaymentNotFoundError: No such transaction for this user
    """
    query = db.query(PaymentTransaction).filter(PaymentTransaction.reference == reference)
    if user_id is not None:
        query = query.filter(PaymentTransaction.user_id == user_id)
    transaction = query.first()
    if transaction is None:
        raise PaymentNotFoundError(f"No payment with reference {reference}")
    return transaction


def _retrieve_session(reference: str) -> Any:
    try:
        return stripe.checkout.Session.retrieve(reference)
    except stripe.StripeError as e:
        logger.error(f"Stripe error retrieving session: reference={reference}, error={e}")
        raise PaymentProviderError("Failed to verify payment") from e


def _close_transaction(db: Session, transaction: PaymentTransaction, status: str) -> None:
    """Move a pending transaction to a failed terminal state and park its subscription."""
    transaction.status = status
    subscription = transaction.subscription
    if subscription is not None and subscription.status == "pending":
        subscription.status = "inactive"


def verify_payment(
    db: Session,
    reference: str,
    user_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> PaymentTransaction:
    """
    Confirm a checkout with Stripe and apply the result.

    Verifying a reference that already reached a terminal status returns it
    unchanged, so repeated verification never activates twice.

    Raises:
        PaymentNotFoundError: Unknown reference (or another user's)
        PaymentProviderError: Stripe could not be reached
    """
    transaction = get_transaction(db, reference, user_id)
    if transaction.is_terminal:
        logger.info(f"Payment already verified: reference={reference}, status={transaction.status}")
        return transaction

    session = _retrieve_session(reference)
    transaction.gateway_response = _session_snapshot(session)

    payment_status = _field(session, "payment_status")
    if payment_status == "paid":
        transaction.status = "success"
        if transaction.subscription is not None:
            activate_subscription(db, transaction.subscription, now)
        logger.info(f"Payment succeeded: reference={reference}, user_id={transaction.user_id}")
    elif _field(session, "status") == "expired":
        _close_transaction(db, transaction, "cancelled")
        logger.info(f"Checkout expired: reference={reference}, user_id={transaction.user_id}")
    else:
        logger.info(f"Payment still pending: reference={reference}, payment_status={payment_status}")

    db.commit()
    db.refresh(transaction)
    return transaction


def mark_payment_failed(db: Session, reference: str) -> PaymentTransaction:
    """Record an asynchronous payment failure. Terminal transactions are left as they are."""
    transaction = get_transaction(db, reference)
    if not transaction.is_terminal:
        _close_transaction(db, transaction, "failed")
        db.commit()
        logger.info(f"Payment failed: reference={reference}, user_id={transaction.user_id}")
    return transaction


def cancel_checkout(db: Session, reference: str) -> PaymentTransaction:
    transaction = get_transaction(db, reference)
    if not transaction.is_terminal:
        _close_transaction(db, transaction, "cancelled")
        db.commit()
        logger.info(f"Checkout cancelled: reference={reference}, user_id={transaction.user_id}")
    return transaction


def verify_webhook(request_body: bytes, signature: str) -> Dict[str, Any]:
    """
    Verify and parse a Stripe webhook event.

    Raises:
        ValueError: Missing secret, bad payload or bad signature
    """
    if not STRIPE_WEBHOOK_SECRET:
        raise ValueError("STRIPE_WEBHOOK_SECRET not configured")

    try:
        event = stripe.Webhook.construct_event(request_body, signature, STRIPE_WEBHOOK_SECRET)
    except ValueError as e:
        logger.error(f"Invalid webhook payload: {e}")
        raise ValueError(f"Invalid webhook payload: {e}")
    except stripe.SignatureVerificationError as e:
        logger.error(f"Webhook signature verification failed: {e}")
        raise ValueError(f"Invalid signature: {e}")

    logger.info(f"Verified webhook event: {event['type']}, id={event['id']}")
    return event


def handle_webhook_event(db: Session, event: Dict[str, Any]) -> Optional[PaymentTransaction]:
    """
    Apply a verified checkout webhook event.

    Returns the affected transaction, or None for events that are ignored or
    reference an unknown checkout.
    """
    event_type = event["type"]
    reference = event["data"]["object"]["id"]

    try:
        if event_type in ("checkout.session.completed", "checkout.session.async_payment_succeeded"):
            return verify_payment(db, reference)
        if event_type == "checkout.session.async_payment_failed":
            return mark_payment_failed(db, reference)
        if event_type == "checkout.session.expired":
            return cancel_checkout(db, reference)
    except PaymentNotFoundError:
        logger.warning(f"Webhook for unknown checkout: type={event_type}, reference={reference}")
        return None

    logger.debug(f"Ignoring webhook event: type={event_type}")
    return None


def list_transactions(db: Session, user_id: int) -> List[PaymentTransaction]:
    return (
        db.query(PaymentTransaction)
        .filter(PaymentTransaction.user_id == user_id)
        .order_by(PaymentTransaction.created_at.desc(), PaymentTransaction.id.desc())
        .all()
    )
