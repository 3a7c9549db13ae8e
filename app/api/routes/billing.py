"""
Billing endpoints: plans, checkout, verification, webhook and subscriptions.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.db.models.user import User
from app.core.auth_dependency import get_current_user
from app.core.exceptions import PaymentNotFoundError, PaymentProviderError, PlanNotFoundError
from app.schemas.billing import (
    CreateCheckoutRequest,
    CreateCheckoutResponse,
    PlanResponse,
    SubscriptionResponse,
    TransactionResponse,
    VerifyPaymentResponse,
)
from app.services import payment_service, subscription_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])


def _subscription_response(subscription) -> SubscriptionResponse:
    response = SubscriptionResponse.model_validate(subscription)
    response.plan_name = subscription.plan.name if subscription.plan else None
    return response


@router.get("/plans", response_model=list[PlanResponse])
def list_plans(db: Session = Depends(get_db)):
    return subscription_service.list_plans(db)


@router.post("/checkout", response_model=CreateCheckoutResponse)
def create_checkout(
    payload: CreateCheckoutRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Start a hosted checkout for a paid plan. Verify the returned reference afterwards."""
    try:
        result = payment_service.initialize_checkout(
            db, current_user, payload.plan_id, payload.success_url, payload.cancel_url
        )
    except PlanNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PaymentProviderError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return CreateCheckoutResponse(**result)


@router.post("/verify/{reference}", response_model=VerifyPaymentResponse)
def verify_payment(
    reference: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Confirm a checkout. Safe to call repeatedly for the same reference."""
    try:
        transaction = payment_service.verify_payment(db, reference, user_id=current_user.id)
    except PaymentNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    except PaymentProviderError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    subscription = transaction.subscription
    return VerifyPaymentResponse(
        reference=transaction.reference,
        status=transaction.status,
        subscription=_subscription_response(subscription) if subscription else None,
    )


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    db: Session = Depends(get_db),
):
    payload = await request.body()
    try:
        event = payment_service.verify_webhook(payload, stripe_signature)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        payment_service.handle_webhook_event(db, event)
    except PaymentProviderError as e:
        # Non-2xx makes Stripe redeliver the event later
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return {"status": "success"}


@router.get("/subscription", response_model=Optional[SubscriptionResponse])
def get_subscription(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """The subscription currently granting the user's tier, or null."""
    subscription = subscription_service.get_active_subscription(db, current_user.id)
    return _subscription_response(subscription) if subscription else None


@router.get("/subscriptions", response_model=list[SubscriptionResponse])
def list_subscriptions(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [_subscription_response(s) for s in subscription_service.list_subscriptions(db, current_user.id)]


@router.post("/subscriptions/{subscription_id}/cancel", response_model=SubscriptionResponse)
def cancel_subscription(
    subscription_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        subscription = subscription_service.cancel_subscription(db, current_user.id, subscription_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if subscription is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    return _subscription_response(subscription)


@router.get("/transactions", response_model=list[TransactionResponse])
def list_transactions(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return payment_service.list_transactions(db, current_user.id)
