"""
Pydantic schemas for billing endpoints.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class PlanResponse(BaseModel):
    id: int
    name: str
    price: Decimal
    currency: str
    description: Optional[str] = None
    features: List[str] = Field(default_factory=list)
    tier_level: int
    duration_days: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class CreateCheckoutRequest(BaseModel):
    """Request schema for initializing a checkout."""
    plan_id: int = Field(..., description="Subscription plan id")
    success_url: Optional[str] = Field(None, description="URL to redirect after successful payment")
    cancel_url: Optional[str] = Field(None, description="URL to redirect if payment is canceled")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "plan_id": 2,
            "success_url": "https://example.com/success",
            "cancel_url": "https://example.com/pricing",
        }
    })


class CreateCheckoutResponse(BaseModel):
    checkout_url: str = Field(..., description="Hosted checkout URL")
    reference: str = Field(..., description="Payment reference to verify later")


class SubscriptionResponse(BaseModel):
    id: int
    plan_id: int
    plan_name: Optional[str] = None
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    auto_renew: bool = False

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    id: int
    reference: str
    amount: Decimal
    currency: str
    status: str
    subscription_id: Optional[int] = None
    transaction_type: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VerifyPaymentResponse(BaseModel):
    reference: str
    status: str
    subscription: Optional[SubscriptionResponse] = None


class CleanupResponse(BaseModel):
    expired: int
