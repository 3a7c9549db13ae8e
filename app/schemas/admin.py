"""
Pydantic schemas for the admin dashboard.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.schemas.billing import SubscriptionResponse


class AdminUserResponse(BaseModel):
    id: int
    email: str
    name: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None
    last_active: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AdminUserListResponse(BaseModel):
    users: List[AdminUserResponse]
    limit: int
    offset: int


class AdminSubscriptionResponse(SubscriptionResponse):
    user_id: int


class AdminSubscriptionListResponse(BaseModel):
    subscriptions: List[AdminSubscriptionResponse]
    limit: int
    offset: int


class RoleUpdateRequest(BaseModel):
    role: str = Field(..., pattern="^(free|pro|enterprise|admin)$")
