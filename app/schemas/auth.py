"""
Pydantic schemas for authentication and profile endpoints.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class SignupRequest(BaseModel):
    """Request schema for user signup."""
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, description="User's password (min 8 characters)")
    name: Optional[str] = Field(default=None, max_length=200, description="Display name")

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Validate password length in bytes (bcrypt limit is 72 bytes)."""
        password_bytes = v.encode("utf-8")
        if len(password_bytes) > 72:
            raise ValueError("Password too long (bcrypt limit 72 bytes)")
        if len(password_bytes) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "email": "ada@example.com",
            "password": "SecurePass123",
            "name": "Ada Obi",
        }
    })


class SignupResponse(BaseModel):
    message: str
    user_id: int


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class ProfileResponse(BaseModel):
    id: int
    email: str
    role: str
    name: Optional[str] = None
    address: Optional[str] = None
    profile_picture_url: Optional[str] = None
    preferences: Dict[str, Any] = Field(default_factory=dict)
    practice_areas: List[str] = Field(default_factory=list)
    last_active: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdateRequest(BaseModel):
    """Editable profile fields. Role and email are not user-editable."""
    name: Optional[str] = Field(default=None, max_length=200)
    address: Optional[str] = Field(default=None, max_length=500)
    profile_picture_url: Optional[str] = Field(default=None, max_length=2048)
    preferences: Optional[Dict[str, Any]] = None
    practice_areas: Optional[List[str]] = None

    # An explicit null clears the field; the columns themselves are never NULL
    @field_validator("preferences")
    @classmethod
    def clear_preferences(cls, v: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return {} if v is None else v

    @field_validator("practice_areas")
    @classmethod
    def clear_practice_areas(cls, v: Optional[List[str]]) -> List[str]:
        return [] if v is None else v


class TierResponse(BaseModel):
    tier: str
    rank: int


class FeatureAccessResponse(BaseModel):
    feature: str
    allowed: bool
    required_tier: str
