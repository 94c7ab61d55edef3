"""
Stock Portfolio Tracker - Pydantic Schemas
User and Authentication Schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, ConfigDict


# =========================
# Token Schemas
# =========================

class Token(BaseModel):
    """Schema for token response."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    """Schema for refresh token request."""
    refresh_token: str


# =========================
# User Schemas
# =========================

class UserBase(BaseModel):
    """Base schema for User with common fields."""
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    phone: Optional[str] = Field(None, max_length=20)


class UserCreate(UserBase):
    """Schema for creating a new user."""
    password: str = Field(..., min_length=6, max_length=100)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "username": "johndoe",
                "phone": "+91 98765 43210",
                "password": "strongpassword123"
            }
        }
    )


class UserLogin(BaseModel):
    """Schema for JSON login."""
    email_or_username: str
    password: str


class User(UserBase):
    """Schema for User response (without password)."""
    id: int
    is_active: bool = True
    is_superuser: bool = False
    created_at: datetime
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserWithToken(User):
    """Schema for User response with tokens."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


# =========================
# Admin Schemas
# =========================

class UserStats(BaseModel):
    """Aggregate figures for one user's collections."""
    position_count: int = 0
    closed_position_count: int = 0
    watchlist_count: int = 0
    total_invested: float = 0.0
    total_current_value: float = 0.0


class UserWithStats(User):
    """Schema for the admin user listing."""
    stats: UserStats


# =========================
# Message Schemas
# =========================

class Message(BaseModel):
    """Generic message response schema."""
    message: str


class ErrorResponse(BaseModel):
    """Error response schema."""
    detail: str
    code: Optional[str] = None
