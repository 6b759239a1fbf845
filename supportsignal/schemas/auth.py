"""Authentication and user schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CurrentUser(BaseModel):
    """Authenticated caller resolved from a bearer token."""

    id: UUID = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="User email address")
    role: str = Field(..., description="User role")
    company_id: Optional[UUID] = Field(None, description="Company the user belongs to")
    has_llm_access: bool = Field(default=False, description="Whether AI features are enabled")
    session_token: Optional[str] = Field(None, description="Server-side session token")


class TokenClaims(BaseModel):
    """Claims carried by a signed SupportSignal access token."""

    sub: str = Field(..., description="Subject (user ID)")
    sid: str = Field(..., description="Session token")
    role: str = Field(..., description="Role at login time")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")
    iss: str = Field(..., description="Token issuer")


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="Account password")
    remember_me: bool = Field(default=False, description="Extend the session to 30 days")


class LoginResponse(BaseModel):
    access_token: str = Field(..., description="Signed bearer token")
    token_type: str = Field(default="bearer")
    expires: datetime = Field(..., description="Session expiry")
    user: CurrentUser


class UserCreate(BaseModel):
    """User creation payload."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="Initial password")
    role: str = Field(..., description="Role to assign")
    company_id: Optional[UUID] = Field(None, description="Target company; defaults to the caller's")
    has_llm_access: bool = Field(default=False, description="Enable AI features")


class UserRoleUpdate(BaseModel):
    role: str = Field(..., description="New role")


class UserResponse(BaseModel):
    """User response model with database fields."""

    id: UUID = Field(..., description="User ID")
    name: str
    email: EmailStr
    role: str
    company_id: Optional[UUID] = None
    has_llm_access: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "CurrentUser",
    "LoginRequest",
    "LoginResponse",
    "TokenClaims",
    "UserCreate",
    "UserResponse",
    "UserRoleUpdate",
]
