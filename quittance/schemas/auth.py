from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Registration details for creating a new account."""
    email: EmailStr = Field(..., description="Login e-mail (stored lower-cased)")
    password: str = Field(..., description="Password, at least 8 characters")
    name: str = Field(..., description="Display name")
    address: str = Field("", description="Postal address")
    phone: Optional[str] = Field(None)
    birth_date: Optional[date] = Field(None)
    birth_place: Optional[str] = Field(None)


class LoginRequest(BaseModel):
    """E-mail and password credentials."""
    email: EmailStr = Field(..., description="Login e-mail")
    password: str = Field(..., description="Password")


class UserRead(BaseModel):
    """Public view of an account; the password digest is never exposed."""
    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="User email")
    name: str = Field(..., description="Display name")
    address: str = Field("")
    phone: Optional[str] = Field(None)
    birth_date: Optional[date] = Field(None)
    birth_place: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Created timestamp")

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Bearer token issued on register/login together with the account."""
    token: str = Field(..., description="Bearer token valid for 24 hours")
    user: UserRead = Field(...)
