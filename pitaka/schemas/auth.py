"""
Pydantic schemas for authentication endpoints (signup and login).

If a required field is missing or the wrong type, FastAPI returns a 422
error before the service runs.
"""

import uuid

from pydantic import BaseModel, EmailStr, Field


class UserSignupRequest(BaseModel):
    """Request body for POST /auth/signup."""
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)


class UserLoginRequest(BaseModel):
    """Request body for POST /auth/login."""
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Response body for successful login/signup: user info + JWT."""
    user_id: uuid.UUID
    email: str
    token: str
    token_type: str = "bearer"
