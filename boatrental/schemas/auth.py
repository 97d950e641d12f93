"""Pydantic schemas for the login API."""

from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request for login."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Response with the session token (header transport)."""

    token: str


class ErrorResponse(BaseModel):
    error: str


class SessionResponse(BaseModel):
    """The identity bound to the presented session token."""

    user_id: int
    expires_at: datetime
