"""Authentication-related Pydantic models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class Credentials(BaseModel):
    """Request model for sign-up and sign-in.

    Format checks live in ``api.validation`` so the caller gets the same
    messages the CLI shows.
    """

    email: str
    password: str


class UserResponse(BaseModel):
    """Response model for user data."""

    id: str
    email: str
    status: Literal["active", "disabled"]
    created_at: datetime


class AuthSession(BaseModel):
    """Payload returned after signing up or in."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse
    redirect_to: str = "/dashboard"


class Redirect(BaseModel):
    redirect_to: str
