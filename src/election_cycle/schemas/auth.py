"""Authentication and account Pydantic v2 schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

IDENTITY_PATTERN = r"^[a-z0-9_.-]{1,64}$"


class RefreshRequest(BaseModel):
    """Token refresh request."""

    refresh_token: str


class TokenResponse(BaseModel):
    """JWT token pair response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token expiration in seconds")


class AccountCreateRequest(BaseModel):
    """Request to create a new account."""

    identity: str = Field(min_length=1, max_length=64, pattern=IDENTITY_PATTERN)
    password: str = Field(min_length=8)
    role: str = Field(default="member", pattern="^(operator|member)$")


class AccountResponse(BaseModel):
    """Account information response."""

    id: UUID
    identity: str
    role: str
    is_active: bool
    created_at: datetime
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}
