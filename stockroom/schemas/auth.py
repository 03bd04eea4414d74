"""Request/response schemas for auth endpoints and token claims."""

from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=50, description="Username")
    password: str = Field(..., min_length=8, max_length=128, description="Password")


class RegisterRequest(BaseModel):
    """New account. role_id is honoured only when an Administrator registers the user."""

    username: str = Field(..., min_length=1, max_length=50, description="Username")
    password: str = Field(..., min_length=8, max_length=128, description="Password")
    display_name: str | None = Field(default=None, max_length=100, description="Full name")
    role_id: int | None = Field(default=None, description="1=Administrator, 2=Manager, 3=Reader")


class TokenResponse(BaseModel):
    """JWT access token returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")


class TokenClaims(BaseModel):
    """Decoded, verified claims of an access token."""

    subject_id: int
    display_name: str
    role_id: int
    issued_at: datetime
    expires_at: datetime


class CurrentUser(BaseModel):
    """Authorized identity (id, display name, role) for dependency injection."""

    id: int
    display_name: str
    role_id: int

    class Config:
        from_attributes = True


class UserListItem(BaseModel):
    """User entry for admin list (no password)."""

    id: int
    username: str
    display_name: str
    role_id: int
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class UsersListResponse(BaseModel):
    """Response for GET /auth/users (admin only)."""

    users: list[UserListItem]


class RoleUpdateRequest(BaseModel):
    """New role for an existing user."""

    role_id: int = Field(..., description="1=Administrator, 2=Manager, 3=Reader")
