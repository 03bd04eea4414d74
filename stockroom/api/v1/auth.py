"""JWT login, registration, user administration, and auth dependencies."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from stockroom.core.config import Settings
from stockroom.core.database import get_db
from stockroom.core.errors import Unauthenticated
from stockroom.core.security import TokenService
from stockroom.models import RoleId
from stockroom.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    RoleUpdateRequest,
    TokenClaims,
    TokenResponse,
    UserListItem,
    UsersListResponse,
)
from stockroom.services.authorization import Capability, require
from stockroom.services.identity import (
    authenticate_user,
    create_user,
    list_users,
    parse_role_id,
    update_user_role,
)

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> TokenClaims | None:
    """Dependency: verified claims of the Bearer token, or None when no token was sent."""
    if credentials is None:
        return None
    return token_service.verify(credentials.credentials)


def require_capability(capability: Capability):
    """Build a dependency that authorizes the caller before the route body runs."""

    def dependency(
        claims: Annotated[TokenClaims | None, Depends(get_token_claims)],
        db: Annotated[Session, Depends(get_db)],
        settings: Annotated[Settings, Depends(get_app_settings)],
    ) -> CurrentUser:
        return require(claims, capability, db, settings.AUTH_ROLE_SOURCE)

    return dependency


get_current_user = require_capability(Capability.AUTHENTICATED)
require_inventory_editor = require_capability(Capability.MUTATE_INVENTORY)
require_admin = require_capability(Capability.ADMINISTER_USERS)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> TokenResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>
    """
    user = authenticate_user(db, body.username, body.password)
    if user is None:
        raise Unauthenticated("Invalid username or password.")
    return TokenResponse(
        access_token=token_service.issue(user),
        token_type="bearer",
        expires_in=token_service.expire_minutes * 60,
    )


@router.post("/register", response_model=UserListItem, status_code=201)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
    claims: Annotated[TokenClaims | None, Depends(get_token_claims)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserListItem:
    """
    Create an account. Self-registration always yields a Reader; choosing any
    other role requires an Administrator token.
    """
    role = RoleId.READER
    if body.role_id is not None:
        requested = parse_role_id(body.role_id)
        if requested != RoleId.READER:
            require(claims, Capability.ADMINISTER_USERS, db, settings.AUTH_ROLE_SOURCE)
        role = requested
    user = create_user(
        db,
        username=body.username,
        password=body.password,
        role_id=role,
        display_name=body.display_name,
    )
    return UserListItem.model_validate(user)


@router.get("/me", response_model=CurrentUser)
def read_me(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Return the identity the gate resolved for this token."""
    return current_user


@router.get("/users", response_model=UsersListResponse)
def get_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UsersListResponse:
    """List all users (admin only)."""
    return UsersListResponse(
        users=[UserListItem.model_validate(u) for u in list_users(db)]
    )


@router.patch("/users/{user_id}/role", response_model=UserListItem)
def patch_user_role(
    user_id: int,
    body: RoleUpdateRequest,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserListItem:
    """Change a user's role (admin only). Takes effect on the user's next request."""
    return UserListItem.model_validate(update_user_role(db, user_id, body.role_id))
