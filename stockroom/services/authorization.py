"""
Authorization gate: decide whether a token's identity may use a capability.

Two ways to resolve the caller's role, selected by AUTH_ROLE_SOURCE:

- "database" (default): the subject id comes from the token but the role is
  re-read from the users table on every call. One primary-key lookup per
  request; a demotion or removal applies to the very next request.
- "token": the role_id claim is trusted as-is and no read happens. Cheaper,
  but a demoted user keeps the old role until the token expires, i.e. for up
  to JWT_EXPIRE_MINUTES. Only pick it when the extra read is a measured cost.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from sqlalchemy.orm import Session

from stockroom.core.errors import Forbidden, Unauthenticated
from stockroom.models import RoleId
from stockroom.schemas.auth import CurrentUser, TokenClaims
from stockroom.services.identity import get_user

logger = logging.getLogger(__name__)

RoleSource = Literal["database", "token"]

DENY_NO_IDENTITY = "no identity"
DENY_IDENTITY_NOT_FOUND = "identity not found"
DENY_INSUFFICIENT_ROLE = "insufficient role"


class Capability(str, Enum):
    READ = "read"
    AUTHENTICATED = "authenticated"
    MUTATE_INVENTORY = "mutate_inventory"
    ADMINISTER_USERS = "administer_users"


# None means no identity is needed at all.
CAPABILITY_ROLES: dict[Capability, frozenset[RoleId] | None] = {
    Capability.READ: None,
    Capability.AUTHENTICATED: frozenset(RoleId),
    Capability.MUTATE_INVENTORY: frozenset({RoleId.ADMINISTRATOR, RoleId.MANAGER}),
    Capability.ADMINISTER_USERS: frozenset({RoleId.ADMINISTRATOR}),
}


@dataclass(frozen=True)
class AuthorizationDecision:
    """Allow(identity) or Deny(reason, message)."""

    allowed: bool
    identity: CurrentUser | None = None
    reason: str | None = None
    message: str | None = None

    @classmethod
    def allow(cls, identity: CurrentUser | None) -> "AuthorizationDecision":
        return cls(allowed=True, identity=identity)

    @classmethod
    def deny(cls, reason: str, message: str) -> "AuthorizationDecision":
        return cls(allowed=False, reason=reason, message=message)


def _required_roles_label(roles: frozenset[RoleId]) -> str:
    return " or ".join(role.label for role in sorted(roles))


def resolve_identity(
    claims: TokenClaims,
    db: Session | None,
    role_source: RoleSource = "database",
) -> CurrentUser | None:
    """Turn verified claims into an identity, or None if the subject no longer exists."""
    if role_source == "token":
        return CurrentUser(
            id=claims.subject_id,
            display_name=claims.display_name,
            role_id=claims.role_id,
        )
    if db is None:
        raise ValueError("A database session is required when AUTH_ROLE_SOURCE is 'database'")
    user = get_user(db, claims.subject_id)
    if user is None:
        return None
    return CurrentUser(id=user.id, display_name=user.display_name, role_id=user.role_id)


def authorize(
    claims: TokenClaims | None,
    capability: Capability,
    db: Session | None = None,
    role_source: RoleSource = "database",
) -> AuthorizationDecision:
    """Decide ALLOW/DENY for a capability. Pure apart from the optional user read."""
    required = CAPABILITY_ROLES[capability]
    if required is None:
        return AuthorizationDecision.allow(None)
    if claims is None:
        return AuthorizationDecision.deny(DENY_NO_IDENTITY, "Not authenticated")

    identity = resolve_identity(claims, db, role_source)
    if identity is None:
        return AuthorizationDecision.deny(DENY_IDENTITY_NOT_FOUND, "User not found")

    try:
        role = RoleId(identity.role_id)
    except ValueError:
        role = None
    if role not in required:
        return AuthorizationDecision.deny(
            DENY_INSUFFICIENT_ROLE,
            f"User '{identity.display_name}' does not have sufficient permissions. "
            f"Requires {_required_roles_label(required)} role.",
        )
    return AuthorizationDecision.allow(identity)


def require(
    claims: TokenClaims | None,
    capability: Capability,
    db: Session | None = None,
    role_source: RoleSource = "database",
) -> CurrentUser | None:
    """Like authorize() but raises Unauthenticated / Forbidden on denial."""
    decision = authorize(claims, capability, db, role_source)
    if decision.allowed:
        return decision.identity
    subject = claims.subject_id if claims is not None else None
    logger.info(
        "Authorization denied: capability=%s subject=%s reason=%s",
        capability.value,
        subject,
        decision.reason,
    )
    if decision.reason == DENY_INSUFFICIENT_ROLE:
        raise Forbidden(decision.message)
    raise Unauthenticated(decision.message)
