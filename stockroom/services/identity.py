"""Identity store: users and the fixed role reference table."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockroom.core.errors import Conflict, NotFound, ValidationError
from stockroom.core.security import hash_password, verify_password
from stockroom.models import Role, RoleId, User

logger = logging.getLogger(__name__)


def seed_roles(db: Session) -> int:
    """Insert any missing role rows. Idempotent; returns how many were added."""
    existing = set(db.scalars(select(Role.id)).all())
    missing = [role for role in RoleId if int(role) not in existing]
    for role in missing:
        db.add(Role(id=int(role), name=role.label))
    if missing:
        db.commit()
        logger.info("Seeded roles: %s", ", ".join(role.label for role in missing))
    return len(missing)


def parse_role_id(value: int) -> RoleId:
    """Map a raw role id to RoleId; raises ValidationError for unknown ids."""
    try:
        return RoleId(value)
    except ValueError:
        raise ValidationError(
            f"Unknown role id {value}; expected 1 (Administrator), 2 (Manager) or 3 (Reader)"
        ) from None


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalars(select(User).where(User.username == username)).first()


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.id)).all())


def create_user(
    db: Session,
    username: str,
    password: str,
    role_id: int = RoleId.READER,
    display_name: str | None = None,
) -> User:
    """
    Register a user with a bcrypt password hash.

    display_name falls back to the username. Raises Conflict if the username is
    taken and ValidationError for an unknown role.
    """
    username = username.strip()
    if not username:
        raise ValidationError("Username must not be empty.")
    role = parse_role_id(role_id)
    if get_user_by_username(db, username) is not None:
        raise Conflict(f"Username '{username}' is already taken.")

    user = User(
        username=username,
        password_hash=hash_password(password),
        display_name=(display_name or "").strip() or username,
        role_id=int(role),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict(f"Username '{username}' is already taken.") from exc
    db.refresh(user)
    logger.info("Created user id=%s username=%s role=%s", user.id, username, role.label)
    return user


def authenticate_user(db: Session, username: str, password: str) -> User | None:
    """Return the user if the password matches, else None (no hint which part failed)."""
    user = get_user_by_username(db, username.strip())
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def update_user_role(db: Session, user_id: int, role_id: int) -> User:
    """Change a user's role. Callers must already be authorized as Administrator."""
    role = parse_role_id(role_id)
    user = db.get(User, user_id)
    if user is None:
        raise NotFound(f"User with id {user_id} not found")
    previous = user.role_id
    user.role_id = int(role)
    db.commit()
    db.refresh(user)
    logger.info(
        "Changed role of user id=%s from %s to %s", user_id, previous, int(role)
    )
    return user
