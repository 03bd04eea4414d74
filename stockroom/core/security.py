"""Password hashing and JWT issuing/verification for authentication."""

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import bcrypt
import jwt

from stockroom.core.errors import ConfigurationError, InvalidCredential
from stockroom.schemas.auth import TokenClaims

if TYPE_CHECKING:
    from stockroom.core.config import Settings
    from stockroom.models.user import User

logger = logging.getLogger(__name__)

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 50
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

REQUIRED_CLAIMS = ["exp", "iat", "sub"]


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


class TokenService:
    """
    Issue and verify signed, time-bounded access tokens.

    One instance is built at startup from settings and shared read-only by all
    requests. Tokens carry the subject id, display name, and role id; they are
    never refreshed or revoked, expiry is the only way they end.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 60) -> None:
        if not secret or not secret.strip():
            raise ConfigurationError("JWT_SECRET must be set and non-empty")
        self._secret = secret
        self._algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenService":
        """Build the process-wide token service; raises ConfigurationError without a secret."""
        if settings.JWT_SECRET is None:
            logger.critical("JWT_SECRET is not configured; refusing to start.")
            raise ConfigurationError("JWT_SECRET must be set and non-empty")
        return cls(
            settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            expire_minutes=settings.JWT_EXPIRE_MINUTES,
        )

    def issue(self, user: "User", now: datetime | None = None) -> str:
        """Create a JWT for a verified user: sub, name, role_id, iat, exp."""
        issued_at = now or datetime.now(UTC)
        payload: dict[str, Any] = {
            "sub": str(user.id),
            "name": user.display_name,
            "role_id": int(user.role_id),
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, raw_token: str | None) -> TokenClaims:
        """
        Validate signature and expiry of a bearer token and return its claims.

        Surrounding whitespace is stripped first. Raises InvalidCredential with a
        generic message; the real cause only goes to the server log.
        """
        token = (raw_token or "").strip()
        if not token:
            logger.warning("Token verification failed: empty token")
            raise InvalidCredential()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.PyJWTError as exc:
            logger.warning("Token verification failed: %s: %s", type(exc).__name__, exc)
            raise InvalidCredential() from exc

        try:
            return TokenClaims(
                subject_id=int(payload["sub"]),
                display_name=str(payload["name"]),
                role_id=int(payload["role_id"]),
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Token verification failed: malformed claims (%s)", exc)
            raise InvalidCredential() from exc
