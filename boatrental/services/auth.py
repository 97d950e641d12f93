"""Authentication service: password verification and signed session tokens."""

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from jwt.exceptions import PyJWTError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from boatrental.core import settings
from boatrental.models.user import User

logger = logging.getLogger(__name__)

# Argon2id with recommended parameters
# Memory: 64 MiB, Time: 3 iterations, Parallelism: 4
ph = PasswordHasher(
    time_cost=3,
    memory_cost=65536,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)

# Verified against for unknown usernames so both failure paths cost the same
_DUMMY_HASH = ph.hash("not-a-real-password")


class AuthError(Exception):
    """Base authentication error."""

    pass


class InvalidCredentialsError(AuthError):
    """Invalid username or password."""

    pass


class CredentialNotFoundError(InvalidCredentialsError):
    """No credential record exists for the username."""

    pass


class CredentialMismatchError(InvalidCredentialsError):
    """The password does not match the stored hash."""

    pass


class StoreUnavailableError(AuthError):
    """The credential store could not be reached."""

    pass


class TokenError(AuthError):
    """Session token error."""

    pass


class TokenMissingError(TokenError):
    """No session token was presented."""

    pass


class InvalidTokenError(TokenError):
    """Session token is malformed or its signature does not verify."""

    pass


class TokenExpiredError(InvalidTokenError):
    """Session token has expired."""

    pass


@dataclass(frozen=True)
class SessionIdentity:
    """Identity resolved from a verified session token."""

    user_id: int
    expires_at: datetime
    token_id: str | None = None


def hash_password(password: str) -> str:
    """Hash a password using Argon2id."""
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its hash using constant-time comparison."""
    try:
        return ph.verify(password_hash, password)
    except VerifyMismatchError:
        return False
    except (InvalidHashError, VerificationError):
        logger.warning("Stored password hash is not a valid Argon2 hash")
        return False


def create_session_token(
    user_id: int,
    *,
    secret_key: str | None = None,
    lifetime: timedelta | None = None,
    now: datetime | None = None,
) -> str:
    """Create a signed session token for a user.

    ``now`` is the issue instant; it defaults to the current time.
    """
    issued_at = now or datetime.now(UTC)
    if lifetime is None:
        lifetime = timedelta(hours=settings.session_lifetime_hours)
    payload = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "jti": secrets.token_hex(16),
    }
    token = jwt.encode(
        payload,
        secret_key or settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    # PyJWT 2.x returns str; older type stubs may declare bytes
    return str(token)


def decode_session_token(token: str, *, secret_key: str | None = None) -> SessionIdentity:
    """Verify a session token's signature and expiry and return its identity."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            secret_key or settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpiredError("Token has expired") from e
    except PyJWTError as e:
        raise InvalidTokenError(f"Invalid token: {e}") from e

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise InvalidTokenError("Token subject is not a user id") from e

    return SessionIdentity(
        user_id=user_id,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        token_id=payload.get("jti"),
    )


class AuthService:
    """Verifies submitted credentials against the users table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user_by_username(self, username: str) -> User | None:
        """Get user by exact username."""
        try:
            result = await self.session.execute(select(User).where(User.username == username))
        except SQLAlchemyError as e:
            logger.error(f"Credential lookup failed: {e}")
            raise StoreUnavailableError("Credential store unavailable") from e
        return result.scalar_one_or_none()

    async def authenticate(self, username: str, password: str) -> User:
        """Return the user whose credentials match.

        Both failure cases subclass InvalidCredentialsError so callers can
        report them identically.
        """
        user = await self.get_user_by_username(username)

        if user is None:
            verify_password(password, _DUMMY_HASH)
            raise CredentialNotFoundError("Invalid username or password")

        if not verify_password(password, user.password_hash):
            raise CredentialMismatchError("Invalid username or password")

        return user

    async def login(self, username: str, password: str) -> str:
        """Authenticate and issue a session token."""
        user = await self.authenticate(username, password)
        return create_session_token(user.id)

    async def create_user(self, username: str, password: str) -> User:
        """Insert a credential record. Used by the provisioning CLI."""
        existing = await self.get_user_by_username(username)
        if existing is not None:
            raise AuthError(f"User already exists: {username}")

        user = User(username=username, password_hash=hash_password(password))
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)

        logger.info(f"Created user: {username}")
        return user
