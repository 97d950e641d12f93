"""Login, logout and session endpoints."""

import logging
import time
from collections import defaultdict
from datetime import UTC, datetime
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy import delete, select
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from boatrental.api.deps import FormError, page_guard, parse_form, redirect, render
from boatrental.core import get_db, settings
from boatrental.core.request_utils import request_log_context
from boatrental.middleware.session_guard import get_session_identity, revoked_sessions
from boatrental.models.token_blacklist import TokenBlacklist
from boatrental.schemas.auth import ErrorResponse, LoginRequest, SessionResponse, TokenResponse
from boatrental.services.auth import (
    AuthService,
    InvalidCredentialsError,
    StoreUnavailableError,
    TokenError,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"

# Rate limiting for failed login attempts
_login_attempts: dict[str, list[float]] = defaultdict(list)
_LOGIN_WINDOW = 60  # 1-minute window
_LOGIN_MAX_ATTEMPTS = 5  # Max failed attempts per window


# --- Token Blacklist ---
# Database-backed record of revoked JTIs; only written when
# SESSION_REVOCATION_ENABLED is set.


async def blacklist_token(db: AsyncSession, jti: str, exp: float) -> None:
    """Add a token to the blacklist. exp is the Unix timestamp when it expires."""
    expires_at = datetime.fromtimestamp(exp, tz=UTC)
    entry = TokenBlacklist(jti=jti, expires_at=expires_at)
    await db.merge(entry)
    await db.flush()
    revoked_sessions.revoke(jti, exp)


async def load_blacklist(db: AsyncSession) -> int:
    """Warm the in-memory blacklist cache from the database. Returns count loaded."""
    now = datetime.now(tz=UTC)
    result = await db.execute(select(TokenBlacklist).where(TokenBlacklist.expires_at >= now))
    count = 0
    for entry in result.scalars():
        expires_at = entry.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        revoked_sessions.revoke(entry.jti, expires_at.timestamp())
        count += 1
    return count


async def cleanup_expired_blacklist_entries(db: AsyncSession) -> int:
    """Remove expired entries from the token blacklist. Returns count removed."""
    now = datetime.now(tz=UTC)
    result: CursorResult[Any] = await db.execute(  # type: ignore[assignment]
        delete(TokenBlacklist).where(TokenBlacklist.expires_at < now)
    )
    return result.rowcount


def _check_login_rate_limit(client_ip: str) -> None:
    """Check if a client IP has exceeded the failed login rate limit."""
    now = time.monotonic()
    recent = [t for t in _login_attempts.get(client_ip, []) if now - t < _LOGIN_WINDOW]
    if not recent:
        # Only addresses with recent failures keep an entry
        _login_attempts.pop(client_ip, None)
        return
    _login_attempts[client_ip] = recent
    if len(recent) >= _LOGIN_MAX_ATTEMPTS:
        logger.warning("Login rate limit exceeded", extra={"client_ip": client_ip})
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Please try again later.",
        )


def _record_login_attempt(client_ip: str) -> None:
    """Record a failed login attempt for rate limiting."""
    _login_attempts[client_ip].append(time.monotonic())


router = APIRouter(tags=["auth"])


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """Dependency to get auth service."""
    return AuthService(db)


def _login_failure(request: Request, message: str, status_code: int) -> Response:
    """Failure response in the shape of the configured session transport."""
    if settings.session_transport == "header":
        return JSONResponse(
            status_code=status_code, content=ErrorResponse(error=message).model_dump()
        )
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return redirect(f"{settings.login_url}?{urlencode({'error': message})}")
    return render(request, "login.html", {"error": message}, status_code=status_code)


def _login_success(token: str) -> Response:
    if settings.session_transport == "header":
        return JSONResponse(content=TokenResponse(token=token).model_dump())
    response = redirect("/")
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_lifetime_seconds,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="strict",
    )
    return response


@router.get("/login", include_in_schema=False)
async def login_page(request: Request, error: str | None = None) -> Response:
    """Render the login form."""
    return render(request, "login.html", {"error": error})


@router.post("/api/login")
async def login(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> Response:
    """Check credentials and hand back a session token.

    With cookie transport the token is set as an HttpOnly cookie and the
    browser is redirected to the dashboard; with header transport the token is
    returned as ``{"token": ...}`` for use as a Bearer token.
    """
    log_context = request_log_context(request)
    client_ip = log_context["client_ip"]
    try:
        _check_login_rate_limit(client_ip)
    except HTTPException as e:
        return _login_failure(request, e.detail, e.status_code)

    try:
        credentials = await parse_form(request, LoginRequest)
    except FormError:
        return _login_failure(
            request, "Username and password are required", status.HTTP_422_UNPROCESSABLE_ENTITY
        )

    try:
        token = await auth_service.login(credentials.username, credentials.password)
    except InvalidCredentialsError:
        _record_login_attempt(client_ip)
        logger.warning("Failed login", extra={"username": credentials.username, **log_context})
        return _login_failure(request, INVALID_CREDENTIALS, status.HTTP_401_UNAUTHORIZED)
    except StoreUnavailableError:
        return _login_failure(
            request,
            "Login is temporarily unavailable. Please try again later.",
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    logger.info("User logged in", extra={"username": credentials.username, **log_context})
    return _login_success(token)


@router.api_route("/logout", methods=["GET", "POST"], include_in_schema=False)
async def logout(request: Request, db: AsyncSession = Depends(get_db)) -> Response:
    """Discard the session and return to the login page.

    When revocation is enabled the presented token's JTI is blacklisted so
    it cannot be replayed for the rest of its lifetime.
    """
    try:
        identity = page_guard.verify(page_guard.extract_token(request))
    except TokenError:
        identity = None

    revoked = False
    if settings.session_revocation_enabled and identity is not None and identity.token_id:
        await blacklist_token(db, identity.token_id, identity.expires_at.timestamp())
        await db.commit()
        revoked = True

    log_context: dict[str, Any] = request_log_context(request)
    if identity is not None:
        log_context["user_id"] = identity.user_id
    logger.info("Session revoked" if revoked else "Logged out", extra=log_context)

    response = redirect(settings.login_url)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return response


# Mounted behind the JSON session guard in api.router
session_router = APIRouter(tags=["auth"])


@session_router.get("/api/me", response_model=SessionResponse)
async def get_current_session(request: Request) -> SessionResponse:
    """Identity bound to the presented session token."""
    identity = get_session_identity(request)
    return SessionResponse(user_id=identity.user_id, expires_at=identity.expires_at)
