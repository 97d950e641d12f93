"""Session guard for protected routes.

A single ``SessionGuard`` is built per rejection style and attached to routers
at registration time::

    router = APIRouter(dependencies=[Depends(page_guard)])

The guard reads the session token from exactly one transport (a cookie or the
``Authorization: Bearer`` header), verifies it without touching the database,
and either stores the resolved identity on ``request.state.session`` or raises
``SessionRejected`` before the route handler runs.
"""

import logging
import threading
import time
from typing import Literal

from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from boatrental.core.config import Settings, settings
from boatrental.core.request_utils import request_log_context
from boatrental.services.auth import (
    InvalidTokenError,
    SessionIdentity,
    TokenError,
    TokenExpiredError,
    TokenMissingError,
    decode_session_token,
)

logger = logging.getLogger(__name__)

Transport = Literal["cookie", "header"]
RejectMode = Literal["redirect", "unauthorized"]


class RevokedSessions:
    """Token ids that were revoked before their natural expiry.

    Filled on logout and from the token_blacklist table at startup. A token id
    only needs remembering until the token itself would have expired, so each
    entry carries that expiry and is dropped once it passes. The guard checks
    membership on every request, so lookups never go to the database.
    """

    def __init__(self) -> None:
        self._expiry: dict[str, float] = {}
        self._lock = threading.Lock()

    def revoke(self, token_id: str, expires_at: float) -> None:
        """Remember token_id until expires_at (Unix timestamp)."""
        with self._lock:
            self._expiry[token_id] = expires_at

    def __contains__(self, token_id: str) -> bool:
        with self._lock:
            expires_at = self._expiry.get(token_id)
            if expires_at is None:
                return False
            if time.time() > expires_at:
                del self._expiry[token_id]
                return False
            return True

    def __len__(self) -> int:
        return len(self._expiry)

    def purge_expired(self) -> int:
        """Drop entries whose tokens have expired. Returns count removed."""
        now = time.time()
        with self._lock:
            stale = [token_id for token_id, exp in self._expiry.items() if now > exp]
            for token_id in stale:
                del self._expiry[token_id]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._expiry.clear()


revoked_sessions = RevokedSessions()


class SessionRejected(Exception):
    """Raised by SessionGuard to short-circuit a request."""

    def __init__(self, guard: "SessionGuard", reason: TokenError):
        super().__init__(str(reason))
        self.guard = guard
        self.reason = reason


class SessionGuard:
    """Gate that every protected request passes through.

    Args:
        secret_key: Key used to verify token signatures
        transport: Where the token is read from - "cookie" or "header"
        login_url: Redirect target for rejected browser requests
        on_reject: "redirect" for HTML pages, "unauthorized" for JSON routes
        cookie_name: Cookie holding the token when transport is "cookie"
        check_revocation: Refuse tokens whose id is in ``revoked``
        revoked: Revoked-session set, shared process-wide by default
    """

    def __init__(
        self,
        secret_key: str,
        transport: Transport = "cookie",
        login_url: str = "/login",
        on_reject: RejectMode = "redirect",
        cookie_name: str = "session",
        check_revocation: bool = False,
        revoked: RevokedSessions | None = None,
    ):
        self.secret_key = secret_key
        self.transport = transport
        self.login_url = login_url
        self.on_reject = on_reject
        self.cookie_name = cookie_name
        self.check_revocation = check_revocation
        self.revoked = revoked if revoked is not None else revoked_sessions

    @classmethod
    def from_settings(cls, on_reject: RejectMode, config: Settings | None = None) -> "SessionGuard":
        config = config or settings
        return cls(
            secret_key=config.jwt_secret_key,
            transport=config.session_transport,
            login_url=config.login_url,
            on_reject=on_reject,
            cookie_name=config.session_cookie_name,
            check_revocation=config.session_revocation_enabled,
        )

    async def __call__(self, request: Request) -> SessionIdentity:
        try:
            identity = self.verify(self.extract_token(request))
        except TokenMissingError as e:
            logger.debug("No session token", extra=request_log_context(request))
            raise SessionRejected(self, e) from e
        except TokenExpiredError as e:
            logger.debug("Expired session token", extra=request_log_context(request))
            raise SessionRejected(self, e) from e
        except InvalidTokenError as e:
            logger.warning(f"Invalid session token: {e}", extra=request_log_context(request))
            raise SessionRejected(self, e) from e

        request.state.session = identity
        return identity

    def extract_token(self, request: Request) -> str:
        """Read the token from the configured transport."""
        if self.transport == "header":
            auth_header = request.headers.get("Authorization", "")
            # Auth schemes are case-insensitive (RFC 7235)
            token = auth_header[7:] if auth_header[:7].lower() == "bearer " else ""
        else:
            token = request.cookies.get(self.cookie_name, "")
        token = token.strip()
        if not token:
            raise TokenMissingError("No session token")
        return token

    def verify(self, token: str) -> SessionIdentity:
        identity = decode_session_token(token, secret_key=self.secret_key)
        if self.check_revocation and identity.token_id and identity.token_id in self.revoked:
            raise InvalidTokenError("Token has been revoked")
        return identity

    def reject(self, request: Request) -> Response:
        """Build the short-circuit response for a rejected request."""
        response: Response
        if self.on_reject == "redirect":
            response = RedirectResponse(self.login_url, status_code=status.HTTP_303_SEE_OTHER)
        else:
            headers = {"WWW-Authenticate": "Bearer"} if self.transport == "header" else None
            response = JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": "unauthorized"},
                headers=headers,
            )
        if self.transport == "cookie" and self.cookie_name in request.cookies:
            response.delete_cookie(self.cookie_name, path="/")
        return response


async def session_rejected_handler(request: Request, exc: SessionRejected) -> Response:
    """Exception handler turning SessionRejected into a redirect or 401."""
    return exc.guard.reject(request)


def get_session_identity(request: Request) -> SessionIdentity:
    """Identity stored by the guard for the current request."""
    identity: SessionIdentity | None = getattr(request.state, "session", None)
    if identity is None:
        raise RuntimeError("get_session_identity used on a route without a SessionGuard")
    return identity
