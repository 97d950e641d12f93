"""Middleware module for the boat rental backend."""

from boatrental.middleware.security_headers import SecurityHeadersMiddleware
from boatrental.middleware.session_guard import (
    SessionGuard,
    SessionRejected,
    get_session_identity,
    session_rejected_handler,
)

__all__ = [
    "SecurityHeadersMiddleware",
    "SessionGuard",
    "SessionRejected",
    "get_session_identity",
    "session_rejected_handler",
]
