"""Request utility functions for handling common request operations."""

import ipaddress
import logging

from fastapi import Request

logger = logging.getLogger(__name__)

_LOCAL_PROXIES = ("127.0.0.1", "::1", "localhost")


def _is_valid_ip(ip_str: str) -> bool:
    """Check if a string is a valid IP address."""
    try:
        ipaddress.ip_address(ip_str)
        return True
    except ValueError:
        return False


def get_client_ip(request: Request) -> str:
    """Get the client IP address from a request.

    X-Real-IP is only honoured when the direct peer is a local reverse proxy;
    X-Forwarded-For is never trusted since any client can set it.
    Returns "unknown" when the transport exposes no peer address.
    """
    if request.client and request.client.host in _LOCAL_PROXIES:
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            ip = real_ip.strip()
            if _is_valid_ip(ip):
                return ip
            logger.warning(f"Invalid X-Real-IP: {real_ip}")

    if request.client:
        return request.client.host

    return "unknown"


def request_log_context(request: Request) -> dict[str, str]:
    """Fields passed as ``extra=`` so log lines carry the caller and route."""
    return {
        "client_ip": get_client_ip(request),
        "method": request.method,
        "path": request.url.path,
    }
