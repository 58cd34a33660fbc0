"""
Request utilities for extracting client information.

Provides helpers to extract IP addresses and user agent strings from
HTTP requests, handling proxy headers correctly, and to build the
identifier used to key contact-form rate limits.
"""

from typing import Optional

from fastapi import Request

# Portion of the user agent folded into the rate-limit identifier
IDENTIFIER_USER_AGENT_LENGTH = 50


def get_client_ip(request: Request) -> Optional[str]:
    """
    Extract the client's real IP address from the request.

    Handles common proxy headers in order of precedence:
    1. CF-Connecting-IP (Cloudflare)
    2. X-Real-IP (nginx)
    3. X-Forwarded-For (standard proxy header, first IP)
    4. Direct client.host

    Args:
        request: FastAPI request object

    Returns:
        Client IP address or None if not available
    """
    cf_ip = request.headers.get("CF-Connecting-IP")
    if cf_ip and cf_ip.strip():
        return cf_ip.strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    # Comma-separated, first is the original client
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        first_ip = forwarded_for.split(",")[0].strip()
        if first_ip:
            return first_ip

    if request.client:
        return request.client.host

    return None


def get_user_agent(request: Request) -> Optional[str]:
    """
    Extract the user agent string from the request.

    Truncates to 500 characters so log lines stay bounded.
    """
    user_agent = request.headers.get("User-Agent")
    if user_agent:
        return user_agent[:500]
    return None


def get_client_identifier(request: Request) -> str:
    """
    Build the rate-limit key for a request.

    Format is ``<ip>:<first 50 chars of user agent>``, with ``unknown``
    standing in for a missing part. Clients behind one NAT with different
    browsers get separate quotas.
    """
    ip = get_client_ip(request) or "unknown"
    user_agent = get_user_agent(request)
    agent_part = user_agent[:IDENTIFIER_USER_AGENT_LENGTH] if user_agent else "unknown"
    return f"{ip}:{agent_part}"
