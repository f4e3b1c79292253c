"""Client IP and user agent extraction for the audit trail."""

from typing import Optional
from fastapi import Request


def get_client_ip(request: Request) -> str:
    """
    Real client IP behind a reverse proxy.

    Precedence: first X-Forwarded-For entry, then X-Real-IP, then the direct
    peer address. Proxy headers are trusted as-is.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_user_agent(request: Request) -> Optional[str]:
    return request.headers.get("User-Agent")
