"""Resolve the rate-limit identity of an incoming request."""

from __future__ import annotations

from fastapi import Request

UNKNOWN_CLIENT = "unknown"


def _extract_client_identity(request: Request) -> str:
    """Return the forwarded client address, the peer address, or ``unknown``."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",", 1)[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    if request.client is not None and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT
