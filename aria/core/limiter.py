"""
Per-IP request limiting for the AI generation endpoints.

Counters live in process memory by default: they reset on restart and are not
shared between workers. Point RATE_LIMIT_STORAGE_URI at a shared backend
(e.g. redis://) when that matters.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from aria.core.config import settings


def client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For, falling back to the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return get_remote_address(request) or "unknown"


limiter = Limiter(key_func=client_ip, storage_uri=settings.rate_limit_storage_uri)
