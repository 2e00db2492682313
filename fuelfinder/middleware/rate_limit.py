from __future__ import annotations

import os
from collections.abc import Callable
from typing import TypedDict

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from limits import parse as parse_limit
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from fuelfinder.middleware.request_id import client_ip


class RateLimitInfo(TypedDict, total=False):
    method: str
    ip: str
    limit: str


# In-memory, per process. Use Redis storage for limits shared across workers.
_storage = MemoryStorage()
_rate = MovingWindowRateLimiter(_storage)

# Longest prefix first; every batch call can fan out to the provider
_PATH_LIMITS: tuple[tuple[str, str], ...] = (
    ("/distances/batch", "50/minute"),
    ("/distances", "100/minute"),
)


def _enabled() -> bool:
    # Enabled unless TESTING is set; RATE_LIMIT_ENABLED=1 forces it on.
    if os.getenv("RATE_LIMIT_ENABLED") in {"1", "true", "TRUE"}:
        return True
    if os.getenv("TESTING"):
        return False
    return True


def _limit_for(method: str, path: str) -> str | None:
    m = method.upper()
    if m == "OPTIONS":
        return None
    for prefix, limit in _PATH_LIMITS:
        if path.startswith(prefix):
            return limit
    if m in {"GET", "HEAD"}:
        return "60/minute"
    if m in {"POST", "PATCH", "DELETE"}:
        return "30/minute"
    return None


async def rate_limit_middleware(request: Request, call_next: Callable) -> Response:
    if not _enabled():
        return await call_next(request)

    limit_str = _limit_for(request.method, request.url.path)
    if not limit_str:
        return await call_next(request)

    ip = client_ip(request)
    key = f"ip:{ip}|m:{request.method.upper()}|p:{request.url.path}"
    if not _rate.hit(parse_limit(limit_str), key):
        info: RateLimitInfo = {"method": request.method.upper(), "ip": ip, "limit": limit_str}
        request.state.rate_limit_info = info
        return JSONResponse(
            status_code=429,
            content={
                "error": {
                    "code": "rate_limited",
                    "message": "Too Many Requests",
                    "detail": info,
                }
            },
        )

    response = await call_next(request)
    response.headers.setdefault("X-RateLimit-Limit", limit_str)
    return response
