from __future__ import annotations

import time
import uuid
from collections.abc import Callable

import sentry_sdk
import structlog
from fastapi import Request, Response

REQUEST_ID_HEADER = "X-Request-ID"


def client_ip(request: Request) -> str:
    # Prefer X-Forwarded-For if present (first hop), fall back to ASGI client
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "local"


def _access_log(request: Request, rid: str, status: int, start_ns: int, **extra) -> None:
    duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000.0
    log = structlog.get_logger(__name__)
    emit = log.error if status >= 500 else log.info
    emit(
        "http_request",
        request_id=rid,
        path=request.url.path,
        method=request.method,
        status=status,
        duration_ms=round(duration_ms, 3),
        client_ip=client_ip(request),
        **extra,
    )


async def request_id_middleware(request: Request, call_next: Callable) -> Response:
    """Attach/propagate Request-ID and emit one structured access log per request.

    Distance lookups log cache hits and misses under the same request_id, so a
    slow response can be traced to the provider call that caused it.
    """
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

    structlog.contextvars.bind_contextvars(
        request_id=rid, path=request.url.path, method=request.method
    )
    sentry_sdk.set_tag("request_id", rid)

    start_ns = time.perf_counter_ns()
    try:
        response = await call_next(request)
    except Exception:
        _access_log(request, rid, 500, start_ns, exc_info=True)
        structlog.contextvars.clear_contextvars()
        raise

    _access_log(request, rid, response.status_code, start_ns)
    response.headers[REQUEST_ID_HEADER] = rid

    # Clear per-request bindings to avoid leakage across tasks
    structlog.contextvars.clear_contextvars()
    return response
