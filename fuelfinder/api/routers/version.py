# fuelfinder/api/routers/version.py
import os
import platform
import time

from fastapi import APIRouter, Request

from fuelfinder import __version__
from fuelfinder.schemas.common import VersionResponse
from fuelfinder.utils.datetime import utcnow

router = APIRouter(prefix="/version", tags=["health"])


@router.get(
    "",
    response_model=VersionResponse,
    summary="Build and runtime information",
    description="VERSION (or RELEASE) env overrides the package version",
)
async def version(request: Request):
    started = getattr(request.app.state, "started_at", None)
    uptime = int(time.monotonic() - started) if started is not None else 0
    return VersionResponse(
        version=os.getenv("VERSION") or os.getenv("RELEASE") or __version__,
        python_version=platform.python_version(),
        uptime_seconds=uptime,
        environment=os.getenv("APP_ENV", "dev"),
        timestamp=utcnow(),
    )
