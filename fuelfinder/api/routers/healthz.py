# fuelfinder/api/routers/healthz.py
from fastapi import APIRouter

from fuelfinder.schemas.common import OkResponse

router = APIRouter(prefix="/healthz", tags=["health"])


@router.get(
    "",
    response_model=OkResponse,
    summary="Liveness check",
    description="Always 200 (no database access)",
)
async def healthz():
    return {"ok": True}
