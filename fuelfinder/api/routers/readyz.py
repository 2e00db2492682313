from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fuelfinder.api.deps import get_db_session
from fuelfinder.schemas.common import ErrorResponse, OkResponse
from fuelfinder.services.health import HealthService

router = APIRouter(prefix="/readyz", tags=["health"])


@router.get(
    "",
    response_model=OkResponse,
    summary="Readiness check",
    description="Runs SELECT 1 against the distance store (503 when unreachable)",
    responses={503: {"model": ErrorResponse, "description": "database unavailable"}},
)
async def readyz(session: AsyncSession = Depends(get_db_session)):
    svc = HealthService(session)
    return await svc.ok()
