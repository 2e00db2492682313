from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from fuelfinder.repositories.sqlalchemy import translate_store_errors


class HealthService:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def ok(self) -> dict:
        async with translate_store_errors():
            await self._session.execute(text("SELECT 1"))
        return {"ok": True}
