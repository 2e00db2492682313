from datetime import date

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fuelfinder import db
from fuelfinder.models.api_usage import ApiUsage


def _insert_for(dialect_name: str):
    return sqlite_insert if dialect_name == "sqlite" else pg_insert


async def record_api_usage(
    service: str,
    metric: str,
    value: int = 1,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> None:
    """
    Record provider API usage to the database.
    Increments the value if a record already exists for today.
    """
    today = date.today()
    factory = session_factory or db.SessionLocal

    async with factory() as session:
        insert = _insert_for(session.bind.dialect.name)
        stmt = (
            insert(ApiUsage)
            .values(service=service, metric=metric, value=value, date=today)
            .on_conflict_do_update(
                index_elements=["service", "metric", "date"],
                set_={"value": ApiUsage.value + value},
            )
        )
        await session.execute(stmt)
        await session.commit()
