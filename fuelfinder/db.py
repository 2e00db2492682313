# fuelfinder/db.py
"""Engine and session factory for the distance store.

``DATABASE_URL`` may name any Postgres or SQLite driver; the service always
runs on the async driver and alembic on the sync one.
"""

from sqlalchemy.engine.url import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from fuelfinder.core.config import settings

_ASYNC_DRIVERS = {
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}

_SYNC_DRIVERS = {
    "postgres": "postgresql+psycopg",
    "postgresql": "postgresql+psycopg",
    "postgresql+asyncpg": "postgresql+psycopg",
    "postgresql+psycopg2": "postgresql+psycopg",
    "sqlite+aiosqlite": "sqlite",
}

engine: AsyncEngine
SessionLocal: async_sessionmaker[AsyncSession]


def _with_driver(database_url: str, drivers: dict[str, str]) -> URL:
    url = make_url(database_url)
    return url.set(drivername=drivers.get(url.drivername, url.drivername))


def async_database_url(database_url: str) -> URL:
    return _with_driver(database_url, _ASYNC_DRIVERS)


def sync_database_url(database_url: str) -> str:
    """URL string for alembic (psycopg / pysqlite)."""
    return _with_driver(database_url, _SYNC_DRIVERS).render_as_string(hide_password=False)


def _asyncpg_options(url: URL) -> tuple[URL, dict[str, str]]:
    query = dict(url.query)
    connect_args: dict[str, str] = {}
    if "sslmode" in query:
        # asyncpg takes the libpq sslmode values under "ssl"
        connect_args["ssl"] = query.pop("sslmode")
    # not supported by asyncpg
    query.pop("channel_binding", None)
    return url.set(query=query), connect_args


def create_store_engine(database_url: str) -> AsyncEngine:
    url = async_database_url(database_url)
    if url.get_backend_name() == "sqlite":
        return create_async_engine(url, future=True)

    url, connect_args = _asyncpg_options(url)
    return create_async_engine(
        url,
        pool_pre_ping=True,
        future=True,
        connect_args=connect_args,
    )


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Cache rows are read after commit, so attributes must not expire
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def configure_engine(database_url: str | None = None) -> None:
    """(Re)build the module-level engine and ``SessionLocal``."""

    global engine, SessionLocal

    engine = create_store_engine(database_url or settings.database_url)
    SessionLocal = make_session_factory(engine)


configure_engine()
