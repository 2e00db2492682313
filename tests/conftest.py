# tests/conftest.py
import os
from collections.abc import Callable
from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Load .env.test if available; TESTING disables the rate limiter
load_dotenv(".env.test", override=False)
os.environ["TESTING"] = "1"

import fuelfinder.models  # noqa: E402,F401  (fills Base.metadata)
from fuelfinder import db  # noqa: E402
from fuelfinder.core.config import Settings  # noqa: E402
from fuelfinder.core.exceptions import NoRouteFoundError  # noqa: E402
from fuelfinder.infra.unit_of_work import SqlAlchemyUnitOfWork  # noqa: E402
from fuelfinder.main import create_app  # noqa: E402
from fuelfinder.models.base import Base  # noqa: E402
from fuelfinder.utils.geo import Coordinates  # noqa: E402

# Postgres when TEST_DATABASE_URL is set, otherwise a throwaway SQLite file per test
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")


class FrozenClock:
    """Controllable replacement for ``utcnow``."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class FakeDistanceProvider:
    """Records every call; answers from ``routes`` or a coordinate-derived default."""

    def __init__(self) -> None:
        self.calls: list[tuple[Coordinates, Coordinates]] = []
        self.routes: dict[tuple[float, float], float] = {}
        self.failures: dict[tuple[float, float], Exception] = {}
        self.hook: Callable[[Coordinates, Coordinates], object] | None = None

    async def fetch_distance_km(self, origin: Coordinates, destination: Coordinates) -> float:
        self.calls.append((origin, destination))
        if self.hook is not None:
            result = self.hook(origin, destination)
            if hasattr(result, "__await__"):
                await result
        dest = (destination.latitude, destination.longitude)
        if dest in self.failures:
            raise self.failures[dest]
        if dest in self.routes:
            return self.routes[dest]
        dlat = abs(destination.latitude - origin.latitude)
        dlng = abs(destination.longitude - origin.longitude)
        return round((dlat + dlng) * 111.0, 3)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 15, 12, 0, 0))


@pytest.fixture
def provider() -> FakeDistanceProvider:
    return FakeDistanceProvider()


@pytest.fixture
def no_route() -> NoRouteFoundError:
    return NoRouteFoundError("no driving route between the points (ZERO_RESULTS)")


@pytest_asyncio.fixture
async def engine(tmp_path):
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'fuelfinder-test.db'}"
    eng = create_async_engine(url, future=True, echo=False, poolclass=NullPool)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s
        if s.in_transaction():
            await s.rollback()


@pytest.fixture
def uow_factory(session_factory):
    return lambda: SqlAlchemyUnitOfWork(session_factory)


class FakeStationListing:
    def __init__(self) -> None:
        self.stations = []
        self.boxes = []

    async def fetch_stations(self, box):
        self.boxes.append(box)
        return list(self.stations)


@pytest.fixture
def station_listing() -> FakeStationListing:
    return FakeStationListing()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        google_maps_api_key="test-key",
        maintenance_key="s3cret",
        _env_file=None,
    )


@pytest_asyncio.fixture
async def app_client(test_settings, session_factory, provider, station_listing):
    app = create_app(
        test_settings,
        session_factory=session_factory,
        distance_provider=provider,
        station_listing=station_listing,
    )
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Nothing listens on port 1; asyncpg fails the connect with ConnectionRefusedError
UNREACHABLE_DATABASE_URL = "postgresql+asyncpg://u:p@127.0.0.1:1/fuelfinder"


@pytest_asyncio.fixture
async def unreachable_engine():
    eng = db.create_store_engine(UNREACHABLE_DATABASE_URL)
    try:
        yield eng
    finally:
        await eng.dispose()


@pytest.fixture
def unreachable_session_factory(unreachable_engine) -> async_sessionmaker[AsyncSession]:
    return db.make_session_factory(unreachable_engine)
