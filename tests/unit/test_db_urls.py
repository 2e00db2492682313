import pytest

from fuelfinder import db

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("raw", "driver"),
    [
        ("postgres://u:p@db:5432/fuel", "postgresql+asyncpg"),
        ("postgresql://u:p@db:5432/fuel", "postgresql+asyncpg"),
        ("postgresql+psycopg://u:p@db:5432/fuel", "postgresql+asyncpg"),
        ("postgresql+asyncpg://u:p@db:5432/fuel", "postgresql+asyncpg"),
        ("sqlite:///cache.db", "sqlite+aiosqlite"),
    ],
)
def test_service_runs_on_async_driver(raw, driver):
    assert db.async_database_url(raw).drivername == driver


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgresql+asyncpg://u:p@db:5432/fuel", "postgresql+psycopg://u:p@db:5432/fuel"),
        ("postgres://u:p@db:5432/fuel", "postgresql+psycopg://u:p@db:5432/fuel"),
        ("sqlite+aiosqlite:///cache.db", "sqlite:///cache.db"),
    ],
)
def test_migrations_run_on_sync_driver(raw, expected):
    assert db.sync_database_url(raw) == expected


def test_libpq_options_are_translated_for_asyncpg():
    url = db.async_database_url(
        "postgresql://u:p@db:5432/fuel?sslmode=require&channel_binding=require"
    )

    cleaned, connect_args = db._asyncpg_options(url)

    assert connect_args == {"ssl": "require"}
    assert dict(cleaned.query) == {}
