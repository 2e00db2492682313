# setup.py
from setuptools import find_packages, setup

setup(
    name="fuelfinder",
    version="0.1.0",  # keep in sync with fuelfinder.__version__
    packages=find_packages(include=["fuelfinder", "fuelfinder.*"]),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg>=0.29",
        "alembic>=1.13",
        "psycopg[binary]>=3.1",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "httpx>=0.26",
        "structlog>=24.1",
        "sentry-sdk>=1.40",
        "limits>=3.7",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "aiosqlite>=0.19",
        ],
    },
)
