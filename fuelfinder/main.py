import os
import time
from datetime import timedelta
from functools import partial

import sentry_sdk
import structlog
from fastapi import FastAPI
from sentry_sdk.integrations.starlette import StarletteIntegration
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.cors import CORSMiddleware

from fuelfinder import __version__, db
from fuelfinder.api import errors
from fuelfinder.api.routers.cache_admin import router as cache_admin_router
from fuelfinder.api.routers.distances import router as distances_router
from fuelfinder.api.routers.healthz import router as healthz_router
from fuelfinder.api.routers.readyz import router as readyz_router
from fuelfinder.api.routers.stations import router as stations_router
from fuelfinder.api.routers.version import router as version_router
from fuelfinder.core.config import Settings
from fuelfinder.core.config import settings as default_settings
from fuelfinder.infra.unit_of_work import SqlAlchemyUnitOfWork
from fuelfinder.logging import setup_logging
from fuelfinder.middleware.rate_limit import rate_limit_middleware
from fuelfinder.middleware.request_id import request_id_middleware
from fuelfinder.services.cache_maintenance import CacheMaintenanceService
from fuelfinder.services.cost_tracking import record_api_usage
from fuelfinder.services.distance_cache import DistanceCache
from fuelfinder.services.distance_provider import DistanceProvider, GoogleDistanceMatrixClient
from fuelfinder.services.station_listing import StationListingClient
from fuelfinder.services.station_ranking import StationFinder


def _init_sentry(env: str) -> None:
    # no-op if DSN is missing
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return
    # traces_sample_rate: clamp to [0.0, 0.2]
    try:
        rate_raw = float(os.getenv("SENTRY_TRACES_RATE", "0"))
    except ValueError:
        rate_raw = 0.0
    sentry_sdk.init(
        dsn=dsn,
        environment=env,
        release=os.getenv("RELEASE"),
        integrations=[StarletteIntegration()],
        traces_sample_rate=max(0.0, min(0.2, rate_raw)),
        send_default_pii=False,
    )


def create_app(
    settings: Settings | None = None,
    *,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    distance_provider: DistanceProvider | None = None,
    station_listing: StationListingClient | None = None,
) -> FastAPI:
    """Compose the application.

    The provider is built here from ``GOOGLE_MAPS_API_KEY`` unless one is passed
    in, so a missing credential fails at startup rather than on first lookup.
    Run with ``uvicorn fuelfinder.main:create_app --factory``.
    """

    setup_logging()
    settings = settings or default_settings
    env = os.getenv("APP_ENV", "dev")
    _init_sentry(env)

    factory = session_factory or db.SessionLocal
    provider = distance_provider or GoogleDistanceMatrixClient(
        settings.google_maps_api_key,
        timeout=settings.distance_provider_timeout_seconds,
    )
    distance_cache = DistanceCache(
        lambda: SqlAlchemyUnitOfWork(factory),
        provider,
        ttl=timedelta(days=settings.distance_cache_ttl_days),
        max_concurrency=settings.distance_provider_max_concurrency,
        usage_recorder=partial(record_api_usage, session_factory=factory),
    )
    listing = station_listing or StationListingClient(
        settings.station_listing_url,
        timeout=settings.station_listing_timeout_seconds,
    )

    app = FastAPI(title="Fuel Finder", version=__version__)
    app.state.started_at = time.monotonic()
    app.state.settings = settings
    app.state.session_factory = factory
    app.state.distance_cache = distance_cache
    app.state.cache_maintenance = CacheMaintenanceService(lambda: SqlAlchemyUnitOfWork(factory))
    app.state.station_finder = StationFinder(listing, distance_cache)

    # Request-ID middleware (JSON access log)
    app.middleware("http")(request_id_middleware)
    # Rate limiting (IP-based, path/method-specific)
    app.middleware("http")(rate_limit_middleware)

    # CORS from ALLOW_ORIGINS env (comma-separated)
    allow_origins = [o.strip() for o in os.getenv("ALLOW_ORIGINS", "").split(",") if o.strip()]
    if allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allow_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS", "HEAD"],
            allow_headers=["*"],
        )

    errors.install(app)
    app.include_router(distances_router)
    app.include_router(stations_router)
    app.include_router(cache_admin_router)
    app.include_router(healthz_router)
    app.include_router(readyz_router)
    app.include_router(version_router)

    structlog.get_logger(__name__).info(
        "app_startup",
        env=env,
        cache_ttl_days=settings.distance_cache_ttl_days,
        provider_max_concurrency=settings.distance_provider_max_concurrency,
    )
    return app
