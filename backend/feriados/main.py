import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feriados.config import settings
from feriados.core.rate_limit import limiter
from feriados.database import get_db
from feriados.routers import holidays
from feriados.services.data_source import DataSourceUnavailable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Holiday cache sweeper background task
# ---------------------------------------------------------------------------
async def _cache_sweep_loop() -> None:
    """Evict expired holiday cache entries at a fixed interval."""
    from feriados.services.holiday_cache import holiday_cache

    while True:
        await asyncio.sleep(settings.CACHE_SWEEP_INTERVAL_SECONDS)
        try:
            removed = await holiday_cache.sweep()
            if removed:
                logger.debug("Cache sweep: %d expired entries removed", removed)
        except Exception:
            logger.exception("Cache sweep error")


# ---------------------------------------------------------------------------
# Database bootstrap
# ---------------------------------------------------------------------------
async def _bootstrap_database() -> None:
    """Create tables and load the region seed files."""
    from feriados.database import async_session, init_db
    from feriados.services.region_seed import seed_from_files

    await init_db()
    if not settings.SEED_ON_STARTUP:
        return

    async with async_session() as db:
        count = await seed_from_files(
            db, settings.SEED_STATES_CSV, settings.SEED_MUNICIPALITIES_CSV,
        )
        await db.commit()
    logger.info("Region seed: %d new regions", count)


# ---------------------------------------------------------------------------
# Lifespan context manager
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan: runs on startup and shutdown."""
    await _bootstrap_database()
    logger.info("Feriados API started")
    sweep_task = asyncio.create_task(_cache_sweep_loop())
    yield
    sweep_task.cancel()
    logger.info("Feriados API shutting down")


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)


# -- Middleware ---------------------------------------------------------------
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)

# -- Rate limiting ------------------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# -- Errors -------------------------------------------------------------------
@app.exception_handler(DataSourceUnavailable)
async def data_source_unavailable_handler(request: Request, exc: DataSourceUnavailable):
    """Surface storage outages as 503; nothing is cached on this path."""
    logger.warning("Data source unavailable for %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Holiday data temporarily unavailable"},
    )


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check with DB and Redis connectivity verification."""
    from feriados.core.redis_client import redis_status

    checks: dict[str, str] = {"db": "ok"}

    try:
        await db.execute(select(1))
    except Exception:
        checks["db"] = "error"

    checks["redis"] = await redis_status()

    # "unavailable" = optional service not configured; only "error" = degraded
    degraded = any(v == "error" for v in checks.values())
    return {"status": "degraded" if degraded else "ok", "app": settings.APP_NAME, **checks}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(holidays.router)
