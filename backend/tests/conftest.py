"""Shared fixtures for Feriados backend tests.

Every test gets its own in-memory SQLite database (aiosqlite), so no
database server is required and tests never see each other's rows.
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Never touch the seed CSVs or a real database file from tests
os.environ.setdefault("SEED_ON_STARTUP", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from feriados.database import Base  # noqa: E402
from feriados.models.region import Region, parent_state_code  # noqa: E402
from feriados.services.holiday_cache import HolidayCache  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"

REGIONS = {
    "21": "Maranhão",
    "2111300": "São Luís",
    "31": "Minas Gerais",
    "3106200": "Belo Horizonte",
    "3146107": "Ouro Preto",
    "33": "Rio de Janeiro",
    "3304557": "Rio de Janeiro",
    "3303302": "Niterói",
    "43": "Rio Grande do Sul",
    "4314902": "Porto Alegre",
}


# ---------------------------------------------------------------------------
# Engine: SQLite in-memory with StaticPool (shared across connections)
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def engine():
    import feriados.models  # noqa: F401 (populate Base.metadata)

    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


# ---------------------------------------------------------------------------
# Reset rate-limiter counters before every test
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_rate_limits():
    """Clear in-memory rate-limit counters so tests never block each other."""
    from feriados.core.rate_limit import limiter

    storage = getattr(limiter, "_storage", None)
    if storage is not None and hasattr(storage, "reset"):
        storage.reset()


# ---------------------------------------------------------------------------
# Per-test session
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def db_session(engine):
    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture()
async def seeded_regions(db_session: AsyncSession) -> dict[str, str]:
    """Insert a handful of states and municipalities, all toggles off."""
    for code, name in REGIONS.items():
        db_session.add(Region(
            code=code,
            name=name,
            state=parent_state_code(code),
            carnaval=False,
            corpus_christi=False,
        ))
    await db_session.commit()
    return dict(REGIONS)


@pytest.fixture()
def cache() -> HolidayCache:
    return HolidayCache()


# ---------------------------------------------------------------------------
# HTTP test client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture()
async def client(db_session: AsyncSession, seeded_regions):
    from feriados.database import get_db
    from feriados.main import app
    from feriados.services.holiday_cache import holiday_cache

    await holiday_cache.clear()

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    await holiday_cache.clear()
