from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from feriados.database import get_db
from feriados.services.data_source import SqlAlchemyDataSource
from feriados.services.holiday_cache import HolidayCache, holiday_cache
from feriados.services.mutations import MutationCoordinator


def get_holiday_cache() -> HolidayCache:
    """Return the process-wide holiday cache (overridable in tests)."""
    return holiday_cache


async def get_data_source(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SqlAlchemyDataSource:
    return SqlAlchemyDataSource(db)


async def get_mutation_coordinator(
    source: Annotated[SqlAlchemyDataSource, Depends(get_data_source)],
    cache: Annotated[HolidayCache, Depends(get_holiday_cache)],
) -> MutationCoordinator:
    return MutationCoordinator(source, cache)
