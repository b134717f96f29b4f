"""Region / custom-holiday data source.

The resolution engine and the mutation coordinator only talk to the
database through :class:`HolidayDataSource`. ``SqlAlchemyDataSource`` is the
production implementation on top of an ``AsyncSession``.
"""

import logging
from collections.abc import Collection
from typing import Protocol

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from feriados.models.custom_holiday import CustomHoliday
from feriados.models.region import HolidayToggle, Region

logger = logging.getLogger(__name__)


class DataSourceUnavailable(Exception):
    """The backing store could not be reached. Never cached, never retried here."""


class DuplicateCustomHoliday(Exception):
    """A custom holiday already exists for this ``(code, date)``."""


class HolidayDataSource(Protocol):
    async def get_region(self, code: str) -> Region | None: ...

    async def list_custom_holidays(
        self, codes: Collection[str], month_day: str
    ) -> list[CustomHoliday]: ...

    async def insert_custom_holiday(self, record: CustomHoliday) -> None: ...

    async def delete_custom_holiday(self, code: str, month_day: str) -> int: ...

    async def update_region_toggle(
        self, codes: Collection[str], toggle: HolidayToggle, enabled: bool
    ) -> int: ...

    async def list_municipalities_of_state(self, state_code: str) -> list[Region]: ...

    async def commit(self) -> None: ...


class SqlAlchemyDataSource:
    """``HolidayDataSource`` backed by the ``regions`` / ``custom_holidays`` tables.

    Writes are flushed until the mutation coordinator calls :meth:`commit`,
    which it does before touching the cache. ``get_db`` still commits
    whatever is left at the end of the request.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_region(self, code: str) -> Region | None:
        try:
            result = await self._db.execute(select(Region).where(Region.code == code))
        except OperationalError as exc:
            raise DataSourceUnavailable(str(exc)) from exc
        return result.scalar_one_or_none()

    async def list_custom_holidays(
        self, codes: Collection[str], month_day: str
    ) -> list[CustomHoliday]:
        if not codes:
            return []
        try:
            result = await self._db.execute(
                select(CustomHoliday).where(
                    CustomHoliday.code.in_(list(codes)),
                    CustomHoliday.date == month_day,
                )
            )
        except OperationalError as exc:
            raise DataSourceUnavailable(str(exc)) from exc
        return list(result.scalars().all())

    async def insert_custom_holiday(self, record: CustomHoliday) -> None:
        self._db.add(record)
        try:
            await self._db.flush()
        except IntegrityError as exc:
            await self._db.rollback()
            raise DuplicateCustomHoliday(f"{record.code}/{record.date}") from exc
        except OperationalError as exc:
            raise DataSourceUnavailable(str(exc)) from exc

    async def delete_custom_holiday(self, code: str, month_day: str) -> int:
        try:
            result = await self._db.execute(
                delete(CustomHoliday).where(
                    CustomHoliday.code == code,
                    CustomHoliday.date == month_day,
                )
            )
        except OperationalError as exc:
            raise DataSourceUnavailable(str(exc)) from exc
        return result.rowcount

    async def update_region_toggle(
        self, codes: Collection[str], toggle: HolidayToggle, enabled: bool
    ) -> int:
        if not codes:
            return 0
        try:
            result = await self._db.execute(
                update(Region)
                .where(Region.code.in_(list(codes)))
                .values({toggle.column: enabled})
            )
        except OperationalError as exc:
            raise DataSourceUnavailable(str(exc)) from exc
        logger.debug("Toggle %s=%s written on %d regions", toggle.value, enabled, result.rowcount)
        return result.rowcount

    async def list_municipalities_of_state(self, state_code: str) -> list[Region]:
        try:
            result = await self._db.execute(
                select(Region)
                .where(Region.state == state_code, Region.code != state_code)
                .order_by(Region.code)
            )
        except OperationalError as exc:
            raise DataSourceUnavailable(str(exc)) from exc
        return list(result.scalars().all())

    async def commit(self) -> None:
        try:
            await self._db.commit()
        except OperationalError as exc:
            raise DataSourceUnavailable(str(exc)) from exc
