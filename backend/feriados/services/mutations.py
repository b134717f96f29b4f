"""Mutation Coordinator.

Writes movable-holiday toggles and custom holidays through the data source
and invalidates the affected holiday cache entries. Every write is
committed before the cache is touched, so a reader that misses the cache
after an invalidation already sees the new rows. Expected failures are
reported as a :class:`MutationStatus`, never raised.
"""

import enum
import logging

from feriados.models.custom_holiday import CustomHoliday
from feriados.models.region import HolidayToggle, is_state_code, parent_state_code
from feriados.services.data_source import DuplicateCustomHoliday, HolidayDataSource
from feriados.services.fixed_calendar import is_fixed
from feriados.services.holiday_cache import HolidayCache

logger = logging.getLogger(__name__)


class MutationStatus(str, enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"


class MutationCoordinator:
    def __init__(self, source: HolidayDataSource, cache: HolidayCache) -> None:
        self._source = source
        self._cache = cache

    async def set_toggle(
        self, region_code: str, toggle: HolidayToggle, enabled: bool
    ) -> MutationStatus:
        """Switch a movable holiday on or off.

        A state code applies the flag to the state record and to every one
        of its municipalities. The change is committed but the cache is left
        alone; callers invalidate with :meth:`HolidayCache.invalidate_code`.
        """
        region = await self._source.get_region(region_code)
        if region is None:
            return MutationStatus.NOT_FOUND

        codes = [region.code]
        if region.is_state:
            municipalities = await self._source.list_municipalities_of_state(region.code)
            codes.extend(m.code for m in municipalities)

        updated = await self._source.update_region_toggle(codes, toggle, enabled)
        await self._source.commit()
        logger.info(
            "Toggle %s=%s applied to %s (%d regions)",
            toggle.value, enabled, region_code, updated,
        )
        return MutationStatus.OK

    async def upsert_custom_holiday(
        self, region_code: str, month_day: str, title: str
    ) -> MutationStatus:
        """Create a custom holiday. Duplicates are rejected, never overwritten."""
        if is_fixed(month_day):
            return MutationStatus.FORBIDDEN

        region = await self._source.get_region(region_code)
        if region is None:
            return MutationStatus.NOT_FOUND

        existing = await self._source.list_custom_holidays({region_code}, month_day)
        if existing:
            return MutationStatus.CONFLICT

        try:
            await self._source.insert_custom_holiday(
                CustomHoliday(code=region_code, date=month_day, title=title)
            )
        except DuplicateCustomHoliday:
            return MutationStatus.CONFLICT

        await self._source.commit()
        logger.info("Custom holiday %s/%s created (%s)", region_code, month_day, title)
        await self._cache.invalidate_code(region_code)
        return MutationStatus.OK

    async def delete_custom_holiday(self, region_code: str, month_day: str) -> MutationStatus:
        """Delete a custom holiday owned by ``region_code``.

        State records cannot be removed through one of the state's
        municipalities, and fixed holidays cannot be removed at all.
        """
        if is_fixed(month_day):
            return MutationStatus.FORBIDDEN

        state_code = parent_state_code(region_code)
        records = await self._source.list_custom_holidays({region_code, state_code}, month_day)
        owned = [r for r in records if r.code == region_code]

        if not owned:
            inherited = any(r.code == state_code for r in records)
            if inherited and not is_state_code(region_code):
                return MutationStatus.FORBIDDEN
            return MutationStatus.NOT_FOUND

        await self._source.delete_custom_holiday(region_code, month_day)
        await self._source.commit()
        logger.info("Custom holiday %s/%s deleted", region_code, month_day)
        await self._cache.invalidate_code(region_code)
        return MutationStatus.OK
