"""Holiday Resolution Engine.

Decides whether a date is a holiday for a region, and under which name.
Sources are consulted in strict precedence order, first match wins:

1. Fixed national calendar (``MM-DD``)
2. National movable holidays (Páscoa, Sexta-Feira Santa)
3. Toggle-gated movable holidays (Carnaval, Corpus Christi) when the
   region has them enabled
4. Custom holidays of the region, then of its parent state

A region with a toggle switched off falls through to the custom records
of step 4 instead of answering "not a holiday" right away.
"""

import logging
from datetime import date

from feriados.models.region import HolidayToggle, parent_state_code
from feriados.services.data_source import HolidayDataSource
from feriados.services.fixed_calendar import lookup_fixed
from feriados.services.holiday_cache import HolidayCache
from feriados.services.month_day import month_day_of
from feriados.services.movable_dates import (
    CARNAVAL,
    CORPUS_CHRISTI,
    MovableDateCalculator,
    movable_dates,
)
from feriados.services.verdict import ResolutionVerdict, VerdictSource

logger = logging.getLogger(__name__)

_TOGGLE_NAMES = {
    HolidayToggle.CARNAVAL: CARNAVAL,
    HolidayToggle.CORPUS_CHRISTI: CORPUS_CHRISTI,
}


async def resolve(
    source: HolidayDataSource,
    region_code: str,
    day: date,
    calculator: MovableDateCalculator = movable_dates,
) -> ResolutionVerdict:
    """Resolve ``day`` for ``region_code`` without any caching."""
    month_day = month_day_of(day)

    # 1. Fixed calendar, no region lookup needed
    fixed_name = lookup_fixed(month_day)
    if fixed_name is not None:
        return ResolutionVerdict.holiday(fixed_name, VerdictSource.FIXED)

    # 2. National movable holidays for the date's own year
    movable = calculator.movable_set(day.year)
    national_name = movable.national_name(day)
    if national_name is not None:
        return ResolutionVerdict.holiday(national_name, VerdictSource.NATIONAL_MOVABLE)

    # 3. Toggle-gated movable holidays
    toggle = None
    if day == movable.offset_minus_47:
        toggle = HolidayToggle.CARNAVAL
    elif day == movable.offset_plus_60:
        toggle = HolidayToggle.CORPUS_CHRISTI

    if toggle is not None:
        region = await source.get_region(region_code)
        if region is None:
            return ResolutionVerdict.not_found(VerdictSource.UNKNOWN_REGION)
        if region.toggle_enabled(toggle):
            return ResolutionVerdict.holiday(_TOGGLE_NAMES[toggle], VerdictSource.REGIONAL_MOVABLE)

    # 4. Custom records: the region's own record wins over the state's
    state_code = parent_state_code(region_code)
    records = await source.list_custom_holidays({region_code, state_code}, month_day)
    by_code = {record.code: record for record in records}

    own = by_code.get(region_code)
    if own is not None:
        source_kind = (
            VerdictSource.STATE_CUSTOM if region_code == state_code
            else VerdictSource.MUNICIPAL_CUSTOM
        )
        return ResolutionVerdict.holiday(own.title, source_kind)

    inherited = by_code.get(state_code)
    if inherited is not None:
        return ResolutionVerdict.holiday(inherited.title, VerdictSource.STATE_CUSTOM)

    return ResolutionVerdict.not_found()


async def resolve_cached(
    source: HolidayDataSource,
    cache: HolidayCache,
    region_code: str,
    day: date,
) -> ResolutionVerdict:
    """Read-through wrapper around :func:`resolve`.

    Data-source errors propagate before ``put`` so a failed read never
    populates the cache.
    """
    cached = await cache.get(region_code, day)
    if cached is not None:
        logger.debug("Holiday cache hit %s/%s", region_code, day)
        return cached

    ticket = cache.ticket()
    verdict = await resolve(source, region_code, day)
    await cache.put(region_code, day, verdict, ticket=ticket)
    return verdict
