"""Holidays router.

``/feriados/{code}/{date}`` where ``code`` is a 2-digit state or 7-digit
municipality code.

- GET with ``YYYY-MM-DD``: is that day a holiday for the region?
- PUT / DELETE with ``MM-DD``: create / remove a custom holiday.
- PUT / DELETE with ``carnaval`` or ``corpus-christi``: switch the movable
  holiday on / off for the region (or the whole state).
"""

import re
from datetime import date as date_type
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from feriados.core.dependencies import (
    get_data_source,
    get_holiday_cache,
    get_mutation_coordinator,
)
from feriados.core.rate_limit import MUTATION_LIMIT, limiter
from feriados.models.region import HolidayToggle
from feriados.schemas.holiday import HolidayCreate, HolidayResponse
from feriados.services.data_source import SqlAlchemyDataSource
from feriados.services.holiday_cache import HolidayCache
from feriados.services.month_day import is_valid_month_day
from feriados.services.mutations import MutationCoordinator, MutationStatus
from feriados.services.resolution import resolve_cached

router = APIRouter(prefix="/feriados", tags=["Feriados"])

_CODE_RE = re.compile(r"^(\d{2}|\d{7})$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_STATUS_ERRORS = {
    MutationStatus.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Region or holiday not found"),
    MutationStatus.CONFLICT: (status.HTTP_409_CONFLICT, "A holiday already exists for this date"),
    MutationStatus.FORBIDDEN: (status.HTTP_403_FORBIDDEN, "This holiday cannot be changed here"),
}


def _validate_code(code: str) -> str:
    if not _CODE_RE.match(code):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Region code must have 2 or 7 digits",
        )
    return code


def _parse_day(value: str) -> date_type:
    if _ISO_DATE_RE.match(value):
        try:
            return date_type.fromisoformat(value)
        except ValueError:
            pass
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Date must be a valid YYYY-MM-DD",
    )


def _parse_target(value: str) -> HolidayToggle | str:
    """Return the toggle named by ``value``, or the validated ``MM-DD`` string."""
    try:
        return HolidayToggle(value)
    except ValueError:
        pass
    if not is_valid_month_day(value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Date must be MM-DD, carnaval or corpus-christi",
        )
    return value


def _raise_for(result: MutationStatus) -> None:
    if result is MutationStatus.OK:
        return
    status_code, detail = _STATUS_ERRORS[result]
    raise HTTPException(status_code=status_code, detail=detail)


@router.get("/{code}/{date}", response_model=HolidayResponse)
async def get_holiday(
    code: str,
    date: str,
    source: Annotated[SqlAlchemyDataSource, Depends(get_data_source)],
    cache: Annotated[HolidayCache, Depends(get_holiday_cache)],
):
    """Return the holiday name for a region on a given day, or 404."""
    _validate_code(code)
    day = _parse_day(date)

    verdict = await resolve_cached(source, cache, code, day)
    if not verdict.found:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not a holiday",
        )
    return HolidayResponse(name=verdict.name)


@router.put("/{code}/{date}")
@limiter.limit(MUTATION_LIMIT)
async def put_holiday(
    request: Request,
    code: str,
    date: str,
    coordinator: Annotated[MutationCoordinator, Depends(get_mutation_coordinator)],
    cache: Annotated[HolidayCache, Depends(get_holiday_cache)],
    body: HolidayCreate | None = None,
):
    """Enable a movable holiday or create a custom holiday."""
    _validate_code(code)
    target = _parse_target(date)

    if isinstance(target, HolidayToggle):
        _raise_for(await coordinator.set_toggle(code, target, True))
        await cache.invalidate_code(code)
        return Response(status_code=status.HTTP_200_OK)

    if body is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Holiday name is required",
        )
    _raise_for(await coordinator.upsert_custom_holiday(code, target, body.name))
    return Response(status_code=status.HTTP_201_CREATED)


@router.delete("/{code}/{date}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(MUTATION_LIMIT)
async def delete_holiday(
    request: Request,
    code: str,
    date: str,
    coordinator: Annotated[MutationCoordinator, Depends(get_mutation_coordinator)],
    cache: Annotated[HolidayCache, Depends(get_holiday_cache)],
):
    """Disable a movable holiday or remove a custom holiday."""
    _validate_code(code)
    target = _parse_target(date)

    if isinstance(target, HolidayToggle):
        _raise_for(await coordinator.set_toggle(code, target, False))
        await cache.invalidate_code(code)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    _raise_for(await coordinator.delete_custom_holiday(code, target))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
