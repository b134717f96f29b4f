"""Tests for the mutation coordinator (SQLite-backed)."""

from datetime import date

import pytest
from sqlalchemy import select

from feriados.models.custom_holiday import CustomHoliday
from feriados.models.region import HolidayToggle, Region
from feriados.services.data_source import SqlAlchemyDataSource
from feriados.services.holiday_cache import HolidayCache
from feriados.services.mutations import MutationCoordinator, MutationStatus
from feriados.services.resolution import resolve, resolve_cached

CARNAVAL_2020 = date(2020, 2, 25)


@pytest.fixture()
def source(db_session, seeded_regions) -> SqlAlchemyDataSource:
    return SqlAlchemyDataSource(db_session)


@pytest.fixture()
def coordinator(source, cache) -> MutationCoordinator:
    return MutationCoordinator(source, cache)


async def _toggles(db, code) -> tuple[bool, bool]:
    region = (await db.execute(select(Region).where(Region.code == code))).scalar_one()
    return region.carnaval, region.corpus_christi


class SessionStateCache(HolidayCache):
    """Records whether the session still had an open transaction at invalidation."""

    def __init__(self, session) -> None:
        super().__init__()
        self._session = session
        self.open_transaction_seen: list[bool] = []

    async def invalidate_code(self, region_code: str) -> int:
        self.open_transaction_seen.append(self._session.in_transaction())
        return await super().invalidate_code(region_code)


class TestSetToggle:
    async def test_municipality(self, coordinator, db_session):
        result = await coordinator.set_toggle("3146107", HolidayToggle.CORPUS_CHRISTI, True)
        assert result is MutationStatus.OK
        assert await _toggles(db_session, "3146107") == (False, True)
        assert await _toggles(db_session, "3106200") == (False, False)

    async def test_state_applies_to_all_municipalities(self, coordinator, db_session):
        result = await coordinator.set_toggle("33", HolidayToggle.CARNAVAL, True)
        assert result is MutationStatus.OK
        for code in ("33", "3304557", "3303302"):
            assert await _toggles(db_session, code) == (True, False)
        assert await _toggles(db_session, "3146107") == (False, False)

    async def test_disable(self, coordinator, db_session):
        await coordinator.set_toggle("33", HolidayToggle.CARNAVAL, True)
        await coordinator.set_toggle("3304557", HolidayToggle.CARNAVAL, False)
        assert await _toggles(db_session, "3304557") == (False, False)
        assert await _toggles(db_session, "3303302") == (True, False)

    async def test_unknown_region(self, coordinator):
        result = await coordinator.set_toggle("3399999", HolidayToggle.CARNAVAL, True)
        assert result is MutationStatus.NOT_FOUND

    async def test_does_not_invalidate_cache(self, coordinator, source, cache):
        await resolve_cached(source, cache, "3304557", CARNAVAL_2020)
        await coordinator.set_toggle("3304557", HolidayToggle.CARNAVAL, True)
        assert len(cache) == 1

    async def test_gating_after_invalidation(self, coordinator, source, cache):
        before = await resolve_cached(source, cache, "3304557", CARNAVAL_2020)
        assert not before.found

        await coordinator.set_toggle("3304557", HolidayToggle.CARNAVAL, True)
        await cache.invalidate_code("3304557")

        after = await resolve_cached(source, cache, "3304557", CARNAVAL_2020)
        assert after.name == "Carnaval"

    async def test_state_toggle_reaches_cached_municipal_record(self, coordinator, source, cache):
        await coordinator.upsert_custom_holiday("3304557", "02-25", "Festa local")
        cached = await resolve_cached(source, cache, "3304557", CARNAVAL_2020)
        assert cached.name == "Festa local"

        await coordinator.set_toggle("33", HolidayToggle.CARNAVAL, True)
        await cache.invalidate_code("33")

        after = await resolve_cached(source, cache, "3304557", CARNAVAL_2020)
        assert after == await resolve(source, "3304557", CARNAVAL_2020)
        assert after.name == "Carnaval"

        await coordinator.set_toggle("33", HolidayToggle.CARNAVAL, False)
        await cache.invalidate_code("33")

        after = await resolve_cached(source, cache, "3304557", CARNAVAL_2020)
        assert after.name == "Festa local"

    async def test_commits_before_returning(self, coordinator, db_session):
        await coordinator.set_toggle("33", HolidayToggle.CARNAVAL, True)
        assert not db_session.in_transaction()


class TestUpsertCustomHoliday:
    async def test_create(self, coordinator, db_session):
        result = await coordinator.upsert_custom_holiday("33", "11-20", "Consciência Negra")
        assert result is MutationStatus.OK
        record = await db_session.get(CustomHoliday, ("33", "11-20"))
        assert record.title == "Consciência Negra"

    async def test_duplicate_rejected(self, coordinator, db_session):
        await coordinator.upsert_custom_holiday("33", "11-20", "Consciência Negra")
        result = await coordinator.upsert_custom_holiday("33", "11-20", "Outro nome")
        assert result is MutationStatus.CONFLICT
        record = await db_session.get(CustomHoliday, ("33", "11-20"))
        assert record.title == "Consciência Negra"

    async def test_same_date_other_region_allowed(self, coordinator):
        await coordinator.upsert_custom_holiday("33", "11-20", "Consciência Negra")
        result = await coordinator.upsert_custom_holiday("3304557", "11-20", "Zumbi")
        assert result is MutationStatus.OK

    async def test_unknown_region(self, coordinator):
        result = await coordinator.upsert_custom_holiday("3399999", "11-20", "Nada")
        assert result is MutationStatus.NOT_FOUND

    async def test_fixed_date_forbidden(self, coordinator):
        result = await coordinator.upsert_custom_holiday("33", "12-25", "Outro Natal")
        assert result is MutationStatus.FORBIDDEN

    async def test_replaces_cached_miss(self, coordinator, source, cache):
        day = date(2020, 11, 20)
        assert not (await resolve_cached(source, cache, "3304557", day)).found

        await coordinator.upsert_custom_holiday("3304557", "11-20", "Zumbi")

        verdict = await resolve_cached(source, cache, "3304557", day)
        assert verdict.name == "Zumbi"

    async def test_state_insert_reaches_cached_municipalities(self, coordinator, source, cache):
        day = date(2020, 11, 20)
        for code in ("3304557", "3303302", "33"):
            assert not (await resolve_cached(source, cache, code, day)).found

        await coordinator.upsert_custom_holiday("33", "11-20", "Consciência Negra")

        for code in ("3304557", "3303302", "33"):
            verdict = await resolve_cached(source, cache, code, day)
            assert verdict.name == "Consciência Negra"


class TestDeleteCustomHoliday:
    async def test_delete_own(self, coordinator, db_session):
        await coordinator.upsert_custom_holiday("33", "11-20", "Consciência Negra")
        result = await coordinator.delete_custom_holiday("33", "11-20")
        assert result is MutationStatus.OK
        assert await db_session.get(CustomHoliday, ("33", "11-20")) is None

    async def test_state_record_via_municipality_forbidden(self, coordinator, db_session):
        await coordinator.upsert_custom_holiday("33", "11-20", "Consciência Negra")
        result = await coordinator.delete_custom_holiday("3304557", "11-20")
        assert result is MutationStatus.FORBIDDEN
        assert await db_session.get(CustomHoliday, ("33", "11-20")) is not None

    async def test_municipal_record_deletable_despite_state_record(self, coordinator, db_session):
        await coordinator.upsert_custom_holiday("33", "11-20", "Consciência Negra")
        await coordinator.upsert_custom_holiday("3304557", "11-20", "Zumbi")
        result = await coordinator.delete_custom_holiday("3304557", "11-20")
        assert result is MutationStatus.OK
        assert await db_session.get(CustomHoliday, ("33", "11-20")) is not None

    async def test_municipal_record_not_deletable_via_other_municipality(self, coordinator):
        await coordinator.upsert_custom_holiday("3304557", "03-01", "Aniversário do Rio")
        result = await coordinator.delete_custom_holiday("3303302", "03-01")
        assert result is MutationStatus.NOT_FOUND

    async def test_missing(self, coordinator):
        result = await coordinator.delete_custom_holiday("3304557", "11-20")
        assert result is MutationStatus.NOT_FOUND

    @pytest.mark.parametrize("code", ["33", "3304557", "4314902"])
    async def test_fixed_date_forbidden(self, coordinator, code):
        result = await coordinator.delete_custom_holiday(code, "05-01")
        assert result is MutationStatus.FORBIDDEN

    async def test_invalidates_cached_verdicts(self, coordinator, source, cache):
        day = date(2020, 11, 20)
        await coordinator.upsert_custom_holiday("33", "11-20", "Consciência Negra")
        assert (await resolve_cached(source, cache, "3304557", day)).found

        await coordinator.delete_custom_holiday("33", "11-20")

        assert not (await resolve_cached(source, cache, "3304557", day)).found


class TestCommitBeforeInvalidation:
    async def test_upsert(self, source, db_session):
        cache = SessionStateCache(db_session)
        coordinator = MutationCoordinator(source, cache)
        await coordinator.upsert_custom_holiday("33", "11-20", "Consciência Negra")
        assert cache.open_transaction_seen == [False]

    async def test_delete(self, source, db_session):
        cache = SessionStateCache(db_session)
        coordinator = MutationCoordinator(source, cache)
        await coordinator.upsert_custom_holiday("33", "11-20", "Consciência Negra")
        await coordinator.delete_custom_holiday("33", "11-20")
        assert cache.open_transaction_seen == [False, False]

    async def test_rejected_write_does_not_invalidate(self, source, db_session):
        cache = SessionStateCache(db_session)
        coordinator = MutationCoordinator(source, cache)
        await coordinator.upsert_custom_holiday("33", "12-25", "Outro Natal")
        assert cache.open_transaction_seen == []
