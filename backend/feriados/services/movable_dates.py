"""Movable-Date Calculator.

Computes Easter Sunday (the anchor of the movable feasts) and the Brazilian
holidays offset from it:

- Carnaval:          anchor - 47 days
- Sexta-Feira Santa: anchor - 2 days
- Páscoa:            anchor
- Corpus Christi:    anchor + 60 days

Results are memoized per year. Movable dates of a given year never change,
so the memo is unbounded and lives for the whole process.
"""

from dataclasses import dataclass
from datetime import date, timedelta

CARNAVAL_OFFSET = -47
GOOD_FRIDAY_OFFSET = -2
CORPUS_CHRISTI_OFFSET = 60

PASCOA = "Páscoa"
SEXTA_FEIRA_SANTA = "Sexta-Feira Santa"
CARNAVAL = "Carnaval"
CORPUS_CHRISTI = "Corpus Christi"


def compute_anchor(year: int) -> date:
    """Return Easter Sunday of ``year`` in the Gregorian calendar.

    Anonymous Gregorian algorithm (Meeus/Jones/Butcher), integer arithmetic
    only.
    """
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    weekday_shift = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * weekday_shift) // 451
    month, day = divmod(h + weekday_shift - 7 * m + 114, 31)
    return date(year, month, day + 1)


@dataclass(frozen=True)
class MovableHolidaySet:
    """The movable holidays of one calendar year."""

    reference: date
    offset_minus_47: date
    offset_plus_60: date
    offset_minus_2: date

    @classmethod
    def from_anchor(cls, anchor: date) -> "MovableHolidaySet":
        return cls(
            reference=anchor,
            offset_minus_47=anchor + timedelta(days=CARNAVAL_OFFSET),
            offset_plus_60=anchor + timedelta(days=CORPUS_CHRISTI_OFFSET),
            offset_minus_2=anchor + timedelta(days=GOOD_FRIDAY_OFFSET),
        )

    @property
    def year(self) -> int:
        return self.reference.year

    def national_name(self, day: date) -> str | None:
        """Name of the movable holiday observed everywhere on ``day``, if any."""
        if day == self.reference:
            return PASCOA
        if day == self.offset_minus_2:
            return SEXTA_FEIRA_SANTA
        return None


def compute_movable_set(year: int) -> MovableHolidaySet:
    return MovableHolidaySet.from_anchor(compute_anchor(year))


class MovableDateCalculator:
    """Per-year memo of anchors and movable sets.

    No lock is taken: computing a year is pure and cheap, so two concurrent
    callers may both compute it and ``setdefault`` keeps whichever landed
    first. Both values are equal.
    """

    def __init__(self) -> None:
        self._anchors: dict[int, date] = {}
        self._sets: dict[int, MovableHolidaySet] = {}

    def anchor(self, year: int) -> date:
        cached = self._anchors.get(year)
        if cached is not None:
            return cached
        return self._anchors.setdefault(year, compute_anchor(year))

    def movable_set(self, year: int) -> MovableHolidaySet:
        cached = self._sets.get(year)
        if cached is not None:
            return cached
        return self._sets.setdefault(year, MovableHolidaySet.from_anchor(self.anchor(year)))

    def cached_years(self) -> list[int]:
        return sorted(self._sets)


# Singleton instance
movable_dates = MovableDateCalculator()
