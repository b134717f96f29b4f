"""Fixed national holidays, keyed by ``MM-DD``. Read-only."""

from types import MappingProxyType

FIXED_HOLIDAYS = MappingProxyType({
    "01-01": "Ano Novo",
    "04-21": "Tiradentes",
    "05-01": "Dia do Trabalhador",
    "09-07": "Independência",
    "10-12": "Nossa Senhora Aparecida",
    "11-02": "Finados",
    "11-15": "Proclamação da República",
    "12-25": "Natal",
})


def lookup_fixed(month_day: str) -> str | None:
    """Return the fixed holiday name for ``month_day`` (``MM-DD``), or None."""
    return FIXED_HOLIDAYS.get(month_day)


def is_fixed(month_day: str) -> bool:
    return month_day in FIXED_HOLIDAYS
