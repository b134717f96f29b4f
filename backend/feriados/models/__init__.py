"""SQLAlchemy ORM models.

All models are imported here so that Alembic can discover them
via ``Base.metadata`` when generating migrations.
"""

from feriados.models.custom_holiday import CustomHoliday  # noqa: F401
from feriados.models.region import Region  # noqa: F401

__all__ = [
    "CustomHoliday",
    "Region",
]
