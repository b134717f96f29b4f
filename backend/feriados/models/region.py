import enum

from sqlalchemy import Boolean, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feriados.database import Base

STATE_CODE_LENGTH = 2
MUNICIPALITY_CODE_LENGTH = 7


def parent_state_code(code: str) -> str:
    """Return the state a region code belongs to (a state is its own parent)."""
    return code[:STATE_CODE_LENGTH]


def is_state_code(code: str) -> bool:
    return len(code) == STATE_CODE_LENGTH


class HolidayToggle(str, enum.Enum):
    """Movable holidays that each region opts into."""

    CARNAVAL = "carnaval"
    CORPUS_CHRISTI = "corpus-christi"

    @property
    def column(self) -> str:
        return self.value.replace("-", "_")


class Region(Base):
    __tablename__ = "regions"

    code: Mapped[str] = mapped_column(String(7), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(2), nullable=False, index=True)
    carnaval: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    corpus_christi: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    # Relationships
    custom_holidays: Mapped[list["CustomHoliday"]] = relationship(  # noqa: F821
        back_populates="region"
    )

    @property
    def parent_state_code(self) -> str:
        return parent_state_code(self.code)

    @property
    def is_state(self) -> bool:
        return is_state_code(self.code)

    def toggle_enabled(self, toggle: HolidayToggle) -> bool:
        if toggle is HolidayToggle.CARNAVAL:
            return self.carnaval
        return self.corpus_christi

    def __repr__(self) -> str:
        return f"<Region(code={self.code!r}, name={self.name!r})>"
