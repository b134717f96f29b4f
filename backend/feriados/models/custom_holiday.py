from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from feriados.database import Base


class CustomHoliday(Base):
    __tablename__ = "custom_holidays"

    code: Mapped[str] = mapped_column(
        String(7), ForeignKey("regions.code"), primary_key=True
    )
    date: Mapped[str] = mapped_column(String(5), primary_key=True)  # MM-DD
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    # Relationships
    region: Mapped["Region"] = relationship(back_populates="custom_holidays")  # noqa: F821

    def __repr__(self) -> str:
        return f"<CustomHoliday(code={self.code!r}, date={self.date!r}, title={self.title!r})>"
