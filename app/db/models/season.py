from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import List, TYPE_CHECKING
from app.db.session import Base

if TYPE_CHECKING:
    from app.db.models.race import Race
    from app.db.models.driver import Driver
    from app.db.models.constructor import Constructor


class Season(Base):
    __tablename__ = "seasons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    year: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    # Se marca al cerrar la temporada (reparto de medallas)
    is_finished: Mapped[bool] = mapped_column(Boolean, default=False)

    races: Mapped[List["Race"]] = relationship("Race", back_populates="season", order_by="Race.position")
    drivers: Mapped[List["Driver"]] = relationship("Driver", back_populates="season", order_by="Driver.position")
    constructors: Mapped[List["Constructor"]] = relationship(
        "Constructor", back_populates="season", order_by="Constructor.position"
    )
