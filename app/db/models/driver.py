from sqlalchemy import String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base


class Driver(Base):
    __tablename__ = "drivers"
    __table_args__ = (
        UniqueConstraint("season_id", "code", name="uq_season_driver"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id"), nullable=False)
    code: Mapped[str] = mapped_column(String, nullable=False) # Ej: ALO
    name: Mapped[str] = mapped_column(String, nullable=False) # Ej: Fernando Alonso
    # Orden de inscripción: es la "clasificación" antes de la primera carrera
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    constructor_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("constructors.id"), nullable=True)

    # Relaciones
    season: Mapped["Season"] = relationship("Season", back_populates="drivers")
    constructor: Mapped["Constructor"] = relationship("Constructor", back_populates="drivers")
