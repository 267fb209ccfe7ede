# app/db/models/standings.py
from sqlalchemy import Integer, String, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base


class DriverStanding(Base):
    """Clasificación del mundial de pilotos tras una carrera."""
    __tablename__ = "driver_standings"
    __table_args__ = (
        UniqueConstraint("race_id", "driver_code", name="uq_race_driver_standing"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    race_id: Mapped[int] = mapped_column(Integer, ForeignKey("races.id"), nullable=False)
    driver_code: Mapped[str] = mapped_column(String, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[float] = mapped_column(Float, default=0.0)


class ConstructorStanding(Base):
    """Clasificación del mundial de constructores tras una carrera."""
    __tablename__ = "constructor_standings"
    __table_args__ = (
        UniqueConstraint("race_id", "constructor_name", name="uq_race_constructor_standing"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    race_id: Mapped[int] = mapped_column(Integer, ForeignKey("races.id"), nullable=False)
    constructor_name: Mapped[str] = mapped_column(String, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[float] = mapped_column(Float, default=0.0)
