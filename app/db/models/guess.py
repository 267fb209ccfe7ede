# app/db/models/guess.py
from sqlalchemy import Integer, String, DateTime, ForeignKey, UniqueConstraint, Enum as SqEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from app.db.session import Base
from app.db.models.category import Category, Flag

# Todas las apuestas se guardan con semántica REPLACE: una nueva escritura
# sobre la misma clave pisa el valor anterior y no se guarda histórico.


class DriverGuess(Base):
    __tablename__ = "driver_guesses"
    __table_args__ = (
        # Un usuario solo tiene un piloto por posición y temporada
        UniqueConstraint("user_id", "season_id", "position", name="uq_driver_guess_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    driver_code: Mapped[str] = mapped_column(String, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped["User"] = relationship("User")


class ConstructorGuess(Base):
    __tablename__ = "constructor_guesses"
    __table_args__ = (
        UniqueConstraint("user_id", "season_id", "position", name="uq_constructor_guess_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    constructor_name: Mapped[str] = mapped_column(String, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped["User"] = relationship("User")


class FlagGuess(Base):
    __tablename__ = "flag_guesses"
    __table_args__ = (
        UniqueConstraint("user_id", "season_id", "flag", name="uq_flag_guess"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id"), nullable=False)
    flag: Mapped[Flag] = mapped_column(SqEnum(Flag), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped["User"] = relationship("User")


class PlaceGuess(Base):
    """Apuesta de carrera: qué piloto acaba 1º (FIRST) o 10º (TENTH)."""
    __tablename__ = "place_guesses"
    __table_args__ = (
        UniqueConstraint("user_id", "race_id", "category", name="uq_place_guess"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    race_id: Mapped[int] = mapped_column(Integer, ForeignKey("races.id"), nullable=False)
    category: Mapped[Category] = mapped_column(SqEnum(Category), nullable=False)
    driver_code: Mapped[str] = mapped_column(String, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped["User"] = relationship("User")
