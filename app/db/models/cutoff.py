# app/db/models/cutoff.py
from sqlalchemy import Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from app.db.session import Base


class SeasonCutoff(Base):
    """Fecha límite para las apuestas de temporada (pilotos, constructores, banderas)."""
    __tablename__ = "season_cutoffs"

    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id"), primary_key=True)
    cutoff: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class RaceCutoff(Base):
    """Fecha límite para las apuestas de una carrera (ganador, décimo)."""
    __tablename__ = "race_cutoffs"

    race_id: Mapped[int] = mapped_column(Integer, ForeignKey("races.id"), primary_key=True)
    cutoff: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
