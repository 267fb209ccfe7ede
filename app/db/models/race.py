# app/db/models/race.py
from sqlalchemy import Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime
from app.db.session import Base


class Race(Base):
    __tablename__ = "races"
    __table_args__ = (
        # El orden dentro de la temporada es único (1 = primera carrera)
        UniqueConstraint("season_id", "position", name="uq_season_race_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    race_datetime: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relaciones
    season: Mapped["Season"] = relationship("Season", back_populates="races")
    race_result: Mapped["RaceResult"] = relationship("RaceResult", back_populates="race", uselist=False)
