# app/db/models/race_result.py
from sqlalchemy import Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base


class RaceResult(Base):
    __tablename__ = "race_results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    race_id: Mapped[int] = mapped_column(Integer, ForeignKey("races.id"), unique=True, nullable=False)

    # Relaciones
    race: Mapped["Race"] = relationship("Race", back_populates="race_result")
    positions: Mapped[list["RacePosition"]] = relationship(
        "RacePosition",
        back_populates="race_result",
        order_by="RacePosition.finishing_position",
        cascade="all, delete-orphan",
    )
