# app/db/models/race_position.py
from sqlalchemy import Integer, String, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base


class RacePosition(Base):
    __tablename__ = "race_positions"
    __table_args__ = (
        UniqueConstraint("race_result_id", "finishing_position", name="uq_result_finishing_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    race_result_id: Mapped[int] = mapped_column(Integer, ForeignKey("race_results.id"), nullable=False)
    finishing_position: Mapped[int] = mapped_column(Integer, nullable=False)
    # Texto oficial: "1", "2"... o "NC", "DSQ", "DNF"
    classified: Mapped[str] = mapped_column(String, nullable=False)
    driver_code: Mapped[str] = mapped_column(String, nullable=False)
    points: Mapped[float] = mapped_column(Float, default=0.0)

    # Relaciones
    race_result: Mapped["RaceResult"] = relationship("RaceResult", back_populates="positions")
