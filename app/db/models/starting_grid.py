# app/db/models/starting_grid.py
from sqlalchemy import Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base


class StartingGrid(Base):
    """Parrilla de salida. Una carrera con parrilla y sin resultado está abierta a apuestas de podio."""
    __tablename__ = "starting_grid"
    __table_args__ = (
        UniqueConstraint("race_id", "position", name="uq_grid_position"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    race_id: Mapped[int] = mapped_column(Integer, ForeignKey("races.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    driver_code: Mapped[str] = mapped_column(String, nullable=False)
