# app/db/models/flag_stat.py
from sqlalchemy import Integer, String, ForeignKey, Enum as SqEnum
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.db.models.category import Flag


class FlagStat(Base):
    """Una fila por cada bandera / safety car registrado en una carrera."""
    __tablename__ = "flag_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    race_id: Mapped[int] = mapped_column(Integer, ForeignKey("races.id"), nullable=False)
    flag: Mapped[Flag] = mapped_column(SqEnum(Flag), nullable=False)
    round: Mapped[int] = mapped_column(Integer, default=1)  # Vuelta
    session_type: Mapped[str] = mapped_column(String, default="RACE")  # RACE / SPRINT
