# app/db/models/scoring_entry.py
from sqlalchemy import Integer, ForeignKey, UniqueConstraint, CheckConstraint, Enum as SqEnum
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.db.models.category import Category


class ScoringEntry(Base):
    """
    Tabla de puntos: (temporada, categoría, diff) -> puntos.
    Es dispersa: un diff sin fila vale 0 puntos.
    """
    __tablename__ = "scoring_entries"
    __table_args__ = (
        # Un diff solo tiene un valor por temporada y categoría
        UniqueConstraint("season_id", "category", "diff", name="uq_season_category_diff"),
        CheckConstraint("diff >= 0", name="ck_diff_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    season_id: Mapped[int] = mapped_column(Integer, ForeignKey("seasons.id"), nullable=False)
    category: Mapped[Category] = mapped_column(SqEnum(Category), nullable=False)
    diff: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[int] = mapped_column(Integer, default=0)
