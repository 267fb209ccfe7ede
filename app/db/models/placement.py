# app/db/models/placement.py
from sqlalchemy import Integer, ForeignKey, Enum as SqEnum
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.db.models.category import Category

# Snapshots de puntuación. Clave primaria compuesta: recalcular escribe
# encima de la fila existente en vez de añadir otra.


# --- POR CARRERA ---
class RacePlacement(Base):
    __tablename__ = "race_placements"

    race_id: Mapped[int] = mapped_column(ForeignKey("races.id"), primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)
    placement: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)


class RaceCategoryPlacement(Base):
    __tablename__ = "race_category_placements"

    race_id: Mapped[int] = mapped_column(ForeignKey("races.id"), primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)
    category: Mapped[Category] = mapped_column(SqEnum(Category), primary_key=True)
    placement: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)


# --- INICIO DE TEMPORADA ---
class SeasonStartPlacement(Base):
    __tablename__ = "season_start_placements"

    season_id: Mapped[int] = mapped_column(ForeignKey("seasons.id"), primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)
    placement: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)


class SeasonStartCategoryPlacement(Base):
    __tablename__ = "season_start_category_placements"

    season_id: Mapped[int] = mapped_column(ForeignKey("seasons.id"), primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)
    category: Mapped[Category] = mapped_column(SqEnum(Category), primary_key=True)
    placement: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)


# --- FINAL DE TEMPORADA (palmarés / medallas) ---
class SeasonPlacement(Base):
    __tablename__ = "season_placements"

    season_id: Mapped[int] = mapped_column(ForeignKey("seasons.id"), primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), primary_key=True)
    placement: Mapped[int] = mapped_column(Integer, nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
