from pydantic import BaseModel
from datetime import datetime
from app.db.models.category import Category, Flag


# --- RESULTADOS DE PUNTUACIÓN ---
class Placement(BaseModel):
    position: int
    points: int


class Summary(BaseModel):
    """Una Placement por categoría puntuada + la total."""
    categories: dict[Category, Placement]
    total: Placement


class Medals(BaseModel):
    gold: int = 0
    silver: int = 0
    bronze: int = 0


class SeasonPlacementOut(BaseModel):
    year: int
    placement: int


class LeaderboardRow(BaseModel):
    user_id: int
    username: str
    position: int
    points: int


class SeriesPoint(BaseModel):
    race_position: int  # 0 = inicio de temporada
    race_name: str | None = None
    position: int
    points: int


# --- TABLA DE PUNTOS ---
class ScoringEntryIn(BaseModel):
    category: Category
    diff: int


class ScoringPointsIn(ScoringEntryIn):
    points: int


# --- CUTOFFS ---
class CutoffIn(BaseModel):
    cutoff: datetime


class CutoffOut(BaseModel):
    cutoff: datetime
    is_open: bool
    seconds_left: int


# --- APUESTAS ---
class FlagGuessIn(BaseModel):
    amounts: dict[Flag, int]


class RankingGuessIn(BaseModel):
    ranking: list[str]  # Posición 1 primero


class PlaceGuessIn(BaseModel):
    category: Category
    driver_code: str
