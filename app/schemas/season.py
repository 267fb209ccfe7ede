from pydantic import BaseModel
from datetime import datetime
from app.db.models.category import Flag

# Esquemas para Temporadas
class SeasonBase(BaseModel):
    year: int
    name: str
    is_active: bool = False

class SeasonCreate(SeasonBase):
    pass

class SeasonOut(SeasonBase):
    id: int
    is_finished: bool = False
    class Config:
        from_attributes = True

# Esquemas para Carreras
class RaceCreate(BaseModel):
    season_id: int
    position: int
    name: str
    race_datetime: datetime | None = None

class RaceOut(BaseModel):
    id: int
    season_id: int
    position: int
    name: str
    race_datetime: datetime | None = None
    class Config:
        from_attributes = True

# Parrilla F1 real de la temporada (el orden de la lista es la posición de inscripción)
class DriverIn(BaseModel):
    code: str
    name: str
    constructor: str | None = None

class ConstructorIn(BaseModel):
    name: str
    color: str = "#000000"

# --- RESULTADOS ---
class RacePositionIn(BaseModel):
    finishing_position: int
    driver_code: str
    classified: str | None = None
    points: float = 0.0

class StandingIn(BaseModel):
    name: str  # Código de piloto o nombre de escudería
    points: float = 0.0

class FlagStatIn(BaseModel):
    flag: Flag
    round: int = 1
    session_type: str = "RACE"
