# app/db/models/category.py
import enum


# --- ENUMS DE REFERENCIA (no se guardan en tabla propia) ---
class Category(str, enum.Enum):
    DRIVER = "DRIVER"            # Ranking final de pilotos
    CONSTRUCTOR = "CONSTRUCTOR"  # Ranking final de escuderías
    FLAG = "FLAG"                # Nº de banderas / safety cars en la temporada
    FIRST = "FIRST"              # Ganador de cada carrera
    TENTH = "TENTH"              # Décimo de cada carrera


class Flag(str, enum.Enum):
    YELLOW_FLAG = "YELLOW_FLAG"
    RED_FLAG = "RED_FLAG"
    SAFETY_CAR = "SAFETY_CAR"


# Categorías de carrera -> posición final que hay que acertar
PLACE_CATEGORIES = {
    Category.FIRST: 1,
    Category.TENTH: 10,
}

# Para entrar en la clasificación de la temporada hay que haber apostado en estas tres
SEASON_CATEGORIES = (Category.FLAG, Category.DRIVER, Category.CONSTRUCTOR)
