"""Configuración de la aplicación con Pydantic Settings."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Variables leídas del entorno (o de un fichero .env)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Base de datos
    DATABASE_URL: str = "sqlite:///./f1_guessing.db"

    # JWT (solo validamos tokens, el login vive fuera de este servicio)
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Zona horaria del servidor: se usa para el cutoff por defecto de temporada
    # y para interpretar fechas sin zona que llegan desde el panel de admin
    TIMEZONE: str = "Europe/Oslo"

    # Frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # FastF1
    FASTF1_CACHE_DIR: str = "cache"

    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
