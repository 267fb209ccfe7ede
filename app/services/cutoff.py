"""
Cutoff Gate: decide si todavía se puede apostar en una temporada o carrera.

La única fuente de verdad es la fila de cutoff. Si no existe, las apuestas
NO están abiertas: se lanza CutoffNotConfiguredError (distinto de "cerrado")
para que quien llama no lo confunda con "sin límite".

La persistencia de apuestas acepta REPLACE a cualquier hora; por eso todo
código que escriba apuestas tiene que pasar antes por require_open_*.
"""
import logging
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import CutoffNotConfiguredError, GuessingClosedError, NotFoundError
from app.db.models.cutoff import RaceCutoff, SeasonCutoff
from app.db.models.race import Race
from app.db.models.season import Season

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite devuelve fechas sin zona: las guardamos siempre en UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_to_utc(value: datetime) -> datetime:
    """Una fecha sin zona que llega del panel de admin es hora local del servidor."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=ZoneInfo(get_settings().TIMEZONE))
    return value.astimezone(timezone.utc)


def default_season_cutoff(year: int) -> datetime:
    """Medianoche local del 1 de enero del año de la temporada, en UTC."""
    local_midnight = datetime(year, 1, 1, tzinfo=ZoneInfo(get_settings().TIMEZONE))
    return local_midnight.astimezone(timezone.utc)


class CutoffGate:

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.db = db
        self.clock = clock

    # --- LECTURA ---
    def season_deadline(self, season_id: int) -> datetime:
        row = self.db.get(SeasonCutoff, season_id)
        if row is None:
            raise CutoffNotConfiguredError("season", season_id)
        return as_utc(row.cutoff)

    def race_deadline(self, race_id: int) -> datetime:
        row = self.db.get(RaceCutoff, race_id)
        if row is None:
            raise CutoffNotConfiguredError("race", race_id)
        return as_utc(row.cutoff)

    def _is_before(self, deadline: datetime) -> bool:
        # Exclusivo: justo en el instante del cutoff ya está cerrado
        return as_utc(self.clock()) < deadline

    def is_open_season(self, season_id: int) -> bool:
        return self._is_before(self.season_deadline(season_id))

    def is_open_race(self, race_id: int) -> bool:
        return self._is_before(self.race_deadline(race_id))

    def require_open_season(self, season_id: int) -> None:
        if not self.is_open_season(season_id):
            raise GuessingClosedError(f"Las apuestas de la temporada {season_id} están cerradas")

    def require_open_race(self, race_id: int) -> None:
        if not self.is_open_race(race_id):
            raise GuessingClosedError(f"Las apuestas de la carrera {race_id} están cerradas")

    def seconds_left_season(self, season_id: int) -> int:
        """Segundos hasta el cutoff (negativo si ya pasó)."""
        delta = self.season_deadline(season_id) - as_utc(self.clock())
        return int(delta.total_seconds())

    def seconds_left_race(self, race_id: int) -> int:
        delta = self.race_deadline(race_id) - as_utc(self.clock())
        return int(delta.total_seconds())

    def race_cutoffs(self, season_id: int) -> list[tuple[Race, datetime]]:
        """Carreras de la temporada que tienen cutoff, por orden de carrera."""
        rows = (
            self.db.query(Race, RaceCutoff.cutoff)
            .join(RaceCutoff, RaceCutoff.race_id == Race.id)
            .filter(Race.season_id == season_id)
            .order_by(Race.position)
            .all()
        )
        return [(race, as_utc(cutoff)) for race, cutoff in rows]

    # --- ESCRITURA (upsert, sin histórico) ---
    def set_season_cutoff(self, season_id: int, instant: datetime) -> datetime:
        instant = local_to_utc(instant)
        row = self.db.get(SeasonCutoff, season_id)
        if row is None:
            row = SeasonCutoff(season_id=season_id, cutoff=instant)
            self.db.add(row)
        else:
            row.cutoff = instant
        self.db.commit()

        logger.info("Cutoff de temporada fijado: temporada=%s cutoff=%s", season_id, instant.isoformat())
        return instant

    def set_race_cutoff(self, race_id: int, instant: datetime) -> datetime:
        instant = local_to_utc(instant)
        row = self.db.get(RaceCutoff, race_id)
        if row is None:
            row = RaceCutoff(race_id=race_id, cutoff=instant)
            self.db.add(row)
        else:
            row.cutoff = instant
        self.db.commit()

        logger.info("Cutoff de carrera fijado: carrera=%s cutoff=%s", race_id, instant.isoformat())
        return instant

    def init_season_cutoff(self, season_id: int) -> datetime:
        """
        Siembra el cutoff por defecto al crear la temporada.
        Si ya hay uno no se toca: el valor por defecto no se reaplica nunca.
        """
        existing = self.db.get(SeasonCutoff, season_id)
        if existing is not None:
            return as_utc(existing.cutoff)

        season = self.db.get(Season, season_id)
        if season is None:
            raise NotFoundError(f"Temporada {season_id} no encontrada")
        return self.set_season_cutoff(season_id, default_season_cutoff(season.year))
