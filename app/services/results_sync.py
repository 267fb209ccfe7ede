"""
Resultados reales: escritura manual desde el panel de admin e importación
automática con FastF1.

Todas las escrituras son REPLACE por carrera: se borra lo anterior y se
vuelve a insertar. Puntuar es un paso aparte (app.services.scoring).
Con commit=False solo se hace flush; quien llama confirma todo de una vez.
"""
import logging
import os
import fastf1
import pandas as pd
from fastf1.ergast import Ergast
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import InvalidGuessError, NotFoundError
from app.db.models.category import Flag
from app.db.models.flag_stat import FlagStat
from app.db.models.race import Race
from app.db.models.race_position import RacePosition
from app.db.models.race_result import RaceResult
from app.db.models.standings import ConstructorStanding, DriverStanding
from app.db.models.starting_grid import StartingGrid

logger = logging.getLogger(__name__)


def _get_race(db: Session, race_id: int) -> Race:
    race = db.get(Race, race_id)
    if race is None:
        raise NotFoundError(f"Carrera {race_id} no encontrada")
    return race


def _reject_repeated(values: list, message: str) -> None:
    if len(set(values)) != len(values):
        raise InvalidGuessError(message)


def _finish(db: Session, commit: bool) -> None:
    if commit:
        db.commit()
    else:
        db.flush()


# ==============================================================================
# ESCRITURA MANUAL
# ==============================================================================

def save_race_result(db: Session, race_id: int, rows: list[dict], commit: bool = True) -> RaceResult:
    """
    rows: [{"finishing_position": 1, "classified": "1", "driver_code": "VER", "points": 25}, ...]
    """
    _get_race(db, race_id)
    _reject_repeated([r["finishing_position"] for r in rows], "Hay posiciones repetidas en el resultado")
    _reject_repeated([r["driver_code"] for r in rows], "Hay pilotos repetidos en el resultado")

    result = db.query(RaceResult).filter(RaceResult.race_id == race_id).first()
    if not result:
        result = RaceResult(race_id=race_id)
        db.add(result)
        db.flush()

    db.query(RacePosition).filter(RacePosition.race_result_id == result.id).delete()

    for row in rows:
        db.add(RacePosition(
            race_result_id=result.id,
            finishing_position=row["finishing_position"],
            classified=str(row.get("classified") or row["finishing_position"]),
            driver_code=row["driver_code"],
            points=row.get("points", 0.0)
        ))

    _finish(db, commit)
    db.refresh(result)
    logger.info("Resultado guardado: carrera=%s posiciones=%s", race_id, len(rows))
    return result


def save_starting_grid(db: Session, race_id: int, driver_codes: list[str], commit: bool = True) -> None:
    _get_race(db, race_id)
    _reject_repeated(driver_codes, "Hay pilotos repetidos en la parrilla")

    db.query(StartingGrid).filter(StartingGrid.race_id == race_id).delete()
    for position, code in enumerate(driver_codes, start=1):
        db.add(StartingGrid(race_id=race_id, position=position, driver_code=code))

    _finish(db, commit)
    logger.info("Parrilla guardada: carrera=%s pilotos=%s", race_id, len(driver_codes))


def save_driver_standings(
    db: Session, race_id: int, standings: list[tuple[str, float]], commit: bool = True
) -> None:
    """standings: [(código, puntos), ...] ya ordenado, el líder primero."""
    _get_race(db, race_id)
    _reject_repeated([code for code, _ in standings], "Hay pilotos repetidos en el mundial")

    db.query(DriverStanding).filter(DriverStanding.race_id == race_id).delete()
    for position, (code, points) in enumerate(standings, start=1):
        db.add(DriverStanding(race_id=race_id, driver_code=code, position=position, points=points))

    _finish(db, commit)
    logger.info("Mundial de pilotos guardado: carrera=%s", race_id)


def save_constructor_standings(
    db: Session, race_id: int, standings: list[tuple[str, float]], commit: bool = True
) -> None:
    _get_race(db, race_id)
    _reject_repeated([name for name, _ in standings], "Hay escuderías repetidas en el mundial")

    db.query(ConstructorStanding).filter(ConstructorStanding.race_id == race_id).delete()
    for position, (name, points) in enumerate(standings, start=1):
        db.add(ConstructorStanding(race_id=race_id, constructor_name=name, position=position, points=points))

    _finish(db, commit)
    logger.info("Mundial de constructores guardado: carrera=%s", race_id)


def save_flags(db: Session, race_id: int, flags: list[dict], commit: bool = True) -> None:
    """flags: [{"flag": Flag.RED_FLAG, "round": 12, "session_type": "RACE"}, ...]"""
    _get_race(db, race_id)

    db.query(FlagStat).filter(FlagStat.race_id == race_id).delete()
    for f in flags:
        db.add(FlagStat(
            race_id=race_id,
            flag=Flag(f["flag"]),
            round=f.get("round", 1),
            session_type=f.get("session_type", "RACE")
        ))

    _finish(db, commit)
    logger.info("Banderas guardadas: carrera=%s total=%s", race_id, len(flags))


def get_flags(db: Session, race_id: int) -> list[FlagStat]:
    return (
        db.query(FlagStat)
        .filter(FlagStat.race_id == race_id)
        .order_by(FlagStat.round, FlagStat.id)
        .all()
    )


# ==============================================================================
# IMPORTACIÓN CON FASTF1
# ==============================================================================

def _enable_cache() -> None:
    cache_dir = get_settings().FASTF1_CACHE_DIR
    if not os.path.exists(cache_dir):
        os.makedirs(cache_dir)
    fastf1.Cache.enable_cache(cache_dir)


def result_rows_from_session(results: pd.DataFrame) -> list[dict]:
    """
    Convierte session.results en filas de RacePosition.
    ClassifiedPosition es '1', '2'... o 'R' / 'D' / 'E' / 'W' / 'F' / 'N' para
    los no clasificados; la posición final la da la columna Position.
    """
    rows = []
    for _, row in results.iterrows():
        if pd.isna(row["Position"]):
            continue
        rows.append({
            "finishing_position": int(row["Position"]),
            "classified": str(row["ClassifiedPosition"]),
            "driver_code": row["Abbreviation"],
            "points": float(row["Points"]) if not pd.isna(row["Points"]) else 0.0,
        })
    return rows


def standings_from_frame(frame: pd.DataFrame, name_column: str) -> list[tuple[str, float]]:
    frame = frame.sort_values("position")
    return [(row[name_column], float(row["points"])) for _, row in frame.iterrows()]


def sync_starting_grid(db: Session, race_id: int):
    """Parrilla desde la clasificación (sesión 'Q'). Devuelve (ok, logs)."""
    logs = []
    race = _get_race(db, race_id)

    try:
        _enable_cache()
        session = fastf1.get_session(race.season.year, race.position, "Q")
        session.load(laps=False, telemetry=False, weather=False, messages=False)

        grid = session.results["Abbreviation"].tolist()
        if not grid:
            logs.append("Clasificación vacía")
            return False, logs

        save_starting_grid(db, race_id, grid)
        logs.append(f"Parrilla: {len(grid)} pilotos")
        return True, logs

    except Exception as e:
        logger.exception("Fallo al importar la parrilla: carrera=%s", race_id)
        db.rollback()
        logs.append(f"Error inesperado: {e}")
        return False, logs


def sync_race_data(db: Session, race_id: int):
    """
    Importa resultado de carrera y clasificaciones del mundial.
    Los fallos se devuelven en los logs, nunca se lanzan al router.
    Devuelve (ok, logs).
    """
    logs = []
    race = _get_race(db, race_id)
    year = race.season.year
    logs.append(f"Importando {race.name} ({year}, ronda {race.position})")

    try:
        _enable_cache()

        # --- RESULTADO ---
        session = fastf1.get_session(year, race.position, "R")
        session.load(laps=False, telemetry=False, weather=False, messages=False)

        if session.results.empty:
            logs.append("Tabla de resultados vacía")
            return False, logs

        rows = result_rows_from_session(session.results)
        save_race_result(db, race_id, rows, commit=False)
        logs.append(f"{len(rows)} posiciones registradas")

        # --- MUNDIAL ---
        ergast = Ergast()
        drivers = ergast.get_driver_standings(season=year, round=race.position)
        if drivers.content:
            save_driver_standings(
                db, race_id, standings_from_frame(drivers.content[0], "driverCode"), commit=False
            )
            logs.append("Mundial de pilotos actualizado")
        else:
            logs.append("Sin mundial de pilotos para esta ronda")

        constructors = ergast.get_constructor_standings(season=year, round=race.position)
        if constructors.content:
            save_constructor_standings(
                db, race_id, standings_from_frame(constructors.content[0], "constructorName"), commit=False
            )
            logs.append("Mundial de constructores actualizado")
        else:
            logs.append("Sin mundial de constructores para esta ronda")

        # Resultado y mundial entran juntos o no entra nada
        db.commit()
        return True, logs

    except Exception as e:
        logger.exception("Fallo al importar la carrera: carrera=%s", race_id)
        db.rollback()
        logs.append(f"Error inesperado: {e}")
        return False, logs
