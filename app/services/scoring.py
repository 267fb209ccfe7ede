"""
Motor de puntuación.

Para una carrera (o para el inicio de temporada) calcula, por jugador y
categoría, los diffs contra la realidad acumulada hasta ese punto, los
convierte en puntos con la tabla de la temporada, ordena con ranking de
competición (1,1,3,4) y guarda un Summary por jugador en el Snapshot Store.

El motor no serializa ejecuciones sobre la misma clave: quien lo llama
tiene que evitar lanzar dos a la vez.
"""
import logging
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.db.models.category import Category, PLACE_CATEGORIES
from app.db.models.constructor import Constructor
from app.db.models.driver import Driver
from app.db.models.flag_stat import FlagStat
from app.db.models.guess import ConstructorGuess, DriverGuess, FlagGuess, PlaceGuess
from app.db.models.race import Race
from app.db.models.race_result import RaceResult
from app.db.models.season import Season
from app.db.models.standings import ConstructorStanding, DriverStanding
from app.schemas.scoring import Placement, Summary
from app.services import diff as diffs
from app.services.guesses import season_guessers
from app.services.scoring_table import get_table, points_for
from app.services.snapshots import RaceSnapshotStore, SeasonStartSnapshotStore, SnapshotStore

logger = logging.getLogger(__name__)


def competition_rank(points_by_user: dict[int, int]) -> dict[int, Placement]:
    """
    Ranking de competición: empatados comparten puesto y el siguiente
    salta tantos puestos como empatados haya. [30,30,20,10] -> [1,1,3,4]
    """
    ordered = sorted(points_by_user.items(), key=lambda kv: (-kv[1], kv[0]))
    placements = {}
    position = 0
    previous = None

    for index, (user_id, points) in enumerate(ordered, start=1):
        if points != previous:
            position = index
            previous = points
        placements[user_id] = Placement(position=position, points=points)

    return placements


# ==============================================================================
# REALIDAD ACUMULADA HASTA LA CARRERA p (p = 0 -> inicio de temporada)
# ==============================================================================

def _races_up_to(db: Session, season_id: int, race_pos: int) -> list[Race]:
    return (
        db.query(Race)
        .filter(Race.season_id == season_id, Race.position <= race_pos)
        .order_by(Race.position)
        .all()
    )


def _latest_standings(db: Session, season_id: int, race_pos: int, model, name_col) -> list[str]:
    """Última clasificación publicada en una carrera <= p, o [] si no hay ninguna."""
    for race in reversed(_races_up_to(db, season_id, race_pos)):
        rows = (
            db.query(name_col)
            .filter(model.race_id == race.id)
            .order_by(model.position)
            .all()
        )
        if rows:
            return [r[0] for r in rows]
    return []


def _driver_standings(db: Session, season_id: int, race_pos: int) -> list[str]:
    standings = _latest_standings(db, season_id, race_pos, DriverStanding, DriverStanding.driver_code)
    if standings:
        return standings
    # Antes de la primera carrera manda el orden de inscripción
    rows = db.query(Driver.code).filter(Driver.season_id == season_id).order_by(Driver.position).all()
    return [r[0] for r in rows]


def _constructor_standings(db: Session, season_id: int, race_pos: int) -> list[str]:
    standings = _latest_standings(
        db, season_id, race_pos, ConstructorStanding, ConstructorStanding.constructor_name
    )
    if standings:
        return standings
    rows = (
        db.query(Constructor.name)
        .filter(Constructor.season_id == season_id)
        .order_by(Constructor.position)
        .all()
    )
    return [r[0] for r in rows]


# ==============================================================================
# DIFFS POR CATEGORÍA -> {user_id: [diff, ...]}
# Un jugador sin apuesta en la categoría no aparece en el diccionario.
# ==============================================================================

def _ranking_by_user(rows) -> dict[int, list[str]]:
    guessed: dict[int, list[str]] = {}
    for user_id, competitor in rows:
        guessed.setdefault(user_id, []).append(competitor)
    return guessed


def _driver_diffs(db, season_id, race_pos, users):
    rows = (
        db.query(DriverGuess.user_id, DriverGuess.driver_code)
        .filter(DriverGuess.season_id == season_id, DriverGuess.user_id.in_(users))
        .order_by(DriverGuess.user_id, DriverGuess.position)
        .all()
    )
    standings = _driver_standings(db, season_id, race_pos)
    return {
        user_id: diffs.rank_diffs(ranking, standings)
        for user_id, ranking in _ranking_by_user(rows).items()
    }


def _constructor_diffs(db, season_id, race_pos, users):
    rows = (
        db.query(ConstructorGuess.user_id, ConstructorGuess.constructor_name)
        .filter(ConstructorGuess.season_id == season_id, ConstructorGuess.user_id.in_(users))
        .order_by(ConstructorGuess.user_id, ConstructorGuess.position)
        .all()
    )
    standings = _constructor_standings(db, season_id, race_pos)
    return {
        user_id: diffs.rank_diffs(ranking, standings)
        for user_id, ranking in _ranking_by_user(rows).items()
    }


def _flag_diffs(db, season_id, race_pos, users):
    race_ids = [r.id for r in _races_up_to(db, season_id, race_pos)]
    flags = []
    if race_ids:
        flags = [r[0] for r in db.query(FlagStat.flag).filter(FlagStat.race_id.in_(race_ids)).all()]
    actual = diffs.count_flags(flags)

    guessed: dict[int, dict] = {}
    rows = (
        db.query(FlagGuess)
        .filter(FlagGuess.season_id == season_id, FlagGuess.user_id.in_(users))
        .all()
    )
    for g in rows:
        guessed.setdefault(g.user_id, {})[g.flag] = g.amount

    return {
        user_id: diffs.count_diffs(amounts, actual)
        for user_id, amounts in guessed.items()
    }


def _place_diffs(category: Category):
    target = PLACE_CATEGORIES[category]

    def resolve(db, season_id, race_pos, users):
        finishing: dict[int, dict[int, str]] = {}
        for race in _races_up_to(db, season_id, race_pos):
            result = db.query(RaceResult).filter(RaceResult.race_id == race.id).first()
            if result is None:
                continue
            finishing[race.id] = {p.finishing_position: p.driver_code for p in result.positions}

        if not finishing:
            return {}

        rows = (
            db.query(PlaceGuess)
            .filter(
                PlaceGuess.race_id.in_(list(finishing)),
                PlaceGuess.category == category,
                PlaceGuess.user_id.in_(users)
            )
            .all()
        )
        per_user: dict[int, list] = {}
        for g in rows:
            per_user.setdefault(g.user_id, []).append(
                diffs.place_diff(g.driver_code, finishing[g.race_id], target)
            )
        return per_user

    return resolve


RESOLVERS = {
    Category.DRIVER: _driver_diffs,
    Category.CONSTRUCTOR: _constructor_diffs,
    Category.FLAG: _flag_diffs,
    Category.FIRST: _place_diffs(Category.FIRST),
    Category.TENTH: _place_diffs(Category.TENTH),
}


# ==============================================================================
# EJECUCIÓN
# ==============================================================================

def _run(db: Session, season: Season, race_pos: int, store: SnapshotStore, key: int) -> dict:
    users = [u.id for u in season_guessers(db, season.id)]

    category_points: dict[Category, dict[int, int]] = {}
    failed = []

    for category in Category:
        per_user = RESOLVERS[category](db, season.id, race_pos, users)
        if not per_user:
            continue

        table = get_table(db, season.id, category)
        if not table:
            # Falla esta categoría; el resto sigue adelante
            logger.warning(
                "Tabla de puntos vacía: temporada=%s categoría=%s, se omite la categoría",
                season.id, category.value,
            )
            failed.append(category)
            continue

        category_points[category] = {
            user_id: sum(points_for(table, d) for d in user_diffs)
            for user_id, user_diffs in per_user.items()
        }

    category_placements = {
        category: competition_rank(points)
        for category, points in category_points.items()
    }
    totals = {
        user_id: sum(points.get(user_id, 0) for points in category_points.values())
        for user_id in users
    }
    total_placements = competition_rank(totals)

    for user_id in users:
        summary = Summary(
            categories={
                category: placements[user_id]
                for category, placements in category_placements.items()
                if user_id in placements
            },
            total=total_placements[user_id],
        )
        store.write(key, user_id, summary)

    logger.info(
        "Puntuación %s=%s: %s jugadores, fallidas=%s",
        store.key_name, key, len(users), [c.value for c in failed],
    )
    return {
        "scope": store.key_name,
        "key": key,
        "guessers": len(users),
        "failed_categories": failed,
    }


def score_race(db: Session, race_id: int) -> dict:
    race = db.get(Race, race_id)
    if race is None:
        raise NotFoundError(f"Carrera {race_id} no encontrada")
    if race.race_result is None:
        raise NotFoundError(f"La carrera {race_id} no tiene resultado")

    return _run(db, race.season, race.position, RaceSnapshotStore(db), race.id)


def score_season_start(db: Session, season_id: int) -> dict:
    season = db.get(Season, season_id)
    if season is None:
        raise NotFoundError(f"Temporada {season_id} no encontrada")

    return _run(db, season, 0, SeasonStartSnapshotStore(db), season.id)


def rescore_season(db: Session, season_id: int) -> list[dict]:
    """Recalcula el inicio de temporada y todas las carreras con resultado, en orden."""
    runs = [score_season_start(db, season_id)]

    races = (
        db.query(Race)
        .join(RaceResult, RaceResult.race_id == Race.id)
        .filter(Race.season_id == season_id)
        .order_by(Race.position)
        .all()
    )
    for race in races:
        runs.append(score_race(db, race.id))

    return runs
