"""
Clasificaciones, evolución de puntos y medallas a partir de los snapshots.
Aquí no se calcula ningún punto: solo se leen y combinan los Summary guardados.
"""
import logging
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, SnapshotNotFoundError
from app.db.models.placement import RacePlacement, SeasonPlacement
from app.db.models.race import Race
from app.db.models.season import Season
from app.schemas.scoring import LeaderboardRow, Medals, SeasonPlacementOut, SeriesPoint, Summary
from app.services.guesses import season_guessers
from app.services.snapshots import RaceSnapshotStore, SeasonStartSnapshotStore

logger = logging.getLogger(__name__)


def latest_scored_race(db: Session, season_id: int) -> Race | None:
    return (
        db.query(Race)
        .join(RacePlacement, RacePlacement.race_id == Race.id)
        .filter(Race.season_id == season_id)
        .order_by(Race.position.desc())
        .first()
    )


def latest_snapshot(db: Session, season_id: int) -> list[tuple[int, Summary]]:
    """Snapshot de la última carrera puntuada o, si no hay ninguna, el de inicio de temporada."""
    race = latest_scored_race(db, season_id)
    if race is not None:
        return RaceSnapshotStore(db).read_all(race.id)
    return SeasonStartSnapshotStore(db).read_all(season_id)


def season_leaderboard(db: Session, season_id: int) -> list[LeaderboardRow]:
    users = {u.id: u for u in season_guessers(db, season_id)}

    return [
        LeaderboardRow(
            user_id=user_id,
            username=users[user_id].username,
            position=summary.total.position,
            points=summary.total.points,
        )
        for user_id, summary in latest_snapshot(db, season_id)
        if user_id in users
    ]


def points_series(db: Session, season_id: int) -> dict[str, list[SeriesPoint]]:
    """
    Devuelve: {username: [SeriesPoint, ...]}
    Empieza en el inicio de temporada (race_position = 0) y sigue por orden
    de carrera, saltando las carreras que aún no tienen snapshot.
    """
    users = season_guessers(db, season_id)
    series: dict[str, list[SeriesPoint]] = {u.username: [] for u in users}
    names = {u.id: u.username for u in users}

    for user_id, summary in SeasonStartSnapshotStore(db).read_all(season_id):
        if user_id in names:
            series[names[user_id]].append(SeriesPoint(
                race_position=0,
                position=summary.total.position,
                points=summary.total.points,
            ))

    races = db.query(Race).filter(Race.season_id == season_id).order_by(Race.position).all()
    store = RaceSnapshotStore(db)
    for race in races:
        for user_id, summary in store.read_all(race.id):
            if user_id in names:
                series[names[user_id]].append(SeriesPoint(
                    race_position=race.position,
                    race_name=race.name,
                    position=summary.total.position,
                    points=summary.total.points,
                ))

    return series


# ==============================================================================
# PALMARÉS
# ==============================================================================

def medals(db: Session, user_id: int) -> Medals:
    rows = (
        db.query(SeasonPlacement.placement)
        .filter(SeasonPlacement.user_id == user_id, SeasonPlacement.placement <= 3)
        .all()
    )
    placements = [r[0] for r in rows]
    return Medals(
        gold=placements.count(1),
        silver=placements.count(2),
        bronze=placements.count(3),
    )


def previous_placements(db: Session, user_id: int) -> list[SeasonPlacementOut]:
    rows = (
        db.query(Season.year, SeasonPlacement.placement)
        .join(Season, Season.id == SeasonPlacement.season_id)
        .filter(SeasonPlacement.user_id == user_id)
        .order_by(Season.year.desc())
        .all()
    )
    return [SeasonPlacementOut(year=year, placement=placement) for year, placement in rows]


def finalize_season(db: Session, season_id: int) -> int:
    """
    Cierra la temporada con lógica WIPE & ASSIGN:
    1. Borra las posiciones finales que hubiera para la temporada.
    2. Las vuelve a escribir desde el último snapshot.
    3. Marca la temporada como terminada.
    Se puede repetir si se corrige un resultado después de cerrar.
    """
    season = db.get(Season, season_id)
    if season is None:
        raise NotFoundError(f"Temporada {season_id} no encontrada")

    if latest_scored_race(db, season_id) is None and not SeasonStartSnapshotStore(db).has_key(season_id):
        raise SnapshotNotFoundError(f"La temporada {season_id} no tiene ninguna puntuación guardada")
    snapshot = latest_snapshot(db, season_id)

    # --- WIPE ---
    deleted = (
        db.query(SeasonPlacement)
        .filter(SeasonPlacement.season_id == season_id)
        .delete(synchronize_session=False)
    )

    # --- ASSIGN ---
    for user_id, summary in snapshot:
        db.add(SeasonPlacement(
            season_id=season_id,
            user_id=user_id,
            placement=summary.total.position,
            points=summary.total.points,
        ))

    season.is_finished = True
    db.commit()

    logger.info(
        "Temporada %s cerrada: %s posiciones escritas (%s reemplazadas)",
        season_id, len(snapshot), deleted,
    )
    return len(snapshot)
