"""
Escritura y lectura de apuestas.

Cada función que escribe pasa primero por el CutoffGate: la BD acepta el
REPLACE a cualquier hora, así que la comprobación del plazo vive aquí.
"""
import logging
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidGuessError, NotFoundError
from app.db.models.category import Category, Flag, PLACE_CATEGORIES, SEASON_CATEGORIES
from app.db.models.constructor import Constructor
from app.db.models.driver import Driver
from app.db.models.guess import ConstructorGuess, DriverGuess, FlagGuess, PlaceGuess
from app.db.models.race import Race
from app.db.models.race_result import RaceResult
from app.db.models.starting_grid import StartingGrid
from app.db.models.user import User
from app.services.cutoff import CutoffGate

logger = logging.getLogger(__name__)

SEASON_GUESS_MODELS = {
    Category.FLAG: FlagGuess,
    Category.DRIVER: DriverGuess,
    Category.CONSTRUCTOR: ConstructorGuess,
}


# ==============================================================================
# ELEGIBILIDAD
# ==============================================================================

def season_guessers(db: Session, season_id: int) -> list[User]:
    """
    Jugadores que cuentan para la temporada: tienen que haber apostado
    banderas, ranking de pilotos y ranking de constructores.
    Ordenados por nombre de usuario.
    """
    query = db.query(User)
    for category in SEASON_CATEGORIES:
        model = SEASON_GUESS_MODELS[category]
        query = query.filter(User.id.in_(select(model.user_id).where(model.season_id == season_id)))

    return (
        query
        .order_by(User.username)
        .all()
    )


# ==============================================================================
# APUESTAS DE TEMPORADA
# ==============================================================================

def _validate_ranking(ranking: list[str], valid: list[str], what: str) -> None:
    if len(set(ranking)) != len(ranking):
        raise InvalidGuessError(f"Hay {what} repetidos en el ranking")
    if set(ranking) != set(valid):
        raise InvalidGuessError(f"El ranking tiene que incluir exactamente los {what} de la temporada")


def set_driver_ranking(db: Session, gate: CutoffGate, user_id: int, season_id: int, ranking: list[str]):
    gate.require_open_season(season_id)

    valid = [d.code for d in db.query(Driver).filter(Driver.season_id == season_id).all()]
    _validate_ranking(ranking, valid, "pilotos")

    # 🔄 Borramos el ranking anterior
    db.query(DriverGuess).filter(
        DriverGuess.user_id == user_id,
        DriverGuess.season_id == season_id
    ).delete()

    now = gate.clock()
    for position, code in enumerate(ranking, start=1):
        db.add(DriverGuess(
            user_id=user_id,
            season_id=season_id,
            position=position,
            driver_code=code,
            submitted_at=now
        ))

    db.commit()
    logger.info("Ranking de pilotos guardado: usuario=%s temporada=%s", user_id, season_id)


def set_constructor_ranking(db: Session, gate: CutoffGate, user_id: int, season_id: int, ranking: list[str]):
    gate.require_open_season(season_id)

    valid = [c.name for c in db.query(Constructor).filter(Constructor.season_id == season_id).all()]
    _validate_ranking(ranking, valid, "constructores")

    db.query(ConstructorGuess).filter(
        ConstructorGuess.user_id == user_id,
        ConstructorGuess.season_id == season_id
    ).delete()

    now = gate.clock()
    for position, name in enumerate(ranking, start=1):
        db.add(ConstructorGuess(
            user_id=user_id,
            season_id=season_id,
            position=position,
            constructor_name=name,
            submitted_at=now
        ))

    db.commit()
    logger.info("Ranking de escuderías guardado: usuario=%s temporada=%s", user_id, season_id)


def set_flag_guesses(db: Session, gate: CutoffGate, user_id: int, season_id: int, amounts: dict[Flag, int]):
    gate.require_open_season(season_id)

    if set(amounts) != set(Flag):
        raise InvalidGuessError("Hay que apostar todas las banderas")
    if any(amount < 0 for amount in amounts.values()):
        raise InvalidGuessError("El número de banderas no puede ser negativo")

    now = gate.clock()
    for flag, amount in amounts.items():
        guess = (
            db.query(FlagGuess)
            .filter(
                FlagGuess.user_id == user_id,
                FlagGuess.season_id == season_id,
                FlagGuess.flag == flag
            )
            .first()
        )
        if not guess:
            guess = FlagGuess(user_id=user_id, season_id=season_id, flag=flag)
            db.add(guess)
        guess.amount = amount
        guess.submitted_at = now

    db.commit()
    logger.info("Apuesta de banderas guardada: usuario=%s temporada=%s", user_id, season_id)


def get_driver_ranking(db: Session, user_id: int, season_id: int) -> list[str]:
    rows = (
        db.query(DriverGuess.driver_code)
        .filter(DriverGuess.user_id == user_id, DriverGuess.season_id == season_id)
        .order_by(DriverGuess.position)
        .all()
    )
    return [r[0] for r in rows]


def get_constructor_ranking(db: Session, user_id: int, season_id: int) -> list[str]:
    rows = (
        db.query(ConstructorGuess.constructor_name)
        .filter(ConstructorGuess.user_id == user_id, ConstructorGuess.season_id == season_id)
        .order_by(ConstructorGuess.position)
        .all()
    )
    return [r[0] for r in rows]


def get_flag_guesses(db: Session, user_id: int, season_id: int) -> dict[Flag, int]:
    rows = (
        db.query(FlagGuess)
        .filter(FlagGuess.user_id == user_id, FlagGuess.season_id == season_id)
        .all()
    )
    return {r.flag: r.amount for r in rows}


# ==============================================================================
# APUESTAS DE CARRERA (ganador / décimo)
# ==============================================================================

def current_race_to_guess(db: Session, season_id: int) -> Race:
    """Primera carrera de la temporada con parrilla publicada y sin resultado."""
    with_grid = select(StartingGrid.race_id)
    with_result = select(RaceResult.race_id)

    race = (
        db.query(Race)
        .filter(
            Race.season_id == season_id,
            Race.id.in_(with_grid),
            Race.id.not_in(with_result)
        )
        .order_by(Race.position)
        .first()
    )
    if race is None:
        raise NotFoundError(f"No hay carrera abierta a apuestas en la temporada {season_id}")
    return race


def set_place_guess(db: Session, gate: CutoffGate, user_id: int, race_id: int, category: Category, driver_code: str):
    if category not in PLACE_CATEGORIES:
        raise InvalidGuessError(f"{category.value} no es una categoría de carrera")

    race = db.get(Race, race_id)
    if race is None:
        raise NotFoundError(f"Carrera {race_id} no encontrada")

    gate.require_open_race(race_id)

    # Si ya hay parrilla, el piloto tiene que estar en ella; si no, basta con que corra la temporada
    grid = [g.driver_code for g in db.query(StartingGrid).filter(StartingGrid.race_id == race_id).all()]
    valid = grid or [d.code for d in db.query(Driver).filter(Driver.season_id == race.season_id).all()]
    if driver_code not in valid:
        raise InvalidGuessError(f"El piloto {driver_code} no corre esta carrera")

    guess = (
        db.query(PlaceGuess)
        .filter(
            PlaceGuess.user_id == user_id,
            PlaceGuess.race_id == race_id,
            PlaceGuess.category == category
        )
        .first()
    )
    if not guess:
        guess = PlaceGuess(user_id=user_id, race_id=race_id, category=category)
        db.add(guess)
    guess.driver_code = driver_code
    guess.submitted_at = gate.clock()

    db.commit()
    logger.info("Apuesta de carrera guardada: usuario=%s carrera=%s categoría=%s", user_id, race_id, category.value)


def get_place_guesses(db: Session, user_id: int, race_id: int) -> dict[Category, str]:
    rows = (
        db.query(PlaceGuess)
        .filter(PlaceGuess.user_id == user_id, PlaceGuess.race_id == race_id)
        .all()
    )
    return {r.category: r.driver_code for r in rows}
